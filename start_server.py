#!/usr/bin/env python3
"""Start script for container deployment that properly handles the PORT environment variable."""

import os
import sys
import subprocess

# Get PORT from environment, default to 8000
port = os.environ.get("PORT", "8000")

try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
    port_int = 8000

# uvicorn imports gfa.main, so src must be on PYTHONPATH
src_path = os.path.join(os.getcwd(), "src")
if not os.path.isdir(src_path):
    print(f"Warning: src directory not found at {src_path}", file=sys.stderr)
    src_path = os.getcwd()

pythonpath = os.environ.get("PYTHONPATH", "")
os.environ["PYTHONPATH"] = f"{src_path}:{pythonpath}" if pythonpath else src_path

cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "gfa.main:app",
    "--host",
    "0.0.0.0",
    "--port",
    str(port_int),
    "--proxy-headers",
    "--forwarded-allow-ips", "*",
]

print(f"Starting Green Field Analysis API on port {port_int}...", file=sys.stderr)
print(f"PYTHONPATH={os.environ['PYTHONPATH']}", file=sys.stderr)

try:
    result = subprocess.call(cmd)
    if result != 0:
        print(f"❌ Uvicorn exited with code {result}", file=sys.stderr)
    sys.exit(result)
except KeyboardInterrupt:
    print("⚠️ Server interrupted by user", file=sys.stderr)
    sys.exit(0)
