#!/usr/bin/env python3
"""Helper script to check and create the .env file for the GFA backend."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Supabase Configuration (optional; snapshots fall back to files under GFA_DATA_ROOT)
GFA_SUPABASE_URL=https://your-project-id.supabase.co
GFA_SUPABASE_KEY=your-service-role-key-here

# API Configuration
GFA_API_PREFIX=/api
GFA_LOG_LEVEL=INFO
# GFA_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list

# Data Paths
GFA_DATA_ROOT=./data

# Optimizer tuning
# GFA_MAX_ITERATIONS=100
# GFA_COST_SEARCH_MAX_SITES=20
"""


def _mask(value: str) -> str:
    return value[:20] + "..." + value[-10:] if len(value) > 20 else value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("GFA Environment Variables Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        with open(env_file, "w", encoding="utf-8") as f:
            f.write(TEMPLATE)
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Edit .env and add your Supabase credentials if you want database storage.")
        return

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    with open(env_file, "r", encoding="utf-8") as f:
        for line in f.read().split("\n"):
            if line.startswith("GFA_SUPABASE_KEY="):
                name, value = line.split("=", 1)
                print(f"{name}={_mask(value.strip())}")
            else:
                print(line)
    print("-" * 60)
    print()

    for name in ("GFA_SUPABASE_URL", "GFA_SUPABASE_KEY"):
        value = os.getenv(name)
        if value:
            print(f"✅ {name} (from environment): {_mask(value)}")
        else:
            print(f"❌ {name} not found in environment")
    print()

    sys.path.insert(0, str(project_root / "src"))
    from gfa.config import settings

    print(f"Data root: {settings.data_root}")
    if settings.supabase_url and settings.supabase_key:
        print("✅ SUCCESS: Supabase is configured!")
    else:
        print("ℹ️  Supabase is NOT configured; scenario snapshots will be written to the data root.")


if __name__ == "__main__":
    main()
