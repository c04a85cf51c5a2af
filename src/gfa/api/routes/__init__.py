"""Route group exports."""

from . import health, optimization, products, scenarios

__all__ = ["optimization", "products", "scenarios", "health"]
