"""Facility-location optimization services."""

from .optimizer import OptimizationInputError, optimize_with_constraints

__all__ = ["OptimizationInputError", "optimize_with_constraints"]
