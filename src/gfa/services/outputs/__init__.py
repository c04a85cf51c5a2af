"""Output serializers."""

from .formatter import optimization_response_to_csv, optimization_response_to_json

__all__ = ["optimization_response_to_csv", "optimization_response_to_json"]
