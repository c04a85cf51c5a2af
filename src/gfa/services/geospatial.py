"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

EARTH_RADIUS_KM = 6371.0
KM_TO_MILES = 0.621371


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_in_unit(lat1: float, lon1: float, lat2: float, lon2: float, unit: str = "km") -> float:
    """Haversine distance expressed in kilometres or miles."""

    distance_km = haversine_km(lat1, lon1, lat2, lon2)
    if unit == "mile":
        return distance_km * KM_TO_MILES
    return distance_km


def haversine_matrix_km(
    origins: Sequence[tuple[float, float]],
    destinations: Sequence[tuple[float, float]],
) -> np.ndarray:
    """Pairwise Haversine distances (km) with shape (len(origins), len(destinations))."""

    if not len(origins) or not len(destinations):
        return np.zeros((len(origins), len(destinations)))
    origin = np.radians(np.asarray(origins, dtype=float))
    dest = np.radians(np.asarray(destinations, dtype=float))
    lat1 = origin[:, 0][:, None]
    lon1 = origin[:, 1][:, None]
    lat2 = dest[:, 0][None, :]
    lon2 = dest[:, 1][None, :]

    a = np.sin((lat2 - lat1) / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(np.clip(1 - a, 0.0, None)))
    return EARTH_RADIUS_KM * c
