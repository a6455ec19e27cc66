"""
Vector primitives shared by the relaxation passes and the reciprocal drivers.
"""

import numpy as np
from numpy.typing import NDArray

from .constants import DEGENERATE_EPSILON
from .errors import DegenerateGeometryError


def add(v1: NDArray[np.float64], v2: NDArray[np.float64]) -> NDArray[np.float64]:
    return v1 + v2


def sub(v1: NDArray[np.float64], v2: NDArray[np.float64]) -> NDArray[np.float64]:
    return v1 - v2


def mult(scalar: float, v: NDArray[np.float64]) -> NDArray[np.float64]:
    return scalar * v


def dot(v1: NDArray[np.float64], v2: NDArray[np.float64]) -> float:
    return float(np.dot(v1, v2))


def cross(v1: NDArray[np.float64], v2: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.cross(v1, v2)


def orthogonal(v1: NDArray[np.float64], v2: NDArray[np.float64], v3: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unnormalized normal contribution of the corner v1 -> v2 -> v3."""
    return np.cross(v2 - v1, v3 - v2)


def mag(v: NDArray[np.float64]) -> float:
    return float(np.sqrt(np.dot(v, v)))


def unit(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize v, raising DegenerateGeometryError when v is (nearly) the zero vector."""
    length = mag(v)
    if length < DEGENERATE_EPSILON:
        raise DegenerateGeometryError(f"Cannot normalize near-zero vector {v}")
    return v / length


def reciprocal(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Spherical inversion of a point through the unit sphere about the origin.

    Raises:
        DegenerateGeometryError: if v is at (or very near) the origin
    """
    length_sq = np.dot(v, v)
    if np.sqrt(length_sq) < DEGENERATE_EPSILON:
        raise DegenerateGeometryError(f"Cannot reciprocate point {v} at the origin")
    return v / length_sq


def tangent_point(p0: NDArray[np.float64], p1: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Closest point to the origin on the line through p0 and p1.

    The projection is onto the infinite line, not clamped to the segment, so the
    result stands in for the point where an edge touches the midsphere.
    """
    d = p1 - p0
    length_sq = np.dot(d, d)
    if np.sqrt(length_sq) < DEGENERATE_EPSILON:
        raise DegenerateGeometryError(f"Edge endpoints {p0} and {p1} coincide")
    return p0 + (np.dot(d, -p0) / length_sq) * d


def edge_distance(p0: NDArray[np.float64], p1: NDArray[np.float64]) -> float:
    """Distance from the origin to the line through p0 and p1."""
    return mag(tangent_point(p0, p1))


def tangent_points_vectorized(p0: NDArray[np.float64], p1: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Vectorized tangent_point over E x 3 arrays of edge endpoints.

    Args:
        p0: First endpoint of each edge
        p1: Second endpoint of each edge

    Returns:
        numpy.ndarray: E x 3 array of tangent points
    """
    d = p1 - p0
    lengths_sq = np.sum(d * d, axis=1)
    if np.any(np.sqrt(lengths_sq) < DEGENERATE_EPSILON):
        raise DegenerateGeometryError("Some edges have coincident endpoints in vectorized tangent point calculation")
    scale = np.sum(d * -p0, axis=1) / lengths_sq
    return p0 + scale[:, np.newaxis] * d


def newell_sum(coords: NDArray[np.float64]) -> NDArray[np.float64]:
    """Sum of orthogonal() over every consecutive (wrapping) corner of a polygon."""
    v1 = np.roll(coords, 2, axis=0)
    v2 = np.roll(coords, 1, axis=0)
    return np.sum(np.cross(v2 - v1, coords - v2), axis=0)


def face_normal(coords: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Approximate unit normal of a (possibly non-planar) polygon.

    Raises:
        DegenerateGeometryError: if the polygon has no usable area, e.g. a
            triangle with two coincident corners
    """
    normal = newell_sum(coords)
    if mag(normal) < DEGENERATE_EPSILON:
        raise DegenerateGeometryError(f"Face with corners {coords.tolist()} has a degenerate normal")
    return normal / mag(normal)


def check_finite(vertices: NDArray[np.float64], context: str) -> NDArray[np.float64]:
    """Raise DegenerateGeometryError if a buffer picked up NaN or infinite values."""
    if not np.all(np.isfinite(vertices)):
        raise DegenerateGeometryError(f"Non-finite vertex positions after {context}")
    return vertices
