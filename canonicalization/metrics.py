"""
Error metrics for judging how canonical a polyhedron is.
"""

import numpy as np
from numpy.typing import NDArray

from .constants import DEGENERATE_EPSILON
from .errors import DegenerateGeometryError
from .geometry import face_normal, mag, tangent_point, tangent_points_vectorized
from .physics import calculate_edge_center, group_faces_by_size


def calculate_max_change(previous_vertices: NDArray[np.float64], vertices: NDArray[np.float64]) -> float:
    """Largest per-vertex displacement between two buffers (the convergence delta)."""
    if len(vertices) == 0:
        return 0.0
    return float(np.linalg.norm(vertices - previous_vertices, axis=1).max())


def calculate_tangency_error(vertices, edges):
    """
    Largest deviation of an edge's distance from the origin from 1.

    Zero when every edge touches the unit sphere.
    """
    worst = 0.0
    for v1_idx, v2_idx in edges:
        t = tangent_point(vertices[v1_idx], vertices[v2_idx])
        worst = max(worst, abs(mag(t) - 1.0))
    return worst


def calculate_tangency_error_vectorized(vertices, edges):
    """
    Vectorized implementation of calculate_tangency_error.

    Args:
        vertices: 3D vertex positions
        edges: Edge indices

    Returns:
        float: Largest | |t| - 1 | over all edges
    """
    if len(edges) == 0:
        return 0.0
    tangent_points = tangent_points_vectorized(vertices[edges[:, 0]], vertices[edges[:, 1]])
    return float(np.abs(np.linalg.norm(tangent_points, axis=1) - 1.0).max())


def calculate_planarity_error(vertices, faces):
    """Largest distance of a face corner from the plane through its face's centroid."""
    worst = 0.0
    for face in faces:
        coords = vertices[list(face)]
        normal = face_normal(coords)
        centroid = coords.mean(axis=0)
        for corner in coords:
            worst = max(worst, abs(np.dot(normal, corner - centroid)))
    return float(worst)


def calculate_planarity_error_vectorized(vertices, faces):
    """
    Vectorized implementation of calculate_planarity_error.

    Args:
        vertices: 3D vertex positions
        faces: Face index lists

    Returns:
        float: Largest corner-to-plane distance over all faces
    """
    worst = 0.0
    for face_indices in group_faces_by_size(faces).values():
        coords = vertices[face_indices]
        v1 = np.roll(coords, 2, axis=1)
        v2 = np.roll(coords, 1, axis=1)
        normals = np.sum(np.cross(v2 - v1, coords - v2), axis=1)
        normal_lengths = np.linalg.norm(normals, axis=1)
        if np.any(normal_lengths < DEGENERATE_EPSILON):
            raise DegenerateGeometryError("Some faces have degenerate normals in vectorized planarity calculation")
        normals = normals / normal_lengths[:, np.newaxis]
        centroids = coords.mean(axis=1)
        distances = np.abs(np.sum(normals[:, np.newaxis, :] * (coords - centroids[:, np.newaxis, :]), axis=2))
        worst = max(worst, float(distances.max()))
    return worst


def calculate_center_offset(vertices, edges) -> float:
    """Distance from the origin to the mean edge tangent point."""
    return mag(calculate_edge_center(vertices, edges))
