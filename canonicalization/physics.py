"""
Corrective force passes over a polyhedron's vertex buffer.

Every pass reads only the buffer it was given and returns a fresh one;
corrections from edges or faces that share a vertex are summed into that
vertex's slot.
"""

from collections import defaultdict

import numpy as np
from numpy.typing import NDArray

from .constants import DEGENERATE_EPSILON, STABILITY
from .errors import DegenerateGeometryError
from .geometry import (
    dot,
    face_normal,
    mag,
    mult,
    tangent_point,
    tangent_points_vectorized,
)


def tangentify(vertices: NDArray[np.float64], edges: NDArray[np.int64],
               stability: float = STABILITY) -> NDArray[np.float64]:
    """
    Pull every edge toward tangency with the unit sphere.

    Each edge's tangent point t is pushed along itself by
    stability * (1 - |t|) / 2, and both endpoints receive that correction.
    """
    new_vertices = np.array(vertices, dtype=np.float64)

    for edge in edges:
        v1_idx, v2_idx = edge
        t = tangent_point(vertices[v1_idx], vertices[v2_idx])
        correction = mult(stability * 0.5 * (1 - mag(t)), t)

        new_vertices[v1_idx] += correction
        new_vertices[v2_idx] += correction

    return new_vertices


def tangentify_vectorized(vertices: NDArray[np.float64], edges: NDArray[np.int64],
                          stability: float = STABILITY) -> NDArray[np.float64]:
    """
    Vectorized implementation of tangentify for better performance.

    Args:
        vertices: 3D vertex positions
        edges: Edge indices
        stability: Damping factor applied to every correction

    Returns:
        numpy.ndarray: New vertex positions
    """
    new_vertices = np.array(vertices, dtype=np.float64)
    if len(edges) == 0:
        return new_vertices

    v1_indices = edges[:, 0]
    v2_indices = edges[:, 1]

    tangent_points = tangent_points_vectorized(vertices[v1_indices], vertices[v2_indices])
    distances = np.linalg.norm(tangent_points, axis=1)
    corrections = (stability * 0.5 * (1 - distances))[:, np.newaxis] * tangent_points

    # np.add.at accumulates repeated indices instead of overwriting them
    np.add.at(new_vertices, v1_indices, corrections)
    np.add.at(new_vertices, v2_indices, corrections)

    return new_vertices


def calculate_edge_center(vertices: NDArray[np.float64], edges: NDArray[np.int64]) -> NDArray[np.float64]:
    """Average of all edge tangent points."""
    if len(edges) == 0:
        raise DegenerateGeometryError("Cannot locate the centre of a polyhedron without edges")
    tangent_points = tangent_points_vectorized(vertices[edges[:, 0]], vertices[edges[:, 1]])
    return tangent_points.mean(axis=0)


def recenter(vertices: NDArray[np.float64], edges: NDArray[np.int64]) -> NDArray[np.float64]:
    """Translate the vertices so the mean edge tangent point moves to the origin."""
    return vertices - calculate_edge_center(vertices, edges)


def rescale(vertices: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Scale the vertices so the farthest one lies on the unit sphere.

    Not part of the default canonicalization loop; repeated application
    interacts badly with tangentify, so callers must ask for it.
    """
    max_magnitude = np.linalg.norm(vertices, axis=1).max()
    if max_magnitude < DEGENERATE_EPSILON:
        raise DegenerateGeometryError("Cannot rescale: every vertex is at the origin")
    return vertices / max_magnitude


def planarize(vertices: NDArray[np.float64], faces, stability: float = STABILITY) -> NDArray[np.float64]:
    """
    Pull the corners of every face toward the plane through its centroid.

    The face normal is flipped to point away from the origin before the
    corrections are applied.
    """
    new_vertices = np.array(vertices, dtype=np.float64)

    for face in faces:
        coords = vertices[list(face)]
        normal = face_normal(coords)
        centroid = coords.mean(axis=0)
        if dot(normal, centroid) < 0:
            normal = mult(-1.0, normal)

        for v_idx in face:
            offset = dot(mult(stability, normal), centroid - vertices[v_idx])
            new_vertices[v_idx] += mult(offset, normal)

    return new_vertices


def group_faces_by_size(faces) -> dict:
    """Group faces into F_k x k index arrays keyed by corner count k."""
    groups = defaultdict(list)
    for face in faces:
        groups[len(face)].append(face)
    return {size: np.array(group, dtype=np.int64) for size, group in groups.items()}


def planarize_vectorized(vertices: NDArray[np.float64], faces,
                         stability: float = STABILITY, face_groups: dict = None) -> NDArray[np.float64]:
    """
    Vectorized implementation of planarize.

    Faces of equal size are processed together as one F_k x k x 3 block.

    Args:
        vertices: 3D vertex positions
        faces: Face index lists
        stability: Damping factor applied to every correction
        face_groups: Optional precomputed output of group_faces_by_size

    Returns:
        numpy.ndarray: New vertex positions
    """
    new_vertices = np.array(vertices, dtype=np.float64)
    if face_groups is None:
        face_groups = group_faces_by_size(faces)

    for face_indices in face_groups.values():
        coords = vertices[face_indices]

        # Newell-style normal sum over each face's corners
        v1 = np.roll(coords, 2, axis=1)
        v2 = np.roll(coords, 1, axis=1)
        normals = np.sum(np.cross(v2 - v1, coords - v2), axis=1)
        normal_lengths = np.linalg.norm(normals, axis=1)
        if np.any(normal_lengths < DEGENERATE_EPSILON):
            bad_face = face_indices[np.argmin(normal_lengths)].tolist()
            raise DegenerateGeometryError(f"Face {bad_face} has a degenerate normal")
        normals = normals / normal_lengths[:, np.newaxis]

        centroids = coords.mean(axis=1)
        inward = np.sum(normals * centroids, axis=1) < 0
        normals[inward] *= -1

        offsets = stability * np.sum(normals[:, np.newaxis, :] * (centroids[:, np.newaxis, :] - coords), axis=2)
        corrections = offsets[:, :, np.newaxis] * normals[:, np.newaxis, :]

        np.add.at(new_vertices, face_indices.ravel(), corrections.reshape(-1, 3))

    return new_vertices
