"""
Read-only queries over polyhedron topology: edges, face centres and duals.
"""

import numpy as np
from numpy.typing import NDArray

from .errors import MalformedTopologyError
from .geometry import reciprocal


def validate_topology(faces, num_vertices: int) -> None:
    """Reject faces with fewer than three corners or with out-of-range indices."""
    for face_index, face in enumerate(faces):
        if len(face) < 3:
            raise MalformedTopologyError(
                f"Face {face_index} has {len(face)} vertices, at least 3 are required"
            )
        for v_idx in face:
            if not 0 <= v_idx < num_vertices:
                raise MalformedTopologyError(
                    f"Face {face_index} references vertex {v_idx}, valid range is 0-{num_vertices - 1}"
                )


def edges_from_faces(faces) -> NDArray[np.int64]:
    """
    Derive the unique undirected edges of a polyhedron from its faces.

    Each consecutive pair of a face (including the wraparound pair) is an edge.
    Edges are returned as sorted (i, j) pairs in order of first appearance.
    """
    seen = {}
    for face in faces:
        for k in range(len(face)):
            a, b = face[k - 1], face[k]
            key = (min(a, b), max(a, b))
            if key not in seen:
                seen[key] = len(seen)
    if not seen:
        return np.zeros((0, 2), dtype=np.int64)
    return np.array(list(seen), dtype=np.int64)


def face_centers(vertices: NDArray[np.float64], faces) -> NDArray[np.float64]:
    """Simple average of each face's corners."""
    return np.array([vertices[list(face)].mean(axis=0) for face in faces])


def build_half_edge_map(faces) -> dict:
    """Map each directed edge (a, b), as wound in its face, to that face's index."""
    half_edges = {}
    for face_index, face in enumerate(faces):
        for k in range(len(face)):
            half_edge = (face[k - 1], face[k])
            if half_edge in half_edges:
                raise MalformedTopologyError(
                    f"Directed edge {half_edge} appears in faces {half_edges[half_edge]} and {face_index}; "
                    "face winding is inconsistent"
                )
            half_edges[half_edge] = face_index
    return half_edges


def dual_faces(faces, num_vertices: int) -> list:
    """
    Faces of the dual polyhedron.

    Dual face j lists, counter-clockwise seen from outside, the indices of the
    faces that surround vertex j. Dual vertex k is face k of the original.
    """
    half_edges = build_half_edge_map(faces)

    # For every vertex, one face it belongs to and the corner it sits at
    first_face = {}
    for face_index, face in enumerate(faces):
        for v_idx in face:
            first_face.setdefault(v_idx, face_index)

    result = []
    for v_idx in range(num_vertices):
        if v_idx not in first_face:
            raise MalformedTopologyError(f"Vertex {v_idx} is not used by any face")

        start = first_face[v_idx]
        ring = [start]
        current = start
        while True:
            face = faces[current]
            predecessor = face[list(face).index(v_idx) - 1]
            # The face across the incoming edge is the next one counter-clockwise
            current = half_edges.get((v_idx, predecessor))
            if current is None:
                raise MalformedTopologyError(
                    f"Edge ({predecessor}, {v_idx}) has only one face; the polyhedron is not closed"
                )
            if current == start:
                break
            if len(ring) > len(faces):
                raise MalformedTopologyError(f"Faces around vertex {v_idx} do not form a single cycle")
            ring.append(current)
        result.append(ring)
    return result


def dual_vertices(vertices: NDArray[np.float64], faces) -> NDArray[np.float64]:
    """Initial dual geometry: face centres reciprocated through the unit sphere."""
    return np.array([reciprocal(center) for center in face_centers(vertices, faces)])
