"""
Canonicalization by reciprocation: alternate between a polyhedron and its dual,
placing each one's vertices at the poles of the other's faces with respect to
the unit sphere.
"""

import logging

import numpy as np
from numpy.typing import NDArray
from tqdm import trange

from .algorithms import as_vertex_buffer
from .constants import PROGRESS_BAR_MIN_ITERATIONS
from .geometry import (
    check_finite,
    dot,
    edge_distance,
    mult,
    orthogonal,
    reciprocal,
    unit,
)
from .metrics import calculate_max_change
from .topology import face_centers

logger = logging.getLogger(__name__)


def read_only(buffer: NDArray[np.float64]) -> NDArray[np.float64]:
    """A view of buffer that cannot be written through."""
    snapshot = buffer.view()
    snapshot.flags.writeable = False
    return snapshot


def reciprocal_c(vertices: NDArray[np.float64], faces) -> NDArray[np.float64]:
    """Face centres reflected through the unit sphere."""
    return np.array([reciprocal(center) for center in face_centers(vertices, faces)])


def reciprocal_n(vertices: NDArray[np.float64], faces) -> NDArray[np.float64]:
    """
    Pole of every face plane with respect to the unit sphere.

    For each face the plane is estimated from the centroid and the Newell
    normal. The pole is scaled by (1 + d) / 2, where d is the face's average
    edge distance from the origin, which nudges edges toward the unit sphere.
    """
    poles = []
    for face in faces:
        centroid = np.zeros(3)
        normal = np.zeros(3)
        avg_edge_distance = 0.0

        v1, v2 = face[-2], face[-1]
        for v3 in face:
            centroid += vertices[v3]
            normal += orthogonal(vertices[v1], vertices[v2], vertices[v3])
            avg_edge_distance += edge_distance(vertices[v1], vertices[v2])
            v1, v2 = v2, v3

        centroid = centroid / len(face)
        normal = unit(normal)
        avg_edge_distance = avg_edge_distance / len(face)

        pole = reciprocal(mult(dot(centroid, normal), normal))
        poles.append(mult((1 + avg_edge_distance) / 2, pole))
    return np.array(poles)


def alternate_reciprocals(polyhedron, iterations: int, reciprocate, verbose: bool = False):
    """
    Shared loop of canonical_xyz and adjust_xyz.

    The loop owns both vertex buffers; reciprocate only ever sees read-only
    snapshots and returns a fresh buffer.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")

    name = polyhedron.name or "<unnamed>"
    logger.info("Reciprocating %s with %s for %d iterations", name, reciprocate.__name__, iterations)

    vertices = as_vertex_buffer(polyhedron.vertices, polyhedron.faces)
    dual = polyhedron.dual()

    use_progress_bar = verbose and iterations >= PROGRESS_BAR_MIN_ITERATIONS
    range_func = (lambda n: trange(n, desc=reciprocate.__name__)) if use_progress_bar else range

    max_change = None
    for iteration in range_func(iterations):
        previous_vertices = vertices

        dual_vertices = reciprocate(read_only(vertices), polyhedron.faces)
        vertices = reciprocate(read_only(dual_vertices), dual.faces)
        check_finite(vertices, f"reciprocation iteration {iteration}")

        max_change = calculate_max_change(previous_vertices, vertices)
        logger.debug("Iteration %d: max change %.3e", iteration, max_change)

    if max_change is not None:
        logger.info("%s reciprocated %d times, final max change %.3e", name, iterations, max_change)

    return polyhedron.with_vertices(vertices)


def canonical_xyz(polyhedron, iterations: int = 1, verbose: bool = False):
    """Canonicalize by alternately reciprocating face planes of the polyhedron and its dual."""
    return alternate_reciprocals(polyhedron, iterations, reciprocal_n, verbose=verbose)


def adjust_xyz(polyhedron, iterations: int = 1, verbose: bool = False):
    """Cheaper variant of canonical_xyz that reciprocates face centres instead of face planes."""
    return alternate_reciprocals(polyhedron, iterations, reciprocal_c, verbose=verbose)
