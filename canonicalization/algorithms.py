"""
Iterative canonicalization: tangentify, recenter and planarize until the
vertices stop moving or the iteration budget runs out.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray
from tqdm import trange

from .constants import CONVERGENCE_THRESHOLD, PROGRESS_BAR_MIN_ITERATIONS, STABILITY
from .errors import MalformedTopologyError
from .geometry import check_finite
from .metrics import calculate_max_change
from .physics import (
    group_faces_by_size,
    planarize_vectorized,
    recenter,
    tangentify_vectorized,
)
from .topology import edges_from_faces, validate_topology

logger = logging.getLogger(__name__)


class RelaxationStatus(Enum):
    ITERATING = "iterating"
    CONVERGED = "converged"
    BUDGET_EXHAUSTED = "budget exhausted"


@dataclass
class CanonicalizationReport:
    vertices: NDArray[np.float64]  # V x 3 buffer after the last iteration
    status: RelaxationStatus
    max_changes: list = field(default_factory=list)  # convergence delta of every iteration run

    @property
    def iterations(self) -> int:
        return len(self.max_changes)

    @property
    def converged(self) -> bool:
        return self.status is RelaxationStatus.CONVERGED

    @property
    def final_change(self):
        return self.max_changes[-1] if self.max_changes else None


def as_vertex_buffer(vertices, faces) -> NDArray[np.float64]:
    """Copy vertices into a fresh float64 V x 3 buffer after checking the faces against it."""
    buffer = np.array(vertices, dtype=np.float64)
    if buffer.ndim != 2 or buffer.shape[1] != 3:
        raise MalformedTopologyError(f"Vertices must be a V x 3 array, got shape {buffer.shape}")
    validate_topology(faces, len(buffer))
    return buffer


def relax(
    vertices: NDArray[np.float64],
    faces,
    iterations: int = 1,
    stability: float = STABILITY,
    tolerance: float = CONVERGENCE_THRESHOLD,
    verbose: bool = False,
) -> CanonicalizationReport:
    """
    Run up to `iterations` rounds of tangentify -> recenter -> planarize.

    Args:
        vertices: 3D vertex positions
        faces: Face index lists, wound consistently
        iterations: Iteration budget; 0 returns an unchanged copy
        stability: Damping factor passed to tangentify and planarize
        tolerance: Convergence threshold on the largest per-vertex displacement
        verbose: Whether to show a progress bar for long runs

    Returns:
        CanonicalizationReport: final buffer, status and per-iteration deltas

    Raises:
        MalformedTopologyError: if the faces do not fit the vertex buffer
        DegenerateGeometryError: if a pass divides by a near-zero vector or
            produces non-finite positions
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")

    vertices = as_vertex_buffer(vertices, faces)
    edges = edges_from_faces(faces)
    face_groups = group_faces_by_size(faces)

    use_progress_bar = verbose and iterations >= PROGRESS_BAR_MIN_ITERATIONS
    range_func = (lambda n: trange(n, desc="Canonicalizing")) if use_progress_bar else range

    status = RelaxationStatus.ITERATING
    max_changes = []

    for iteration in range_func(iterations):
        previous_vertices = vertices

        vertices = tangentify_vectorized(previous_vertices, edges, stability)
        vertices = recenter(vertices, edges)
        vertices = planarize_vectorized(vertices, faces, stability, face_groups=face_groups)
        check_finite(vertices, f"canonicalization iteration {iteration}")

        max_change = calculate_max_change(previous_vertices, vertices)
        max_changes.append(max_change)
        logger.debug("Iteration %d: max change %.3e", iteration, max_change)

        if max_change < tolerance:
            status = RelaxationStatus.CONVERGED
            break

    if status is RelaxationStatus.ITERATING:
        status = RelaxationStatus.BUDGET_EXHAUSTED

    return CanonicalizationReport(vertices, status, max_changes)


def canonicalize_with_report(polyhedron, iterations: int = 1, **kwargs):
    """
    Canonicalize a Polyhedron and report how the run ended.

    Non-convergence is not an error: the best-effort geometry is returned with
    a BUDGET_EXHAUSTED status.

    Returns:
        tuple: (new Polyhedron with the original faces and name, CanonicalizationReport)
    """
    logger.info("Canonicalizing %s (%d vertices, %d faces), up to %d iterations",
                polyhedron.name or "<unnamed>", len(polyhedron.vertices), len(polyhedron.faces), iterations)

    report = relax(polyhedron.vertices, polyhedron.faces, iterations=iterations, **kwargs)

    if report.converged:
        logger.info("%s converged after %d iterations, max change %.3e",
                    polyhedron.name or "<unnamed>", report.iterations, report.final_change)
    elif report.iterations > 0:
        logger.warning("%s did not converge within %d iterations, max change %.3e",
                       polyhedron.name or "<unnamed>", report.iterations, report.final_change)

    return polyhedron.with_vertices(report.vertices), report


def canonicalize(polyhedron, iterations: int = 1, **kwargs):
    """Canonicalize a Polyhedron, returning a new one with the same faces and name."""
    canonical, _ = canonicalize_with_report(polyhedron, iterations, **kwargs)
    return canonical
