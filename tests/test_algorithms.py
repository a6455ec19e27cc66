"""
Test script to verify the canonicalization driver.
"""

import logging
import os
import sys
import numpy as np
import pytest

# Add the parent directory to the Python path so we can import the canonicalization module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from canonicalization.algorithms import (
    RelaxationStatus,
    canonicalize,
    canonicalize_with_report,
    relax,
)
from canonicalization.constants import CONVERGENCE_THRESHOLD
from canonicalization.errors import DegenerateGeometryError, MalformedTopologyError
from canonicalization.metrics import (
    calculate_center_offset,
    calculate_planarity_error_vectorized,
    calculate_tangency_error_vectorized,
)
from data_types import Polyhedron
from data_types.seeds import build_cube, build_icosahedron, build_tetrahedron


def test_zero_iterations_is_a_copy():
    """canonicalize(mesh, 0) returns the input geometry exactly."""
    cube = build_cube()
    result, report = canonicalize_with_report(cube, 0)

    assert np.array_equal(result.vertices, cube.vertices)
    assert result.faces == cube.faces
    assert result.name == cube.name
    assert result is not cube
    assert report.iterations == 0
    assert report.final_change is None
    assert report.status is RelaxationStatus.BUDGET_EXHAUSTED


def test_cube_keeps_equal_radii():
    """A cube is edge- and face-symmetric, so every corner stays at the same distance."""
    cube = build_cube()
    result, report = canonicalize_with_report(cube, 50)

    magnitudes = np.linalg.norm(result.vertices, axis=1)
    assert np.allclose(magnitudes, magnitudes[0], atol=1e-6)
    assert report.iterations == 50

    # With 0.1 damping the cube needs more than 50 iterations to settle
    assert report.status is RelaxationStatus.BUDGET_EXHAUSTED


def test_cube_converges():
    """The cube settles with its edges on the unit sphere."""
    cube = build_cube()
    result, report = canonicalize_with_report(cube, 300)

    assert report.status is RelaxationStatus.CONVERGED
    assert report.converged
    assert report.final_change < CONVERGENCE_THRESHOLD
    assert report.iterations < 300

    # Corners of a cube with midsphere radius 1 are at distance sqrt(3/2)
    magnitudes = np.linalg.norm(result.vertices, axis=1)
    assert np.allclose(magnitudes, np.sqrt(1.5), atol=1e-6)
    assert calculate_tangency_error_vectorized(result.vertices, result.edges()) < 1e-6


def test_converged_polyhedron_is_a_fixed_point():
    """One more iteration on a converged result barely moves it."""
    cube = build_cube()
    converged = canonicalize(cube, 300)

    report = relax(converged.vertices, converged.faces, iterations=1)
    assert report.max_changes[0] < CONVERGENCE_THRESHOLD
    assert report.status is RelaxationStatus.CONVERGED


def test_max_changes_shrink_on_cube():
    report = relax(build_cube().vertices, build_cube().faces, iterations=100)
    changes = np.array(report.max_changes)
    assert np.all(np.diff(changes) < 0)


def test_irregular_polyhedron_improves():
    """A jittered icosahedron gets closer to canonical form."""
    icosahedron = build_icosahedron()
    rng = np.random.default_rng(3)
    jittered = icosahedron.with_vertices(icosahedron.vertices + 0.05 * rng.normal(size=icosahedron.vertices.shape))
    edges = jittered.edges()

    tangency_before = calculate_tangency_error_vectorized(jittered.vertices, edges)
    offset_before = calculate_center_offset(jittered.vertices, edges)

    result = canonicalize(jittered, 300)

    assert np.all(np.isfinite(result.vertices))
    assert calculate_tangency_error_vectorized(result.vertices, edges) < tangency_before
    assert calculate_center_offset(result.vertices, edges) < offset_before
    assert calculate_planarity_error_vectorized(result.vertices, result.faces) < 1e-9  # triangles are always planar


def test_canonicalize_keeps_topology():
    cube = build_cube()
    result = canonicalize(cube, 5)

    assert isinstance(result, Polyhedron)
    assert result.faces == cube.faces
    assert result.name == cube.name
    assert result.vertices.shape == cube.vertices.shape
    assert not np.array_equal(result.vertices, cube.vertices)


def test_relax_accepts_raw_buffers():
    cube = build_cube()
    report = relax(cube.vertices.tolist(), [list(face) for face in cube.faces], iterations=3)
    assert report.vertices.shape == (8, 3)
    assert len(report.max_changes) == 3


def test_malformed_topology_rejected_before_running():
    vertices = build_cube().vertices

    with pytest.raises(MalformedTopologyError):
        relax(vertices, [[0, 1]], iterations=1)

    with pytest.raises(MalformedTopologyError):
        relax(vertices, [[0, 1, 8]], iterations=1)

    with pytest.raises(MalformedTopologyError):
        relax(vertices[:, :2], [[0, 1, 2]], iterations=1)


def test_degenerate_geometry_is_fatal():
    """Two coincident corners make an edge with no direction."""
    tetrahedron = build_tetrahedron()
    vertices = np.array(tetrahedron.vertices)
    vertices[1] = vertices[0]

    with pytest.raises(DegenerateGeometryError):
        canonicalize(tetrahedron.with_vertices(vertices), 10)


def test_negative_iterations():
    with pytest.raises(ValueError):
        relax(build_cube().vertices, build_cube().faces, iterations=-1)


def test_logging(caplog):
    """Progress goes to the logging side channel."""
    with caplog.at_level(logging.INFO, logger="canonicalization.algorithms"):
        canonicalize(build_cube(), 5)
    assert "Canonicalizing C" in caplog.text
    assert "did not converge within 5 iterations" in caplog.text

    caplog.clear()
    with caplog.at_level(logging.INFO, logger="canonicalization.algorithms"):
        canonicalize(build_cube(), 300)
    assert "converged after" in caplog.text


if __name__ == "__main__":
    # Run tests directly
    test_zero_iterations_is_a_copy()
    test_cube_keeps_equal_radii()
    test_cube_converges()
    test_converged_polyhedron_is_a_fixed_point()
    test_max_changes_shrink_on_cube()
    test_irregular_polyhedron_improves()
    test_canonicalize_keeps_topology()
    test_relax_accepts_raw_buffers()
    test_malformed_topology_rejected_before_running()
    test_degenerate_geometry_is_fatal()
    test_negative_iterations()
    print("All tests passed!")
