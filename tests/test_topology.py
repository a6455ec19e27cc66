"""
Test script to verify the Polyhedron type and its topology accessors.
"""

import os
import sys
import numpy as np
import pytest

# Add the parent directory to the Python path so we can import the data_types module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from canonicalization.errors import MalformedTopologyError
from canonicalization.geometry import face_normal
from canonicalization.topology import edges_from_faces
from data_types import Polyhedron
from data_types.seeds import build_cube, build_icosahedron, build_tetrahedron


def is_rotation(a, b):
    """True if sequence b is a cyclic rotation of sequence a."""
    a, b = list(a), list(b)
    if len(a) != len(b):
        return False
    return any(a[k:] + a[:k] == b for k in range(len(a)))


def test_edges_from_faces():
    """Edges are unique, sorted pairs in order of first appearance."""
    edges = edges_from_faces([[0, 1, 2]])
    assert edges.tolist() == [[0, 2], [0, 1], [1, 2]]

    cube = build_cube()
    edges = cube.edges()
    assert edges.shape == (12, 2)
    assert np.all(edges[:, 0] < edges[:, 1])
    assert len({tuple(edge) for edge in edges.tolist()}) == 12

    assert build_tetrahedron().edges().shape == (6, 2)


def test_face_centers():
    cube = build_cube()
    centers = cube.centers()
    assert centers.shape == (6, 3)
    # Face 0 is the z = +1 face
    assert np.allclose(centers[0], np.array([0.0, 0.0, 1.0]))
    assert np.allclose(np.linalg.norm(centers, axis=1), 1.0)


def test_dual_of_cube():
    """The dual of a cube is an octahedron whose faces follow the cube's vertices."""
    cube = build_cube()
    dual = cube.dual()

    assert len(dual.vertices) == len(cube.faces)
    assert len(dual.faces) == len(cube.vertices)
    assert all(len(face) == 3 for face in dual.faces)
    assert dual.name == "dC"

    # Dual face j lists the faces around vertex j
    for v_idx, dual_face in enumerate(dual.faces):
        expected = {f_idx for f_idx, face in enumerate(cube.faces) if v_idx in face}
        assert set(dual_face) == expected

    # Dual vertices are the reciprocated face centres
    assert np.allclose(dual.vertices, cube.centers())


def test_dual_winding_is_outward():
    """Dual faces are counter-clockwise seen from outside."""
    for polyhedron in [build_cube(), build_tetrahedron(), build_icosahedron()]:
        dual = polyhedron.dual()
        for face, center in zip(dual.faces, dual.centers()):
            normal = face_normal(dual.vertices[list(face)])
            assert np.dot(normal, center) > 0


def test_dual_of_dual_restores_faces():
    """Taking the dual twice gives back every face, up to a cyclic rotation."""
    icosahedron = build_icosahedron()
    double_dual = icosahedron.dual().dual()

    assert len(double_dual.faces) == len(icosahedron.faces)
    for original, restored in zip(icosahedron.faces, double_dual.faces):
        assert is_rotation(original, restored)


def test_dual_rejects_open_mesh():
    triangle = Polyhedron(np.eye(3), [[0, 1, 2]])
    with pytest.raises(MalformedTopologyError):
        triangle.dual()


def test_dual_rejects_inconsistent_winding():
    cube = build_cube()
    faces = [list(face) for face in cube.faces]
    faces[0] = faces[0][::-1]
    with pytest.raises(MalformedTopologyError):
        Polyhedron(cube.vertices, faces).dual()


def test_malformed_topology():
    """Malformed faces are rejected when the Polyhedron is built."""
    vertices = np.eye(3)

    # Face with only two corners
    with pytest.raises(MalformedTopologyError):
        Polyhedron(vertices, [[0, 1]])

    # Index out of range
    with pytest.raises(MalformedTopologyError):
        Polyhedron(vertices, [[0, 1, 3]])
    with pytest.raises(MalformedTopologyError):
        Polyhedron(vertices, [[0, 1, -1]])

    # Vertices that are not V x 3
    with pytest.raises(MalformedTopologyError):
        Polyhedron(np.zeros((3, 2)), [[0, 1, 2]])

    # Malformed topology is still a ValueError for callers that don't care which
    with pytest.raises(ValueError):
        Polyhedron(vertices, [[0, 1]])


def test_vertices_are_read_only():
    cube = build_cube()
    with pytest.raises(ValueError):
        cube.vertices[0, 0] = 5.0


def test_polyhedron_copies_input():
    vertices = np.eye(3)
    triangle = Polyhedron(vertices, [[0, 1, 2]])
    vertices[0, 0] = 5.0
    assert triangle.vertices[0, 0] == 1.0


def test_with_vertices():
    cube = build_cube()
    scaled = cube.with_vertices(cube.vertices * 2)

    assert scaled.faces == cube.faces
    assert scaled.name == cube.name
    assert np.allclose(scaled.vertices, cube.vertices * 2)
    assert scaled != cube
    assert cube.with_vertices(cube.vertices) == cube

    with pytest.raises(MalformedTopologyError):
        cube.with_vertices(cube.vertices[:4])


def test_trimesh_round_trip():
    """Fan triangulation turns the six cube quads into twelve triangles."""
    cube = build_cube()
    mesh = cube.to_trimesh()

    assert mesh.faces.shape == (12, 3)
    assert np.allclose(mesh.vertices, cube.vertices)
    assert mesh.volume > 0

    triangulated = Polyhedron.from_trimesh(mesh, name="triangulated cube")
    assert len(triangulated.faces) == 12
    assert len(triangulated.edges()) == 18
    assert triangulated.name == "triangulated cube"


if __name__ == "__main__":
    # Run tests directly
    test_edges_from_faces()
    test_face_centers()
    test_dual_of_cube()
    test_dual_winding_is_outward()
    test_dual_of_dual_restores_faces()
    test_dual_rejects_open_mesh()
    test_dual_rejects_inconsistent_winding()
    test_malformed_topology()
    test_vertices_are_read_only()
    test_polyhedron_copies_input()
    test_with_vertices()
    test_trimesh_round_trip()
    print("All tests passed!")
