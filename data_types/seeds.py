"""
Seed polyhedra to feed the canonicalization drivers.

Every builder returns a Polyhedron with faces wound counter-clockwise when
seen from outside, which the dual operator and the planarize pass rely on.

SEEDS (Conway letters):
    T  tetrahedron   (V=4,  E=6,  F=4)
    C  cube          (V=8,  E=12, F=6)
    O  octahedron    (V=6,  E=12, F=8)
    I  icosahedron   (V=12, E=30, F=20)
    D  dodecahedron  (V=20, E=30, F=12), built as the dual of I
    Pn n-gonal prism, An n-gonal antiprism, Yn n-gonal pyramid
"""

import re

import numpy as np
import trimesh

from .polyhedron import Polyhedron


def build_tetrahedron() -> Polyhedron:
    vertices = [[1, 1, 1], [1, -1, -1], [-1, 1, -1], [-1, -1, 1]]
    faces = [[0, 1, 2], [0, 2, 3], [0, 3, 1], [1, 3, 2]]
    return Polyhedron(np.array(vertices, dtype=float), faces, name="T")


def build_cube() -> Polyhedron:
    """Cube with corners at (±1, ±1, ±1)."""
    vertices = [
        [1, 1, 1], [-1, 1, 1], [-1, -1, 1], [1, -1, 1],
        [1, -1, -1], [1, 1, -1], [-1, 1, -1], [-1, -1, -1],
    ]
    faces = [
        [3, 0, 1, 2],  # z = +1
        [3, 4, 5, 0],  # x = +1
        [0, 5, 6, 1],  # y = +1
        [1, 6, 7, 2],  # x = -1
        [2, 7, 4, 3],  # y = -1
        [5, 4, 7, 6],  # z = -1
    ]
    return Polyhedron(np.array(vertices, dtype=float), faces, name="C")


def build_octahedron() -> Polyhedron:
    vertices = [[0, 0, 1], [1, 0, 0], [0, 1, 0], [-1, 0, 0], [0, -1, 0], [0, 0, -1]]
    faces = [
        [0, 1, 2], [0, 2, 3], [0, 3, 4], [0, 4, 1],
        [1, 4, 5], [1, 5, 2], [2, 5, 3], [3, 5, 4],
    ]
    return Polyhedron(np.array(vertices, dtype=float), faces, name="O")


def build_icosahedron() -> Polyhedron:
    """Unit-circumradius icosahedron from trimesh."""
    mesh = trimesh.creation.icosahedron()
    if mesh.volume < 0:
        mesh.invert()
    return Polyhedron.from_trimesh(mesh, name="I")


def build_dodecahedron() -> Polyhedron:
    dodecahedron = build_icosahedron().dual()
    return Polyhedron(dodecahedron.vertices, dodecahedron.faces, name="D")


def build_prism(n: int) -> Polyhedron:
    """n-gonal prism on unit-radius polygons, all edges the same length."""
    if n < 3:
        raise ValueError(f"A prism needs at least 3 sides, got {n}")
    theta = 2 * np.pi * np.arange(n) / n
    h = np.sin(np.pi / n)
    top = np.column_stack([np.cos(theta), np.sin(theta), np.full(n, h)])
    bottom = np.column_stack([np.cos(theta), np.sin(theta), np.full(n, -h)])

    faces = [list(range(n)), list(range(2 * n - 1, n - 1, -1))]
    for i in range(n):
        faces.append([i, n + i, n + (i + 1) % n, (i + 1) % n])
    return Polyhedron(np.vstack([top, bottom]), faces, name=f"P{n}")


def build_antiprism(n: int) -> Polyhedron:
    """n-gonal antiprism on unit-radius polygons, all edges the same length."""
    if n < 3:
        raise ValueError(f"An antiprism needs at least 3 sides, got {n}")
    theta = 2 * np.pi * np.arange(n) / n
    h = np.sqrt((np.cos(np.pi / n) - np.cos(2 * np.pi / n)) / 2)
    top = np.column_stack([np.cos(theta), np.sin(theta), np.full(n, h)])
    bottom = np.column_stack([np.cos(theta + np.pi / n), np.sin(theta + np.pi / n), np.full(n, -h)])

    faces = [list(range(n)), list(range(2 * n - 1, n - 1, -1))]
    for i in range(n):
        faces.append([i, n + i, (i + 1) % n])
        faces.append([(i + 1) % n, n + i, n + (i + 1) % n])
    return Polyhedron(np.vstack([top, bottom]), faces, name=f"A{n}")


def build_pyramid(n: int, height: float = 1.0) -> Polyhedron:
    """n-gonal pyramid, apex on the +z axis."""
    if n < 3:
        raise ValueError(f"A pyramid needs at least 3 sides, got {n}")
    theta = 2 * np.pi * np.arange(n) / n
    base = np.column_stack([np.cos(theta), np.sin(theta), np.full(n, -height / 2)])
    apex = np.array([[0.0, 0.0, height / 2]])

    faces = [list(range(n - 1, -1, -1))]
    for i in range(n):
        faces.append([i, (i + 1) % n, n])
    return Polyhedron(np.vstack([base, apex]), faces, name=f"Y{n}")


PLATONIC_SEEDS = {
    "T": build_tetrahedron,
    "C": build_cube,
    "O": build_octahedron,
    "I": build_icosahedron,
    "D": build_dodecahedron,
}

FAMILY_SEEDS = {
    "P": build_prism,
    "A": build_antiprism,
    "Y": build_pyramid,
}


def seed_from_name(name: str) -> Polyhedron:
    """Build a seed from its Conway letter, e.g. "C", "D" or "P5"."""
    if name in PLATONIC_SEEDS:
        return PLATONIC_SEEDS[name]()

    match = re.fullmatch(r"([PAY])(\d+)", name)
    if match is None:
        raise ValueError(
            f"Unknown seed {name!r}. Available seeds: {', '.join(PLATONIC_SEEDS)}, Pn, An, Yn"
        )
    return FAMILY_SEEDS[match.group(1)](int(match.group(2)))
