from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
import trimesh

from canonicalization.errors import MalformedTopologyError
from canonicalization.topology import (
    dual_faces,
    dual_vertices,
    edges_from_faces,
    face_centers,
    validate_topology,
)


@dataclass(frozen=True, eq=False)
class Polyhedron:
    vertices: NDArray[np.float64]  # V x 3 array of vertex coordinates, read-only
    faces: tuple  # F tuples of vertex *indices*, counter-clockwise seen from outside
    name: str = ""

    def __post_init__(self):
        vertices = np.array(self.vertices, dtype=np.float64)
        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise MalformedTopologyError(f"Vertices must be a V x 3 array, got shape {vertices.shape}")
        vertices.flags.writeable = False
        faces = tuple(tuple(int(v_idx) for v_idx in face) for face in self.faces)
        validate_topology(faces, len(vertices))
        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "faces", faces)

    def __eq__(self, other):
        if not isinstance(other, Polyhedron):
            return NotImplemented
        return self.faces == other.faces and np.array_equal(self.vertices, other.vertices)

    def edges(self) -> NDArray[np.int64]:
        """E x 2 array of unique vertex index pairs, recomputed from the faces."""
        return edges_from_faces(self.faces)

    def centers(self) -> NDArray[np.float64]:
        """F x 3 array of face centroids."""
        return face_centers(self.vertices, self.faces)

    def dual(self) -> "Polyhedron":
        """
        The dual polyhedron. Dual vertex k sits at the reciprocal of face k's
        centre; dual face j surrounds original vertex j.
        """
        return Polyhedron(
            dual_vertices(self.vertices, self.faces),
            dual_faces(self.faces, len(self.vertices)),
            name="d" + self.name,
        )

    def with_vertices(self, vertices: NDArray[np.float64]) -> "Polyhedron":
        """Same topology and name, new geometry."""
        if len(vertices) != len(self.vertices):
            raise MalformedTopologyError(
                f"Expected {len(self.vertices)} vertices, got {len(vertices)}"
            )
        return Polyhedron(vertices, self.faces, name=self.name)

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh, name: str = "") -> "Polyhedron":
        """Wrap a triangle mesh; every triangle becomes a face."""
        return cls(np.asarray(mesh.vertices), mesh.faces.tolist(), name=name)

    def to_trimesh(self) -> trimesh.Trimesh:
        """Fan-triangulate every face into a trimesh.Trimesh (no vertex merging)."""
        triangles = []
        for face in self.faces:
            for k in range(1, len(face) - 1):
                triangles.append([face[0], face[k], face[k + 1]])
        return trimesh.Trimesh(vertices=np.array(self.vertices), faces=np.array(triangles), process=False)
