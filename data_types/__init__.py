from .polyhedron import Polyhedron
from .seeds import seed_from_name

__all__ = ["Polyhedron", "seed_from_name"]
