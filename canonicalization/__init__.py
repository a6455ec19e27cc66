"""
Canonicalization of polyhedra: move vertices until every edge touches the unit
sphere, every face is planar and the shape is centred on the origin.
"""

from .algorithms import (
    CanonicalizationReport,
    RelaxationStatus,
    canonicalize,
    canonicalize_with_report,
    relax,
)
from .errors import CanonicalizationError, DegenerateGeometryError, MalformedTopologyError
from .metrics import (
    calculate_center_offset,
    calculate_max_change,
    calculate_planarity_error,
    calculate_planarity_error_vectorized,
    calculate_tangency_error,
    calculate_tangency_error_vectorized,
)
from .physics import (
    planarize,
    planarize_vectorized,
    recenter,
    rescale,
    tangentify,
    tangentify_vectorized,
)
from .reciprocal import adjust_xyz, canonical_xyz, reciprocal_c, reciprocal_n
