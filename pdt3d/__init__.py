"""
pdt3d — 3D тетраедралізація Делоне, звичайна або періодична (одиничний куб, 3-тор).
Рушій: SciPy Delaunay (Qhull); періодичний режим — через 27 копій точок.
"""

__version__ = "0.1.0"

from pdt3d.errors import InvalidInputError, TriangulationError, EngineInitError
from pdt3d.geom import EPS, wrap_unit, normalize_coords
from pdt3d.predicates import orient3d, insphere, tet_volumes, affine_rank, is_degenerate
from pdt3d.engine import PERIOD, PeriodicDelaunay3D, ensure_initialized, is_initialized
from pdt3d.pipeline import Fault, Outcome, triangulate, materialize, compute_delaunay
from pdt3d.mesh import TetMesh

__all__ = [
    "InvalidInputError", "TriangulationError", "EngineInitError",
    "EPS", "wrap_unit", "normalize_coords",
    "orient3d", "insphere", "tet_volumes", "affine_rank", "is_degenerate",
    "PERIOD", "PeriodicDelaunay3D", "ensure_initialized", "is_initialized",
    "Fault", "Outcome", "triangulate", "materialize", "compute_delaunay",
    "TetMesh", "__version__",
]
