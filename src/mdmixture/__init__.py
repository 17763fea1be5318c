"""
MDMixture
=========
Minimum-distance distribution functions, radial distribution functions,
and Kirkwood–Buff integrals of solvents around solutes in molecular
dynamics (MD) simulations of mixtures.
"""

from numpy.typing import ArrayLike
from pint import Quantity, UnitRegistry
Q_ = Quantity
ureg = UnitRegistry(auto_reduce_dimensions=True)

VERSION = "1.0.0"
__all__ = ["algorithm", "analysis", "options", "selection", "trajectory",
           "ArrayLike", "VERSION"]

from . import algorithm, analysis, options, selection, trajectory # noqa: E402
from .options import Options # noqa: E402
from .selection import Selection # noqa: E402
from .trajectory import Trajectory, UniverseTrajectory # noqa: E402
from .analysis.mddf import MDDF, mddf # noqa: E402
from .analysis.results import Result # noqa: E402
__all__ += ["MDDF", "Options", "Result", "Selection", "Trajectory",
            "UniverseTrajectory", "mddf"]
