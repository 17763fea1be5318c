"""
General algorithms
==================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module is a collection of algorithms used by the MDMixture
analysis modules: periodic minimum distances, rigid-body moves, and
histogram kernels.
"""

from . import accelerated, minimum_distance, molecule, utility

__all__ = ["accelerated", "minimum_distance", "molecule", "utility"]
