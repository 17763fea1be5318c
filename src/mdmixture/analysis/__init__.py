"""
Simulation trajectory analysis
==============================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module provides the classes for computing minimum-distance
distribution functions from simulation trajectories.
"""

from . import base, mddf, results

__all__ = ["base", "mddf", "results"]
