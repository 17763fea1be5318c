"""
Utility algorithms
==================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains logical and mathematical utility functions used by
other MDMixture modules.
"""

import os

from MDAnalysis.lib.mdamath import box_volume, triclinic_vectors
import numpy as np

def get_n_bins(cutoff: float, binstep: float) -> int:

    """
    Get the number of histogram bins of width `binstep` that fit below
    `cutoff`.

    Parameters
    ----------
    cutoff : `float`
        Upper bound of the histogram.

    binstep : `float`
        Bin width.

    Returns
    -------
    n_bins : `int`
        Number of bins.
    """

    return max(int(np.round(cutoff / binstep, 8)), 1)

def get_bin_edges(n_bins: int, binstep: float) -> np.ndarray[float]:

    r"""
    Get the edges of histogram bins starting at zero.

    Parameters
    ----------
    n_bins : `int`
        Number of bins.

    binstep : `float`
        Bin width.

    Returns
    -------
    edges : `numpy.ndarray`
        Bin edges.

        **Shape**: :math:`(N_\mathrm{bins}+1,)`.
    """

    return binstep * np.arange(n_bins + 1)

def cell_volume(dimensions: np.ndarray[float]) -> float:

    r"""
    Computes the volume of an orthorhombic or triclinic cell.

    Parameters
    ----------
    dimensions : `numpy.ndarray`
        Cell lengths and angles.

        **Shape**: :math:`(6,)`.

    Returns
    -------
    volume : `float`
        Cell volume.
    """

    return float(box_volume(np.asarray(dimensions, dtype=np.float32)))

def get_cell_heights(dimensions: np.ndarray[float]) -> np.ndarray[float]:

    r"""
    Computes the distances between opposite faces of a cell.

    The minimum image convention holds for distances smaller than half
    of the shortest height.

    Parameters
    ----------
    dimensions : `numpy.ndarray`
        Cell lengths and angles.

        **Shape**: :math:`(6,)`.

    Returns
    -------
    heights : `numpy.ndarray`
        Cell heights.

        **Shape**: :math:`(3,)`.
    """

    a, b, c = triclinic_vectors(dimensions).astype(float)
    volume = abs(np.dot(np.cross(a, b), c))
    return volume / np.linalg.norm(
        (np.cross(b, c), np.cross(c, a), np.cross(a, b)), axis=1
    )

def get_n_jobs(n_jobs: int = None, n_tasks: int = None) -> int:

    """
    Get the number of workers to use.

    Parameters
    ----------
    n_jobs : `int`, optional
        Requested number of workers. If not specified or :code:`0`, the
        number of CPU threads available to this process is used.

    n_tasks : `int`, optional
        Number of tasks to distribute. No more workers than tasks are
        used.

    Returns
    -------
    n_jobs : `int`
        Number of workers.
    """

    n_jobs = n_jobs or len(os.sched_getaffinity(0))
    if n_tasks is not None:
        n_jobs = min(n_jobs, n_tasks)
    return max(n_jobs, 1)
