"""
Numba algorithms
================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains Numba-accelerated kernels that reduce atom pair
distances to per-molecule minimum distances and tally them into
histograms.
"""

import numba
import numpy as np

# fastmath is off: infinities mark molecules beyond the cutoff.

@numba.njit(nogil=True)
def reduce_minimum_distances(
        pairs: np.ndarray[int], distances: np.ndarray[float],
        natomspermol: int, irefatom: int, iself: int,
        within_cutoff: np.ndarray[bool], dmin: np.ndarray[float],
        dref: np.ndarray[float], i: np.ndarray[int], j: np.ndarray[int]
    ) -> None:

    r"""
    Serial Numba-accelerated reduction of atom pair distances to the
    minimum distance between a query molecule and every molecule of a
    second group.

    The output arrays are overwritten.

    Parameters
    ----------
    pairs : `numpy.ndarray`
        Indices of the query atom and of the group atom in each pair
        found within the cutoff.

        **Shape**: :math:`(N_\mathrm{pairs},\,2)`.

    distances : `numpy.ndarray`
        Pair distances.

        **Shape**: :math:`(N_\mathrm{pairs},)`.

    natomspermol : `int`
        Number of atoms per molecule in the second group.

    irefatom : `int`
        Index of the reference atom within a molecule of the second
        group.

    iself : `int`
        Molecule of the second group to ignore (the query molecule
        itself in autocorrelation), or :code:`-1`.

    within_cutoff : `numpy.ndarray`
        Whether each molecule has an atom within the cutoff.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    dmin : `numpy.ndarray`
        Minimum distance of each molecule.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    dref : `numpy.ndarray`
        Minimum distance of the reference atom of each molecule.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    i : `numpy.ndarray`
        Index of the query atom realizing each minimum distance.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    j : `numpy.ndarray`
        Index (within its molecule) of the atom realizing each minimum
        distance.

        **Shape**: :math:`(N_\mathrm{mol},)`.
    """

    within_cutoff[:] = False
    dmin[:] = np.inf
    dref[:] = np.inf
    i[:] = -1
    j[:] = -1
    for k in range(pairs.shape[0]):
        jmol = pairs[k, 1] // natomspermol
        if jmol == iself:
            continue
        jatom = pairs[k, 1] - jmol * natomspermol
        d = distances[k]
        if d < dmin[jmol]:
            within_cutoff[jmol] = True
            dmin[jmol] = d
            i[jmol] = pairs[k, 0]
            j[jmol] = jatom
        if jatom == irefatom and d < dref[jmol]:
            dref[jmol] = d

@numba.njit(nogil=True)
def tally_minimum_distances(
        within_cutoff: np.ndarray[bool], dmin: np.ndarray[float],
        dref: np.ndarray[float], binstep: float,
        md_count: np.ndarray[float], rdf_count: np.ndarray[float]) -> None:

    r"""
    Serial Numba-accelerated histogramming of molecular minimum
    distances and reference atom distances. Distances beyond the last
    bin are ignored.

    Parameters
    ----------
    within_cutoff : `numpy.ndarray`
        Whether each molecule has an atom within the cutoff.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    dmin : `numpy.ndarray`
        Minimum distance of each molecule.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    dref : `numpy.ndarray`
        Minimum distance of the reference atom of each molecule.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    binstep : `float`
        Bin width.

    md_count : `numpy.ndarray`
        Minimum-distance histogram, updated in place.

        **Shape**: :math:`(N_\mathrm{bins},)`.

    rdf_count : `numpy.ndarray`
        Reference atom distance histogram, updated in place.

        **Shape**: :math:`(N_\mathrm{bins},)`.
    """

    n_bins = md_count.shape[0]
    for k in range(within_cutoff.shape[0]):
        if not within_cutoff[k]:
            continue
        ibin = int(dmin[k] / binstep)
        if ibin < n_bins:
            md_count[ibin] += 1
        if dref[k] < np.inf:
            ibin = int(dref[k] / binstep)
            if ibin < n_bins:
                rdf_count[ibin] += 1

@numba.njit(nogil=True)
def tally_atomic_contributions(
        within_cutoff: np.ndarray[bool], dmin: np.ndarray[float],
        i: np.ndarray[int], j: np.ndarray[int], binstep: float,
        solute_atom: np.ndarray[float], solvent_atom: np.ndarray[float]
    ) -> None:

    r"""
    Serial Numba-accelerated histogramming of the solute and solvent
    atoms that realize each molecular minimum distance.

    Parameters
    ----------
    within_cutoff : `numpy.ndarray`
        Whether each molecule has an atom within the cutoff.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    dmin : `numpy.ndarray`
        Minimum distance of each molecule.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    i : `numpy.ndarray`
        Solute atom (within its molecule) of each minimum distance.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    j : `numpy.ndarray`
        Solvent atom (within its molecule) of each minimum distance.

        **Shape**: :math:`(N_\mathrm{mol},)`.

    binstep : `float`
        Bin width.

    solute_atom : `numpy.ndarray`
        Solute atomic contributions, updated in place.

        **Shape**: :math:`(N_\mathrm{bins},\,N_\mathrm{atoms/mol,solute})`.

    solvent_atom : `numpy.ndarray`
        Solvent atomic contributions, updated in place.

        **Shape**: :math:`(N_\mathrm{bins},\,N_\mathrm{atoms/mol,solvent})`.
    """

    n_bins = solute_atom.shape[0]
    for k in range(within_cutoff.shape[0]):
        if not within_cutoff[k]:
            continue
        ibin = int(dmin[k] / binstep)
        if ibin < n_bins:
            solute_atom[ibin, i[k]] += 1
            solvent_atom[ibin, j[k]] += 1
