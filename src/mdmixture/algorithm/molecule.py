"""
Molecular rigid-body moves
==========================
.. moduleauthor:: Benjamin B. Ye <bye@caltech.edu>

This module contains algorithms for reshaping coordinates into
molecules and for displacing molecules as rigid bodies.
"""

from MDAnalysis.lib.mdamath import triclinic_vectors
import numpy as np
from scipy.spatial.transform import Rotation

def as_molecules(
        positions: np.ndarray[float], natomspermol: int) -> np.ndarray[float]:

    r"""
    Reshapes the coordinates of identical molecules so that the first
    axis indexes the molecules.

    Parameters
    ----------
    positions : `numpy.ndarray`
        Coordinates of :math:`N` atoms.

        **Shape**: :math:`(N,\,3)`.

    natomspermol : `int`
        Number of atoms per molecule.

    Returns
    -------
    molecules : `numpy.ndarray`
        View of the coordinates grouped by molecule.

        **Shape**: :math:`(N/N_\mathrm{atoms/mol},\,N_\mathrm{atoms/mol},\,3)`.
    """

    return positions.reshape((-1, natomspermol, 3))

def random_points(
        dimensions: np.ndarray[float], n_points: int,
        rng: np.random.Generator) -> np.ndarray[float]:

    r"""
    Draws points uniformly distributed inside an orthorhombic or
    triclinic cell.

    Parameters
    ----------
    dimensions : `numpy.ndarray`
        Cell lengths and angles.

        **Shape**: :math:`(6,)`.

    n_points : `int`
        Number of points :math:`N`.

    rng : `numpy.random.Generator`
        Random number generator.

    Returns
    -------
    points : `numpy.ndarray`
        Points inside the cell.

        **Shape**: :math:`(N,\,3)`.
    """

    return rng.random((n_points, 3)) @ triclinic_vectors(dimensions)

def random_move(
        molecules: np.ndarray[float], irefatom: int,
        dimensions: np.ndarray[float], rng: np.random.Generator
    ) -> np.ndarray[float]:

    r"""
    Applies independent random rigid-body moves to molecules.

    Each molecule is rotated by a uniformly distributed random rotation
    about its reference atom, and then translated so that its reference
    atom lies at a uniformly distributed random point inside the cell.
    Atoms may end up outside the cell; the periodic distance
    calculations account for that.

    Parameters
    ----------
    molecules : `numpy.ndarray`
        Coordinates of :math:`N_\mathrm{mol}` molecules, modified in
        place.

        **Shape**: :math:`(N_\mathrm{mol},\,N_\mathrm{atoms/mol},\,3)`.

    irefatom : `int`
        Index of the reference atom within a molecule.

    dimensions : `numpy.ndarray`
        Cell lengths and angles.

        **Shape**: :math:`(6,)`.

    rng : `numpy.random.Generator`
        Random number generator.

    Returns
    -------
    molecules : `numpy.ndarray`
        Moved molecules (same array as the input).
    """

    n_mols = molecules.shape[0]
    molecules -= molecules[:, irefatom:irefatom + 1].copy()
    if molecules.shape[1] > 1:
        rotations = Rotation.random(n_mols, rng).as_matrix()
        molecules[:] = np.einsum("mij,maj->mai", rotations, molecules)
    molecules += random_points(dimensions, n_mols, rng)[:, None]
    return molecules
