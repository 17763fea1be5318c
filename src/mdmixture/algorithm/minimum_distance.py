"""
Periodic minimum distances
==========================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains the per-molecule minimum-distance records and the
periodic system that computes them between one solute molecule and all
solvent molecules using the MDAnalysis grid neighbor search.
"""

from dataclasses import dataclass

from MDAnalysis.lib.nsgrid import FastNS
import numpy as np

from .accelerated import reduce_minimum_distances
from .utility import get_cell_heights

@dataclass
class MinimumDistances:

    r"""
    Minimum distances between one solute molecule and every solvent
    molecule, stored as one array per field and indexed by the solvent
    molecule.

    Parameters
    ----------
    within_cutoff : `numpy.ndarray`
        Whether the solvent molecule has an atom within the cutoff of
        the solute molecule.

    dmin : `numpy.ndarray`
        Minimum atom-to-atom distance, which is also the minimum
        distance between the two molecules. :code:`numpy.inf` for
        molecules beyond the cutoff.

        **Reference unit**: :math:`\mathrm{Å}`.

    dref : `numpy.ndarray`
        Distance between the solvent reference atom and the closest
        solute atom. :code:`numpy.inf` if beyond the cutoff.

        **Reference unit**: :math:`\mathrm{Å}`.

    i : `numpy.ndarray`
        Solute atom (index within its molecule) realizing `dmin`.

    j : `numpy.ndarray`
        Solvent atom (index within its molecule) realizing `dmin`.
    """

    within_cutoff: np.ndarray
    dmin: np.ndarray
    dref: np.ndarray
    i: np.ndarray
    j: np.ndarray

    @classmethod
    def empty(cls, nmols: int) -> "MinimumDistances":
        return cls(np.zeros(nmols, dtype=bool), np.full(nmols, np.inf),
                   np.full(nmols, np.inf), np.full(nmols, -1),
                   np.full(nmols, -1))

    def __len__(self) -> int:
        return self.within_cutoff.shape[0]

    def copy_from(self, other: "MinimumDistances") -> None:

        """
        Overwrites this record with the contents of another one of the
        same length.
        """

        self.within_cutoff[:] = other.within_cutoff
        self.dmin[:] = other.dmin
        self.dref[:] = other.dref
        self.i[:] = other.i
        self.j[:] = other.j

class PeriodicSystem:

    r"""
    Periodic system holding the coordinates of one solute molecule
    (the query) and of all solvent molecules, with a grid search
    structure built over the solvent.

    Parameters
    ----------
    solute_natoms : `int`
        Number of atoms in a solute molecule.

    solvent_natoms : `int`
        Number of solvent atoms.

    natomspermol : `int`
        Number of atoms per solvent molecule.

    cutoff : `float`
        Search cutoff.

        **Reference unit**: :math:`\mathrm{Å}`.

    irefatom : `int`, keyword-only, default: :code:`0`
        Reference atom of a solvent molecule.

    autocorrelation : `bool`, keyword-only, default: :code:`False`
        Whether the solute and solvent molecules are the same set, in
        which case a solute molecule is never paired with itself.

    Attributes
    ----------
    xpositions : `numpy.ndarray`
        Coordinates of the current solute molecule.

        **Shape**: :math:`(N_\mathrm{atoms/mol,solute},\,3)`.

    ypositions : `numpy.ndarray`
        Coordinates of the solvent atoms.

        **Shape**: :math:`(N_\mathrm{atoms,solvent},\,3)`.

    dimensions : `numpy.ndarray`
        Cell lengths and angles.

        **Shape**: :math:`(6,)`.

    list : `MinimumDistances`
        Minimum distances from the last call to
        :meth:`minimum_distances`.
    """

    def __init__(
            self, solute_natoms: int, solvent_natoms: int,
            natomspermol: int, cutoff: float, *, irefatom: int = 0,
            autocorrelation: bool = False) -> None:
        self.xpositions = np.zeros((solute_natoms, 3))
        self.ypositions = np.zeros((solvent_natoms, 3))
        self.dimensions = None
        self.cutoff = cutoff
        self.natomspermol = natomspermol
        self.irefatom = irefatom
        self.autocorrelation = autocorrelation
        self.list = MinimumDistances.empty(solvent_natoms // natomspermol)
        self._grid = None

    def update_unitcell(self, dimensions: np.ndarray[float]) -> None:

        r"""
        Sets the periodic cell for the next frame.

        Parameters
        ----------
        dimensions : `numpy.ndarray`
            Cell lengths and angles.

            **Shape**: :math:`(6,)`.
        """

        dimensions = np.asarray(dimensions, dtype=np.float32)
        heights = get_cell_heights(dimensions)
        if 2 * self.cutoff >= heights.min():
            emsg = (f"The cutoff ({self.cutoff}) must be smaller than half "
                    f"of the shortest cell height ({heights.min():.4f}).")
            raise ValueError(emsg)
        self.dimensions = dimensions
        self._grid = None

    def rebuild_index(self) -> None:

        """
        Builds the grid search structure over the current solvent
        coordinates.
        """

        if self.dimensions is None:
            raise RuntimeError("The periodic cell has not been set.")
        self._grid = FastNS(self.cutoff,
                            self.ypositions.astype(np.float32),
                            self.dimensions, pbc=True)

    def minimum_distances(
            self, isolute: int, *, update_lists: bool = True
        ) -> MinimumDistances:

        """
        Computes the minimum distance between the current solute
        molecule and every solvent molecule.

        Parameters
        ----------
        isolute : `int`
            Index of the current solute molecule, excluded from the
            solvent molecules in autocorrelation.

        update_lists : `bool`, keyword-only, default: :code:`True`
            Determines whether the grid is rebuilt from the current
            solvent coordinates. It must be rebuilt whenever the
            solvent moved since the last call.

        Returns
        -------
        list : `MinimumDistances`
            Minimum distances, stored in :attr:`list`.
        """

        if update_lists or self._grid is None:
            self.rebuild_index()
        result = self._grid.search(self.xpositions.astype(np.float32))
        reduce_minimum_distances(
            np.asarray(result.get_pairs(), dtype=np.int64).reshape(-1, 2),
            np.asarray(result.get_pair_distances(), dtype=np.float64),
            self.natomspermol, self.irefatom,
            isolute if self.autocorrelation else -1,
            self.list.within_cutoff, self.list.dmin, self.list.dref,
            self.list.i, self.list.j
        )
        return self.list
