"""
Molecule selections
===================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains the :class:`Selection` class, which partitions a
flat list of atom indices into identical molecules.
"""

from dataclasses import dataclass, field

import MDAnalysis as mda
import numpy as np

from . import ArrayLike

@dataclass(frozen=True)
class Selection:

    r"""
    Immutable partition of a set of atoms into :math:`N_\mathrm{mol}`
    molecules with the same number of atoms.

    Exactly one of `nmols` and `natomspermol` should be given. A
    selection with :code:`nmols=1` is a single (possibly large)
    molecule, such as a protein at infinite dilution.

    Parameters
    ----------
    indices : array-like
        Global (zero-based) indices of the atoms in the trajectory.

        **Shape**: :math:`(N_\mathrm{atoms},)`.

    nmols : `int`, keyword-only, optional
        Number of molecules :math:`N_\mathrm{mol}`.

    natomspermol : `int`, keyword-only, optional
        Number of atoms per molecule.

    Attributes
    ----------
    natoms : `int`
        Number of atoms :math:`N_\mathrm{atoms}`.
    """

    indices: np.ndarray
    nmols: int = None
    natomspermol: int = None
    natoms: int = field(init=False)

    def __post_init__(self) -> None:
        indices = np.asarray(self.indices, dtype=int).ravel()
        natoms = indices.shape[0]
        if natoms == 0:
            raise ValueError("The selection does not contain any atoms.")
        if np.unique(indices).shape[0] != natoms:
            raise ValueError("The selection contains repeated atoms.")

        nmols, natomspermol = self.nmols, self.natomspermol
        if nmols is None and natomspermol is None:
            emsg = ("Either the number of molecules or the number of "
                    "atoms per molecule must be specified.")
            raise ValueError(emsg)
        if nmols is not None and natomspermol is not None \
                and nmols * natomspermol != natoms:
            emsg = (f"{nmols} molecules with {natomspermol} atoms each "
                    f"are inconsistent with {natoms} selected atoms.")
            raise ValueError(emsg)
        if nmols is None:
            if natomspermol < 1 or natoms % natomspermol:
                emsg = (f"The number of atoms ({natoms}) is not a multiple "
                        f"of the number of atoms per molecule "
                        f"({natomspermol}).")
                raise ValueError(emsg)
            nmols = natoms // natomspermol
        elif natomspermol is None:
            if nmols < 1 or natoms % nmols:
                emsg = (f"The number of atoms ({natoms}) is not a multiple "
                        f"of the number of molecules ({nmols}).")
                raise ValueError(emsg)
            natomspermol = natoms // nmols

        indices.flags.writeable = False
        object.__setattr__(self, "indices", indices)
        object.__setattr__(self, "nmols", int(nmols))
        object.__setattr__(self, "natomspermol", int(natomspermol))
        object.__setattr__(self, "natoms", natoms)

    @classmethod
    def from_atomgroup(
            cls, group: mda.AtomGroup, *, nmols: int = None,
            natomspermol: int = None) -> "Selection":

        """
        Creates a selection from an MDAnalysis atom group.

        If neither `nmols` nor `natomspermol` is given, each residue in
        `group` is a molecule, and all residues must contain the same
        number of atoms.

        Parameters
        ----------
        group : `MDAnalysis.AtomGroup`
            Atoms in the selection.

        nmols : `int`, keyword-only, optional
            Number of molecules.

        natomspermol : `int`, keyword-only, optional
            Number of atoms per molecule.

        Returns
        -------
        selection : `Selection`
            Molecule selection.
        """

        if nmols is None and natomspermol is None:
            n_atoms = np.fromiter((r.atoms.n_atoms for r in group.residues),
                                  dtype=int)
            if n_atoms.size and np.any(n_atoms != n_atoms[0]):
                emsg = ("The residues in the atom group do not contain the "
                        "same number of atoms, so the number of molecules "
                        "or atoms per molecule must be specified.")
                raise ValueError(emsg)
            nmols = group.n_residues
        return cls(group.ix, nmols=nmols, natomspermol=natomspermol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return (self.natomspermol == other.natomspermol
                and np.array_equal(self.indices, other.indices))

    def __hash__(self) -> int:
        return hash((self.natomspermol, self.indices.tobytes()))

    def overlaps(self, other: "Selection") -> bool:

        """
        Checks whether this selection shares atoms with another.
        """

        return np.intersect1d(self.indices, other.indices).shape[0] > 0

    def molecule(self, imol: int) -> slice:

        """
        Returns the slice of coordinate slots occupied by a molecule.

        Parameters
        ----------
        imol : `int`
            Molecule index.

        Returns
        -------
        slots : `slice`
            Coordinate slots of molecule `imol`.
        """

        if not 0 <= imol < self.nmols:
            raise IndexError(f"Molecule index {imol} is out of range for "
                             f"{self.nmols} molecules.")
        return slice(imol * self.natomspermol,
                     (imol + 1) * self.natomspermol)

    def view(self, positions: np.ndarray, imol: int) -> np.ndarray:

        r"""
        Returns a view of the coordinates of one molecule.

        Parameters
        ----------
        positions : `numpy.ndarray`
            Coordinates of all atoms in the selection.

            **Shape**: :math:`(N_\mathrm{atoms},\,3)`.

        imol : `int`
            Molecule index.

        Returns
        -------
        positions : `numpy.ndarray`
            Coordinates of the atoms in molecule `imol`.

            **Shape**: :math:`(N_\mathrm{atoms}/N_\mathrm{mol},\,3)`.
        """

        return positions[self.molecule(imol)]

    def atom_type(self, indices: ArrayLike) -> np.ndarray:

        """
        Converts global atom indices into indices within a molecule.

        Parameters
        ----------
        indices : array-like
            Global atom indices, which must belong to this selection.

        Returns
        -------
        types : `numpy.ndarray`
            Atom-in-molecule indices.
        """

        indices = np.atleast_1d(np.asarray(indices, dtype=int))
        order = np.argsort(self.indices)
        slots = np.searchsorted(self.indices, indices, sorter=order)
        slots = np.minimum(slots, self.natoms - 1)
        found = self.indices[order[slots]] == indices
        if not found.all():
            emsg = (f"Atoms {indices[~found].tolist()} do not belong to "
                    "the selection.")
            raise ValueError(emsg)
        return order[slots] % self.natomspermol
