"""
Trajectory frame sources
========================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains the :class:`Trajectory` interface through which the
analysis modules read solute and solvent coordinates frame by frame,
and :class:`UniverseTrajectory`, its implementation for any trajectory
format supported by MDAnalysis.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Union

import MDAnalysis as mda
from MDAnalysis.coordinates.base import ProtoReader
import numpy as np

from .selection import Selection

class Trajectory(ABC):

    r"""
    A sequential source of solute and solvent coordinates.

    Frames can only be read one after another, in file order. Reading a
    frame fills :attr:`x_solute`, :attr:`x_solvent`, and the periodic
    cell returned by :meth:`box` in place.

    Parameters
    ----------
    solute : `mdmixture.Selection`
        Solute molecules.

    solvent : `mdmixture.Selection`, optional
        Solvent molecules. If not provided, the solute is also the
        solvent (autocorrelation).

    Attributes
    ----------
    nframes : `int`
        Number of frames in the trajectory.

    x_solute : `numpy.ndarray`
        Solute coordinates in the current frame.

        **Shape**: :math:`(N_\mathrm{atoms,solute},\,3)`.

    x_solvent : `numpy.ndarray`
        Solvent coordinates in the current frame.

        **Shape**: :math:`(N_\mathrm{atoms,solvent},\,3)`.
    """

    def __init__(self, solute: Selection, solvent: Selection = None) -> None:
        self.solute = solute
        self.solvent = solute if solvent is None else solvent
        if self.solute != self.solvent and self.solute.overlaps(self.solvent):
            emsg = ("The solute and solvent selections share atoms but are "
                    "not identical.")
            raise ValueError(emsg)
        self.x_solute = np.zeros((self.solute.natoms, 3))
        self.x_solvent = np.zeros((self.solvent.natoms, 3))

    @property
    def autocorrelation(self) -> bool:

        """
        Whether the solute and solvent are the same set of molecules.
        """

        return self.solute == self.solvent

    @property
    @abstractmethod
    def nframes(self) -> int:
        pass

    @abstractmethod
    def open(self) -> None:

        """
        Opens the trajectory for reading, positioned before the first
        frame.
        """

        pass

    @abstractmethod
    def close(self) -> None:

        """
        Closes the trajectory.
        """

        pass

    def first_frame(self) -> None:

        """
        Positions the trajectory before its first frame.
        """

        self.close()
        self.open()

    @abstractmethod
    def next_frame(self) -> None:

        """
        Reads the next frame into :attr:`x_solute` and
        :attr:`x_solvent`. A missing or unreadable frame raises a
        `RuntimeError`.
        """

        pass

    @abstractmethod
    def box(self, iframe: int) -> np.ndarray:

        r"""
        Returns the periodic cell of a frame that was just read.

        Parameters
        ----------
        iframe : `int`
            Index of the frame.

        Returns
        -------
        dimensions : `numpy.ndarray`
            Cell lengths and angles.

            **Shape**: :math:`(6,)`.

            **Reference unit**: :math:`\mathrm{Å}` (lengths),
            :math:`^\circ` (angles).
        """

        pass

class UniverseTrajectory(Trajectory):

    """
    Trajectory read through an MDAnalysis coordinate reader.

    Any format MDAnalysis can read is supported, including coordinates
    already held in memory by
    :class:`MDAnalysis.coordinates.memory.MemoryReader`.

    Parameters
    ----------
    universe : `MDAnalysis.Universe` or `MDAnalysis.coordinates.base.ProtoReader`
        Universe or coordinate reader containing the trajectory.

    solute : `mdmixture.Selection`
        Solute molecules.

    solvent : `mdmixture.Selection`, optional
        Solvent molecules. If not provided, the solute is also the
        solvent (autocorrelation).
    """

    def __init__(
            self, universe: Union[mda.Universe, ProtoReader],
            solute: Selection, solvent: Selection = None) -> None:
        super().__init__(solute, solvent)
        self._reader = (universe.trajectory
                        if isinstance(universe, mda.Universe) else universe)
        n_atoms = self._reader.n_atoms
        for name, s in (("solute", self.solute), ("solvent", self.solvent)):
            if s.indices.max() >= n_atoms:
                emsg = (f"The {name} selection refers to atoms beyond the "
                        f"{n_atoms} atoms in the trajectory.")
                raise ValueError(emsg)
        self._frames: Iterator = None
        self._dimensions = None

    @classmethod
    def from_atomgroups(
            cls, ag1: mda.AtomGroup, ag2: mda.AtomGroup = None, *,
            solute_nmols: int = None, solute_natomspermol: int = None,
            solvent_nmols: int = None, solvent_natomspermol: int = None
        ) -> "UniverseTrajectory":

        """
        Creates a trajectory from the solute and solvent atom groups of
        the same universe. Unless their sizes are given, molecules are
        the residues of each group.

        Parameters
        ----------
        ag1 : `MDAnalysis.AtomGroup`
            Solute atoms.

        ag2 : `MDAnalysis.AtomGroup`, optional
            Solvent atoms. If not provided, the solute is also the
            solvent.

        solute_nmols : `int`, keyword-only, optional
            Number of solute molecules.

        solute_natomspermol : `int`, keyword-only, optional
            Number of atoms per solute molecule.

        solvent_nmols : `int`, keyword-only, optional
            Number of solvent molecules.

        solvent_natomspermol : `int`, keyword-only, optional
            Number of atoms per solvent molecule.

        Returns
        -------
        trajectory : `UniverseTrajectory`
            Trajectory reading the atom groups' universe.
        """

        solute = Selection.from_atomgroup(ag1, nmols=solute_nmols,
                                          natomspermol=solute_natomspermol)
        if ag2 is None:
            solvent = None
        else:
            if ag2.universe is not ag1.universe:
                raise ValueError("The atom groups belong to different "
                                 "universes.")
            solvent = Selection.from_atomgroup(
                ag2, nmols=solvent_nmols, natomspermol=solvent_natomspermol
            )
        return cls(ag1.universe, solute, solvent)

    @property
    def nframes(self) -> int:
        return self._reader.n_frames

    def _iterate(self) -> Iterator:
        for ts in self._reader:
            yield ts

    def open(self) -> None:
        self._frames = self._iterate()

    def close(self) -> None:
        if self._frames is not None:
            self._frames.close()
            self._frames = None

    def next_frame(self) -> None:
        if self._frames is None:
            raise RuntimeError("The trajectory is not open.")
        try:
            ts = next(self._frames)
        except StopIteration:
            raise RuntimeError("Could not read the next frame: the "
                               "trajectory ended prematurely.") from None
        except (EOFError, OSError) as err:
            raise RuntimeError(f"Could not read frame: {err}") from err
        self.x_solute[:] = ts.positions[self.solute.indices]
        self.x_solvent[:] = ts.positions[self.solvent.indices]
        self._dimensions = (None if ts.dimensions is None
                            else np.array(ts.dimensions, dtype=float))

    def box(self, iframe: int) -> np.ndarray:
        if self._dimensions is None or np.any(self._dimensions[:3] <= 0):
            emsg = (f"Frame {iframe} does not contain system dimension "
                    "information.")
            raise ValueError(emsg)
        return np.asarray(self._dimensions, dtype=float)
