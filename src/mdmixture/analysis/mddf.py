"""
Minimum-distance distribution functions
=======================================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains the per-frame sampling of minimum distances
between solute and solvent molecules, the generation of the ideal-gas
reference configurations, and the :class:`MDDF` analysis class that
runs them over a trajectory in parallel.
"""

from dataclasses import dataclass

import numpy as np

from .base import ParallelAnalysisBase
from .results import Result
from ..algorithm.accelerated import (tally_atomic_contributions,
                                     tally_minimum_distances)
from ..algorithm.minimum_distance import MinimumDistances, PeriodicSystem
from ..algorithm.molecule import as_molecules, random_move
from ..algorithm.utility import cell_volume
from ..options import Options
from ..trajectory import Trajectory
from ..utility import log_summary

@dataclass
class Buffer:

    r"""
    Scratch arrays owned by one worker.

    Parameters
    ----------
    solute_read : `numpy.ndarray`
        Solute coordinates of the frame being processed.

        **Shape**: :math:`(N_\mathrm{atoms,solute},\,3)`.

    solvent_read : `numpy.ndarray`
        Solvent coordinates of the frame being processed. The solvent
        coordinates of the periodic system are overwritten by the
        ideal-gas configurations and restored from this copy.

        **Shape**: :math:`(N_\mathrm{atoms,solvent},\,3)`.

    ref_solutes : `numpy.ndarray`
        Solute molecules drawn as references for the ideal-gas
        configurations of the current frame.

        **Shape**: :math:`(N_\mathrm{samples},)`.

    list : `mdmixture.algorithm.minimum_distance.MinimumDistances`
        Minimum distances of the solvent molecules to the reference
        solute molecule, saved before randomization.

    indexes_in_bulk : `numpy.ndarray`
        Solvent molecules in the bulk solution. Only the first
        :math:`N_\mathrm{bulk}` entries are meaningful.

        **Shape**: :math:`(N_\mathrm{mol,solvent},)`.
    """

    solute_read: np.ndarray
    solvent_read: np.ndarray
    ref_solutes: np.ndarray
    list: MinimumDistances
    indexes_in_bulk: np.ndarray

    @classmethod
    def from_result(cls, R: Result) -> "Buffer":
        return cls(
            solute_read=np.zeros((R.solute.natoms, 3)),
            solvent_read=np.zeros((R.solvent.natoms, 3)),
            ref_solutes=np.zeros(R.options.n_random_samples, dtype=int),
            list=MinimumDistances.empty(R.solvent.nmols),
            indexes_in_bulk=np.zeros(R.solvent.nmols, dtype=int)
        )

@dataclass
class Worker:

    """
    State owned by one worker: accumulator, periodic system, buffers,
    and the random number generator of the frame being processed.
    """

    result: Result
    system: PeriodicSystem
    buffer: Buffer
    rng: np.random.Generator = None

def inbulk(md: MinimumDistances, options: Options) -> np.ndarray[bool]:

    """
    Determines which solvent molecules are in the bulk solution.

    With a hard cutoff, a molecule is in the bulk if it is within the
    cutoff but farther than `dbulk` from the solute. Otherwise, every
    molecule beyond the cutoff (`dbulk`) is in the bulk.

    Parameters
    ----------
    md : `mdmixture.algorithm.minimum_distance.MinimumDistances`
        Minimum distances of the solvent molecules.

    options : `mdmixture.Options`
        Calculation options.

    Returns
    -------
    bulk : `numpy.ndarray`
        Whether each solvent molecule is in the bulk.
    """

    if options.usecutoff:
        return md.within_cutoff & (md.dmin > options.dbulk)
    return ~md.within_cutoff

def collect_bulk(
        buff: Buffer, md: MinimumDistances, options: Options,
        iself: int = -1) -> int:

    """
    Saves the minimum distances to the current solute molecule and
    gathers the solvent molecules in the bulk into
    :code:`buff.indexes_in_bulk`.

    Parameters
    ----------
    buff : `Buffer`
        Worker buffer.

    md : `mdmixture.algorithm.minimum_distance.MinimumDistances`
        Minimum distances of the solvent molecules.

    options : `mdmixture.Options`
        Calculation options.

    iself : `int`, default: :code:`-1`
        Solvent molecule that is the solute molecule itself
        (autocorrelation), which is never in the bulk, or :code:`-1`.

    Returns
    -------
    n_solvent_in_bulk : `int`
        Number of valid entries in :code:`buff.indexes_in_bulk`.
    """

    buff.list.copy_from(md)
    bulk = inbulk(buff.list, options)
    if iself >= 0:
        bulk[iself] = False
    n_solvent_in_bulk = np.count_nonzero(bulk)
    buff.indexes_in_bulk[:n_solvent_in_bulk] = np.flatnonzero(bulk)
    return n_solvent_in_bulk

def randomize_solvent(
        system: PeriodicSystem, buff: Buffer, n_solvent_in_bulk: int,
        R: Result, rng: np.random.Generator) -> None:

    """
    Replaces the solvent in the periodic system with an ideal-gas
    configuration.

    Every solvent molecule slot receives a copy of a molecule drawn
    uniformly from the bulk molecules (or from all molecules if none is
    in the bulk), randomly rotated about its reference atom and placed
    at a random position in the cell.

    Parameters
    ----------
    system : `mdmixture.algorithm.minimum_distance.PeriodicSystem`
        Periodic system whose solvent coordinates are overwritten.

    buff : `Buffer`
        Worker buffer holding the frame coordinates and bulk molecules.

    n_solvent_in_bulk : `int`
        Number of valid entries in :code:`buff.indexes_in_bulk`.

    R : `mdmixture.analysis.results.Result`
        Accumulator holding the solvent selection.

    rng : `numpy.random.Generator`
        Random number generator of the worker.
    """

    nmols = R.solvent.nmols
    if n_solvent_in_bulk > 0:
        jmols = buff.indexes_in_bulk[
            rng.integers(n_solvent_in_bulk, size=nmols)
        ]
    else:
        jmols = rng.integers(nmols, size=nmols)
    molecules = as_molecules(system.ypositions, R.solvent.natomspermol)
    molecules[:] = as_molecules(buff.solvent_read,
                                R.solvent.natomspermol)[jmols]
    random_move(molecules, R.irefatom, system.dimensions, rng)

def update_counters(
        R: Result, md: MinimumDistances, random: bool = False) -> None:

    """
    Adds minimum distances to the histograms of an accumulator.

    Parameters
    ----------
    R : `mdmixture.analysis.results.Result`
        Accumulator.

    md : `mdmixture.algorithm.minimum_distance.MinimumDistances`
        Minimum distances of the solvent molecules.

    random : `bool`, default: :code:`False`
        Determines whether the distances belong to an ideal-gas
        configuration.
    """

    binstep = R.options.binstep
    if random:
        tally_minimum_distances(md.within_cutoff, md.dmin, md.dref, binstep,
                                R.md_count_random, R.rdf_count_random)
    else:
        tally_minimum_distances(md.within_cutoff, md.dmin, md.dref, binstep,
                                R.md_count, R.rdf_count)
        tally_atomic_contributions(md.within_cutoff, md.dmin, md.i, md.j,
                                   binstep, R.solute_atom, R.solvent_atom)

def mddf_frame(
        R: Result, system: PeriodicSystem, buff: Buffer, options: Options,
        rng: np.random.Generator) -> Result:

    """
    Accumulates the minimum-distance histograms of one frame.

    The frame coordinates must already be in `buff` and the periodic
    cell in `system`. Every solute molecule is compared with all solvent
    molecules. For the solute molecules drawn as references,
    ideal-gas configurations are generated from the bulk solvent
    molecules and compared with the same solute molecule.

    Parameters
    ----------
    R : `mdmixture.analysis.results.Result`
        Accumulator of the worker.

    system : `mdmixture.algorithm.minimum_distance.PeriodicSystem`
        Periodic system of the worker.

    buff : `Buffer`
        Buffer of the worker.

    options : `mdmixture.Options`
        Calculation options.

    rng : `numpy.random.Generator`
        Random number generator of the worker.

    Returns
    -------
    R : `mdmixture.analysis.results.Result`
        Updated accumulator.
    """

    volume = cell_volume(system.dimensions)

    # Reference solute molecules for the ideal-gas distributions, drawn
    # with replacement
    buff.ref_solutes[:] = rng.integers(R.solute.nmols,
                                       size=buff.ref_solutes.shape[0])
    n_random = np.bincount(buff.ref_solutes, minlength=R.solute.nmols)
    n_random_in_domain = 0

    # One solute molecule at a time; the grid over the solvent is only
    # rebuilt when the solvent moved
    update_lists = True
    system.ypositions[:] = buff.solvent_read
    for isolute in range(R.solute.nmols):
        system.xpositions[:] = R.solute.view(buff.solute_read, isolute)
        md = system.minimum_distances(isolute, update_lists=update_lists)
        update_lists = False
        update_counters(R, md)

        nrand = n_random[isolute]
        if nrand == 0:
            continue

        n_solvent_in_bulk = collect_bulk(
            buff, md, options, isolute if R.autocorrelation else -1
        )
        for _ in range(nrand):
            randomize_solvent(system, buff, n_solvent_in_bulk, R, rng)
            md = system.minimum_distances(isolute, update_lists=True)
            update_counters(R, md, random=True)
            n_random_in_domain += np.count_nonzero(
                md.within_cutoff & (md.dmin <= R.dbulk)
            )
        system.ypositions[:] = buff.solvent_read
        update_lists = True

    # Fraction of the ideal-gas molecules within dbulk of the solute
    R.add_volume(volume, volume * n_random_in_domain
                 / (options.n_random_samples * R.n_solvent_eff))
    return R

class MDDF(ParallelAnalysisBase):

    r"""
    Parallel calculation of the minimum-distance distribution function
    (MDDF) :math:`g_\mathrm{md}(r)` of a solvent around a solute, the
    radial distribution function of the solvent reference atom, and the
    corresponding Kirkwood–Buff integrals.

    The minimum distance between a solute and a solvent molecule is the
    shortest distance between any of their atoms. The MDDF compares the
    histogram of these distances with that of an ideal gas of solvent
    molecules at the bulk density, obtained by randomly placing copies
    of bulk solvent molecules in the cell.

    Parameters
    ----------
    trajectory : `mdmixture.Trajectory`
        Trajectory with the solute and solvent selections.

    options : `mdmixture.Options`, optional
        Calculation options.

    verbose : `bool`, keyword-only, default: :code:`False`
        Determines whether detailed progress is shown.

    Attributes
    ----------
    result : `mdmixture.analysis.results.Result`
        Merged and finalized accumulator.

    results : `MDAnalysis.analysis.base.Results`
        Distribution functions, Kirkwood–Buff integrals, volumes, and
        densities. Same as :code:`result.results`.
    """

    def __init__(
            self, trajectory: Trajectory, options: Options = None, *,
            verbose: bool = False) -> None:
        super().__init__(trajectory, verbose)
        self.options = Options() if options is None else options

        # Validate the selections and options before any frame is read
        self.result = Result(trajectory.solute, trajectory.solvent,
                             self.options)

    def _prepare(self) -> None:
        self.result = Result(self._trajectory.solute,
                             self._trajectory.solvent, self.options)
        seed = self.options.seed if self.options.deterministic else None
        self._entropy = np.random.SeedSequence(seed).entropy

        if self._verbose:
            log_summary("Minimum-distance distribution function", {
                "Solute": (f"{self.result.solute.nmols} molecule(s) of "
                           f"{self.result.solute.natomspermol} atom(s)"),
                "Solvent": (f"{self.result.solvent.nmols} molecule(s) of "
                            f"{self.result.solvent.natomspermol} atom(s)"),
                "Autocorrelation": self.result.autocorrelation,
                "Bulk distance": self.options.dbulk,
                "Cutoff": self.result.cutoff,
                "Bins": self.result.nbins,
                "Random samples per frame": self.options.n_random_samples,
                "Frames": f"{self.n_frames} of {self._trajectory.nframes}"
            })
            log_summary("Options", self.options.as_dict())

    def _new_worker(self, index: int) -> Worker:
        R = Result(self._trajectory.solute, self._trajectory.solvent,
                   self.options)
        system = PeriodicSystem(
            R.solute.natomspermol, R.solvent.natoms,
            R.solvent.natomspermol, R.cutoff, irefatom=R.irefatom,
            autocorrelation=R.autocorrelation
        )
        return Worker(R, system, Buffer.from_result(R))

    def _read_frame(self, worker: Worker, frame: int) -> None:
        worker.buffer.solute_read[:] = self._trajectory.x_solute
        worker.buffer.solvent_read[:] = self._trajectory.x_solvent
        worker.system.update_unitcell(self._trajectory.box(frame))

        # One random stream per frame, so that the ideal-gas samples do
        # not depend on which worker processes the frame
        worker.rng = np.random.default_rng(
            np.random.SeedSequence(self._entropy, spawn_key=(int(frame),))
        )
        worker.result.nframes_read += 1

    def _single_frame(self, worker: Worker) -> None:
        mddf_frame(worker.result, worker.system, worker.buffer,
                   self.options, worker.rng)

    def _conclude(self, workers: list[Worker]) -> None:

        # Sum the partial results of all workers only after all of
        # them finished
        for worker in workers:
            self.result.merge(worker.result)
        self.result.finalize()
        self.results = self.result.results

    def run(
            self, verbose: bool = None, *, n_jobs: int = None,
            **kwargs) -> "MDDF":

        """
        Performs the calculation over the frames selected in the
        options.

        Parameters
        ----------
        verbose : `bool`, optional
            Determines whether detailed progress is shown.

        n_jobs : `int`, keyword-only, optional
            Number of workers. Overrides :code:`options.n_jobs`.

        **kwargs
            Additional keyword arguments to pass to
            :class:`joblib.Parallel`.

        Returns
        -------
        self : `MDDF`
            Analysis object with results.
        """

        stop = (None if self.options.lastframe is None
                else self.options.lastframe + 1)
        return super().run(
            self.options.firstframe, stop, self.options.stride, verbose,
            n_jobs=n_jobs or self.options.n_jobs or None, **kwargs
        )

def mddf(
        trajectory: Trajectory, options: Options = None,
        **kwargs) -> Result:

    """
    Computes the minimum-distance distribution function, the radial
    distribution function, and the Kirkwood–Buff integrals of a
    trajectory.

    Parameters
    ----------
    trajectory : `mdmixture.Trajectory`
        Trajectory with the solute and solvent selections.

    options : `mdmixture.Options`, optional
        Calculation options.

    **kwargs
        Additional keyword arguments to pass to :class:`MDDF`.

    Returns
    -------
    result : `mdmixture.analysis.results.Result`
        Finalized accumulator.
    """

    return MDDF(trajectory, options, **kwargs).run().result
