"""
Analysis base classes
=====================
.. moduleauthor:: Benjamin B. Ye <bye@caltech.edu>

This module contains the custom base class
:class:`ParallelAnalysisBase` for multithreaded analysis of trajectories
that can only be read sequentially, using Joblib for parallelization.
"""

from abc import ABC, abstractmethod
from datetime import datetime
import threading
from typing import Any

import joblib
from MDAnalysis.analysis.base import Results
from MDAnalysis.lib.log import ProgressBar
import numpy as np

from ..algorithm.utility import get_n_jobs
from ..trajectory import Trajectory
from ..utility import log

class ParallelAnalysisBase(ABC):

    """
    A multithreaded analysis base object.

    The frames to analyze are split into contiguous blocks, one per
    worker. Each worker owns all the data it modifies. Reading a frame
    is the only step that is serialized: the trajectory is advanced,
    in file order, inside a lock shared by all workers, and the
    coordinates are copied into the worker's own buffers before the
    lock is released. After all workers finish, their partial results
    are combined in :meth:`_conclude`.

    Subclasses implement :meth:`_prepare`, :meth:`_new_worker`,
    :meth:`_read_frame`, :meth:`_single_frame`, and :meth:`_conclude`.

    Parameters
    ----------
    trajectory : `mdmixture.Trajectory`
        Simulation trajectory.

    verbose : `bool`, default: :code:`False`
        Determines whether detailed progress is shown.
    """

    def __init__(self, trajectory: Trajectory, verbose: bool = False) -> None:
        self._trajectory = trajectory
        self._verbose = verbose
        self.results = Results()

    def _setup_frames(
            self, start: int = None, stop: int = None, step: int = None
        ) -> None:

        n_frames = self._trajectory.nframes
        if n_frames == 0:
            raise ValueError("The trajectory does not contain any frames.")
        start = 0 if start is None else start
        stop = n_frames if stop is None else stop
        if stop > n_frames:
            emsg = (f"Frame {stop - 1} was requested, but the trajectory "
                    f"only contains {n_frames} frames.")
            raise ValueError(emsg)
        self.frames = np.arange(start, stop, step or 1)
        self.n_frames = self.frames.shape[0]
        if self.n_frames == 0:
            raise ValueError("No frames were selected for analysis.")

    @abstractmethod
    def _prepare(self) -> None:
        pass

    @abstractmethod
    def _new_worker(self, index: int) -> Any:
        pass

    @abstractmethod
    def _read_frame(self, worker: Any, frame: int) -> None:
        pass

    @abstractmethod
    def _single_frame(self, worker: Any) -> None:
        pass

    @abstractmethod
    def _conclude(self, workers: list) -> None:
        pass

    def _next_frame(self, worker: Any) -> None:

        """
        Reads the next selected frame into the buffers of a worker,
        skipping unselected frames. Must be called with the read lock
        held.
        """

        frame = next(self._frame_iterator)
        while self._cursor < frame:
            self._trajectory.next_frame()
            self._cursor += 1
        self._trajectory.next_frame()
        self._cursor += 1
        self._read_frame(worker, frame)

    def _job_block(self, worker: Any, n_frames: int) -> Any:
        for _ in range(n_frames):
            with self._lock:
                self._next_frame(worker)
                self._progress.update(1)
            self._single_frame(worker)
        return worker

    def run(
            self, start: int = None, stop: int = None, step: int = None,
            verbose: bool = None, *, n_jobs: int = None,
            **kwargs) -> "ParallelAnalysisBase":

        """
        Perform the calculation in parallel.

        Parameters
        ----------
        start : `int`, optional
            Starting frame for analysis.

        stop : `int`, optional
            Ending frame for analysis (exclusive).

        step : `int`, optional
            Number of frames to skip between each analyzed frame.

        verbose : `bool`, optional
            Determines whether detailed progress is shown.

        n_jobs : `int`, keyword-only, optional
            Number of workers. If not specified, it is automatically
            set to either the number of frames to analyze or the maximum
            number of CPU threads available, whichever is smaller.

        **kwargs
            Additional keyword arguments to pass to
            :class:`joblib.Parallel`.

        Returns
        -------
        self : `ParallelAnalysisBase`
            Parallel analysis base object.
        """

        if verbose is not None:
            self._verbose = verbose
        verbose = self._verbose

        self._setup_frames(start, stop, step)
        self.n_jobs = get_n_jobs(n_jobs, self.n_frames)
        self._prepare()
        workers = [self._new_worker(i) for i in range(self.n_jobs)]
        blocks = np.array_split(self.frames, self.n_jobs)

        self._lock = threading.Lock()
        self._frame_iterator = iter(self.frames)
        self._cursor = 0
        self._progress = ProgressBar(total=self.n_frames,
                                     disable=not verbose)

        if verbose:
            log("Starting analysis using Joblib "
                f"(n_jobs={self.n_jobs}, n_frames={self.n_frames})...")
            time_start = datetime.now()

        self._trajectory.open()
        try:
            workers = joblib.Parallel(n_jobs=self.n_jobs,
                                      require="sharedmem", **kwargs)(
                joblib.delayed(self._job_block)(w, b.shape[0])
                for w, b in zip(workers, blocks)
            )
        finally:
            self._trajectory.close()
            self._progress.close()

        if verbose:
            log(f"Finished! Time elapsed: {datetime.now() - time_start}.")

        self._conclude(workers)
        return self
