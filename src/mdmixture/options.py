"""
Calculation options
===================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains the immutable set of options that controls a
minimum-distance distribution function calculation.
"""

from dataclasses import dataclass, fields
from typing import Optional

@dataclass(frozen=True)
class Options:

    r"""
    Options for a minimum-distance distribution function (MDDF)
    calculation.

    Parameters
    ----------
    binstep : `float`, default: :code:`0.02`
        Width of the distance histogram bins.

        **Reference unit**: :math:`\mathrm{Å}`.

    dbulk : `float`, default: :code:`10.0`
        Distance from the solute beyond which solvent molecules are
        considered to be in the bulk solution.

        **Reference unit**: :math:`\mathrm{Å}`.

    cutoff : `float`, default: :code:`10.0`
        Largest minimum distance tallied. Only used if
        :code:`usecutoff=True`, in which case it must be larger than
        `dbulk`; otherwise, `dbulk` is used as the cutoff.

        **Reference unit**: :math:`\mathrm{Å}`.

    usecutoff : `bool`, default: :code:`False`
        Determines whether the bulk region is the shell between `dbulk`
        and `cutoff` (:code:`True`) or everything beyond `dbulk`
        (:code:`False`).

    n_random_samples : `int`, default: :code:`10`
        Number of ideal-gas reference configurations generated per
        frame.

    irefatom : `int`, optional
        Index (within a solvent molecule) of the atom used as the pivot
        for random rotations and as the reference for the radial
        distribution function. Defaults to the first atom.

    firstframe : `int`, default: :code:`0`
        First frame analyzed (zero-based, inclusive).

    lastframe : `int`, optional
        Last frame analyzed (zero-based, inclusive). Defaults to the
        last frame of the trajectory.

    stride : `int`, default: :code:`1`
        Number of frames to advance between analyzed frames.

    seed : `int`, default: :code:`321`
        Master seed for the random number generators.

    deterministic : `bool`, default: :code:`False`
        Determines whether the random streams of the frames are derived
        from `seed`, which makes the results independent of the number
        of workers. If :code:`False`, fresh entropy is drawn from the
        operating system for every run.

    n_jobs : `int`, default: :code:`0`
        Number of workers. If :code:`0`, the number of available CPU
        threads is used.
    """

    binstep: float = 0.02
    dbulk: float = 10.0
    cutoff: float = 10.0
    usecutoff: bool = False
    n_random_samples: int = 10
    irefatom: Optional[int] = None
    firstframe: int = 0
    lastframe: Optional[int] = None
    stride: int = 1
    seed: int = 321
    deterministic: bool = False
    n_jobs: int = 0

    def __post_init__(self) -> None:
        if self.binstep <= 0:
            raise ValueError(f"The bin width must be positive, not "
                             f"{self.binstep}.")
        if self.dbulk <= 0:
            raise ValueError(f"The bulk distance must be positive, not "
                             f"{self.dbulk}.")
        if self.usecutoff and self.cutoff <= self.dbulk:
            emsg = ("The bulk region is only defined if cutoff > dbulk "
                    f"(cutoff={self.cutoff}, dbulk={self.dbulk}).")
            raise ValueError(emsg)
        if self.n_random_samples < 1:
            raise ValueError("At least one random sample per frame is "
                             "required.")
        if self.irefatom is not None and self.irefatom < 0:
            raise ValueError("The reference atom index cannot be negative.")
        if self.firstframe < 0:
            raise ValueError("The first frame index cannot be negative.")
        if self.lastframe is not None and self.lastframe < self.firstframe:
            emsg = (f"The last frame ({self.lastframe}) precedes the first "
                    f"frame ({self.firstframe}).")
            raise ValueError(emsg)
        if self.stride < 1:
            raise ValueError("The frame stride must be at least 1.")
        if self.n_jobs < 0:
            raise ValueError("The number of workers cannot be negative.")

    @property
    def search_cutoff(self) -> float:

        """
        Distance up to which minimum distances are searched and
        tallied.
        """

        return self.cutoff if self.usecutoff else self.dbulk

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
