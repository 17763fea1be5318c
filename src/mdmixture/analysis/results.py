"""
Distribution function results
=============================
.. moduleauthor:: Benjamin Ye <GitHub: @bbye98>

This module contains the :class:`Result` accumulator, which tallies the
minimum-distance and reference atom histograms of one or more workers
and converts them into distribution functions and Kirkwood–Buff
integrals.
"""

from typing import Union
import warnings

from MDAnalysis.analysis.base import Results
import numpy as np

from .. import ArrayLike, Q_, ureg
from ..algorithm.utility import get_bin_edges, get_n_bins
from ..options import Options
from ..selection import Selection

class Result:

    r"""
    Accumulator for the minimum-distance distribution function (MDDF)
    :math:`g_\mathrm{md}(r)`, the reference atom radial distribution
    function (RDF) :math:`g(r)`, and their Kirkwood–Buff (KB) integrals.

    The raw fields are sums over frames that are only ever added to,
    so that accumulators filled by independent workers can be combined
    with :meth:`merge`. :meth:`finalize` converts the sums into the
    normalized quantities stored in :attr:`results` without modifying
    them.

    The MDDF is the ratio between the minimum-distance histogram and
    that of an ideal gas of solvent molecules at the bulk density
    :math:`\rho_\mathrm{bulk}`,

    .. math::

       g_\mathrm{md}(r)=\frac{\langle n(r)\rangle}
       {\langle n^*(r)\rangle}

    and the KB integral is

    .. math::

       G(R)=\frac{1}{\rho_\mathrm{bulk}}\sum_{r<R}\left[
       \langle n(r)\rangle-\langle n^*(r)\rangle\right]

    The RDF KB integral is
    :math:`G(R)=4\pi\int_0^R r^2[g(r)-1]\,dr`.

    Parameters
    ----------
    solute : `mdmixture.Selection`
        Solute molecules.

    solvent : `mdmixture.Selection`
        Solvent molecules.

    options : `mdmixture.Options`, optional
        Calculation options.

    Attributes
    ----------
    autocorrelation : `bool`
        Whether the solute and solvent are the same molecules.

    nbins : `int`
        Number of histogram bins :math:`N_\mathrm{bins}`.

    md_count : `numpy.ndarray`
        Sum of the minimum-distance histograms.

        **Shape**: :math:`(N_\mathrm{bins},)`.

    rdf_count : `numpy.ndarray`
        Sum of the reference atom distance histograms.

        **Shape**: :math:`(N_\mathrm{bins},)`.

    md_count_random : `numpy.ndarray`
        Sum of the ideal-gas minimum-distance histograms.

        **Shape**: :math:`(N_\mathrm{bins},)`.

    rdf_count_random : `numpy.ndarray`
        Sum of the ideal-gas reference atom distance histograms.

        **Shape**: :math:`(N_\mathrm{bins},)`.

    solute_atom : `numpy.ndarray`
        Minimum-distance histograms resolved by the solute atom
        realizing the minimum distance.

        **Shape**: :math:`(N_\mathrm{bins},\,N_\mathrm{atoms/mol,solute})`.

    solvent_atom : `numpy.ndarray`
        Minimum-distance histograms resolved by the solvent atom
        realizing the minimum distance.

        **Shape**: :math:`(N_\mathrm{bins},\,N_\mathrm{atoms/mol,solvent})`.

    volume_total : `float`
        Sum of the cell volumes.

    volume_domain : `float`
        Sum of the volumes within `dbulk` of the solute.

    volume_bulk : `float`
        Sum of the volumes beyond `dbulk` of the solute.

    nframes_read : `int`
        Number of frames accumulated.

    results.bins : `numpy.ndarray`
        Centers of the histogram bins.

        **Shape**: :math:`(N_\mathrm{bins},)`.

        **Reference unit**: :math:`\mathrm{Å}`.

    results.mddf : `numpy.ndarray`
        Minimum-distance distribution function.

        **Shape**: :math:`(N_\mathrm{bins},)`.

    results.rdf : `numpy.ndarray`
        Reference atom radial distribution function.

        **Shape**: :math:`(N_\mathrm{bins},)`.

    results.kb : `numpy.ndarray`
        KB integral from the MDDF.

        **Shape**: :math:`(N_\mathrm{bins},)`.

        **Reference unit**: :math:`\mathrm{Å}^3`.

    results.kb_rdf : `numpy.ndarray`
        KB integral from the RDF.

        **Shape**: :math:`(N_\mathrm{bins},)`.

        **Reference unit**: :math:`\mathrm{Å}^3`.

    results.volume : `MDAnalysis.analysis.base.Results`
        Average :code:`total`, :code:`domain`, and :code:`bulk`
        volumes, and the ideal-gas :code:`shell` volume of each bin.

    results.density : `MDAnalysis.analysis.base.Results`
        :code:`solute`, :code:`solvent`, and :code:`solvent_bulk`
        number densities.
    """

    def __init__(
            self, solute: Selection, solvent: Selection,
            options: Options = None) -> None:

        self.solute = solute
        self.solvent = solvent
        self.options = Options() if options is None else options
        self.autocorrelation = solute == solvent
        if self.autocorrelation and solvent.nmols < 2:
            emsg = ("The distribution of a solvent around itself requires "
                    "at least two molecules.")
            raise ValueError(emsg)

        self.irefatom = self.options.irefatom or 0
        if self.irefatom >= solvent.natomspermol:
            emsg = (f"The reference atom index ({self.irefatom}) is out of "
                    f"range for solvent molecules with "
                    f"{solvent.natomspermol} atoms.")
            raise ValueError(emsg)

        self.dbulk = self.options.dbulk
        self.cutoff = self.options.search_cutoff
        self.nbins = get_n_bins(self.cutoff, self.options.binstep)

        # Preallocate arrays to store the histograms
        self.md_count = np.zeros(self.nbins)
        self.rdf_count = np.zeros(self.nbins)
        self.md_count_random = np.zeros(self.nbins)
        self.rdf_count_random = np.zeros(self.nbins)
        self.solute_atom = np.zeros((self.nbins, solute.natomspermol))
        self.solvent_atom = np.zeros((self.nbins, solvent.natomspermol))

        self.volume_total = 0.0
        self.volume_domain = 0.0
        self.volume_bulk = 0.0
        self.nframes_read = 0
        self.results = Results()

    @property
    def n_solvent_eff(self) -> int:

        """
        Number of solvent molecules that can pair with a solute
        molecule.
        """

        return self.solvent.nmols - self.autocorrelation

    def add_volume(self, total: float, domain: float) -> None:

        """
        Adds the volume contribution of one frame.

        Parameters
        ----------
        total : `float`
            Cell volume.

        domain : `float`
            Volume within `dbulk` of the solute. The rest of the cell
            is the bulk volume.
        """

        self.volume_total += total
        self.volume_domain += domain
        self.volume_bulk += total - domain

    def _check_compatible(self, other: "Result") -> None:
        if not isinstance(other, Result):
            raise TypeError(f"Cannot merge a Result with a "
                            f"{type(other).__name__}.")
        if self.solute != other.solute or self.solvent != other.solvent:
            raise ValueError("Cannot merge results computed for different "
                             "solute or solvent selections.")
        for name in ("binstep", "dbulk", "usecutoff", "n_random_samples"):
            if getattr(self.options, name) != getattr(other.options, name):
                emsg = (f"Cannot merge results computed with different "
                        f"options ({name}={getattr(self.options, name)} "
                        f"and {name}={getattr(other.options, name)}).")
                raise ValueError(emsg)
        if self.cutoff != other.cutoff or self.irefatom != other.irefatom:
            raise ValueError("Cannot merge results computed with different "
                             "cutoffs or reference atoms.")
        for name in ("md_count", "rdf_count", "md_count_random",
                     "rdf_count_random", "solute_atom", "solvent_atom"):
            if getattr(self, name).shape != getattr(other, name).shape:
                emsg = (f"Cannot merge results with mismatched '{name}' "
                        f"histograms ({getattr(self, name).shape} and "
                        f"{getattr(other, name).shape}).")
                raise ValueError(emsg)

    def merge(self, other: "Result") -> "Result":

        """
        Adds the raw sums of another accumulator to this one.

        Merging is commutative and associative because only sums are
        combined; :meth:`finalize` must be called afterwards to update
        :attr:`results`.

        Parameters
        ----------
        other : `Result`
            Accumulator computed with the same selections and options.

        Returns
        -------
        self : `Result`
            This accumulator.
        """

        self._check_compatible(other)
        self.md_count += other.md_count
        self.rdf_count += other.rdf_count
        self.md_count_random += other.md_count_random
        self.rdf_count_random += other.rdf_count_random
        self.solute_atom += other.solute_atom
        self.solvent_atom += other.solvent_atom
        self.volume_total += other.volume_total
        self.volume_domain += other.volume_domain
        self.volume_bulk += other.volume_bulk
        self.nframes_read += other.nframes_read
        return self

    def finalize(self) -> "Result":

        """
        Computes the densities, distribution functions, and KB
        integrals from the accumulated sums and stores them in
        :attr:`results`.

        The accumulated sums are left untouched, so calling this method
        repeatedly gives the same results.

        Returns
        -------
        self : `Result`
            This accumulator.
        """

        if self.nframes_read == 0:
            raise ValueError("No frames were accumulated.")

        binstep = self.options.binstep
        n_frames = self.nframes_read
        n_eff = self.n_solvent_eff
        norm = self.solute.nmols * n_frames
        norm_random = self.options.n_random_samples * n_frames

        results = Results()
        results.edges = get_bin_edges(self.nbins, binstep)
        results.bins = (results.edges[:-1] + results.edges[1:]) / 2
        results.nframes_read = n_frames
        results.autocorrelation = self.autocorrelation

        # Average counts per solute molecule (or per ideal-gas sample)
        # and per frame
        results.md_count = self.md_count / norm
        results.rdf_count = self.rdf_count / norm
        md_count_random = self.md_count_random / norm_random
        rdf_count_random = self.rdf_count_random / norm_random

        # Average volumes, where the ideal-gas histogram gives the
        # volume of each minimum-distance shell
        results.volume = Results(
            total=self.volume_total / n_frames,
            domain=self.volume_domain / n_frames,
            bulk=self.volume_bulk / n_frames
        )
        results.volume.shell = (results.volume.total * md_count_random
                                / n_eff)

        results.density = Results(
            solute=self.solute.nmols / results.volume.total,
            solvent=self.solvent.nmols / results.volume.total
        )
        if self.options.usecutoff:
            # First bin lying entirely beyond dbulk
            ibulk = int(np.ceil(np.round(self.dbulk / binstep, 8)))
            n_bulk = results.md_count[ibulk:].sum()
            volume_bulk = results.volume.shell[ibulk:].sum()
        else:
            n_bulk = n_eff - results.md_count.sum()
            volume_bulk = results.volume.bulk
        if volume_bulk > 0:
            results.density.solvent_bulk = n_bulk / volume_bulk
        else:
            warnings.warn("The bulk volume is zero, so the bulk solvent "
                          "density and the distribution functions are "
                          "undefined and set to zero.")
            results.density.solvent_bulk = 0.0

        # Ideal-gas histograms at the bulk solvent density
        results.md_count_random = (results.density.solvent_bulk
                                   * results.volume.shell)
        results.rdf_count_random = (results.density.solvent_bulk
                                    * results.volume.total
                                    * rdf_count_random / n_eff)

        results.mddf = _ratio(results.md_count, results.md_count_random)
        results.rdf = _ratio(results.rdf_count, results.rdf_count_random)
        results.solute_atom = _ratio(self.solute_atom / norm,
                                     results.md_count_random[:, None])
        results.solvent_atom = _ratio(self.solvent_atom / norm,
                                      results.md_count_random[:, None])

        results.sum_md_count = np.cumsum(results.md_count)
        results.sum_md_count_random = np.cumsum(results.md_count_random)
        results.sum_rdf_count = np.cumsum(results.rdf_count)
        results.sum_rdf_count_random = np.cumsum(results.rdf_count_random)

        if results.density.solvent_bulk > 0:
            results.kb = ((results.sum_md_count
                           - results.sum_md_count_random)
                          / results.density.solvent_bulk)
        else:
            results.kb = np.zeros(self.nbins)
        results.kb_rdf = 4 * np.pi * binstep * np.cumsum(
            results.bins ** 2 * (results.rdf - 1)
        )

        results.units = {
            "results.bins": ureg.angstrom,
            "results.edges": ureg.angstrom,
            "results.kb": ureg.angstrom ** 3,
            "results.kb_rdf": ureg.angstrom ** 3,
            "results.volume": ureg.angstrom ** 3,
            "results.density": ureg.angstrom ** -3
        }
        self.results = results
        return self

    def kb_units(
            self, unit: str = "cm**3/mol", *, rdf: bool = False) -> Q_:

        r"""
        Converts a Kirkwood–Buff integral from volume per molecule to
        molar volume.

        Parameters
        ----------
        unit : `str`, default: :code:`"cm**3/mol"`
            Target unit.

        rdf : `bool`, keyword-only, default: :code:`False`
            Determines whether the RDF KB integral is converted instead
            of the MDDF one.

        Returns
        -------
        kb : `pint.Quantity`
            KB integral in the target unit.
        """

        if "kb" not in self.results:
            raise RuntimeError("The results have not been finalized.")
        kb = self.results.kb_rdf if rdf else self.results.kb
        return (kb * ureg.angstrom ** 3 * ureg.avogadro_constant).to(unit)

    def contributions(
            self, group: str, atoms: ArrayLike, *, local: bool = False
        ) -> np.ndarray[float]:

        r"""
        Sums the contributions of a subset of solute or solvent atoms
        to the MDDF.

        The contributions of all atoms of a molecule add up to the
        MDDF.

        Parameters
        ----------
        group : `str`
            Group the atoms belong to.

            **Valid values**: :code:`"solute"` and :code:`"solvent"`.

        atoms : array-like
            Global indices of the atoms, or indices within a molecule
            if :code:`local=True`. Atoms of different molecules with
            the same index within their molecule are counted once.

        local : `bool`, keyword-only, default: :code:`False`
            Determines whether `atoms` are indices within a molecule.

        Returns
        -------
        contribution : `numpy.ndarray`
            Contribution of the atoms to the MDDF.

            **Shape**: :math:`(N_\mathrm{bins},)`.
        """

        if group not in {"solute", "solvent"}:
            emsg = (f"Invalid group '{group}'. The options are 'solute' "
                    "and 'solvent'.")
            raise ValueError(emsg)
        if f"{group}_atom" not in self.results:
            raise RuntimeError("The results have not been finalized.")
        selection: Selection = getattr(self, group)
        if local:
            types = np.atleast_1d(np.asarray(atoms, dtype=int))
            if np.any((types < 0) | (types >= selection.natomspermol)):
                emsg = (f"Atom indices must be between 0 and "
                        f"{selection.natomspermol - 1}.")
                raise ValueError(emsg)
        else:
            types = selection.atom_type(atoms)
        return self.results[f"{group}_atom"][:, np.unique(types)].sum(axis=1)

def _ratio(
        a: np.ndarray[float], b: Union[float, np.ndarray[float]]
    ) -> np.ndarray[float]:
    b = np.broadcast_to(b, a.shape)
    return np.divide(a, b, out=np.zeros_like(a), where=b > 0)
