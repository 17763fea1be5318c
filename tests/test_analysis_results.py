import copy
import pathlib
import sys

import numpy as np
import pytest

sys.path.insert(0, f"{pathlib.Path(__file__).parents[1].resolve().as_posix()}/src")
from mdmixture import Options, Selection, ureg # noqa: E402
from mdmixture.analysis.results import Result # noqa: E402

rng = np.random.default_rng()

solute = Selection([0, 1], nmols=1)
solvent = Selection(np.arange(2, 8), natomspermol=3)
options = Options(binstep=1.0, dbulk=5.0, n_random_samples=4)

def filled() -> Result:
    R = Result(solute, solvent, options)
    R.md_count += rng.integers(0, 3, R.nbins)
    R.rdf_count += rng.integers(0, 3, R.nbins)
    R.md_count_random += rng.integers(0, 3, R.nbins)
    R.rdf_count_random += rng.integers(0, 3, R.nbins)
    R.solute_atom += rng.integers(0, 3, R.solute_atom.shape)
    R.solvent_atom += rng.integers(0, 3, R.solvent_atom.shape)
    R.add_volume(1000 * (1 + rng.random()), 100 * rng.random())
    R.nframes_read += 1
    return R

def test_class_result():

    R = Result(solute, solvent, options)

    # TEST CASE 1: Histograms sized from the bulk distance
    assert R.nbins == 5
    assert R.md_count.shape == R.md_count_random.shape == (5,)
    assert R.solute_atom.shape == (5, 2)
    assert R.solvent_atom.shape == (5, 3)
    assert R.irefatom == 0
    assert not R.autocorrelation and R.n_solvent_eff == 2

    # TEST CASE 2: Histograms sized from the hard cutoff
    R = Result(solute, solvent,
               Options(binstep=0.5, dbulk=5.0, cutoff=8.0, usecutoff=True))
    assert R.nbins == 16

    # TEST CASE 3: Autocorrelation excludes the solute molecule itself
    R = Result(solvent, solvent)
    assert R.autocorrelation and R.n_solvent_eff == 1

    # TEST CASE 4: Invalid reference atom or too few molecules
    with pytest.raises(ValueError):
        Result(solute, solvent, Options(irefatom=3))
    with pytest.raises(ValueError):
        Result(solute, solute)

def test_func_result_finalize():

    R = Result(solute, solvent, options)
    R.md_count[1] = 1
    R.rdf_count[2] = 1
    R.md_count_random[:] = (0, 1, 2, 3, 4)
    R.rdf_count_random[:] = (0, 0, 2, 2, 4)
    R.solute_atom[1, 1] = 1
    R.solvent_atom[1, 2] = 1
    R.add_volume(1000.0, 100.0)
    R.nframes_read = 1
    results = R.finalize().results

    # TEST CASE 1: Bin centers and volumes
    assert np.allclose(results.bins, (0.5, 1.5, 2.5, 3.5, 4.5))
    assert results.volume.total == 1000
    assert results.volume.bulk == 900
    assert np.allclose(results.volume.shell,
                       1000 * np.arange(5) / 4 / 2)

    # TEST CASE 2: Densities, where one of two solvent molecules is in
    # the bulk volume
    assert np.isclose(results.density.solute, 1 / 1000)
    assert np.isclose(results.density.solvent, 2 / 1000)
    assert np.isclose(results.density.solvent_bulk, 1 / 900)

    # TEST CASE 3: Distribution functions
    md_count_random = np.arange(5) * 1000 / 8 / 900
    assert np.allclose(results.md_count_random, md_count_random)
    assert np.allclose(results.mddf, (0, 1 / md_count_random[1], 0, 0, 0))
    assert results.rdf[2] > 0 and results.rdf[0] == 0

    # TEST CASE 4: KB integrals
    assert np.allclose(results.kb, 900 * (np.cumsum((0, 1, 0, 0, 0))
                                          - np.cumsum(md_count_random)))
    assert np.allclose(results.kb_rdf,
                       4 * np.pi * np.cumsum(results.bins ** 2
                                             * (results.rdf - 1)))

    # TEST CASE 5: Atomic contributions add up to the MDDF
    assert np.allclose(R.contributions("solute", [0, 1]), results.mddf)
    assert np.allclose(R.contributions("solvent", [0, 1, 2], local=True),
                       results.mddf)
    assert np.allclose(R.contributions("solvent", [4, 7]), results.mddf)
    assert np.allclose(R.contributions("solvent", [0], local=True), 0)

    # TEST CASE 6: KB integrals in molar units
    kb = R.kb_units()
    assert kb.units == ureg.centimeter ** 3 / ureg.mole
    assert np.allclose(kb.magnitude, 0.602214076 * results.kb)

def test_func_result_finalize_idempotent():

    R = filled()
    md_count = R.md_count.copy()
    first = copy.deepcopy(R.finalize().results)
    second = R.finalize().results

    # TEST CASE 1: Raw sums are untouched and results are unchanged
    assert np.array_equal(R.md_count, md_count)
    for key in ("mddf", "rdf", "kb", "kb_rdf"):
        assert np.array_equal(first[key], second[key])
    assert first.density.solvent_bulk == second.density.solvent_bulk

def test_func_result_finalize_invalid():

    R = Result(solute, solvent, options)

    # TEST CASE 1: Nothing accumulated
    with pytest.raises(ValueError):
        R.finalize()

    # TEST CASE 2: Results requested before finalization
    with pytest.raises(RuntimeError):
        R.kb_units()
    with pytest.raises(RuntimeError):
        R.contributions("solute", [0])

    # TEST CASE 3: Invalid contribution group or atoms
    R = filled().finalize()
    with pytest.raises(ValueError):
        R.contributions("cosolvent", [0])
    with pytest.raises(ValueError):
        R.contributions("solvent", [3], local=True)
    with pytest.raises(ValueError):
        R.contributions("solute", [2])

    # TEST CASE 4: No bulk volume
    R = Result(solute, solvent, options)
    R.md_count[1] = 1
    R.md_count_random[1] = 1
    R.add_volume(1000.0, 1000.0)
    R.nframes_read = 1
    with pytest.warns(UserWarning):
        R.finalize()
    assert R.results.density.solvent_bulk == 0
    assert np.all(R.results.mddf == 0) and np.all(R.results.kb == 0)

def test_func_result_merge():

    a, b, c = filled(), filled(), filled()

    # TEST CASE 1: Merging is commutative
    ab = copy.deepcopy(a).merge(copy.deepcopy(b)).finalize()
    ba = copy.deepcopy(b).merge(copy.deepcopy(a)).finalize()
    assert np.array_equal(ab.md_count, ba.md_count)
    assert np.allclose(ab.results.mddf, ba.results.mddf)
    assert np.isclose(ab.volume_total, ba.volume_total)

    # TEST CASE 2: Merging is associative
    ab_c = copy.deepcopy(a).merge(copy.deepcopy(b)).merge(c)
    a_bc = copy.deepcopy(a).merge(copy.deepcopy(b).merge(c))
    assert ab_c.nframes_read == a_bc.nframes_read == 3
    assert np.array_equal(ab_c.solvent_atom, a_bc.solvent_atom)
    assert np.allclose(ab_c.finalize().results.kb,
                       a_bc.finalize().results.kb)

    # TEST CASE 3: Volumes are summed
    assert np.isclose(ab_c.volume_domain + ab_c.volume_bulk,
                      ab_c.volume_total)

def test_func_result_merge_invalid():

    R = Result(solute, solvent, options)

    # TEST CASE 1: Not an accumulator
    with pytest.raises(TypeError):
        R.merge(np.zeros(5))

    # TEST CASE 2: Different selections or options
    with pytest.raises(ValueError):
        R.merge(Result(Selection([0, 1], natomspermol=1), solvent, options))
    with pytest.raises(ValueError):
        R.merge(Result(solute, solvent, Options(binstep=0.5, dbulk=5.0,
                                                n_random_samples=4)))
    with pytest.raises(ValueError):
        R.merge(Result(solute, solvent, Options(binstep=1.0, dbulk=5.0,
                                                n_random_samples=4,
                                                irefatom=2)))

def test_func_result_finalize_bulk_shell():

    # dbulk = 1.0 falls inside the bin spanning 0.9-1.2
    R = Result(solute, solvent,
               Options(binstep=0.3, dbulk=1.0, cutoff=2.0, usecutoff=True,
                       n_random_samples=4))
    assert R.nbins == 6
    R.md_count[3] = R.md_count[4] = 1
    R.md_count_random[:] = 4
    R.add_volume(1000.0, 100.0)
    R.nframes_read = 1
    results = R.finalize().results

    # TEST CASE 1: Bin straddling dbulk is not part of the bulk shell
    assert np.allclose(results.volume.shell, 500)
    assert np.isclose(results.density.solvent_bulk, 1 / 1000)
