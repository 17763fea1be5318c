import pathlib
import sys

from MDAnalysis.lib.distances import distance_array
import numpy as np
import pytest

sys.path.insert(0, f"{pathlib.Path(__file__).parents[1].resolve().as_posix()}/src")
from mdmixture.algorithm import minimum_distance # noqa: E402

rng = np.random.default_rng()

def brute_force(x, y, natomspermol, irefatom, cutoff, dims):
    d = distance_array(x.astype(np.float32), y.astype(np.float32),
                       box=dims.astype(np.float32))
    d = d.reshape(x.shape[0], -1, natomspermol)
    dmin = d.min(axis=(0, 2))
    dref = d[:, :, irefatom].min(axis=0)
    flat = d.transpose(1, 0, 2).reshape(d.shape[1], -1).argmin(axis=1)
    i, j = np.divmod(flat, natomspermol)
    return dmin < cutoff, dmin, np.where(dref < cutoff, dref, np.inf), i, j

@pytest.mark.parametrize("dims", [np.array((25.0, 25.0, 25.0, 90, 90, 90)),
                                  np.array((25.0, 26.0, 27.0, 80, 90, 75))])
def test_class_periodic_system(dims):

    cutoff = 8.0
    natomspermol = 3
    nmols = 60
    x = 25 * rng.random((5, 3))
    y = 25 * rng.random((natomspermol * nmols, 3))

    system = minimum_distance.PeriodicSystem(5, y.shape[0], natomspermol,
                                             cutoff, irefatom=1)
    system.update_unitcell(dims)
    system.xpositions[:] = x
    system.ypositions[:] = y
    md = system.minimum_distances(0)
    within, dmin, dref, i, j = brute_force(x, y, natomspermol, 1, cutoff,
                                           dims)

    # Molecules too close to the cutoff to be compared reliably
    clear = np.abs(dmin - cutoff) > 1e-3

    # TEST CASE 1: Molecules within the cutoff
    assert len(md) == nmols
    assert np.array_equal(md.within_cutoff[clear], within[clear])
    assert np.all(np.isinf(md.dmin[~md.within_cutoff]))

    # TEST CASE 2: Minimum distances and the atoms realizing them
    assert np.allclose(md.dmin[within & clear], dmin[within & clear],
                       atol=1e-4)
    assert np.array_equal(md.i[within & clear], i[within & clear])
    assert np.array_equal(md.j[within & clear], j[within & clear])

    # TEST CASE 3: Reference atom distances
    ref = within & clear & (np.abs(dref - cutoff) > 1e-3)
    assert np.allclose(md.dref[ref], dref[ref], atol=1e-4)
    assert np.all(md.dref[md.within_cutoff] >= md.dmin[md.within_cutoff])

    # TEST CASE 4: Grid is reused for a different query molecule
    system.xpositions[:] = y[:5]
    md = system.minimum_distances(0, update_lists=False)
    assert md.within_cutoff[0]
    assert np.isclose(md.dmin[0], 0, atol=1e-5)
    assert np.isclose(md.dref[0], 0, atol=1e-5)

def test_class_periodic_system_autocorrelation():

    dims = np.array((30.0, 30.0, 30.0, 90, 90, 90))
    y = np.array(((15, 15, 15), (18, 15, 15), (15, 15, 29)), dtype=float)
    system = minimum_distance.PeriodicSystem(1, 3, 1, 10.0,
                                             autocorrelation=True)
    system.update_unitcell(dims)
    system.ypositions[:] = y
    system.xpositions[:] = y[:1]

    # TEST CASE 1: A molecule is never its own neighbor
    md = system.minimum_distances(0)
    assert md.within_cutoff.tolist() == [False, True, False]
    assert np.isclose(md.dmin[1], 3)

    # TEST CASE 2: Periodic images are used
    system.xpositions[:] = (15, 15, 1)
    md = system.minimum_distances(2, update_lists=False)
    assert md.within_cutoff.tolist() == [False, False, False]
    md = system.minimum_distances(1, update_lists=False)
    assert md.within_cutoff[2] and np.isclose(md.dmin[2], 2)

def test_class_periodic_system_invalid():

    system = minimum_distance.PeriodicSystem(1, 2, 1, 10.0)

    # TEST CASE 1: Search before the cell is set
    with pytest.raises(RuntimeError):
        system.minimum_distances(0)

    # TEST CASE 2: Cutoff larger than half of the cell
    with pytest.raises(ValueError):
        system.update_unitcell(np.array((15.0, 30.0, 30.0, 90, 90, 90)))

def test_class_minimum_distances():

    md = minimum_distance.MinimumDistances.empty(4)

    # TEST CASE 1: Empty record
    assert len(md) == 4
    assert not md.within_cutoff.any() and np.all(np.isinf(md.dmin))

    # TEST CASE 2: Copy is independent of the source
    other = minimum_distance.MinimumDistances.empty(4)
    other.within_cutoff[1] = True
    other.dmin[1] = 2.5
    md.copy_from(other)
    other.dmin[1] = 1.0
    assert md.within_cutoff[1] and md.dmin[1] == 2.5
