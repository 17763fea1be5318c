import pathlib
import sys

import pytest

sys.path.insert(0, f"{pathlib.Path(__file__).parents[1].resolve().as_posix()}/src")
from mdmixture import Options # noqa: E402

def test_class_options():

    # TEST CASE 1: Default options
    options = Options()
    assert options.binstep == 0.02
    assert options.dbulk == options.cutoff == 10.0
    assert not options.usecutoff
    assert options.n_random_samples == 10
    assert options.irefatom is None
    assert options.lastframe is None
    assert options.seed == 321 and not options.deterministic

    # TEST CASE 2: Search cutoff is dbulk unless a hard cutoff is used
    assert Options(dbulk=8.0, cutoff=12.0).search_cutoff == 8.0
    assert Options(dbulk=8.0, cutoff=12.0,
                   usecutoff=True).search_cutoff == 12.0

    # TEST CASE 3: Options are immutable
    with pytest.raises(AttributeError):
        options.binstep = 0.1

    # TEST CASE 4: Dictionary of all options
    assert Options(stride=2).as_dict()["stride"] == 2
    assert len(options.as_dict()) == 12

def test_class_options_invalid():

    # TEST CASE 1: Non-positive bin width or bulk distance
    with pytest.raises(ValueError):
        Options(binstep=0)
    with pytest.raises(ValueError):
        Options(dbulk=-1.0)

    # TEST CASE 2: Hard cutoff not beyond the bulk distance
    with pytest.raises(ValueError):
        Options(dbulk=10.0, cutoff=10.0, usecutoff=True)

    # TEST CASE 3: Invalid sampling and frame range
    with pytest.raises(ValueError):
        Options(n_random_samples=0)
    with pytest.raises(ValueError):
        Options(firstframe=5, lastframe=2)
    with pytest.raises(ValueError):
        Options(stride=0)
    with pytest.raises(ValueError):
        Options(irefatom=-1)
    with pytest.raises(ValueError):
        Options(n_jobs=-2)
