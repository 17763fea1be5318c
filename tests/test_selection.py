import pathlib
import sys

import MDAnalysis as mda
import numpy as np
import pytest

sys.path.insert(0, f"{pathlib.Path(__file__).parents[1].resolve().as_posix()}/src")
from mdmixture import Selection # noqa: E402

def test_class_selection():

    # TEST CASE 1: Molecule size from the number of molecules and vice
    # versa
    s1 = Selection(np.arange(10, 22), nmols=4)
    s2 = Selection(np.arange(10, 22), natomspermol=3)
    assert s1.natoms == 12 and s1.natomspermol == 3
    assert s2.nmols == 4
    assert s1 == s2 and hash(s1) == hash(s2)

    # TEST CASE 2: Same atoms split into different molecules
    assert s1 != Selection(np.arange(10, 22), nmols=6)

    # TEST CASE 3: Single molecule
    protein = Selection(np.arange(100), nmols=1)
    assert protein.natomspermol == 100

    # TEST CASE 4: Indices cannot be modified
    with pytest.raises(ValueError):
        s1.indices[0] = 0

    # TEST CASE 5: Molecule slots and views
    assert s1.molecule(2) == slice(6, 9)
    positions = np.arange(36, dtype=float).reshape(12, 3)
    assert np.array_equal(s1.view(positions, 1), positions[3:6])
    with pytest.raises(IndexError):
        s1.molecule(4)

    # TEST CASE 6: Overlapping selections
    assert s1.overlaps(Selection([21, 22], nmols=1))
    assert not s1.overlaps(Selection([0, 1], nmols=1))

    # TEST CASE 7: Atom-in-molecule indices of global atom indices
    assert s1.atom_type([10, 14, 21]).tolist() == [0, 1, 2]
    with pytest.raises(ValueError):
        s1.atom_type([0])

def test_class_selection_invalid():

    # TEST CASE 1: Empty selection or repeated atoms
    with pytest.raises(ValueError):
        Selection([], nmols=1)
    with pytest.raises(ValueError):
        Selection([0, 1, 1], nmols=1)

    # TEST CASE 2: Missing or inconsistent molecule sizes
    with pytest.raises(ValueError):
        Selection(np.arange(6))
    with pytest.raises(ValueError):
        Selection(np.arange(6), nmols=2, natomspermol=2)
    with pytest.raises(ValueError):
        Selection(np.arange(7), nmols=2)
    with pytest.raises(ValueError):
        Selection(np.arange(7), natomspermol=3)

def test_func_selection_from_atomgroup():

    universe = mda.Universe.empty(12, n_residues=5,
                                  atom_resindex=[0, 0, 0, 1, 1, 1, 2, 2,
                                                 3, 3, 4, 4])

    # TEST CASE 1: Residues as molecules
    water = Selection.from_atomgroup(universe.atoms[:6])
    assert water.nmols == 2 and water.natomspermol == 3

    # TEST CASE 2: Residues of different sizes
    with pytest.raises(ValueError):
        Selection.from_atomgroup(universe.atoms)

    # TEST CASE 3: Explicit molecule size
    ions = Selection.from_atomgroup(universe.atoms[6:], natomspermol=1)
    assert ions.nmols == 6
    assert np.array_equal(ions.indices, np.arange(6, 12))
