from __future__ import annotations

import pytest

from voron_mods.compatibility import build_compatibility, split_tokens
from voron_mods.config import SUPPORTED, UNKNOWN, UNSUPPORTED


def test_split_tokens():
    assert split_tokens(" V0, V2.4 /Trident,, / ") == ["V0", "V2.4", "Trident"]


@pytest.mark.parametrize("cell", ["V0.1", "V2.4, V0.1", "V0.1/VT"])
def test_v0_1_marks_v0_and_v0_1(cell):
    flags = build_compatibility(cell)
    assert flags.v0 == SUPPORTED
    assert flags.v0_1 == SUPPORTED


def test_v0_does_not_imply_v0_1():
    flags = build_compatibility("V0.2r1")
    assert flags.v0 == SUPPORTED
    assert flags.v0_1 == UNSUPPORTED


@pytest.mark.parametrize("cell", ["", "n/a", "Voron 2", "v2.4", "Switchwire", "?"])
def test_unrecognized_tokens_are_all_unsupported(cell):
    flags = build_compatibility(cell).to_dict()
    assert set(flags.values()) == {UNSUPPORTED}
    assert UNKNOWN not in flags.values()


def test_every_family_synonym():
    flags = build_compatibility("V0.0, V1, V2.4r2, Voron Trident")
    assert flags.to_dict() == {
        "v0": SUPPORTED,
        "v0_1": UNSUPPORTED,
        "v1_8": SUPPORTED,
        "v2_4": SUPPORTED,
        "trident": SUPPORTED,
    }
