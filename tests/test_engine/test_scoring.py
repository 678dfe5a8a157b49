"""Tests for cyclic feature matching."""

import math

import pytest

from shapeit.engine import NO_MATCH, MatchScore, match_score

SEQUENCES = [
    [1.0],
    [1.0, 2.0, 3.0],
    [math.pi / 2] * 4,
    [0.5, 1.7, 2.2, 0.9, 1.1],
]


@pytest.mark.parametrize("seq", SEQUENCES)
def test_self_match_is_perfect(seq):
    assert match_score(seq, seq).score == pytest.approx(1.0)


@pytest.mark.parametrize("shift", [0, 1, 2, 3, 4])
def test_score_invariant_to_cyclic_rotation(shift):
    dst = [0.5, 1.7, 2.2, 0.9, 1.1]
    src = dst[-shift:] + dst[:-shift] if shift else list(dst)
    result = match_score(dst, src)
    assert result.score == pytest.approx(1.0)
    assert src[result.offset:] + src[: result.offset] == dst


def test_partial_match_uses_min_max_ratio():
    result = match_score([1.0, 1.0], [1.0, 2.0])
    assert result.score == pytest.approx(0.75)


def test_length_mismatch_is_no_match():
    assert match_score([1.0, 2.0], [1.0, 2.0, 3.0]) == NO_MATCH
    assert match_score([], []) == NO_MATCH


def test_undefined_values_score_zero():
    result = match_score([1.0, None], [1.0, 1.0])
    assert result.score == pytest.approx(0.5)


def test_explicit_offsets():
    result = match_score([1.0, 2.0, 3.0], [2.0, 3.0, 1.0], offsets=[1])
    assert result.offset == 1
    assert result.score < 1.0
    assert match_score([1.0, 2.0], [1.0, 2.0], offsets=[None]) == NO_MATCH


def test_earliest_offset_wins_ties():
    result = match_score([1.0, 1.0, 1.0], [1.0, 1.0, 1.0])
    assert result == MatchScore(1.0, 0)


def test_match_score_converts_to_float():
    assert float(MatchScore(0.4, 2)) == 0.4
