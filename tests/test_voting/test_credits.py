"""Tests for the per-ballot credit transforms."""

import math

import pytest

from liquidvote.models import InvalidBallotError
from liquidvote.voting.credits import (
    check_ballot,
    normalize_ballot,
    square_root_ballot,
    transform_ballot,
)


class TestCreditTransforms:
    def test_normalize(self):
        assert normalize_ballot({"a": 1.0, "b": 3.0}) == {"a": 0.25, "b": 0.75}

    def test_normalize_zero_sum_unchanged(self):
        assert normalize_ballot({"a": 0.0, "b": 0.0}) == {"a": 0.0, "b": 0.0}

    def test_square_root(self):
        assert square_root_ballot({"a": 9.0, "b": 0.0}) == {"a": 3.0, "b": 0.0}

    def test_square_root_negative(self):
        assert math.isnan(square_root_ballot({"a": -1.0})["a"])

    def test_normalize_then_quadratic(self):
        """Normalizing first: 0.25, 0.75 → 0.5, 0.866."""
        result = transform_ballot({"a": 1.0, "b": 3.0}, normalize=True, quadratic=True)
        assert result["a"] == pytest.approx(0.5)
        assert result["b"] == pytest.approx(math.sqrt(0.75))

    def test_no_transform_copies(self):
        ballot = {"a": 1.0}
        result = transform_ballot(ballot)
        assert result == ballot
        assert result is not ballot

    def test_check_ballot(self):
        check_ballot("alice", {"a": 0.0, "b": 1.0})
        with pytest.raises(InvalidBallotError, match="alice"):
            check_ballot("alice", {"a": -0.5})
