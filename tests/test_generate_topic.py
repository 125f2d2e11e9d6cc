"""Tests for the mock topic generator script."""

import pytest

from liquidvote.calculate import calculate_all
from scripts.generate_topic import generate_topic


class TestGenerateTopic:
    def test_sizes(self):
        topic = generate_topic(6, 3)
        assert len(topic.delegates) == 6
        assert len(topic.options) == 3
        assert set(topic.votes) == set(topic.delegates)

    def test_ballots_split_one_unit(self):
        topic = generate_topic(6, 3)
        for ballot in topic.votes.values():
            assert sum(ballot.values()) == pytest.approx(1.0, abs=1e-3)
            assert any(target in topic.options for target in ballot)

    def test_same_seed_same_names(self):
        assert generate_topic(4, 2).delegate_names() == generate_topic(4, 2).delegate_names()

    def test_no_self_delegation(self):
        topic = generate_topic(8, 2, delegation_probability=1.0)
        for delegate, ballot in topic.votes.items():
            assert delegate not in ballot

    def test_every_system_runs(self):
        data = generate_topic(8, 4).to_vote_data()
        results = calculate_all(data)
        assert all("error" not in r.details for r in results)
