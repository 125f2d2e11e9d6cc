"""Tests for the approval voting system."""

from tests.conftest import make_vote_data

from liquidvote.voting.approval import ApprovalVoting


class TestApprovalVoting:
    def test_name(self):
        assert ApprovalVoting([]).name == "Approval Voting"

    def test_simple(self):
        system = ApprovalVoting([["dog"], ["cat"], ["dog"]])
        assert system.calculate() == {"dog"}

    def test_recurse(self):
        system = ApprovalVoting([["dog"], ["cat"], ["bat", "dog"], ["dog"]])
        assert system.calculate() == {"dog"}

    def test_no_majority_needed(self):
        """Most approvals win even without a majority of voters."""
        system = ApprovalVoting([["dog", "bat"], ["cat"], ["bat"]])
        assert system.calculate() == {"bat"}

    def test_second_choice_wins(self):
        system = ApprovalVoting([["rat", "dog"], ["cat", "dog"], ["bat"]])
        assert system.calculate() == {"dog"}

    def test_ignore(self):
        system = ApprovalVoting([["cat", "dog"], ["bat"], ["dog"]])
        system.ignore("cat")
        assert system.calculate() == {"dog"}

    def test_ignore_leader_makes_runner_up_win(self):
        """A leads B 2-1; ignoring A makes B the winner."""
        system = ApprovalVoting([["A"], ["A"], ["B"]])
        assert system.calculate() == {"A"}
        system.ignore("A")
        assert system.calculate() == {"B"}

    def test_calculate_does_not_change_state(self):
        system = ApprovalVoting([["A"], ["A"], ["B"]])
        system.calculate()
        assert system.calculate() == {"A"}
        assert system.ignored == set()

    def test_next_round(self):
        """First round is a tie between cat and dog; then nothing is left."""
        system = ApprovalVoting([["cat", "dog"], ["cat"], ["dog"]])
        assert system.next_round() == {"cat", "dog"}
        assert system.next_round() is None

    def test_rounds(self):
        system = ApprovalVoting([["a", "b"], ["a"], ["b", "c"]])
        assert system.rounds() == [{"a", "b"}, {"c"}]

    def test_everything_ignored(self):
        system = ApprovalVoting([["a"], ["b"]])
        system.ignore("a")
        system.ignore("b")
        assert system.calculate() is None

    def test_no_voters(self):
        assert ApprovalVoting([]).calculate() is None

    def test_copy_restarts_from_same_ignore_set(self):
        system = ApprovalVoting([["a"], ["a"], ["b"], ["c"]])
        system.ignore("c")
        clone = system.copy()

        assert clone.rounds() == [{"a"}, {"b"}]
        # The source system is untouched and can be replayed
        assert system.ignored == {"c"}
        assert system.copy().rounds() == [{"a"}, {"b"}]

    def test_evaluate(self):
        result = ApprovalVoting([["a", "b"], ["a"], ["b", "c"]]).evaluate()
        assert result.winners == [["a", "b"], ["c"]]
        assert result.details["num_rounds"] == 2

    def test_evaluate_leaves_state_alone(self):
        system = ApprovalVoting([["a"], ["b"]])
        system.evaluate()
        assert system.ignored == set()

    def test_from_vote_data(self):
        data = make_vote_data({
            "alice": {"dog": 0.5, "cat": 0.5},
            "bob": {"cat": 1.0, "alice": 0.5},
            "carol": {"bat": 0.0},
        }, ["dog", "cat", "bat"])
        system = ApprovalVoting.from_vote_data(data)
        assert system.calculate() == {"cat"}
        assert len(system.voters) == 2
