"""Plurality (first-past-the-post) voting system."""

from collections import Counter
from collections.abc import Iterable
from typing import Any, Self

from liquidvote.models import VoteData, VotingResult
from liquidvote.voting import register_voting_system
from liquidvote.voting.base import VotingSystem


@register_voting_system
class Plurality(VotingSystem):
    """First-past-the-post: every voter names one option, most votes wins.

    All options tied at the top count win together, so the result is only
    empty when there were no votes at all.
    """

    method = "plurality"

    def __init__(self, votes: Iterable[str]):
        self.votes: list[str] = list(votes)

    @property
    def name(self) -> str:
        return "Plurality"

    @property
    def description(self) -> str:
        return "Each voter picks one option; the option(s) with the most votes win"

    @classmethod
    def from_vote_data(cls, data: VoteData, **options: Any) -> Self:
        return cls(data.single_choices())

    def count(self) -> dict[str, int]:
        return dict(Counter(self.votes))

    def calculate(self) -> set[str]:
        counts = self.count()
        if not counts:
            return set()
        max_count = max(counts.values())
        return {option for option, count in counts.items() if count == max_count}

    def evaluate(self) -> VotingResult:
        counts = self.count()
        winners = self.calculate()
        return VotingResult(
            system_name=self.name,
            scores={option: float(count) for option, count in counts.items()},
            winners=[sorted(winners)] if winners else [],
            details={"num_votes": len(self.votes)},
        )
