"""Borda count voting system."""

from collections.abc import Iterable
from typing import Any, Self

from liquidvote.models import VoteData, VotingResult
from liquidvote.voting import register_voting_system
from liquidvote.voting.base import VotingSystem


@register_voting_system
class BordaCount(VotingSystem):
    """Borda count voting system.

    Each voter ranks some options. In a ranking of length L, the option at
    (0-indexed) position i earns L - i points:
    - 1st place = L points
    - 2nd place = L - 1 points
    - ...
    - Last place = 1 point

    Points are summed across voters without normalizing by the number of
    voters, so a single ranking always hands out L*(L+1)/2 points.
    """

    method = "borda"

    def __init__(self, voters: Iterable[Iterable[str]]):
        self.voters: list[list[str]] = [list(voter) for voter in voters]

    @property
    def name(self) -> str:
        return "Borda Count"

    @property
    def description(self) -> str:
        return "Points-based system: 1st = L pts, 2nd = L-1 pts, ..., last = 1 pt"

    @classmethod
    def from_vote_data(cls, data: VoteData, **options: Any) -> Self:
        return cls(data.ranked_ballots())

    def calculate(self) -> dict[str, float]:
        scores: dict[str, float] = {}
        for ranking in self.voters:
            length = len(ranking)
            for position, option in enumerate(ranking):
                scores[option] = scores.get(option, 0.0) + (length - position)
        return scores

    def evaluate(self) -> VotingResult:
        scores = self.calculate()
        winners = VotingResult.top(scores)
        return VotingResult(
            system_name=self.name,
            scores=scores,
            winners=[winners] if winners else [],
            details={
                "num_voters": len(self.voters),
                "max_possible": float(sum(len(r) for r in self.voters)),
            },
        )
