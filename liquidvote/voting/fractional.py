"""Fractional and quadratic voting system."""

from collections.abc import Iterable, Mapping
from typing import Any, Self

from liquidvote.models import Ballot, VoteData, VotingResult
from liquidvote.voting import register_voting_system
from liquidvote.voting.base import VotingSystem
from liquidvote.voting.credits import check_ballot, transform_ballot


@register_voting_system
class FractionalVoting(VotingSystem):
    """Fractional (credit) voting, optionally quadratic.

    Every voter spreads credits over options. Before the credits are summed
    per option, each voter's ballot can be:
    1. normalized: divided by its own total, equalizing voting power
    2. square-rooted (quadratic): spent credits become vote counts

    The order is fixed (normalize, then quadratic) because it changes the
    result materially.

    Real quadratic voting needs a market in which participants exchange
    credits according to how much they care. That exchange, and the
    integrity of each voter's credit total, is assumed to happen elsewhere.
    Enable `normalize` when equal voting power is wanted instead.
    """

    method = "frac"
    accepted_options = ("normalize", "quadratic", "strict")

    def __init__(
        self,
        voters: Iterable[Mapping[str, float]],
        normalize: bool = False,
        quadratic: bool = False,
        strict: bool = False,
    ):
        self.voters: list[Ballot] = [dict(voter) for voter in voters]
        self.normalize = normalize
        self.quadratic = quadratic
        self.strict = strict

    @property
    def name(self) -> str:
        return "Quadratic Voting" if self.quadratic else "Fractional Voting"

    @property
    def description(self) -> str:
        return "Voters spread credits over options; credits are summed per option"

    @classmethod
    def from_vote_data(cls, data: VoteData, **options: Any) -> Self:
        votes = data.only_option_voting()
        return cls([votes[source] for source in sorted(votes)], **options)

    def calculate(self) -> dict[str, float]:
        result: dict[str, float] = {}
        for index, voter in enumerate(self.voters):
            if self.strict:
                check_ballot(f"voter {index}", voter)
            votes = transform_ballot(voter, self.normalize, self.quadratic)
            for to, credit in votes.items():
                result[to] = result.get(to, 0.0) + credit
        return result

    def evaluate(self) -> VotingResult:
        scores = self.calculate()
        winners = VotingResult.top(scores)
        return VotingResult(
            system_name=self.name,
            scores=scores,
            winners=[winners] if winners else [],
            details={
                "normalize": self.normalize,
                "quadratic": self.quadratic,
                "num_voters": len(self.voters),
            },
        )
