"""Approval voting system."""

from collections import Counter
from typing import Any, Self

from liquidvote.models import VoteData
from liquidvote.voting import register_voting_system
from liquidvote.voting.base import EliminationVotingSystem


@register_voting_system
class ApprovalVoting(EliminationVotingSystem):
    """Approval voting with sequential extraction.

    Every voter approves any number of options. The option(s) approved most
    often, among those not ignored, win. No majority is required: with low
    turnout, a plurality of approvals is enough.

    Each `next_round()` ignores the previous winners, producing a ranking
    one winner set at a time.
    """

    method = "approval"

    @property
    def name(self) -> str:
        return "Approval Voting"

    @property
    def description(self) -> str:
        return "Voters approve any number of options; the most approved option wins"

    @classmethod
    def from_vote_data(cls, data: VoteData, **options: Any) -> Self:
        return cls(data.approval_ballots())

    def count(self) -> dict[str, int]:
        counts: Counter[str] = Counter()
        for voter in self.voters:
            for vote in voter:
                if vote not in self.ignored:
                    counts[vote] += 1
        return dict(counts)

    def calculate(self) -> set[str] | None:
        counts = self.count()
        if not counts:
            return None
        max_count = max(counts.values())
        return {option for option, count in counts.items() if count == max_count}
