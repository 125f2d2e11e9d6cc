"""Ranked-Choice Voting (RCV) system."""

import logging
from collections import Counter
from dataclasses import dataclass

from liquidvote.voting import register_voting_system
from liquidvote.voting.base import EliminationVotingSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Counting:
    """Still counting; `eliminated` holds options dropped in earlier rounds."""
    eliminated: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Majority:
    """Terminal: one or more options passed the majority threshold."""
    winners: frozenset[str]


@dataclass(frozen=True)
class Exhausted:
    """Terminal: every option was eliminated or ignored without a majority."""
    pass


RoundState = Counting | Majority | Exhausted


@register_voting_system
class RankedChoiceVoting(EliminationVotingSystem):
    """Ranked-Choice Voting (instant runoff).

    For each round:
    1. Every voter counts for their highest-ranked option that is neither
       ignored nor eliminated
    2. Any option counted by more than half the voters (voters // 2) wins
    3. Otherwise, all options with the fewest votes are eliminated together
    4. If eliminated and ignored options cover every option on any ballot,
       there is no winner

    The rounds form a small state machine (Counting -> Majority | Exhausted)
    that `step()` advances one round at a time.
    """

    method = "rcv"

    @property
    def name(self) -> str:
        return "Ranked-Choice Voting"

    @property
    def description(self) -> str:
        return "Eliminate the weakest option until one holds a majority of first choices"

    def count(self, eliminated: frozenset[str] = frozenset()) -> dict[str, int]:
        """Count each voter's top choice that is still in the running."""
        counts: Counter[str] = Counter()
        for voter in self.voters:
            for vote in voter:
                if vote not in eliminated and vote not in self.ignored:
                    counts[vote] += 1
                    break
        return dict(counts)

    def step(self, state: Counting) -> RoundState:
        """Run one counting round from `state` and return the next state."""
        counts = self.count(state.eliminated)
        logger.debug("round tally: %s", counts)

        majority = len(self.voters) // 2
        winners = frozenset(option for option, count in counts.items() if count > majority)
        if winners:
            logger.info("majority reached by %s", sorted(winners))
            return Majority(winners)

        if not counts:
            return Exhausted()

        min_count = min(counts.values())
        to_eliminate = {option for option, count in counts.items() if count == min_count}
        logger.info("eliminating %s with %d votes", sorted(to_eliminate), min_count)
        eliminated = state.eliminated | to_eliminate

        if self.unique_votes() <= eliminated | self.ignored:
            logger.info("all options eliminated without a majority")
            return Exhausted()

        return Counting(eliminated)

    def calculate(self) -> set[str] | None:
        state: RoundState = Counting()
        while isinstance(state, Counting):
            state = self.step(state)

        if isinstance(state, Majority):
            return set(state.winners)
        return None
