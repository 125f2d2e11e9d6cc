"""Abstract base classes for voting systems."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar, Self

from liquidvote.models import VoteData, VotingResult


class VotingSystem(ABC):
    """Abstract base class for voting systems.

    Each voting system is built from its own ballot shape (plain choices,
    rankings, credit maps...) and aggregates them with `calculate()`.
    Systems are registered via the @register_voting_system decorator in
    liquidvote/voting/__init__.py under `method`, the name the RPC layer
    dispatches on.
    """

    method: ClassVar[str]
    # Keyword options from a request's params that from_vote_data accepts
    accepted_options: ClassVar[tuple[str, ...]] = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this voting system."""
        pass

    @property
    def description(self) -> str:
        """Optional description of how this voting system works."""
        return ""

    @classmethod
    @abstractmethod
    def from_vote_data(cls, data: VoteData, **options: Any) -> Self:
        """Build this system's ballots from a stripped vote view."""
        pass

    @abstractmethod
    def calculate(self) -> Any:
        """Aggregate the ballots and return this system's native result."""
        pass

    @abstractmethod
    def evaluate(self) -> VotingResult:
        """Run the system and wrap its outcome in a VotingResult."""
        pass


class EliminationVotingSystem(VotingSystem):
    """Base for systems that extract winners one round at a time.

    `calculate()` finds the current winner set without changing anything.
    `next_round()` finds it and then ignores those winners, so repeated calls
    walk down the field until no winner is left. An instance therefore
    carries state: use `copy()` to restart from the same ignore set, and
    never share one instance between concurrent callers.
    """

    def __init__(self, voters: Iterable[Iterable[str]], ignore: Iterable[str] = ()):
        self.voters: list[list[str]] = [list(voter) for voter in voters]
        self.ignored: set[str] = set(ignore)

    @classmethod
    def from_vote_data(cls, data: VoteData, **options: Any) -> Self:
        return cls(data.ranked_ballots())

    def ignore(self, option: str) -> None:
        """Permanently exclude `option` from future tallies."""
        self.ignored.add(option)

    @abstractmethod
    def calculate(self) -> set[str] | None:
        pass

    def next_round(self) -> set[str] | None:
        """Compute the current winners, then ignore them from now on."""
        winners = self.calculate()
        if winners:
            self.ignored.update(winners)
        return winners

    def rounds(self) -> list[set[str]]:
        """Run `next_round()` until no winner is found."""
        results = []
        while True:
            winners = self.next_round()
            if not winners:
                return results
            results.append(winners)

    def copy(self) -> Self:
        return type(self)(self.voters, ignore=self.ignored)

    def unique_votes(self) -> set[str]:
        return {vote for voter in self.voters for vote in voter}

    def evaluate(self) -> VotingResult:
        rounds = self.copy().rounds()
        return VotingResult(
            system_name=self.name,
            winners=[sorted(winners) for winners in rounds],
            details={
                "ignored": sorted(self.ignored),
                "num_voters": len(self.voters),
                "num_rounds": len(rounds),
            },
        )
