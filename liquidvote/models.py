"""Core data models for ballot collections and voting results."""

import hashlib
import struct
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Self

# source delegate -> {target participant -> weight}
Ballot = dict[str, float]
Votes = dict[str, Ballot]


class DuplicateNameError(ValueError):
    """Raised when a delegate name or option title is already registered."""
    pass


class UnknownParticipantError(KeyError):
    """Raised when a ballot refers to an id that is neither delegate nor option."""
    pass


class InvalidBallotError(ValueError):
    """Raised in strict mode for ballots the engine refuses to aggregate."""
    pass


@dataclass
class Topic:
    """A single decision: who may vote, what can be voted for, and the ballots.

    Attributes:
        title: Human-readable title of the decision
        description: Longer description shown to participants
        delegates: Dict mapping delegate_id -> display name
        options: Dict mapping option_id -> title
        votes: Dict mapping delegate_id -> {target_id -> weight}
        id: Unique id of this topic

    A ballot target may be an option (a direct vote) or another delegate
    (delegation); both may be mixed in one ballot.

    Example:
        >>> topic = Topic("Lunch", "What should we eat?")
        >>> alice = topic.add_new_delegate("alice")
        >>> pizza = topic.add_new_option("pizza")
        >>> topic.cast_vote_to(alice, pizza, 1.0)
    """
    title: str
    description: str = ""
    delegates: dict[str, str] = field(default_factory=dict)
    options: dict[str, str] = field(default_factory=dict)
    votes: Votes = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def add_new_delegate(self, name: str) -> str:
        """Register a delegate under a fresh id and return that id."""
        if name in self.delegates.values():
            raise DuplicateNameError(f"Delegate already exists: {name}")
        delegate_id = str(uuid.uuid4())
        self.delegates[delegate_id] = name
        return delegate_id

    def add_delegate(self, delegate_id: str, name: str) -> bool:
        """Register a delegate under a caller-chosen id.

        Returns False (and changes nothing) if the id is already taken.
        """
        if delegate_id in self.delegates:
            return False
        self.delegates[delegate_id] = name
        return True

    def force_add_delegate(self, delegate_id: str, name: str) -> None:
        self.delegates[delegate_id] = name

    def add_new_option(self, title: str) -> str:
        """Register an option under a fresh id and return that id."""
        if title in self.options.values():
            raise DuplicateNameError(f"Option already exists: {title}")
        option_id = str(uuid.uuid4())
        self.options[option_id] = title
        return option_id

    def add_option(self, option_id: str, title: str) -> bool:
        if option_id in self.options:
            return False
        self.options[option_id] = title
        return True

    def cast_vote_to(self, source: str, target: str, weight: float) -> None:
        """Set the weight `source` gives to `target`, keeping the rest of the ballot.

        The weight itself is not validated: negative, zero and self-targeted
        votes are stored as given.
        """
        self._check_delegate(source)
        self.votes.setdefault(source, {})[target] = float(weight)

    def overwrite_vote_for(self, source: str, ballot: Mapping[str, float]) -> None:
        """Replace the whole ballot of `source`."""
        self._check_delegate(source)
        self.votes[source] = {target: float(w) for target, w in ballot.items()}

    def _check_delegate(self, source: str) -> None:
        if source not in self.delegates:
            raise UnknownParticipantError(f"Not a registered delegate: {source}")

    def get_id_by_name(self, name: str) -> str | None:
        for delegate_id, delegate_name in self.delegates.items():
            if delegate_name == name:
                return delegate_id
        return None

    def get_id_by_title(self, title: str) -> str | None:
        for option_id, option_title in self.options.items():
            if option_title == title:
                return option_id
        return None

    def delegate_names(self) -> set[str]:
        return set(self.delegates.values())

    def option_titles(self) -> set[str]:
        return set(self.options.values())

    def to_vote_data(self) -> "VoteData":
        """Strip labels and freeze the ballots for aggregation."""
        return VoteData(
            delegates=frozenset(self.delegates),
            options=frozenset(self.options),
            votes={source: dict(ballot) for source, ballot in self.votes.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "delegates": dict(self.delegates),
            "options": dict(self.options),
            "votes": {source: dict(ballot) for source, ballot in self.votes.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build a Topic from its JSON form.

        `policies` is accepted as an alias for `options`.
        """
        options = data.get("options", data.get("policies", {}))
        topic = cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            delegates={str(k): str(v) for k, v in data.get("delegates", {}).items()},
            options={str(k): str(v) for k, v in options.items()},
        )
        if "id" in data:
            topic.id = str(data["id"])
        for source, ballot in data.get("votes", {}).items():
            topic.overwrite_vote_for(str(source), ballot)
        return topic

    @classmethod
    def dummy(cls) -> Self:
        """A small fruit topic, handy for mocking up requests."""
        topic = cls("dummy", "which fruit")

        alice = topic.add_new_delegate("alice")
        bob = topic.add_new_delegate("bob")
        charlie = topic.add_new_delegate("charlie")

        apples = topic.add_new_option("apples")
        bananas = topic.add_new_option("bananas")
        topic.add_new_option("oranges")

        topic.cast_vote_to(alice, apples, 1.0)
        topic.cast_vote_to(bob, bananas, 1.0)
        topic.cast_vote_to(charlie, bananas, 1.0)

        return topic


def _update_with_id(hasher, participant_id: str) -> None:
    # Length prefix keeps ("ab", "c") and ("a", "bc") apart
    encoded = participant_id.encode()
    hasher.update(struct.pack(">I", len(encoded)))
    hasher.update(encoded)


@dataclass(frozen=True)
class VoteData:
    """Label-free view of a Topic, the only input aggregation methods see.

    Attributes:
        delegates: Ids allowed to cast (or delegate) a ballot
        options: Ids that can only receive votes
        votes: Dict mapping delegate_id -> {target_id -> weight}
    """
    delegates: frozenset[str]
    options: frozenset[str]
    votes: Mapping[str, Mapping[str, float]] = field(default_factory=dict)

    def normalized(self) -> Votes:
        """Return every ballot scaled to sum to 1 (zero-sum ballots unchanged)."""
        result = {}
        for source, ballot in self.votes.items():
            total = sum(ballot.values())
            if total == 0:
                result[source] = dict(ballot)
            else:
                result[source] = {to: w / total for to, w in ballot.items()}
        return result

    def only_option_voting(self) -> Votes:
        """Ballots with delegation entries removed."""
        return {
            source: {to: w for to, w in ballot.items() if to not in self.delegates}
            for source, ballot in self.votes.items()
        }

    def only_delegate_voting(self) -> Votes:
        """Ballots with direct votes for options removed."""
        return {
            source: {to: w for to, w in ballot.items() if to not in self.options}
            for source, ballot in self.votes.items()
        }

    def ranked_ballots(self) -> list[list[str]]:
        """Each delegate's positively weighted options, heaviest first.

        Ties in weight are ordered by id so the ranking is deterministic.
        Delegates without any option vote are left out.
        """
        ballots = []
        for source in sorted(self.votes):
            ballot = self.votes[source]
            ranked = sorted(
                (to for to, w in ballot.items() if to in self.options and w > 0),
                key=lambda to: (-ballot[to], to),
            )
            if ranked:
                ballots.append(ranked)
        return ballots

    def approval_ballots(self) -> list[list[str]]:
        return [sorted(ranked) for ranked in self.ranked_ballots()]

    def single_choices(self) -> list[str]:
        return [ranked[0] for ranked in self.ranked_ballots()]

    def hash(self) -> bytes:
        """SHA-256 over delegates, options and every (source, target, weight).

        Each part is hashed in sorted order, so two views with the same
        content hash identically regardless of insertion order.
        Every id is length-prefixed, so ids cannot run into one another.
        """
        delegates_hash = hashlib.sha256()
        for delegate in sorted(self.delegates):
            _update_with_id(delegates_hash, delegate)

        options_hash = hashlib.sha256()
        for option in sorted(self.options):
            _update_with_id(options_hash, option)

        votes_hash = hashlib.sha256()
        for source in sorted(self.votes):
            _update_with_id(votes_hash, source)
            ballot = self.votes[source]
            votes_hash.update(struct.pack(">I", len(ballot)))
            for target in sorted(ballot):
                _update_with_id(votes_hash, target)
                votes_hash.update(struct.pack(">d", ballot[target]))

        hasher = hashlib.sha256()
        hasher.update(delegates_hash.digest())
        hasher.update(options_hash.digest())
        hasher.update(votes_hash.digest())
        return hasher.digest()

    def request_id(self) -> str:
        return self.hash().hex()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary (sorted for stability)."""
        return {
            "delegates": sorted(self.delegates),
            "options": sorted(self.options),
            "votes": {
                source: {to: self.votes[source][to] for to in sorted(self.votes[source])}
                for source in sorted(self.votes)
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        options = data.get("options", data.get("policies", []))
        return cls(
            delegates=frozenset(str(d) for d in data.get("delegates", [])),
            options=frozenset(str(o) for o in options),
            votes={
                str(source): {str(to): float(w) for to, w in ballot.items()}
                for source, ballot in data.get("votes", {}).items()
            },
        )


@dataclass
class VotingResult:
    """Result from a voting system.

    Attributes:
        system_name: Human-readable name of the voting system
        scores: Option -> numeric score, for methods that score options
        winners: Successive winner sets, first round first; ties share a set
        influence: Delegate -> influence (liquid democracy only)
        details: System-specific details for transparency/debugging
    """
    system_name: str
    scores: dict[str, float] = field(default_factory=dict)
    winners: list[list[str]] = field(default_factory=list)
    influence: dict[str, float] = field(default_factory=dict)
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "system_name": self.system_name,
            "scores": self.scores,
            "winners": self.winners,
            "influence": self.influence,
            "details": self.details,
        }

    @staticmethod
    def top(scores: Mapping[str, float]) -> list[str]:
        """Sorted list of every option tied at the highest score."""
        if not scores:
            return []
        best = max(scores.values())
        return sorted(option for option, score in scores.items() if score == best)
