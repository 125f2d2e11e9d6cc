"""Voting systems for aggregating ballots."""

from .base import VotingSystem

# Voting system registry - import systems here to register them
_voting_systems: dict[str, type[VotingSystem]] = {}


def register_voting_system(system_class: type[VotingSystem]) -> type[VotingSystem]:
    """Decorator to register a voting system class under its RPC method name."""
    _voting_systems[system_class.method] = system_class
    return system_class


def get_voting_system(method: str) -> type[VotingSystem] | None:
    """Return the voting system class registered for `method`, if any."""
    return _voting_systems.get(method)


def get_all_voting_systems() -> list[type[VotingSystem]]:
    """Return all registered voting system classes."""
    return list(_voting_systems.values())
