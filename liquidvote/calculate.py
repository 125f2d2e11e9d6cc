"""Orchestrator: dispatch vote data to the registered voting systems."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from liquidvote.models import VoteData, VotingResult
from liquidvote.voting import get_all_voting_systems, get_voting_system
from liquidvote.voting.base import VotingSystem

# Import voting systems to register them
from liquidvote.voting import approval  # noqa: F401
from liquidvote.voting import borda  # noqa: F401
from liquidvote.voting import fractional  # noqa: F401
from liquidvote.voting import liquid  # noqa: F401
from liquidvote.voting import plurality  # noqa: F401
from liquidvote.voting import rcv  # noqa: F401

logger = logging.getLogger(__name__)


class CalculationError(Exception):
    """Error while preparing or running a calculation request."""
    pass


class MethodNotFoundError(CalculationError):
    """No voting system is registered under the requested method name."""
    pass


def select_flags(keys: Iterable[str], params: Mapping[str, Any]) -> dict[str, bool]:
    """Pick the given boolean flags out of params, skipping missing or null ones.

    Raises:
        CalculationError: If a flag is present but not a JSON boolean
    """
    flags = {}
    for key in keys:
        value = params.get(key)
        if value is None:
            continue
        if not isinstance(value, bool):
            raise CalculationError(f"{key} must be true or false, got {value!r}")
        flags[key] = value
    return flags


def build_system(
    system_class: type[VotingSystem], data: VoteData, params: Mapping[str, Any]
) -> VotingSystem:
    """Instantiate a voting system, passing on only the flags it understands."""
    options = select_flags(system_class.accepted_options, params)
    return system_class.from_vote_data(data, **options)


def calculate(method: str, params: Mapping[str, Any]) -> VotingResult:
    """Run the voting system registered as `method` on a JSON-style payload.

    Args:
        method: Registered method name, e.g. "liquid" or "frac"
        params: VoteData dict (delegates, options, votes) plus optional
            `normalize`, `quadratic` and `strict` flags

    Returns:
        VotingResult of the selected system

    Raises:
        MethodNotFoundError: If no system is registered under `method`
        ValueError / KeyError: If the ballots are invalid for that system
    """
    system_class = get_voting_system(method)
    if system_class is None:
        raise MethodNotFoundError("method not found")

    data = VoteData.from_dict(params)
    logger.debug("calculating %s for request %s", method, data.request_id())
    return build_system(system_class, data, params).evaluate()


async def calculate_async(method: str, params: Mapping[str, Any]) -> VotingResult:
    """Same as calculate(), run in a worker thread.

    Liquid democracy runs thousands of matrix multiplications; this keeps
    them off the event loop.
    """
    return await asyncio.to_thread(calculate, method, params)


def calculate_all(data: VoteData, **params: Any) -> list[VotingResult]:
    """Run every registered voting system on the same vote data.

    A system that fails gets a result carrying the error instead of
    failing the whole run. Malformed flags fail the run up front.
    """
    systems = get_all_voting_systems()
    select_flags({key for s in systems for key in s.accepted_options}, params)

    results = []
    for system_class in systems:
        system = build_system(system_class, data, params)
        try:
            results.append(system.evaluate())
        except Exception as e:
            logger.warning("%s failed: %s", system.name, e)
            results.append(VotingResult(
                system_name=system.name,
                details={"error": str(e)},
            ))
    return results
