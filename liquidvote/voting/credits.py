"""Per-ballot credit transforms shared by fractional and liquid voting.

Order matters: when both are enabled, a ballot is normalized first and
square-rooted second.
"""

import math
from collections.abc import Mapping

from liquidvote.models import Ballot, InvalidBallotError


def normalize_ballot(ballot: Mapping[str, float]) -> Ballot:
    """Scale credits so they sum to 1. A zero-sum ballot is returned as is."""
    total = sum(ballot.values())
    if total == 0:
        return dict(ballot)
    return {to: credit / total for to, credit in ballot.items()}


def square_root_ballot(ballot: Mapping[str, float]) -> Ballot:
    """Turn spent credits into quadratic-voting vote counts.

    Negative credits have no real root and become NaN.
    """
    return {
        to: math.sqrt(credit) if credit >= 0 else math.nan
        for to, credit in ballot.items()
    }


def check_ballot(source: str, ballot: Mapping[str, float]) -> None:
    for to, credit in ballot.items():
        if credit < 0:
            raise InvalidBallotError(
                f"Negative weight {credit} from {source} to {to}"
            )


def transform_ballot(
    ballot: Mapping[str, float],
    normalize: bool = False,
    quadratic: bool = False,
) -> Ballot:
    votes = dict(ballot)
    if normalize:
        votes = normalize_ballot(votes)
    if quadratic:
        votes = square_root_ballot(votes)
    return votes
