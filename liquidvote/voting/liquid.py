"""Liquid democracy: delegation resolved by matrix power iteration.

Delegates and options are laid out as states of a chain. Column j of the
transition matrix M is delegate j's ballot; options are absorbing, keeping
everything they receive. Starting from one unit of weight per delegate,
A_k = M^k tells where that weight sits after k rounds of delegation and
S = I + A_1 + ... + A_N how much passed through each delegate along the way.

This is a bounded approximation of the chain's limit, not a fixed-point
solve. Weight caught in a delegation cycle that never reaches an option is
never settled, so option scores undercount it. A cycle whose ballots give
away more than all their weight overflows instead. By default either case
is only logged; `strict=True` raises NonAbsorbingDelegationError instead.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Self

import numpy as np

from liquidvote.models import InvalidBallotError, UnknownParticipantError, VoteData, VotingResult
from liquidvote.voting import register_voting_system
from liquidvote.voting.base import VotingSystem
from liquidvote.voting.credits import check_ballot, transform_ballot

logger = logging.getLogger(__name__)

ITERATIONS = 10_000

# Weight still held by delegates after the last iteration above this
# threshold is reported as unsettled
UNSETTLED_TOLERANCE = 1e-6

Voters = Mapping[str, Mapping[str, float]]


class NonAbsorbingDelegationError(ValueError):
    """Raised in strict mode when delegated weight never settles on an option."""
    pass


@dataclass
class DelegationOutcome:
    """Everything the power iteration produces.

    Attributes:
        scores: Option -> weight settled there after the last iteration
        influence: Delegate -> row sum of S over its own diagonal entry
        unsettled: Weight still held by delegates after the last iteration
        iterations: Number of multiplications actually run
    """
    scores: dict[str, float]
    influence: dict[str, float]
    unsettled: float
    iterations: int


@register_voting_system
class LiquidDemocracy(VotingSystem):
    """Liquid democracy with transitive, possibly cyclic, delegation.

    Args:
        voters: Dict mapping delegate -> {target -> weight}; a target may be
            another delegate (delegation) or an option (direct vote)
        delegates: Delegate ids; defaults to the ballot owners
        options: Option ids; defaults to every target that is not a delegate
        normalize: Scale each ballot to sum to 1 before building the matrix
        quadratic: Square-root each weight (after normalizing)
        strict: Reject negative or self-targeted weights and unsettled weight
        iterations: Number of multiplications by M
        tolerance: If set, stop as soon as no entry of A changes by more
            than this. Influence then differs from the fixed-budget result,
            since S holds fewer terms.
    """

    method = "liquid"
    accepted_options = ("normalize", "quadratic", "strict")

    def __init__(
        self,
        voters: Voters,
        delegates: Iterable[str] | None = None,
        options: Iterable[str] | None = None,
        normalize: bool = False,
        quadratic: bool = False,
        strict: bool = False,
        iterations: int = ITERATIONS,
        tolerance: float | None = None,
    ):
        self.voters = {source: dict(ballot) for source, ballot in voters.items()}
        self.delegates = None if delegates is None else set(delegates)
        self.options = None if options is None else set(options)
        self.normalize = normalize
        self.quadratic = quadratic
        self.strict = strict
        self.iterations = iterations
        self.tolerance = tolerance

    @property
    def name(self) -> str:
        return "Liquid Democracy"

    @property
    def description(self) -> str:
        return "Delegates vote directly or pass weight on to other delegates"

    @classmethod
    def from_vote_data(cls, data: VoteData, **options: Any) -> Self:
        return cls(data.votes, delegates=data.delegates, options=data.options, **options)

    def prepare_lists(self) -> tuple[list[str], list[str]]:
        """Return (delegates, options) in matrix order."""
        if self.delegates is None:
            delegates = set(self.voters)
        else:
            delegates = self.delegates
        if self.options is None:
            targets = {to for ballot in self.voters.values() for to in ballot}
            options = targets - delegates
        else:
            options = self.options
        return sorted(delegates), sorted(options)

    def create_matrix(self) -> tuple[tuple[list[str], list[str]], np.ndarray]:
        """Build the n x n transition matrix, delegates first.

        Column j (delegate j) holds that delegate's transformed ballot. The
        bottom-right options block is the identity and the top-right block is
        zero, since options never pass weight on.
        """
        delegates, options = self.prepare_lists()
        d, p = len(delegates), len(options)
        position = {delegate: i for i, delegate in enumerate(delegates)}
        position.update({option: d + i for i, option in enumerate(options)})

        d_to_all = np.zeros((d + p, d))
        for x, delegate in enumerate(delegates):
            ballot = self.voters.get(delegate, {})
            if self.strict:
                self._check_ballot(delegate, ballot)
            votes = transform_ballot(ballot, self.normalize, self.quadratic)

            for to, weight in votes.items():
                if to not in position:
                    raise UnknownParticipantError(
                        f"{delegate} votes for {to}, which is neither a delegate nor an option"
                    )
                d_to_all[position[to], x] = weight

        o_to_d = np.zeros((d, p))
        o_to_o = np.eye(p)
        matrix = np.hstack([d_to_all, np.vstack([o_to_d, o_to_o])])

        logger.debug("transition matrix for %d delegates, %d options:\n%s", d, p, matrix)
        return (delegates, options), matrix

    @staticmethod
    def _check_ballot(delegate: str, ballot: Mapping[str, float]) -> None:
        check_ballot(delegate, ballot)
        if ballot.get(delegate, 0) != 0:
            raise InvalidBallotError(f"{delegate} delegates to themselves")

    def resolve(self) -> DelegationOutcome:
        (delegates, options), matrix = self.create_matrix()
        d = len(delegates)

        edge = matrix.shape[0]
        a = np.eye(edge)
        total = np.eye(edge)

        iterations = 0
        # Overflow is reported below as divergence
        with np.errstate(over="ignore", invalid="ignore"):
            for _ in range(self.iterations):
                following = a @ matrix
                total += following
                iterations += 1
                converged = (
                    self.tolerance is not None
                    and np.abs(following - a).max(initial=0.0) < self.tolerance
                )
                a = following
                if converged:
                    logger.debug("converged after %d iterations", iterations)
                    break

        if not (np.isfinite(a).all() and np.isfinite(total).all()):
            if self.strict:
                raise NonAbsorbingDelegationError(
                    f"delegated weight diverged within {iterations} iterations"
                )
            logger.warning("delegated weight diverged within %d iterations", iterations)

        settled = a[:, :d].sum(axis=1)[d:]
        scores = {option: float(v) for option, v in zip(options, settled)}

        block = total[:d, :d]
        with np.errstate(invalid="ignore"):
            influence_values = block.sum(axis=1) / np.diag(block)
        influence = {delegate: float(v) for delegate, v in zip(delegates, influence_values)}

        unsettled = float(a[:d, :d].sum())
        if abs(unsettled) > UNSETTLED_TOLERANCE:
            if self.strict:
                raise NonAbsorbingDelegationError(
                    f"{unsettled:g} weight never reached an option after {iterations} iterations"
                )
            logger.warning(
                "%g weight still held by delegates after %d iterations",
                unsettled, iterations,
            )

        return DelegationOutcome(
            scores=scores,
            influence=influence,
            unsettled=unsettled,
            iterations=iterations,
        )

    def calculate(self) -> tuple[dict[str, float], dict[str, float]]:
        """Return (option scores, delegate influence)."""
        outcome = self.resolve()
        return outcome.scores, outcome.influence

    def evaluate(self) -> VotingResult:
        outcome = self.resolve()
        winners = VotingResult.top(outcome.scores)
        return VotingResult(
            system_name=self.name,
            scores=outcome.scores,
            winners=[winners] if winners else [],
            influence=outcome.influence,
            details={
                "normalize": self.normalize,
                "quadratic": self.quadratic,
                "iterations": outcome.iterations,
                "unsettled": outcome.unsettled,
            },
        )
