"""
Strike Policy - Decides how each recorded violation escalates
"""

import logging
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrikeDecision:
    """Outcome of evaluating the strike count after a violation"""
    disqualify: bool
    level: str
    message: str
    duration_ms: int


class StrikePolicy:
    """
    Strike threshold policy for a quiz session.

    Every violation is one strike. Strikes below `max_strikes` produce a
    warning notice; reaching `max_strikes` disqualifies the attempt.
    A policy is one fixed configuration; the monitor runs exactly one.
    """

    DISQUALIFIED_MESSAGE = "You have been disqualified due to violations!"
    DISQUALIFIED_DURATION_MS = 5000

    def __init__(
        self,
        name: str,
        max_strikes: int,
        reason: str,
        warnings: Dict[int, str] = None
    ):
        """
        Args:
            name: Policy identifier used in configuration
            max_strikes: Strike count at which the attempt is disqualified
            reason: Disqualification reason shown to the user
            warnings: Optional warning text per strike number
        """
        if max_strikes < 1:
            raise ValueError(f"max_strikes must be >= 1, got {max_strikes}")

        self.name = name
        self.max_strikes = max_strikes
        self.reason = reason
        self.warnings = dict(warnings or {})

    def evaluate(self, strike_count: int) -> StrikeDecision:
        """
        Evaluate the policy for the current strike count.

        Args:
            strike_count: Number of strikes recorded so far (>= 1)

        Returns:
            StrikeDecision describing the notice and whether to disqualify
        """
        if strike_count >= self.max_strikes:
            logger.info(f"Policy {self.name}: strike {strike_count} reached limit {self.max_strikes}")
            return StrikeDecision(
                disqualify=True,
                level="error",
                message=self.DISQUALIFIED_MESSAGE,
                duration_ms=self.DISQUALIFIED_DURATION_MS
            )

        remaining = self.max_strikes - strike_count
        message = self.warnings.get(strike_count)
        if message is None:
            message = f"Warning {strike_count}: {remaining} more violation(s) = ZERO score!"

        # The last warning before disqualification stays on screen longer
        duration_ms = 4000 if remaining == 1 else 3000

        return StrikeDecision(
            disqualify=False,
            level="warning",
            message=message,
            duration_ms=duration_ms
        )

    def __repr__(self):
        return f"<StrikePolicy {self.name} max_strikes={self.max_strikes}>"


THREE_STRIKE_POLICY = StrikePolicy(
    name="three_strike",
    max_strikes=3,
    reason="Three security violations (3 strikes rule)",
    warnings={
        1: "1st Warning: Do not leave the test!",
        2: "2nd Warning: One more violation = ZERO score!",
    }
)

ZERO_TOLERANCE_POLICY = StrikePolicy(
    name="zero_tolerance",
    max_strikes=1,
    reason="Security violation (zero tolerance rule)"
)

POLICIES: Dict[str, StrikePolicy] = {
    THREE_STRIKE_POLICY.name: THREE_STRIKE_POLICY,
    ZERO_TOLERANCE_POLICY.name: ZERO_TOLERANCE_POLICY,
}


def get_policy(name: str) -> StrikePolicy:
    """Look up a configured policy by name."""
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown strike policy '{name}', expected one of {sorted(POLICIES)}"
        ) from None
