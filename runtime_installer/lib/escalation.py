from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from ..errors import InstallerError
from .command import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    label: str
    action: Callable[[], None]


class EscalationExhausted(InstallerError):
    """Every strategy failed. ``attempts`` holds (label, error) in order."""

    def __init__(self, attempts: Sequence[Tuple[str, Exception]]):
        self.attempts: List[Tuple[str, Exception]] = list(attempts)
        labels = ", ".join(label for label, _ in self.attempts)
        super().__init__(f"All {len(self.attempts)} install strategies failed ({labels})")


def escalate(strategies: Sequence[Strategy]) -> str:
    """Try strategies in order and return the label of the first that succeeds.

    Each strategy differs in approach, not timing: there is no delay between
    attempts. Only CommandError moves on to the next strategy; anything else
    propagates immediately.
    """

    if not strategies:
        raise ValueError("escalate() needs at least one strategy")

    attempts: List[Tuple[str, Exception]] = []
    last: CommandError | None = None
    for i, strategy in enumerate(strategies, start=1):
        logger.info("Attempt %d/%d: %s", i, len(strategies), strategy.label)
        try:
            strategy.action()
        except CommandError as e:
            logger.warning("Attempt %d (%s) failed: %s", i, strategy.label, e)
            attempts.append((strategy.label, e))
            last = e
            continue
        return strategy.label

    raise EscalationExhausted(attempts) from last
