"""
Vote mutator.

Each vote sends ``counter = current + 1`` for one fact, where current comes
from the feed's copy of that fact, and merges the row echoed back by the
store. Nothing changes locally until the store confirms. Two votes issued on
the same fact and counter from the same stale copy both send the same value
and the store ends up one behind; that lost update is accepted.
"""

from collections import Counter
from typing import Optional

from loguru import logger

from ..api.gateway import FactGateway, FactId
from ..errors import ErrorKind, FactValidationError, GatewayError, WriteError
from ..models import VOTE_COUNTERS, Fact, counter_attribute
from .feed_state import FeedState
from .notifications import VOTE_FAILED_MESSAGE, LoggingNotifier, Notification, Notifier


class VoteMutator:
    """Per-fact, per-counter confirmed increments."""

    def __init__(
        self,
        gateway: FactGateway,
        state: FeedState,
        notifier: Optional[Notifier] = None,
    ):
        self.gateway = gateway
        self.state = state
        self.notifier = notifier or LoggingNotifier()
        self._updating: Counter = Counter()

    def is_updating(self, fact_id: FactId) -> bool:
        """True while a vote on fact_id is waiting for the store."""
        return self._updating[fact_id] > 0

    async def vote(self, fact_id: FactId, counter: str) -> Fact:
        """
        Increment one counter of one fact.

        Args:
            fact_id: Identifier of a fact currently in the feed
            counter: votesInteresting, votesMindblowing or votesFalse
                (snake_case names are accepted too)

        Returns:
            The fact as confirmed by the store

        Raises:
            FactValidationError: Unknown counter or fact not in the feed
            WriteError: If the update failed (the feed is left untouched)
        """
        attr = counter_attribute(counter)
        column = VOTE_COUNTERS[attr]

        fact = self.state.get(fact_id)
        if fact is None:
            raise FactValidationError(f"Fact {fact_id} is not in the feed")

        new_value = getattr(fact, attr) + 1
        self._updating[fact_id] += 1
        try:
            confirmed = await self.gateway.update_fact(fact_id, {column: new_value})
        except GatewayError as e:
            logger.error(f"Error voting {column} on fact {fact_id}: {e}")
            self.notifier.notify(Notification(VOTE_FAILED_MESSAGE, ErrorKind.WRITE))
            raise WriteError(f"Failed to vote on fact {fact_id}: {e}") from e
        finally:
            self._updating[fact_id] -= 1
            if self._updating[fact_id] <= 0:
                del self._updating[fact_id]

        if not self.state.replace_by_id(confirmed):
            logger.debug(f"Fact {fact_id} left the feed before its vote was confirmed")
        return confirmed
