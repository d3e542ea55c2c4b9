"""
Feed synchronizer.

Turns the active FilterState into a read against the gateway and replaces the
feed with the result. Reads can overlap when filters change faster than the
network answers; only the most recently issued read is ever applied. Older
results are dropped when they arrive (staleness discard, not cancellation).
"""

from typing import Optional

from loguru import logger

from ..api.gateway import DEFAULT_READ_LIMIT, FactGateway, FactQuery
from ..errors import ErrorKind, GatewayError, ReadError
from ..models import FilterState
from .feed_state import FeedState
from .notifications import READ_FAILED_MESSAGE, LoggingNotifier, Notification, Notifier


def build_read_request(filter_state: FilterState, limit: int = DEFAULT_READ_LIMIT) -> FactQuery:
    """
    Build the read request for a filter.

    The category equality filter is omitted for "all" and the text filter is
    omitted for an empty search. Results are ordered by votesInteresting,
    highest first.
    """
    return FactQuery(
        category=filter_state.category_filter,
        text_contains=filter_state.text_filter,
        order_by="votesInteresting",
        descending=True,
        limit=limit,
    )


class FeedSynchronizer:
    """Keeps a FeedState in line with the latest filter."""

    def __init__(
        self,
        gateway: FactGateway,
        state: FeedState,
        notifier: Optional[Notifier] = None,
        limit: int = DEFAULT_READ_LIMIT,
        initial_filter: Optional[FilterState] = None,
    ):
        self.gateway = gateway
        self.state = state
        self.notifier = notifier or LoggingNotifier()
        self.limit = limit
        self.current_filter = initial_filter or FilterState()
        self.last_failure: Optional[ReadError] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of reads issued so far."""
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def sync(self, filter_state: FilterState) -> FeedState:
        """
        Fetch the facts for filter_state and, unless superseded, replace the feed.

        Args:
            filter_state: Filter the read is built from

        Returns:
            The shared FeedState (unchanged if this read was superseded)
        """
        self._generation += 1
        generation = self._generation
        self.current_filter = filter_state
        self.state.loading = True

        query = build_read_request(filter_state, self.limit)
        logger.debug(f"Issuing read #{generation}: {query}")

        try:
            facts = await self.gateway.read_facts(query)
        except GatewayError as e:
            if not self.is_current(generation):
                logger.debug(f"Discarding failure of superseded read #{generation}: {e}")
                return self.state
            logger.error(f"Error fetching facts: {e}")
            self.state.last_error = ErrorKind.READ
            self.last_failure = ReadError(f"Failed to fetch facts: {e}")
            self.notifier.notify(Notification(READ_FAILED_MESSAGE, ErrorKind.READ))
        else:
            if not self.is_current(generation):
                logger.debug(f"Discarding stale result of read #{generation} ({len(facts)} facts)")
                return self.state
            self.state.replace_all(facts)
            self.state.last_error = None
            self.last_failure = None
            logger.info(f"Fetched {len(facts)} facts for {filter_state}")
        finally:
            if self.is_current(generation):
                self.state.loading = False

        return self.state

    async def refresh(self) -> FeedState:
        """Re-issue the read for the current filter."""
        return await self.sync(self.current_filter)

    async def set_filter(self, filter_state: FilterState) -> FeedState:
        """Sync only when filter_state differs from the current filter."""
        if filter_state == self.current_filter and self._generation > 0:
            return self.state
        return await self.sync(filter_state)

    async def set_category(self, category: str) -> FeedState:
        return await self.set_filter(self.current_filter.with_category(category))

    async def set_search(self, search_text: str) -> FeedState:
        return await self.set_filter(self.current_filter.with_search(search_text))
