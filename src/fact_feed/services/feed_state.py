"""
The single owned feed list.

FeedState is the only mutable shared resource in the engine. It is changed
through exactly three operations (replace_all, prepend, replace_by_id). None
of them awaits, so on one event loop they never interleave.
"""

from typing import Iterable, Iterator, Optional, Tuple

from loguru import logger

from ..api.gateway import FactId
from ..errors import ErrorKind
from ..models import Fact

EMPTY_FEED_MESSAGE = "Currently there's no facts for this category yet! Create the first one!"


class FeedState:
    """Ordered facts plus loading and error flags."""

    def __init__(self, facts: Iterable[Fact] = ()):
        self._facts: Tuple[Fact, ...] = ()
        self.loading: bool = False
        self.last_error: Optional[ErrorKind] = None
        self.replace_all(facts)

    @property
    def facts(self) -> Tuple[Fact, ...]:
        return self._facts

    def __len__(self) -> int:
        return len(self._facts)

    def __iter__(self) -> Iterator[Fact]:
        return iter(self._facts)

    def __contains__(self, fact_id: object) -> bool:
        return any(f.id == fact_id for f in self._facts)

    def get(self, fact_id: FactId) -> Optional[Fact]:
        for fact in self._facts:
            if fact.id == fact_id:
                return fact
        return None

    def replace_all(self, facts: Iterable[Fact]) -> None:
        """Replace the whole list, keeping the first occurrence of each id."""
        seen = set()
        unique = []
        for fact in facts:
            if fact.id in seen:
                logger.warning(f"Dropping duplicate fact id {fact.id} from feed result")
                continue
            seen.add(fact.id)
            unique.append(fact)
        self._facts = tuple(unique)

    def prepend(self, fact: Fact) -> None:
        """Put fact at the front; an existing entry with the same id is removed."""
        self._facts = (fact,) + tuple(f for f in self._facts if f.id != fact.id)

    def replace_by_id(self, fact: Fact) -> bool:
        """
        Replace the entry with fact's id.

        Returns:
            False if no entry had that id (the feed is left unchanged)
        """
        if fact.id not in self:
            return False
        self._facts = tuple(fact if f.id == fact.id else f for f in self._facts)
        return True

    def summary(self) -> str:
        if not self._facts:
            return EMPTY_FEED_MESSAGE
        return f"There are {len(self._facts)} facts in the database. Add your own!"
