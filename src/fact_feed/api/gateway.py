"""Defines the FactGateway protocol for remote store backends."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

from ..models import Fact

FactId = Union[int, str]
ProgressCallback = Callable[[int], None]

DEFAULT_READ_LIMIT = 1000

# Characters with a meaning in PostgREST filter values
_RESERVED_PATTERN_CHARS = str.maketrans("", "", "*%,()")


def escape_pattern(term: str) -> str:
    """Strip characters that would change the meaning of an ilike filter."""
    return term.translate(_RESERVED_PATTERN_CHARS)


@dataclass(frozen=True)
class FactQuery:
    """
    A filtered, ordered, capped read of the facts table.

    The search term is stored with reserved pattern characters removed; a
    term left empty by that drops the text filter, so every gateway sees the
    same search.
    """

    category: Optional[str] = None
    text_contains: Optional[str] = None
    order_by: str = "votesInteresting"
    descending: bool = True
    limit: int = DEFAULT_READ_LIMIT

    def __post_init__(self):
        if self.text_contains is not None:
            object.__setattr__(self, "text_contains", escape_pattern(self.text_contains) or None)

    def matches(self, fact: Fact) -> bool:
        """True when fact satisfies the category and text filters."""
        if self.category is not None and fact.category != self.category:
            return False
        if self.text_contains is not None and self.text_contains.lower() not in fact.text.lower():
            return False
        return True


class FactGateway(Protocol):
    """
    A protocol that defines the interface for the remote fact store.

    Any implementation (Supabase over HTTP, an in-memory fake, ...) can be
    used interchangeably by the feed engine. Every method raises
    ``GatewayError`` on failure.
    """

    async def read_facts(self, query: FactQuery) -> List[Fact]:
        """Return the facts matching query, in query order."""
        ...

    async def insert_fact(
        self,
        text: str,
        source: str,
        category: str,
        image_url: str = "",
        votes_interesting: int = 0,
        votes_mindblowing: int = 0,
        votes_false: int = 0,
    ) -> Fact:
        """Insert a new row and return it as stored."""
        ...

    async def update_fact(self, fact_id: FactId, patch: Dict[str, Any]) -> Fact:
        """Apply patch (wire column names) to one row and return the stored row."""
        ...

    async def upload_blob(
        self,
        container: str,
        object_name: str,
        content: bytes,
        cache_control: str = "3600",
        overwrite: bool = False,
        content_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        """Upload content to a blob container."""
        ...

    def get_public_url(self, container: str, object_name: str) -> str:
        """Return the public URL of an uploaded object."""
        ...
