"""
Fact, filter and draft models.

Facts travel over the wire with camelCase column names (``votesInteresting``)
and are exposed to Python code with snake_case attributes. Both spellings are
accepted when building a model.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from ..errors import FactValidationError

MAX_TEXT_LENGTH = 200
ALL_CATEGORIES = "all"

# Wire name of every vote counter column, keyed by its Python attribute name
VOTE_COUNTERS = {
    "votes_interesting": "votesInteresting",
    "votes_mindblowing": "votesMindblowing",
    "votes_false": "votesFalse",
}


class Category(str, Enum):
    """The closed set of fact categories, with their display colours."""

    TECHNOLOGY = "technology"
    SCIENCE = "science"
    FINANCE = "finance"
    SOCIETY = "society"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    HISTORY = "history"
    NEWS = "news"

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS[self]

    @classmethod
    def names(cls) -> List[str]:
        return [c.value for c in cls]


_CATEGORY_COLORS = {
    Category.TECHNOLOGY: "#3b82f6",
    Category.SCIENCE: "#16a34a",
    Category.FINANCE: "#ef4444",
    Category.SOCIETY: "#eab308",
    Category.ENTERTAINMENT: "#db2777",
    Category.HEALTH: "#14b8a6",
    Category.HISTORY: "#f97316",
    Category.NEWS: "#8b5cf6",
}


def category_color(name: str) -> Optional[str]:
    """Return the display colour for a category name, or None if unknown."""
    try:
        return Category(name).color
    except ValueError:
        return None


def is_valid_http_url(value: str) -> bool:
    """True when value parses as an absolute http or https URL."""
    try:
        parsed = urlparse(value)
    except (TypeError, ValueError):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class Fact(BaseModel):
    """A single fact row as confirmed by the remote store."""

    id: Union[int, str]
    text: str
    source: str
    category: str
    image_url: str = Field(default="", alias="imageUrl")
    votes_interesting: int = Field(default=0, ge=0, alias="votesInteresting")
    votes_mindblowing: int = Field(default=0, ge=0, alias="votesMindblowing")
    votes_false: int = Field(default=0, ge=0, alias="votesFalse")
    created_at: Optional[datetime] = None

    model_config = {"populate_by_name": True, "frozen": True, "extra": "ignore"}

    @field_validator("image_url", mode="before")
    @classmethod
    def _empty_image_url(cls, v):
        return v or ""

    @property
    def is_disputed(self) -> bool:
        return self.votes_interesting < self.votes_false

    @property
    def has_image(self) -> bool:
        return self.image_url != ""

    def counter(self, name: str) -> int:
        """Current value of a vote counter, by wire or attribute name."""
        attr = counter_attribute(name)
        return getattr(self, attr)

    def to_row(self) -> dict:
        """Serialize with wire (camelCase) column names."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def counter_attribute(name: str) -> str:
    """Normalize a vote counter name to its attribute name.

    Raises:
        FactValidationError: If name is not a vote counter
    """
    if name in VOTE_COUNTERS:
        return name
    for attr, wire in VOTE_COUNTERS.items():
        if wire == name:
            return attr
    raise FactValidationError(f"Unknown vote counter: {name!r}")


@dataclass(frozen=True)
class FilterState:
    """Active category selector and search text. Both apply at once."""

    category: str = ALL_CATEGORIES
    search_text: str = ""

    def __post_init__(self):
        if self.category != ALL_CATEGORIES and self.category not in Category.names():
            raise FactValidationError(f"Unknown category: {self.category!r}")
        object.__setattr__(self, "search_text", (self.search_text or "").strip())

    @property
    def category_filter(self) -> Optional[str]:
        return None if self.category == ALL_CATEGORIES else self.category

    @property
    def text_filter(self) -> Optional[str]:
        return self.search_text or None

    def with_category(self, category: str) -> "FilterState":
        return replace(self, category=category)

    def with_search(self, search_text: str) -> "FilterState":
        return replace(self, search_text=search_text)


@dataclass(frozen=True)
class ImageFile:
    """An image picked by the user to attach to a new fact."""

    filename: str
    content: bytes = field(repr=False)
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FactDraft:
    """User input for a new fact, before it is sent anywhere."""

    text: str = ""
    source: str = ""
    category: str = ""
    image: Optional[ImageFile] = None

    @property
    def remaining_characters(self) -> int:
        return MAX_TEXT_LENGTH - len(self.text)

    def validate(self) -> List[str]:
        """
        Validate the draft and return a list of validation errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.text:
            errors.append("text must not be empty")
        elif len(self.text) > MAX_TEXT_LENGTH:
            errors.append(f"text must be at most {MAX_TEXT_LENGTH} characters (got {len(self.text)})")

        if not is_valid_http_url(self.source):
            errors.append("source must be an absolute http or https URL")

        if self.category not in Category.names():
            errors.append(f"category must be one of: {', '.join(Category.names())}")

        return errors
