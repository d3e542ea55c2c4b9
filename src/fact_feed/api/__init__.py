"""Remote store gateways for the fact feed."""

from .client import SupabaseGateway
from .gateway import DEFAULT_READ_LIMIT, FactGateway, FactId, FactQuery, ProgressCallback, escape_pattern

__all__ = [
    "DEFAULT_READ_LIMIT",
    "FactGateway",
    "FactId",
    "FactQuery",
    "ProgressCallback",
    "SupabaseGateway",
    "escape_pattern",
]
