"""
Feed service facade.

Wires the synchronizer, the submission pipeline and the vote mutator to one
shared FeedState, one gateway and one notifier, so that all three agree on a
single current feed.
"""

from typing import Optional

from loguru import logger

from ..api.client import SupabaseGateway
from ..api.gateway import FactGateway, FactId, ProgressCallback
from ..config import Settings, get_settings
from ..models import Fact, FactDraft, FilterState
from ..utils.logging import setup_logging
from .feed_state import FeedState
from .feed_sync import FeedSynchronizer
from .notifications import LoggingNotifier, Notifier
from .submission import FactSubmissionPipeline, SubmissionResult
from .theme import JsonFileStore, ThemePreference
from .votes import VoteMutator


class FeedService:
    """Single entry point for the presentation layer."""

    def __init__(
        self,
        gateway: FactGateway,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
        theme: Optional[ThemePreference] = None,
    ):
        """
        Initialize the service.

        Args:
            gateway: Remote store gateway
            notifier: Sink for user-visible notifications
            settings: Settings to read limits and bucket names from
            theme: Optional theme preference, injected by the caller
        """
        self.settings = settings or get_settings()
        self.gateway = gateway
        self.notifier = notifier or LoggingNotifier()
        self.state = FeedState()
        self.theme = theme

        self.synchronizer = FeedSynchronizer(
            gateway, self.state, self.notifier, limit=self.settings.read_limit
        )
        self.submissions = FactSubmissionPipeline(
            gateway,
            self.state,
            self.notifier,
            bucket=self.settings.image_bucket,
            cache_control=self.settings.image_cache_control,
        )
        self.votes = VoteMutator(gateway, self.state, self.notifier)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        configure_logging: bool = True,
    ) -> "FeedService":
        """
        Build a service talking to Supabase, with a file-backed theme preference.

        Args:
            settings: Settings to build from (cached settings by default)
            notifier: Sink for user-visible notifications
            configure_logging: Install the engine's loguru sinks first
        """
        settings = settings or get_settings()
        if configure_logging:
            setup_logging(settings)

        problems = settings.validate_config()
        for problem in problems:
            logger.warning(f"Configuration problem: {problem}")

        gateway = SupabaseGateway(
            base_url=settings.supabase_url,
            api_key=settings.supabase_key,
            table=settings.facts_table,
            timeout=settings.request_timeout,
            chunk_size=settings.upload_chunk_size,
        )
        theme = ThemePreference(JsonFileStore(settings.theme_store_file), key=settings.theme_key)
        return cls(gateway, notifier=notifier, settings=settings, theme=theme)

    async def aclose(self) -> None:
        close = getattr(self.gateway, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "FeedService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def filter(self) -> FilterState:
        return self.synchronizer.current_filter

    async def load(self, filter_state: Optional[FilterState] = None) -> FeedState:
        return await self.synchronizer.sync(filter_state or self.filter)

    async def select_category(self, category: str) -> FeedState:
        return await self.synchronizer.set_category(category)

    async def search(self, search_text: str) -> FeedState:
        return await self.synchronizer.set_search(search_text)

    async def submit(
        self, draft: FactDraft, on_progress: Optional[ProgressCallback] = None
    ) -> SubmissionResult:
        return await self.submissions.submit(draft, on_progress=on_progress)

    async def vote(self, fact_id: FactId, counter: str) -> Fact:
        return await self.votes.vote(fact_id, counter)
