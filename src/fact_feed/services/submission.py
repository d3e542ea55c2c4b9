"""
Fact submission pipeline.

A submission is a two-phase write:

1. Record phase - insert the fact row with no image and zeroed counters. A
   failure here fails the whole submission and leaves the feed untouched.
2. Image phase - only when an image was supplied: upload it, resolve its
   public URL and patch the row's imageUrl. A failure here is a warning; the
   row from phase 1 stays, with an empty imageUrl. Phase 1 is never rolled
   back.

The resulting fact is prepended to the feed whatever the active filter is, so
users always see what they just posted.
"""

import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from loguru import logger

from ..api.gateway import FactGateway, ProgressCallback
from ..errors import ErrorKind, FactValidationError, GatewayError, UploadError, WriteError
from ..models import Fact, FactDraft, ImageFile
from .feed_state import FeedState
from .notifications import (
    IMAGE_FAILED_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
    LoggingNotifier,
    Notification,
    Notifier,
)

DEFAULT_IMAGE_BUCKET = "fact-images"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class SubmissionStage(str, Enum):
    """Where a submission is in its two-phase write."""

    RECORD_PENDING = "record_pending"
    RECORD_CREATED = "record_created"
    IMAGE_PENDING = "image_pending"
    IMAGE_ATTACHED = "image_attached"
    IMAGE_FAILED = "image_failed"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a successful or partially successful submission."""

    fact: Fact
    stage: SubmissionStage
    warning: Optional[UploadError] = None

    @property
    def partial(self) -> bool:
        return self.warning is not None


def sanitize_filename(filename: str) -> str:
    """Keep only [A-Za-z0-9._-] from the base name; never return an empty name."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", base).strip("._")
    return cleaned or "image"


def build_object_name(fact_id, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Storage object name for a fact image: ``{id}-{timestamp_ms}-{filename}``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{fact_id}-{timestamp_ms}-{sanitize_filename(filename)}"


class FactSubmissionPipeline:
    """
    Validates drafts and runs the two-phase write for each one.

    Submissions may overlap. ``in_flight`` stays true until every one of them
    has settled; ``stage`` and ``progress`` follow the most recently started
    submission only.
    """

    def __init__(
        self,
        gateway: FactGateway,
        state: FeedState,
        notifier: Optional[Notifier] = None,
        bucket: str = DEFAULT_IMAGE_BUCKET,
        cache_control: str = "3600",
        clock: Callable[[], float] = time.time,
    ):
        self.gateway = gateway
        self.state = state
        self.notifier = notifier or LoggingNotifier()
        self.bucket = bucket
        self.cache_control = cache_control
        self.clock = clock

        self.stage: Optional[SubmissionStage] = None
        self.progress: int = 0
        self._in_flight = 0
        self._latest = 0

    @property
    def in_flight(self) -> bool:
        """True while any submission is waiting for the store."""
        return self._in_flight > 0

    def _is_latest(self, ticket: int) -> bool:
        return ticket == self._latest

    def _set_stage(self, ticket: int, stage: SubmissionStage) -> SubmissionStage:
        if self._is_latest(ticket):
            self.stage = stage
        return stage

    def _progress_reporter(self, ticket: int, on_progress: Optional[ProgressCallback]) -> ProgressCallback:
        def report(value: int) -> None:
            value = max(0, min(100, value))
            if self._is_latest(ticket):
                self.progress = value
            if on_progress:
                on_progress(value)
        return report

    async def submit(
        self, draft: FactDraft, on_progress: Optional[ProgressCallback] = None
    ) -> SubmissionResult:
        """
        Validate and store a draft, then prepend the stored fact to the feed.

        Args:
            draft: The user's input
            on_progress: Optional callback receiving image upload progress (0-100)

        Returns:
            SubmissionResult with the fact as merged into the feed

        Raises:
            FactValidationError: If the draft is invalid (no remote call made)
            WriteError: If the record could not be inserted
        """
        errors = draft.validate()
        if errors:
            raise FactValidationError("; ".join(errors), errors)

        self._latest += 1
        ticket = self._latest
        self._in_flight += 1
        self.progress = 0
        report = self._progress_reporter(ticket, on_progress)
        try:
            fact = await self._create_record(ticket, draft)
            stage = SubmissionStage.RECORD_CREATED

            warning = None
            if draft.image is not None:
                fact, stage, warning = await self._attach_image(ticket, fact, draft.image, report)

            self.state.prepend(fact)
            logger.info(f"Submitted fact {fact.id} ({stage.value})")
            return SubmissionResult(fact=fact, stage=stage, warning=warning)
        finally:
            self._in_flight -= 1

    async def _create_record(self, ticket: int, draft: FactDraft) -> Fact:
        self._set_stage(ticket, SubmissionStage.RECORD_PENDING)
        try:
            fact = await self.gateway.insert_fact(
                text=draft.text,
                source=draft.source,
                category=draft.category,
                image_url="",
                votes_interesting=0,
                votes_mindblowing=0,
                votes_false=0,
            )
        except GatewayError as e:
            logger.error(f"Error inserting fact: {e}")
            self.notifier.notify(Notification(SUBMIT_FAILED_MESSAGE, ErrorKind.WRITE))
            raise WriteError(f"Failed to insert fact: {e}") from e

        self._set_stage(ticket, SubmissionStage.RECORD_CREATED)
        return fact

    async def _attach_image(
        self, ticket: int, fact: Fact, image: ImageFile, report: ProgressCallback
    ) -> Tuple[Fact, SubmissionStage, Optional[UploadError]]:
        self._set_stage(ticket, SubmissionStage.IMAGE_PENDING)
        object_name = build_object_name(fact.id, image.filename, int(self.clock() * 1000))

        try:
            await self.gateway.upload_blob(
                self.bucket,
                object_name,
                image.content,
                cache_control=self.cache_control,
                overwrite=False,
                content_type=image.content_type,
                on_progress=report,
            )
            public_url = self.gateway.get_public_url(self.bucket, object_name)
            patched = await self.gateway.update_fact(fact.id, {"imageUrl": public_url})
        except GatewayError as e:
            logger.warning(f"Fact {fact.id} saved without image: {e}")
            stage = self._set_stage(ticket, SubmissionStage.IMAGE_FAILED)
            self.notifier.notify(Notification(IMAGE_FAILED_MESSAGE, ErrorKind.UPLOAD, warning=True))
            warning = UploadError(f"Image for fact {fact.id} failed: {e}")
            return fact.model_copy(update={"image_url": ""}), stage, warning

        report(100)
        return patched, self._set_stage(ticket, SubmissionStage.IMAGE_ATTACHED), None
