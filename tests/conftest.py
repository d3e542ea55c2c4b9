"""Shared fixtures: an in-memory gateway and fact factories."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from fact_feed.errors import GatewayError
from fact_feed.models import Fact
from fact_feed.services import CollectingNotifier, FeedState


class FakeGateway:
    """
    In-memory FactGateway.

    Records every call. Methods listed in ``fail`` raise GatewayError. With
    ``hold_reads`` set, each read waits until the test releases it, so reads
    can be resolved in any order.
    """

    def __init__(self, facts: Optional[List[Fact]] = None):
        self.rows: Dict[Any, Fact] = {f.id: f for f in facts or []}
        self.next_id = max([f.id for f in facts or [] if isinstance(f.id, int)], default=0) + 1
        self.calls: List[tuple] = []
        self.fail: set = set()
        self.hold_reads = False
        self.held: List[asyncio.Future] = []
        self.blobs: Dict[str, bytes] = {}

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail:
            raise GatewayError(f"{method} failed", 500)

    async def wait_for_reads(self, count: int) -> None:
        while len(self.held) < count:
            await asyncio.sleep(0)

    def release_read(self, index: int, error: Optional[Exception] = None) -> None:
        future = self.held[index]
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(None)

    async def read_facts(self, query):
        self.calls.append(("read_facts", query))
        if self.hold_reads:
            future = asyncio.get_running_loop().create_future()
            self.held.append(future)
            await future
        self._maybe_fail("read_facts")
        matching = [f for f in self.rows.values() if query.matches(f)]
        matching.sort(key=lambda f: f.votes_interesting, reverse=query.descending)
        return matching[:query.limit]

    async def insert_fact(self, text, source, category, image_url="",
                          votes_interesting=0, votes_mindblowing=0, votes_false=0):
        self.calls.append(("insert_fact", text, source, category, image_url))
        self._maybe_fail("insert_fact")
        fact = Fact(
            id=self.next_id,
            text=text,
            source=source,
            category=category,
            image_url=image_url,
            votes_interesting=votes_interesting,
            votes_mindblowing=votes_mindblowing,
            votes_false=votes_false,
        )
        self.next_id += 1
        self.rows[fact.id] = fact
        return fact

    async def update_fact(self, fact_id, patch):
        self.calls.append(("update_fact", fact_id, dict(patch)))
        self._maybe_fail("update_fact")
        if fact_id not in self.rows:
            raise GatewayError(f"No fact with id {fact_id}", 404)
        row = self.rows[fact_id].to_row()
        row.update(patch)
        self.rows[fact_id] = Fact.model_validate(row)
        return self.rows[fact_id]

    async def upload_blob(self, container, object_name, content, cache_control="3600",
                          overwrite=False, content_type=None, on_progress=None):
        self.calls.append(("upload_blob", container, object_name, cache_control, overwrite))
        if on_progress:
            on_progress(0)
        self._maybe_fail("upload_blob")
        key = f"{container}/{object_name}"
        if key in self.blobs and not overwrite:
            raise GatewayError("The resource already exists", 409)
        self.blobs[key] = content
        if on_progress:
            on_progress(50)
            on_progress(100)

    def get_public_url(self, container, object_name):
        self.calls.append(("get_public_url", container, object_name))
        return f"https://cdn.example.com/{container}/{object_name}"

    def called(self, method: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == method]


def make_fact(fact_id=1, text="Octopuses have three hearts", category="science",
              votes_interesting=0, votes_false=0, **kwargs) -> Fact:
    return Fact(
        id=fact_id,
        text=text,
        source=kwargs.pop("source", "https://example.com/fact"),
        category=category,
        votes_interesting=votes_interesting,
        votes_false=votes_false,
        **kwargs,
    )


@pytest.fixture
def facts():
    return [
        make_fact(1, "Volcano lightning is caused by ash friction", "science", votes_interesting=12),
        make_fact(2, "The first computer bug was a moth", "technology", votes_interesting=30),
        make_fact(3, "Rome was founded in 753 BC", "history", votes_interesting=5, votes_false=9),
        make_fact(4, "Iceland has over 130 volcanoes", "science", votes_interesting=20),
    ]


@pytest.fixture
def gateway(facts):
    return FakeGateway(facts)


@pytest.fixture
def state():
    return FeedState()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def fact_factory():
    return make_fact
