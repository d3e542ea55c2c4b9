"""
HTTP gateway for a Supabase project.

This module talks to the PostgREST endpoint (``/rest/v1``) for the facts
table and to the Storage endpoint (``/storage/v1``) for fact images. It turns
every transport or HTTP failure into a ``GatewayError``; it never retries.
"""

from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from ..config import get_settings
from ..errors import GatewayError
from ..models import Fact
from .gateway import FactId, FactQuery, ProgressCallback

class SupabaseGateway:
    """
    FactGateway implementation over the Supabase REST and Storage APIs.

    Can be used as an async context manager; an internally created
    ``httpx.AsyncClient`` is closed on exit, an injected one is left open.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        table: Optional[str] = None,
        timeout: Optional[int] = None,
        chunk_size: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: Base URL of the Supabase project
            api_key: Key sent as ``apikey`` and bearer token
            table: Name of the facts table
            timeout: Request timeout in seconds
            chunk_size: Upload chunk size in bytes
            client: Optional pre-configured HTTP client
        """
        settings = get_settings()
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_key
        self.table = table or settings.facts_table
        self.timeout = timeout or settings.request_timeout
        self.chunk_size = chunk_size or settings.upload_chunk_size

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout)

        logger.info(f"Initialized SupabaseGateway with base_url: {self.base_url}, table: {self.table}")

    async def __aenter__(self) -> "SupabaseGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        headers.update(extra)
        return headers

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request and translate failures.

        Raises:
            GatewayError: On transport errors and non-2xx responses
        """
        logger.debug(f"Making {method} request to {url}")
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GatewayError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 300:
            raise GatewayError(
                f"HTTP {response.status_code}: {response.text}",
                response.status_code,
            )
        return response

    @staticmethod
    def _parse_rows(response: httpx.Response) -> List[Fact]:
        try:
            rows = response.json()
            if isinstance(rows, dict):
                rows = [rows]
            if not isinstance(rows, list):
                raise TypeError(f"expected a list of rows, got {type(rows).__name__}")
            return [Fact.model_validate(row) for row in rows]
        except (TypeError, ValueError, ValidationError) as e:
            raise GatewayError(f"Failed to parse facts response: {e}") from e

    @staticmethod
    def query_params(query: FactQuery) -> Dict[str, str]:
        """Translate a FactQuery into PostgREST query parameters."""
        params = {
            "select": "*",
            "order": f"{query.order_by}.{'desc' if query.descending else 'asc'}",
            "limit": str(query.limit),
        }
        if query.category is not None:
            params["category"] = f"eq.{query.category}"
        if query.text_contains:
            params["text"] = f"ilike.*{query.text_contains}*"
        return params

    async def read_facts(self, query: FactQuery) -> List[Fact]:
        response = await self._send(
            "GET", self.rest_url, params=self.query_params(query), headers=self._headers()
        )
        facts = self._parse_rows(response)
        logger.debug(f"Read {len(facts)} facts (category={query.category}, text={query.text_contains!r})")
        return facts

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
        row = {
            "text": text,
            "source": source,
            "category": category,
            "imageUrl": image_url,
            "votesInteresting": votes_interesting,
            "votesMindblowing": votes_mindblowing,
            "votesFalse": votes_false,
        }
        response = await self._send(
            "POST",
            self.rest_url,
            json=row,
            headers=self._headers(Prefer="return=representation"),
        )
        facts = self._parse_rows(response)
        if not facts:
            raise GatewayError("Insert returned no row")
        return facts[0]

    async def update_fact(self, fact_id: FactId, patch: Dict[str, Any]) -> Fact:
        response = await self._send(
            "PATCH",
            self.rest_url,
            params={"id": f"eq.{fact_id}"},
            json=patch,
            headers=self._headers(Prefer="return=representation"),
        )
        facts = self._parse_rows(response)
        if not facts:
            raise GatewayError(f"No fact with id {fact_id}", 404)
        return facts[0]

    def object_url(self, container: str, object_name: str) -> str:
        return f"{self.base_url}/storage/v1/object/{container}/{object_name}"

    def get_public_url(self, container: str, object_name: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{container}/{object_name}"

    async def _chunks(
        self, content: bytes, on_progress: Optional[ProgressCallback]
    ) -> AsyncIterator[bytes]:
        total = len(content)
        sent = 0
        for start in range(0, total, self.chunk_size):
            chunk = content[start:start + self.chunk_size]
            yield chunk
            sent += len(chunk)
            if on_progress:
                on_progress(int(sent * 100 / total))

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
        headers = self._headers(**{
            "cache-control": f"max-age={cache_control}",
            "x-upsert": "true" if overwrite else "false",
            "Content-Type": content_type or "application/octet-stream",
            "Content-Length": str(len(content)),
        })
        if on_progress:
            on_progress(0)

        await self._send(
            "POST",
            self.object_url(container, object_name),
            content=self._chunks(content, on_progress),
            headers=headers,
        )

        if on_progress:
            on_progress(100)
        logger.info(f"Uploaded {len(content)} bytes to {container}/{object_name}")
