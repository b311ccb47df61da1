import logging
from typing import Any
from uuid import UUID

import httpx

from userbff.core.config import Settings

logger = logging.getLogger(__name__)

BEGIN_TRANSACTION = "begin_transaction"
COMMIT_TRANSACTION = "commit_transaction"
ROLLBACK_TRANSACTION = "rollback_transaction"


class StoreTransportError(Exception):
    """Raised when a request to the remote store never produced a response."""


class RemoteStoreClient:
    """Thin HTTP client for one PostgREST collection plus its transaction RPCs.

    Responses are returned as-is; deciding what a status code means is left
    to the caller. No retries happen here.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        resource: str = "trans_users",
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.resource = resource
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"apikey": api_key},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RemoteStoreClient":
        return cls(
            settings.rest_url,
            settings.supabase_anon_key,
            settings.users_table,
            timeout=settings.store_timeout_seconds,
            transport=transport,
        )

    @property
    def _collection(self) -> str:
        return f"/{self.resource}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        request_headers = dict(headers or {})
        if json is not None:
            request_headers["Content-Type"] = "application/json"
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers=request_headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Remote store %s %s failed: %s", method, url, exc)
            raise StoreTransportError(f"{method} {url}: {exc}") from exc
        logger.debug("Remote store %s %s -> %s", method, url, response.status_code)
        return response

    async def list_rows(self, **filters: str) -> httpx.Response:
        params = {column: f"eq.{value}" for column, value in filters.items()}
        return await self._send("GET", self._collection, params=params or None)

    async def get_by_id(self, user_id: UUID | str) -> httpx.Response:
        return await self.list_rows(id=str(user_id))

    async def find_by(self, column: str, value: str) -> httpx.Response:
        return await self.list_rows(**{column: value})

    async def insert(self, entity: dict[str, Any], transaction_id: str) -> httpx.Response:
        return await self._send(
            "POST",
            self._collection,
            json=entity,
            headers={
                "Transaction-Id": transaction_id,
                "Prefer": "return=representation",
            },
        )

    async def patch(
        self,
        user_id: UUID | str,
        fields: dict[str, Any],
        transaction_id: str,
    ) -> httpx.Response:
        return await self._send(
            "PATCH",
            self._collection,
            params={"id": f"eq.{user_id}"},
            json=fields,
            headers={
                "Transaction-Id": transaction_id,
                "Prefer": "return=representation, tx=commit",
            },
        )

    async def remove(self, user_id: UUID | str, transaction_id: str) -> httpx.Response:
        return await self._send(
            "DELETE",
            self._collection,
            params={"id": f"eq.{user_id}"},
            headers={
                "Transaction-Id": transaction_id,
                "Prefer": "tx=commit",
            },
        )

    async def rpc(self, name: str, payload: dict[str, Any]) -> httpx.Response:
        return await self._send("POST", f"/rpc/{name}", json=payload)
