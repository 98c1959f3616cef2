# core/kv_client.py
import json
import logging
from typing import Any, Dict, Optional, Protocol, Sequence
from urllib.parse import quote
import httpx
from config.settings import settings
from model.kv import KeyInfo, KeyPage
from util.constants import ExternalURIs
from util.errors import KVStoreError
from util.types import BulkWriteEntry

logger = logging.getLogger(__name__)


class KVStoreClient(Protocol):
    """
    Capability the pipelines need from the external key-value store.
    Every method raises KVStoreError on transport failure or a non-2xx answer.
    """

    async def list_keys(
        self, namespace_id: str, *, cursor: Optional[str] = None, limit: int = 1000
    ) -> KeyPage: ...

    async def get_value(self, namespace_id: str, key_name: str) -> str: ...

    async def put_value(
        self,
        namespace_id: str,
        key_name: str,
        value: str,
        *,
        metadata: Optional[Dict[str, Any]] = None,
        expiration_ttl: Optional[int] = None,
    ) -> None: ...

    async def delete_value(self, namespace_id: str, key_name: str) -> None: ...

    async def bulk_write(
        self, namespace_id: str, entries: Sequence[BulkWriteEntry]
    ) -> None: ...

    async def bulk_delete(self, namespace_id: str, key_names: Sequence[str]) -> None: ...


class CloudflareKVClient:
    """
    Workers KV REST client over a shared httpx.AsyncClient.

    Built once per process (see main.lifespan) and handed to the services.
    """

    def __init__(
        self,
        *,
        account_id: str = settings.KV_ACCOUNT_ID,
        api_token: str = settings.KV_API_TOKEN,
        base_url: str = settings.KV_API_BASE_URL,
        timeout: float = settings.KV_REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._account_id = account_id
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=httpx.Timeout(timeout, connect=5.0),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    def _path(self, template: str, namespace_id: str, **kw: str) -> str:
        return template.format(
            account_id=self._account_id, namespace_id=namespace_id, **kw
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            res = await self._http.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error("kv.request_error method=%s err=%s", method, type(e).__name__)
            raise KVStoreError(f"{method} {path} failed: {type(e).__name__}") from e

        if res.status_code // 100 != 2:
            logger.warning("kv.bad_status method=%s status=%d", method, res.status_code)
            raise KVStoreError(
                f"{method} {path} returned {res.status_code}", res.status_code
            )
        return res

    async def list_keys(
        self, namespace_id: str, *, cursor: Optional[str] = None, limit: int = 1000
    ) -> KeyPage:
        params: Dict[str, Any] = {"limit": limit}
        if cursor:
            params["cursor"] = cursor
        res = await self._request(
            "GET", self._path(ExternalURIs.KV_KEYS, namespace_id), params=params
        )
        body = res.json()
        info = body.get("result_info") or {}
        return KeyPage(
            keys=[KeyInfo.model_validate(k) for k in body.get("result") or []],
            cursor=info.get("cursor") or None,
        )

    async def get_value(self, namespace_id: str, key_name: str) -> str:
        res = await self._request(
            "GET",
            self._path(ExternalURIs.KV_VALUE, namespace_id, key_name=quote(key_name, safe="")),
        )
        return res.text

    async def put_value(
        self,
        namespace_id: str,
        key_name: str,
        value: str,
        *,
        metadata: Optional[Dict[str, Any]] = None,
        expiration_ttl: Optional[int] = None,
    ) -> None:
        path = self._path(
            ExternalURIs.KV_VALUE, namespace_id, key_name=quote(key_name, safe="")
        )
        params = {"expiration_ttl": expiration_ttl} if expiration_ttl else None
        if metadata is not None:
            # Metadata rides along only on the multipart form variant
            await self._request(
                "PUT",
                path,
                params=params,
                files={
                    "value": (None, value),
                    "metadata": (None, json.dumps(metadata)),
                },
            )
            return
        await self._request(
            "PUT",
            path,
            params=params,
            content=value.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )

    async def delete_value(self, namespace_id: str, key_name: str) -> None:
        await self._request(
            "DELETE",
            self._path(ExternalURIs.KV_VALUE, namespace_id, key_name=quote(key_name, safe="")),
        )

    async def bulk_write(
        self, namespace_id: str, entries: Sequence[BulkWriteEntry]
    ) -> None:
        await self._request(
            "PUT", self._path(ExternalURIs.KV_BULK, namespace_id), json=list(entries)
        )

    async def bulk_delete(self, namespace_id: str, key_names: Sequence[str]) -> None:
        await self._request(
            "POST",
            self._path(ExternalURIs.KV_BULK_DELETE, namespace_id),
            json=list(key_names),
        )
