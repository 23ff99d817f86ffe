"""
Airtable API Client

Async HTTP client for the leads table with:
- Bearer-token auth
- Cursor pagination (offset in / offset out)
- Record get / create / patch / delete
- Upstream status and body surfaced on every failure

No retries: the background refresher's next tick is the retry.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the record store returns non-2xx or cannot be reached."""
    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamClient:
    """
    Async client for the upstream leads table.

    Usage:
        client = UpstreamClient(table_url=settings.table_url, token=settings.AIRTABLE_TOKEN)

        page = await client.list_page()
        while page.get("offset"):
            page = await client.list_page(offset=page["offset"])

        await client.close()
    """

    SORT_FIELD = "Last Call Date"
    SORT_DIRECTION = "desc"

    def __init__(
        self,
        table_url: str,
        token: str,
        page_size: int = 100,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            table_url: Full table endpoint (base id and table name included)
            token: Personal access token sent as a bearer credential
            page_size: Records requested per list call
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.table_url = table_url.rstrip("/")
        self.page_size = page_size
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    async def list_page(self, offset: Optional[str] = None) -> Dict[str, Any]:
        """
        Fetch one page of records, newest call first.

        Args:
            offset: Continuation cursor returned by the previous page

        Returns:
            Raw page payload: {"records": [...], "offset": "..."}
        """
        params = {
            "pageSize": str(self.page_size),
            "sort[0][field]": self.SORT_FIELD,
            "sort[0][direction]": self.SORT_DIRECTION,
        }
        if offset:
            params["offset"] = offset

        return await self._request("GET", self.table_url, params=params)

    async def get_record(self, record_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.table_url}/{record_id}")

    async def create_record(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", self.table_url, json={"fields": fields})

    async def update_record(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"{self.table_url}/{record_id}", json={"fields": fields})

    async def delete_record(self, record_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"{self.table_url}/{record_id}")

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Make a single HTTP request and decode the JSON body."""
        if self._closed:
            raise UpstreamError("Client is closed")

        logger.debug(f"{method} {url}")

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Airtable request failed: {e}") from e

        if not response.is_success:
            raise UpstreamError(
                f"Airtable {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return response.json() if response.content else {}

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
