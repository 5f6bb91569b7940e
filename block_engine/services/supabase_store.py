"""
Data store client - Supabase PostgREST and Auth over httpx.

Tables used by the engine: ``blocks``, ``projects``, ``users``,
``factory_logs``; the ``deduct_credits`` RPC performs the atomic credit
decrement.
"""
from typing import Any, Dict, List, Optional, Protocol

import httpx

from config import settings
from logging_config import logger


class PersistenceError(Exception):
    """A data store request failed"""


class PersistenceConflictError(PersistenceError):
    """Insert rejected by a uniqueness constraint"""


class IdentityError(Exception):
    """Access token missing, expired or rejected"""


class PersistenceProvider(Protocol):
    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it, including its generated ``id``"""
        ...


UNIQUE_VIOLATION = "23505"


class SupabaseStore:
    """Thin async client for the PostgREST and Auth endpoints of a Supabase project"""

    def __init__(self, url: str, service_key: str, timeout: float = 15.0):
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.auth_url = f"{url.rstrip('/')}/auth/v1"
        self.service_key = service_key
        self.timeout = timeout

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json"
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Data store request failed", method=method, url=url, error=str(e))
            raise PersistenceError(f"Data store unreachable: {e}") from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.error(
                "Data store error",
                method=method,
                url=url,
                status_code=response.status_code,
                detail=detail
            )
            if response.status_code == 409 or detail.get("code") == UNIQUE_VIOLATION:
                raise PersistenceConflictError(detail.get("message") or "Unique constraint violated")
            raise PersistenceError(detail.get("message") or f"Data store error {response.status_code}")

        return response

    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            f"{self.rest_url}/{table}",
            headers=self._headers(prefer="return=representation"),
            json=record
        )
        rows = response.json()
        if not rows or not rows[0].get("id"):
            raise PersistenceError(f"Insert into {table} returned no id")
        return rows[0]

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Rows matching equality ``filters``"""
        params: Dict[str, Any] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{_filter_value(value)}"
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)

        response = await self._request(
            "GET",
            f"{self.rest_url}/{table}",
            headers=self._headers(),
            params=params
        )
        return response.json()

    async def delete(self, table: str, filters: Dict[str, Any]) -> None:
        if not filters:
            raise ValueError("Refusing to delete without filters")

        params = {column: f"eq.{_filter_value(value)}" for column, value in filters.items()}
        await self._request(
            "DELETE",
            f"{self.rest_url}/{table}",
            headers=self._headers(),
            params=params
        )

    async def rpc(self, function: str, params: Dict[str, Any]) -> Any:
        response = await self._request(
            "POST",
            f"{self.rest_url}/rpc/{function}",
            headers=self._headers(),
            json=params
        )
        return response.json() if response.content else None

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        """User behind an access token, as returned by Supabase Auth"""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.auth_url}/user",
                    headers={
                        "apikey": self.service_key,
                        "Authorization": f"Bearer {access_token}"
                    }
                )
        except httpx.HTTPError as e:
            raise IdentityError(f"Auth service unreachable: {e}") from e

        if response.status_code != 200:
            raise IdentityError("Invalid or expired access token")

        user = response.json()
        if not user.get("id"):
            raise IdentityError("Auth service returned no user id")
        return user

    async def ping(self) -> bool:
        """True when the blocks table is reachable"""
        try:
            await self.select("blocks", columns="id", limit=1)
            return True
        except PersistenceError:
            return False


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _error_detail(response: httpx.Response) -> Dict[str, Any]:
    try:
        detail = response.json()
    except ValueError:
        return {"message": response.text[:300]}
    return detail if isinstance(detail, dict) else {"message": str(detail)}


def get_store() -> SupabaseStore:
    return SupabaseStore(
        url=settings.SUPABASE_URL,
        service_key=settings.SUPABASE_SERVICE_KEY,
        timeout=settings.SUPABASE_TIMEOUT
    )
