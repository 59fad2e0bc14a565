from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import DEFAULT_ITEMS_TABLE, ITEMS_PAGE_SIZE, USERS_MAX_PAGES, USERS_PER_PAGE
from .models import DurationUnit, Item, User, ValidationError
from .utils import parse_start_date

logger = logging.getLogger(__name__)


class SupabaseError(Exception):
    """Raised when Supabase operations fail."""


class SupabaseConnectionError(SupabaseError):
    """Raised when Supabase is unreachable (network/timeout)."""


class SupabaseApiError(SupabaseError):
    """Raised when Supabase returns an error response."""


class AuthenticationError(SupabaseApiError):
    """Raised when the service credentials are missing or rejected."""


class SupabaseClient:
    """Privileged (service role) access to Supabase Auth and PostgREST."""

    def __init__(
        self,
        url: Optional[str],
        service_key: Optional[str],
        http_client: Optional[httpx.Client] = None,
    ):
        self._url = (url or "").rstrip("/")
        self._service_key = service_key or ""
        self._client = http_client
        self._owns_client = http_client is None

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None

    def list_users(self, per_page: int = USERS_PER_PAGE, max_pages: int = USERS_MAX_PAGES) -> List[User]:
        users: List[User] = []
        for page in range(1, max_pages + 1):
            data = self._get("/auth/v1/admin/users", params={"page": page, "per_page": per_page})
            page_users = data.get("users") if isinstance(data, dict) else None
            if not isinstance(page_users, list):
                raise SupabaseApiError("Unexpected response shape for admin users listing")
            logger.info("Fetched %s users from page %s", len(page_users), page)
            for raw in page_users:
                try:
                    users.append(self._to_user(raw))
                except ValidationError as exc:
                    logger.warning("Skipping malformed user record: %s", exc)
            if len(page_users) < per_page:
                break
        else:
            logger.warning("Stopped listing users after %s full pages; later users are not notified", max_pages)
        return users

    def list_items(self, table: str = DEFAULT_ITEMS_TABLE, page_size: int = ITEMS_PAGE_SIZE) -> List[Item]:
        items: List[Item] = []
        offset = 0
        while True:
            rows = self._get(
                f"/rest/v1/{table}",
                params={"select": "*", "order": "id.asc", "limit": page_size, "offset": offset},
            )
            if not isinstance(rows, list):
                raise SupabaseApiError(f"Unexpected response shape for table {table}")
            logger.info("Fetched %s rows from %s (offset=%s)", len(rows), table, offset)
            for raw in rows:
                try:
                    items.append(self._to_item(raw))
                except ValidationError as exc:
                    logger.warning("Skipping malformed item record: %s", exc)
            if len(rows) < page_size:
                break
            offset += page_size
        return items

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        if not self._url or not self._service_key:
            raise AuthenticationError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required.")
        client = self._http()
        try:
            response = client.get(path, params=params)
            response.raise_for_status()
        except httpx.RequestError as exc:
            raise SupabaseConnectionError(f"Supabase request failed: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status in {401, 403}:
                raise AuthenticationError(f"Supabase rejected credentials (status={status})") from exc
            raise SupabaseApiError(f"Supabase request returned error: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise SupabaseApiError(f"Supabase returned a non-JSON body for {path}") from exc

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(base_url=self._url, timeout=20.0)
            self._owns_client = True
        self._client.headers.update(
            {"apikey": self._service_key, "Authorization": f"Bearer {self._service_key}"}
        )
        return self._client

    @staticmethod
    def _to_user(raw: dict) -> User:
        user_id = raw.get("id")
        if not user_id:
            raise ValidationError("user is missing 'id'")
        metadata = raw.get("user_metadata") or {}
        email = metadata.get("notify_email") if isinstance(metadata, dict) else None
        if isinstance(email, str) and email.strip():
            return User(id=str(user_id), notify_email=email.strip())
        return User(id=str(user_id))

    @staticmethod
    def _to_item(raw: dict) -> Item:
        for key in ("id", "user_id", "name", "start_date", "duration", "unit"):
            if raw.get(key) is None:
                raise ValidationError(f"item {raw.get('id')!r} is missing '{key}'")
        try:
            start_date = parse_start_date(str(raw["start_date"]))
        except ValueError as exc:
            raise ValidationError(f"item {raw['id']!r}: {exc}") from exc
        try:
            duration = int(raw["duration"])
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"item {raw['id']!r} has non-integer duration {raw['duration']!r}") from exc
        if duration <= 0:
            raise ValidationError(f"item {raw['id']!r} has non-positive duration {duration}")
        try:
            unit = DurationUnit(str(raw["unit"]))
        except ValueError as exc:
            raise ValidationError(f"item {raw['id']!r} has unknown unit {raw['unit']!r}") from exc
        return Item(
            id=str(raw["id"]),
            user_id=str(raw["user_id"]),
            name=str(raw["name"]),
            start_date=start_date,
            duration=duration,
            unit=unit,
        )
