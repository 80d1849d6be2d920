"""
Rate-limited ClickUp API v2 client.

Every request goes through the client's RateLimiter, so calls are spaced
at least ``min_interval`` seconds apart. A 429 response is retried once
after the server's ``Retry-After`` hint; a second 429 raises
RemoteThrottledError. Every other HTTP or network failure raises
RemoteTransportError immediately.

Example:
    >>> with ClickUpClient(api_key="pk_123") as client:
    ...     folder = client.find_folder(space_id, "E02 - Market data")
    ...     if folder is None:
    ...         folder = client.create_folder(space_id, "E02 - Market data")
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from spectrack.core.clickup.exceptions import (
    CustomFieldNotFoundError,
    RemoteThrottledError,
    RemoteTransportError,
)
from spectrack.core.clickup.models import (
    CustomField,
    Folder,
    Item,
    Space,
    TaskList,
    Team,
)
from spectrack.core.clickup.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

BASE_URL = "https://api.clickup.com/api/v2"
DEFAULT_INTERVAL = 0.2
STATUS_INTERVAL = 1.0
DEFAULT_RETRY_AFTER = 60.0
DEFAULT_SPEC_ID_FIELD = "Spec ID"


class ClickUpClient:
    """
    Synchronous ClickUp client built on httpx.

    Attributes:
        spec_id_field: Name of the list custom field that stores spec IDs
    """

    def __init__(
        self,
        api_key: str,
        min_interval: float = DEFAULT_INTERVAL,
        retry_after_default: float = DEFAULT_RETRY_AFTER,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        spec_id_field: str = DEFAULT_SPEC_ID_FIELD,
        transport: httpx.BaseTransport | None = None,
        limiter: RateLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Personal API token, sent as the Authorization header
            min_interval: Minimum seconds between requests
            retry_after_default: Wait used when a 429 carries no Retry-After
            base_url: API root
            timeout: Per-request timeout in seconds
            spec_id_field: Custom field name used to match items by spec ID
            transport: Optional httpx transport (tests use MockTransport)
            limiter: Optional pre-built RateLimiter; overrides min_interval
            sleep: Sleep function for throttle waits
        """
        self.retry_after_default = retry_after_default
        self.spec_id_field = spec_id_field
        self.limiter = limiter or RateLimiter(min_interval, sleep=sleep)
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=base_url,
            headers={"Authorization": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "ClickUpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        self.limiter.wait()
        try:
            return self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteTransportError(f"{method} {path} failed: {e}") from e

    def _retry_after(self, response: httpx.Response) -> float:
        header = response.headers.get("Retry-After")
        if header is None:
            return self.retry_after_default
        try:
            return max(float(header), 0.0)
        except ValueError:
            return self.retry_after_default

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = self._send(method, path, **kwargs)

        if response.status_code == 429:
            wait = self._retry_after(response)
            logger.warning(f"Rate limited on {method} {path}, retrying in {wait:.0f}s")
            self._sleep(wait)
            response = self._send(method, path, **kwargs)
            if response.status_code == 429:
                raise RemoteThrottledError(
                    f"{method} {path} still rate limited after retry",
                    retry_after=self._retry_after(response),
                )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteTransportError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            ) from e

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise RemoteTransportError(
                f"{method} {path} returned invalid JSON", status_code=response.status_code
            ) from e
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # Workspace structure
    # ------------------------------------------------------------------

    def list_teams(self) -> list[Team]:
        data = self._request("GET", "/team")
        return [Team.model_validate(t) for t in data.get("teams", [])]

    def list_spaces(self, team_id: str) -> list[Space]:
        data = self._request("GET", f"/team/{team_id}/space")
        return [Space.model_validate(s) for s in data.get("spaces", [])]

    def list_folders(self, space_id: str) -> list[Folder]:
        data = self._request("GET", f"/space/{space_id}/folder")
        return [Folder.model_validate(f) for f in data.get("folders", [])]

    def find_folder(self, space_id: str, name: str) -> Folder | None:
        """Find a folder by exact name."""
        for folder in self.list_folders(space_id):
            if folder.name == name:
                return folder
        return None

    def create_folder(self, space_id: str, name: str) -> Folder:
        data = self._request("POST", f"/space/{space_id}/folder", json={"name": name})
        return Folder.model_validate(data)

    def list_lists(self, folder_id: str) -> list[TaskList]:
        data = self._request("GET", f"/folder/{folder_id}/list")
        return [TaskList.model_validate(lst) for lst in data.get("lists", [])]

    def find_list(self, folder_id: str, name: str) -> TaskList | None:
        """Find a list by exact name."""
        for task_list in self.list_lists(folder_id):
            if task_list.name == name:
                return task_list
        return None

    def create_list(self, folder_id: str, name: str) -> TaskList:
        data = self._request("POST", f"/folder/{folder_id}/list", json={"name": name})
        return TaskList.model_validate(data)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def list_items(
        self,
        list_id: str,
        include_closed: bool = True,
        subtasks: bool = True,
        statuses: list[str] | None = None,
    ) -> list[Item]:
        """
        List every item in a list, following pagination.

        Subtasks are included by default so nested items can be matched by
        their spec ID like top-level ones.
        """
        items: list[Item] = []
        page = 0
        while True:
            params: dict[str, Any] = {
                "include_closed": str(include_closed).lower(),
                "archived": "false",
                "subtasks": str(subtasks).lower(),
                "page": page,
            }
            if statuses:
                params["statuses[]"] = statuses
            data = self._request("GET", f"/list/{list_id}/task", params=params)
            batch = data.get("tasks") or []
            items.extend(Item.model_validate(t) for t in batch)
            if not batch or data.get("last_page", True):
                break
            page += 1
        return items

    def find_item_by_spec_id(
        self,
        list_id: str,
        spec_id: str,
        items: list[Item] | None = None,
    ) -> Item | None:
        """
        Find the item for ``spec_id`` within a list.

        An item whose spec ID custom field equals ``spec_id`` wins; otherwise
        the first item whose name starts with ``"{spec_id}: "`` is returned.
        The colon keeps ``E02-F01-T1`` from matching ``E02-F01-T10: ...``.

        Args:
            list_id: List to search
            spec_id: Spec ID to look for
            items: Pre-fetched items of the list, to avoid another request
        """
        candidates = items if items is not None else self.list_items(list_id)
        for item in candidates:
            if item.custom_field_value(self.spec_id_field) == spec_id:
                return item
        for item in candidates:
            if item.has_spec_prefix(spec_id):
                return item
        return None

    def create_item(self, list_id: str, fields: dict[str, Any]) -> Item:
        data = self._request("POST", f"/list/{list_id}/task", json=fields)
        return Item.model_validate(data)

    def update_item(self, item_id: str, fields: dict[str, Any]) -> Item:
        """Update name, status, parent or any other writable item field."""
        data = self._request("PUT", f"/task/{item_id}", json=fields)
        return Item.model_validate(data) if data.get("id") else self.get_item(item_id)

    def get_item(self, item_id: str) -> Item:
        data = self._request("GET", f"/task/{item_id}")
        return Item.model_validate(data)

    def list_items_by_status(self, list_id: str, status: str) -> list[Item]:
        """Items of a list whose status matches ``status`` case-insensitively."""
        wanted = status.strip().upper()
        return [
            item
            for item in self.list_items(
                list_id, include_closed=False, subtasks=False, statuses=[status]
            )
            if item.normalized_status == wanted
        ]

    # ------------------------------------------------------------------
    # Custom fields
    # ------------------------------------------------------------------

    def list_custom_fields(self, list_id: str) -> list[CustomField]:
        data = self._request("GET", f"/list/{list_id}/field")
        return [CustomField.model_validate(f) for f in data.get("fields", [])]

    def find_custom_field(self, list_id: str, name: str) -> CustomField:
        """
        Look up a list custom field by name.

        Raises:
            CustomFieldNotFoundError: If the list has no field with that name
        """
        fields = self.list_custom_fields(list_id)
        for field in fields:
            if field.name == name:
                return field
        raise CustomFieldNotFoundError(name, list_id, [f.name for f in fields])

    def set_custom_field(self, item_id: str, field_id: str, value: Any) -> None:
        self._request("POST", f"/task/{item_id}/field/{field_id}", json={"value": value})
