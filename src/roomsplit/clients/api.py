"""Client for the room expenses HTTP API."""

import logging
from datetime import datetime
from typing import Any

import httpx

from ..exceptions import LedgerAPIError, RoomNotFoundError
from ..ledger import (
    expense_from_record,
    in_window,
    member_from_record,
    room_from_record,
)
from ..models import Expense, Member, Room

logger = logging.getLogger(__name__)


class ApiLedgerClient:
    """Reads rooms, members and expenses from the room API.

    Implements the ledger reader interface so an API-backed room can be fed
    straight into the balance engine.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the API client."""
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=30.0,
            transport=transport,
        )

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        """Issue a GET request and decode the JSON body."""
        try:
            response = self.client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise LedgerAPIError(
                f"GET {path} failed with status {e.response.status_code}: "
                f"{e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise LedgerAPIError(f"GET {path} failed: {e}") from e
        return response.json()

    def get_room(self, room_id: str) -> Room:
        """Get a room by ID."""
        try:
            data = self._get(f"/rooms/{room_id}")
        except LedgerAPIError as e:
            cause = e.__cause__
            if (
                isinstance(cause, httpx.HTTPStatusError)
                and cause.response.status_code == 404
            ):
                raise RoomNotFoundError(room_id) from e
            raise
        return room_from_record(data)

    def list_active_members(self, room_id: str) -> list[Member]:
        """Get the active members of a room, in the order the API returns them."""
        data = self._get(f"/members/room/{room_id}")
        members = [member_from_record(record) for record in data]
        return [m for m in members if m.is_active]

    def list_expenses(
        self,
        room_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Expense]:
        """
        Get a room's expenses within an optional date window.

        Args:
            room_id: The room ID
            start: Only include expenses on or after this time
            end: Only include expenses on or before this time

        Returns:
            List of expenses

        Raises:
            InvalidAmountError: If the API returns a malformed amount
            LedgerAPIError: If the request fails
        """
        params: dict[str, str] = {}
        if start:
            params["startDate"] = start.isoformat()
        if end:
            params["endDate"] = end.isoformat()

        data = self._get(f"/expenses/room/{room_id}", params=params)
        expenses = [expense_from_record(record) for record in data]

        # The API applies one bound at a time; enforce the full window here
        expenses = [e for e in expenses if in_window(e.expense_date, start, end)]

        logger.info(f"Fetched {len(expenses)} expenses for room {room_id}")
        return expenses
