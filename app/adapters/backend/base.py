"""Hosted backend client interface.

Services depend on this abstraction (not the concrete REST client) so the
tests can run against in-memory fakes and the vendor stays swappable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from app.adapters.backend.filters import Filter

Row = dict[str, Any]


class AbstractBackendClient(ABC):
    """Interface for table, storage and auth access on the hosted backend."""

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        or_conditions: str | None = None,
        order: str | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        """Fetch rows from a table.

        Args:
            table: Table name.
            columns: Comma-separated column list.
            filters: AND-combined column filters.
            or_conditions: Rendered OR group (see ``filters.or_group``).
            order: Order clause such as ``"created_at.desc"``.
            offset: Zero-based first row.
            limit: Maximum rows; the backend may cap this further.

        Returns:
            Matching rows in backend order.
        """
        raise NotImplementedError

    @abstractmethod
    async def count(
        self,
        table: str,
        *,
        filters: Sequence[Filter] = (),
        or_conditions: str | None = None,
    ) -> int:
        """Return the exact number of rows matching the filters."""
        raise NotImplementedError

    @abstractmethod
    async def select_one(
        self,
        table: str,
        *,
        filters: Sequence[Filter],
        columns: str = "*",
    ) -> Row | None:
        """Fetch the first matching row, or None."""
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Row,
        *,
        filters: Sequence[Filter],
    ) -> list[Row]:
        """Update matching rows and return their new representation."""
        raise NotImplementedError

    @abstractmethod
    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        """Create an absolute, time-limited download URL for a stored object."""
        raise NotImplementedError

    @abstractmethod
    async def get_user(self, access_token: str) -> Row | None:
        """Resolve an access token to its user, or None if it is rejected."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources."""
        return None
