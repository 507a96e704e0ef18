"""
Session resolution for driver-scoped views.

PURPOSE: Map a driver to the session ids that scope its event queries.
AI CONTEXT: One fresh read per call; no caching between calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .config import Config
from .errors import QueryFailure
from .store import QueryFilter

if TYPE_CHECKING:
    from .store import EventStore

__all__ = ["SessionResolver"]

logger = logging.getLogger(__name__)


class SessionResolver:
    """
    Resolve driver -> sessions through the event store.

    A driver without sessions is "no data", not a fault: the resolver
    returns an empty list and callers render an empty view.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store

    async def resolve_sessions(self, driver_id: Any) -> list[Any]:
        """
        Return the session ids owned by a driver.

        Issues exactly one driver_sessions query filtered by driver_id.
        Order follows the store's row order; duplicates are removed while
        keeping the first occurrence.

        Business context: Fatigue and emotion rows only carry a session id,
        so every per-driver chart starts here before fanning out to the
        event tables with an `in` filter.

        Args:
            driver_id: Identifier of the driver.

        Returns:
            List of session ids. Empty when the driver has no sessions.

        Raises:
            QueryFailure: If the store reported an error.

        Example:
            >>> await SessionResolver(store).resolve_sessions(3)
            [11, 12, 15]
        """
        result = await self.store.query(
            Config.TABLE_SESSIONS,
            QueryFilter(select=("session_id",), eq={"driver_id": driver_id}),
        )
        if not result.ok:
            raise QueryFailure(Config.TABLE_SESSIONS, result.error or "unknown error")

        session_ids = list(
            dict.fromkeys(
                row["session_id"] for row in result.data if row.get("session_id") is not None
            )
        )
        if not session_ids:
            logger.info("No sessions found for driver %s", driver_id)
        return session_ids
