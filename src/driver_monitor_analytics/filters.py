"""
Filter state and last-filter-wins request tracking.

PURPOSE: Recompute a view from scratch on every filter change and publish
only the result that belongs to the most recent filter.
AI CONTEXT: One ViewStateHolder per view; never shared across views.

STATE MACHINE:
    filter change -> new generation -> loader runs -> on completion:
        generation still latest  -> publish result, remember filter
        superseded               -> discard result (logged at DEBUG)

The two event queries of a view may finish in any order; the holder only
cares which *request* is newest, not which query finished first.

USAGE:
    holder = ViewStateHolder()
    state = FilterState(start_date="2026-03-01", end_date="2026-03-07")
    result = await holder.apply(state, lambda f: service.fatigue_details(f.start_date, f.end_date))
    if result is None:
        ...  # a newer filter was applied meanwhile
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, fields, replace
from typing import Any, Generic, TypeVar

__all__ = ["FilterState", "ViewStateHolder"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FilterState:
    """
    Filters that drive one dashboard view.

    FIELDS:
    - start_date / end_date: 'YYYY-MM-DD' bounds, None when unset
    - driver_id: Selected driver for driver-scoped views
    - page: 1-based page for paginated tables
    """

    start_date: str | None = None
    end_date: str | None = None
    driver_id: Any = None
    page: int = 1

    def with_changes(self, **changes: Any) -> FilterState:
        """
        Return a new state with changes applied.

        Changing any filter other than `page` resets the page to 1, so a
        narrower date range never leaves the table on a page that no longer
        exists.

        Example:
            >>> FilterState(page=4).with_changes(start_date='2026-03-01').page
            1
        """
        names = {f.name for f in fields(self)}
        unknown = set(changes) - names
        if unknown:
            raise TypeError(f"unknown filter fields: {sorted(unknown)}")
        filter_changed = any(
            getattr(self, name) != value for name, value in changes.items() if name != "page"
        )
        if filter_changed and "page" not in changes:
            changes["page"] = 1
        return replace(self, **changes)


class ViewStateHolder(Generic[T]):
    """
    Per-view holder of the latest derived state.

    Each apply() call takes a new generation number. When its loader
    completes, the result is published only if no later apply() started in
    the meantime. Otherwise the result is discarded and apply() returns None.
    """

    def __init__(self) -> None:
        self._generation = 0
        self.current: T | None = None
        self.current_filter: FilterState | None = None

    @property
    def generation(self) -> int:
        """Number of the most recently started request."""
        return self._generation

    def begin(self) -> int:
        """Start a new request and return its generation tag."""
        self._generation += 1
        return self._generation

    def is_current(self, tag: int) -> bool:
        """True if no request started after the one tagged `tag`."""
        return tag == self._generation

    def publish(self, tag: int, filter_state: FilterState, result: T) -> bool:
        """
        Publish a result if its request is still the latest.

        Returns:
            True if published, False if discarded as stale.
        """
        if not self.is_current(tag):
            logger.debug(
                "Discarding stale result (generation %s, latest %s)", tag, self._generation
            )
            return False
        self.current = result
        self.current_filter = filter_state
        return True

    async def apply(
        self,
        filter_state: FilterState,
        loader: Callable[[FilterState], Awaitable[T]],
    ) -> T | None:
        """
        Recompute the view for a filter, honoring last-filter-wins.

        Previous derived state is never patched incrementally: the loader
        runs from a fresh query and its result replaces `current` wholesale.

        Args:
            filter_state: Filter that triggered the recomputation.
            loader: Coroutine function producing the view result.

        Returns:
            The loader's result if it was published, None if a newer
            filter superseded it while it was running.
        """
        tag = self.begin()
        result = await loader(filter_state)
        if self.publish(tag, filter_state, result):
            return result
        return None
