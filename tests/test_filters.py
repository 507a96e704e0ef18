"""Tests for filter state and last-filter-wins tracking."""

from __future__ import annotations

import asyncio

import pytest

from driver_monitor_analytics.filters import FilterState, ViewStateHolder


class TestFilterState:
    """Test suite for FilterState.with_changes."""

    def test_date_change_resets_page(self) -> None:
        """Verifies a narrower range never leaves the table on a stale page.

        Business context:
        Page 4 of a month may not exist once the range shrinks to a week.
        """
        state = FilterState(start_date="2026-03-01", page=4)
        assert state.with_changes(end_date="2026-03-07").page == 1

    def test_page_change_keeps_filters(self) -> None:
        state = FilterState(start_date="2026-03-01", page=1)
        moved = state.with_changes(page=3)
        assert moved.page == 3
        assert moved.start_date == "2026-03-01"

    def test_same_value_does_not_reset_page(self) -> None:
        state = FilterState(driver_id=2, page=3)
        assert state.with_changes(driver_id=2).page == 3

    def test_explicit_page_wins_over_reset(self) -> None:
        state = FilterState(page=3)
        assert state.with_changes(driver_id=1, page=2).page == 2

    def test_unknown_field_raises(self) -> None:
        with pytest.raises(TypeError):
            FilterState().with_changes(driver="Ana")

    def test_original_is_unchanged(self) -> None:
        state = FilterState(page=4)
        state.with_changes(start_date="2026-03-01")
        assert state.page == 4


class TestViewStateHolder:
    """Test suite for ViewStateHolder.

    Business context:
    Changing a filter twice quickly fires two recomputations. Whichever
    finishes last, the view must show the result of the newest filter.
    """

    @pytest.mark.asyncio
    async def test_publishes_single_result(self) -> None:
        holder: ViewStateHolder[str] = ViewStateHolder()
        state = FilterState(start_date="2026-03-01")

        async def loader(f: FilterState) -> str:
            return f"rows from {f.start_date}"

        assert await holder.apply(state, loader) == "rows from 2026-03-01"
        assert holder.current == "rows from 2026-03-01"
        assert holder.current_filter == state

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(self) -> None:
        """Verifies an older request finishing last does not overwrite state.

        Arrangement:
        Request A blocks on an event; request B completes immediately.

        Action:
        Release A after B has published.

        Assertion Strategy:
        A returns None and current still holds B's result.
        """
        holder: ViewStateHolder[str] = ViewStateHolder()
        release_a = asyncio.Event()

        async def slow_loader(f: FilterState) -> str:
            await release_a.wait()
            return "A"

        async def fast_loader(f: FilterState) -> str:
            return "B"

        task_a = asyncio.create_task(holder.apply(FilterState(driver_id=1), slow_loader))
        await asyncio.sleep(0)
        result_b = await holder.apply(FilterState(driver_id=2), fast_loader)
        release_a.set()
        result_a = await task_a

        assert result_b == "B"
        assert result_a is None
        assert holder.current == "B"
        assert holder.current_filter == FilterState(driver_id=2)

    @pytest.mark.asyncio
    async def test_latest_request_wins_when_it_finishes_last(self) -> None:
        holder: ViewStateHolder[str] = ViewStateHolder()
        release_b = asyncio.Event()

        async def first(f: FilterState) -> str:
            return "A"

        async def second(f: FilterState) -> str:
            await release_b.wait()
            return "B"

        task_b = asyncio.create_task(holder.apply(FilterState(page=2), second))
        await asyncio.sleep(0)
        # A starts after B, so B is now stale even though A finishes first.
        assert await holder.apply(FilterState(page=3), first) == "A"
        release_b.set()
        assert await task_b is None
        assert holder.current == "A"

    def test_publish_with_old_tag(self) -> None:
        holder: ViewStateHolder[int] = ViewStateHolder()
        old = holder.begin()
        new = holder.begin()
        assert holder.publish(old, FilterState(), 1) is False
        assert holder.publish(new, FilterState(), 2) is True
        assert holder.current == 2
        assert holder.generation == 2
