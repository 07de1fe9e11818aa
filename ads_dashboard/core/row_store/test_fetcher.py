"""
Тесты постраничной выборки строк

Использование:
    pytest ads_dashboard/core/row_store/test_fetcher.py
"""
import asyncio
from datetime import date, timedelta

import pytest

from ads_dashboard.core.data_processor import (
    DateRange,
    EngineContext,
    EntityScope,
    FetchFailure,
    PaginationLimitExceeded,
    RawDailyRow,
    RowStoreError,
)
from ads_dashboard.core.row_store import RowStore, effective_page_size, fetch_all_rows


PERIOD = DateRange(since=date(2024, 3, 1), until=date(2024, 3, 31))


class MemoryRowStore(RowStore):
    """Хранилище в памяти с журналом запросов"""

    def __init__(self, rows, max_page_size=1000, fail_on_call=None):
        self.rows = rows
        self.max_page_size = max_page_size
        self.fail_on_call = fail_on_call
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def fetch_daily_rows(self, project_id, since, until, offset, limit, entity=None):
        self.calls.append((offset, limit))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
                raise RowStoreError("connection reset")
            matched = [
                row for row in self.rows
                if since <= row.date <= until
                and (entity is None or getattr(row, entity.column) == entity.entity_id)
            ]
            return matched[offset:offset + min(limit, self.max_page_size)]
        finally:
            self.active -= 1

    async def project_timezone(self, project_id):
        return 'America/Sao_Paulo'

    async def project_currency(self, project_id):
        return 'BRL'


def numbered_rows(count, day=date(2024, 3, 10)):
    # spend = порядковый номер, чтобы проверить порядок
    return [RawDailyRow(date=day, ad_id=f'ad_{i % 3}', spend=i) for i in range(count)]


def test_2500_rows_with_1000_cap_take_three_calls():
    store = MemoryRowStore(numbered_rows(2500))

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD))

    assert len(store.calls) == 3
    assert [offset for offset, _ in store.calls] == [0, 1000, 2000]
    assert len(result.rows) == 2500
    assert [row.spend for row in result.rows] == list(range(2500))
    assert result.pages == 3
    assert result.complete is True
    assert result.error is None


def test_exact_multiple_needs_one_empty_page():
    store = MemoryRowStore(numbered_rows(2000))

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD))

    assert len(store.calls) == 3
    assert len(result.rows) == 2000


def test_empty_period_single_call():
    store = MemoryRowStore([])

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD))

    assert len(store.calls) == 1
    assert result.rows == []
    assert result.complete is True


def test_page_size_limited_by_store_cap():
    store = MemoryRowStore(numbered_rows(1200), max_page_size=500)
    context = EngineContext(page_size=1000)

    assert effective_page_size(store, context) == 500

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD, context=context))

    assert store.calls == [(0, 500), (500, 500), (1000, 500)]
    assert len(result.rows) == 1200


def test_smaller_configured_page_size():
    store = MemoryRowStore(numbered_rows(25))

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD, context=EngineContext(page_size=10)))

    assert len(store.calls) == 3
    assert len(result.rows) == 25


def test_pages_are_sequential():
    store = MemoryRowStore(numbered_rows(3500))

    asyncio.run(fetch_all_rows(store, 'p1', PERIOD))

    assert store.max_active == 1


def test_failure_mid_pagination_returns_partial_rows():
    store = MemoryRowStore(numbered_rows(2500), fail_on_call=2)

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD))

    assert result.complete is False
    assert len(result.rows) == 1000
    assert isinstance(result.error, FetchFailure)
    assert result.error.offset == 1000
    assert result.error.rows_collected == 1000
    assert isinstance(result.error.cause, RowStoreError)
    assert 'connection reset' in str(result.error)


def test_failure_on_first_page():
    store = MemoryRowStore(numbered_rows(10), fail_on_call=1)

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD))

    assert result.complete is False
    assert result.rows == []
    assert result.pages == 0


def test_pagination_limit():
    store = MemoryRowStore(numbered_rows(25))
    context = EngineContext(page_size=10, max_pages=2)

    with pytest.raises(PaginationLimitExceeded) as exc_info:
        asyncio.run(fetch_all_rows(store, 'p1', PERIOD, context=context))

    assert exc_info.value.max_pages == 2
    assert exc_info.value.rows_collected == 20
    # Третий запрос - проверка одной строкой, что данные не кончились
    assert store.calls == [(0, 10), (10, 10), (20, 1)]


def test_data_filling_exactly_max_pages_is_complete():
    store = MemoryRowStore(numbered_rows(20))
    context = EngineContext(page_size=10, max_pages=2)

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD, context=context))

    assert result.complete is True
    assert result.pages == 2
    assert [row.spend for row in result.rows] == list(range(20))
    assert store.calls == [(0, 10), (10, 10), (20, 1)]


def test_pagination_limit_not_hit_when_last_page_short():
    store = MemoryRowStore(numbered_rows(15))
    context = EngineContext(page_size=10, max_pages=2)

    result = asyncio.run(fetch_all_rows(store, 'p1', PERIOD, context=context))

    assert len(result.rows) == 15


def test_range_and_entity_filters_are_passed():
    rows = numbered_rows(9) + numbered_rows(5, day=PERIOD.since - timedelta(days=1))
    store = MemoryRowStore(rows)

    result = asyncio.run(fetch_all_rows(
        store, 'p1', PERIOD, entity=EntityScope(level='ad', entity_id='ad_1')
    ))

    assert [row.spend for row in result.rows] == [1, 4, 7]
