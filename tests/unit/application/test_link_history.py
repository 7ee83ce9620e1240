# tests/unit/application/test_link_history.py
from __future__ import annotations

from datetime import date

import pytest

from netwatch_api.dependencies.container import DashboardContainer
from netwatch_api.domain.exceptions.monitoring import InvalidTrendData
from netwatch_api.infrastructure.persistence.trend_history_store import TrendHistoryStore


@pytest.mark.asyncio
async def test_readings_snap_to_biweekly_periods(
    container: DashboardContainer, history: TrendHistoryStore
) -> None:
    await container.record_link_sample.execute("sal-mty-01", 40.0, observed_on=date(2025, 5, 3))
    await container.record_link_sample.execute("sal-mty-01", 42.0, observed_on=date(2025, 5, 9))
    dto = await container.record_link_sample.execute(" sal-mty-01 ", 55.0)

    assert dto.link_id == "sal-mty-01"
    assert [(s.period_start, s.value) for s in dto.samples] == [
        ("2025-05-01", 42.0),
        ("2025-06-01", 55.0),
    ]
    assert len(history.history("link:sal-mty-01")) == 2


@pytest.mark.asyncio
async def test_link_history_is_bounded_to_twelve_periods(container: DashboardContainer) -> None:
    for month in range(1, 13):
        for day in (1, 16):
            observed = date(2024, month, day)
            await container.record_link_sample.execute("l1", float(month), observed_on=observed)

    dto = await container.link_trend.execute("l1")
    assert len(dto.samples) == 12
    assert dto.samples[0].period_start == "2024-07-01"


@pytest.mark.asyncio
async def test_unknown_link_has_empty_analysis(container: DashboardContainer) -> None:
    dto = await container.link_trend.execute("nobody")
    assert dto.samples == []
    assert dto.direction.value == "stable"


@pytest.mark.asyncio
async def test_blank_link_id_is_rejected(container: DashboardContainer) -> None:
    with pytest.raises(InvalidTrendData):
        await container.link_trend.execute("   ")


@pytest.mark.asyncio
async def test_export_import_and_stats(container: DashboardContainer) -> None:
    await container.record_link_sample.execute("a", 10.0, observed_on=date(2025, 1, 20))
    document = await container.export_trends.execute()

    container.history.clear()
    result = await container.import_trends.execute(document)
    assert (result.imported_samples, result.series_count) == (1, 1)

    stats = await container.trend_stats.execute()
    assert stats.series_count == 1
    assert stats.oldest_period == "2025-01-16"
