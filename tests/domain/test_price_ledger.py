from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from homeplans.domain.model import Plan
from homeplans.domain.price_ledger import PriceLedger
from tests.helpers.catalog import FakePriceHistoryRepository, FixedClock

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
DAY = timedelta(hours=24)


def _ledger() -> tuple[PriceLedger, FakePriceHistoryRepository]:
    history = FakePriceHistoryRepository()
    return PriceLedger(history, clock=FixedClock(NOW)), history


def test_recorded_change_is_visible_within_window() -> None:
    ledger, _ = _ledger()
    plan_id = uuid4()

    ledger.record_price_change(plan_id, 400_000, 410_000)

    assert ledger.changed_within({plan_id}, DAY) == {plan_id}


def test_window_start_is_inclusive() -> None:
    ledger, _ = _ledger()
    plan_id = uuid4()

    ledger.record_price_change(plan_id, 1.0, 2.0, at=NOW - DAY)

    assert ledger.changed_within([plan_id], DAY) == {plan_id}


def test_events_before_window_start_are_excluded() -> None:
    ledger, _ = _ledger()
    plan_id = uuid4()

    ledger.record_price_change(plan_id, 1.0, 2.0, at=NOW - DAY - timedelta(microseconds=1))

    assert ledger.changed_within([plan_id], DAY) == set()


def test_only_requested_plans_are_returned() -> None:
    ledger, _ = _ledger()
    changed, unchanged, other = uuid4(), uuid4(), uuid4()
    ledger.record_price_change(changed, 1.0, 2.0)
    ledger.record_price_change(other, 1.0, 2.0)

    assert ledger.changed_within([changed, unchanged], DAY) == {changed}


def test_empty_candidates_skip_the_query() -> None:
    ledger, history = _ledger()

    assert ledger.changed_within([], DAY) == set()
    assert history.queries == []


def test_query_is_bounded_by_window_start() -> None:
    ledger, history = _ledger()
    plan_id = uuid4()

    ledger.changed_within([plan_id], timedelta(hours=1))

    assert history.queries == [(frozenset({plan_id}), NOW - timedelta(hours=1))]


def test_negative_window_is_rejected() -> None:
    ledger, _ = _ledger()

    with pytest.raises(ValueError, match="non-negative"):
        ledger.changed_within([uuid4()], timedelta(hours=-1))


def test_events_are_never_merged() -> None:
    ledger, history = _ledger()
    plan_id = uuid4()

    ledger.record_price_change(plan_id, 400_000, 410_000, at=NOW - timedelta(hours=3))
    ledger.record_price_change(plan_id, 410_000, 400_000, at=NOW - timedelta(hours=1))

    assert len(history.items) == 2
    assert [(e.old_price, e.new_price) for e in ledger.history(plan_id)] == [
        (400_000, 410_000),
        (410_000, 400_000),
    ]


def test_observe_price_records_history_before_updating_plan() -> None:
    ledger, history = _ledger()
    plan = Plan(plan_name="The Magnolia", price=400_000.0)
    seen_prices: list[float | None] = []
    original_add = history.add

    def spying_add(event: object) -> None:
        seen_prices.append(plan.price)
        original_add(event)  # type: ignore[arg-type]

    history.add = spying_add  # type: ignore[method-assign]

    changed = ledger.observe_price(plan, 415_000.0)

    assert changed is True
    assert seen_prices == [400_000.0]
    assert plan.price == 415_000.0
    assert plan.last_updated == NOW
    assert history.items[0].old_price == 400_000.0
    assert history.items[0].new_price == 415_000.0


def test_observe_same_price_records_nothing() -> None:
    ledger, history = _ledger()
    earlier = NOW - timedelta(days=3)
    plan = Plan(plan_name="The Magnolia", price=400_000.0, last_updated=earlier)

    assert ledger.observe_price(plan, 400_000.0) is False
    assert history.items == []
    assert plan.last_updated == earlier


def test_first_observation_sets_price_without_event() -> None:
    ledger, history = _ledger()
    plan = Plan(plan_name="The Magnolia")

    assert ledger.observe_price(plan, 399_990.0) is False
    assert plan.price == 399_990.0
    assert plan.last_updated == NOW
    assert history.items == []
