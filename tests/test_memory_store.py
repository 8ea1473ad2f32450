"""
Tests for the in-memory store adapter.
"""

import asyncio
import logging

import pytest

from shopcalendar.adapters.memory_store import InMemoryShopStore
from shopcalendar.domain.exceptions import ConfigError
from shopcalendar.domain.models import AppointmentStatus, WorkingHoursRule
from shopcalendar.domain.timeutils import TimeOfDay
from shopcalendar.domain.working_hours import WorkingHours

DATA_YAML = """
working_hours:
  - {day_of_week: 2, open_time: "09:00", close_time: "17:00"}
appointments:
  - {id: a1, date: 2024-01-09, start_time: "10:00", end_time: "11:00", status: confirmed}
  - {id: a2, date: 2024-01-10, start_time: "10:00", end_time: "11:00"}
  - {id: a3, shop_id: other, date: 2024-01-09, start_time: "12:00", end_time: "13:00"}
  - {id: broken, start_time: "10:00", end_time: "11:00"}
orders:
  ORD-1:
    - {id: p1, amount_cents: 10000, refunded_amount_cents: 5000, type: payment}
    - {id: r1, amount_cents: -5000, type: refund}
"""


class TestInMemoryShopStore:
    """Tests for InMemoryShopStore."""

    def test_load_from_yaml(self, tmp_path, caplog):
        path = tmp_path / "shop_data.yaml"
        path.write_text(DATA_YAML, encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            store = InMemoryShopStore.load_from_yaml(path)

        appointments = asyncio.run(store.get_appointments("default", "2024-01-09"))
        assert [a.id for a in appointments] == ["a1"]
        assert appointments[0].status is AppointmentStatus.CONFIRMED

        other = asyncio.run(store.get_appointments("other", "2024-01-09"))
        assert [a.id for a in other] == ["a3"]

        transactions = asyncio.run(store.get_transactions("ORD-1"))
        assert len(transactions) == 2

        working_hours = asyncio.run(store.get_working_hours("default"))
        assert working_hours.is_open_at("2024-01-09", "09:00")

        assert "Skipping appointment row" in caplog.text

    def test_default_working_hours_used_when_fixture_has_none(self, tmp_path):
        path = tmp_path / "shop_data.yaml"
        path.write_text("appointments: []\n", encoding="utf-8")
        default = WorkingHours([WorkingHoursRule(day_of_week=1, open_time=TimeOfDay.of(8), close_time=TimeOfDay.of(12))])

        store = InMemoryShopStore.load_from_yaml(path, default_working_hours=default, shop_id="s")

        assert asyncio.run(store.get_working_hours("s")) is default

    def test_unknown_shop_is_closed_and_empty(self):
        store = InMemoryShopStore()

        working_hours = asyncio.run(store.get_working_hours("missing"))

        assert all(rule.is_closed for rule in working_hours.weekly_rules())
        assert asyncio.run(store.get_appointments("missing", "2024-01-09")) == []
        assert asyncio.run(store.get_transactions("missing")) == []

    def test_malformed_payment_fails_load(self, tmp_path):
        path = tmp_path / "shop_data.yaml"
        path.write_text("orders:\n  ORD-1:\n    - {id: p1, status: completed}\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="amount_cents"):
            InMemoryShopStore.load_from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            InMemoryShopStore.load_from_yaml(tmp_path / "nope.yaml")
