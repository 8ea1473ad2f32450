"""
In-memory shop data store, optionally loaded from a YAML fixture.

Stands in for the managed backend when running the CLI locally or in tests.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..config import WorkingHoursConfig, load_yaml_mapping
from ..domain.exceptions import ConfigError
from ..domain.models import ExistingAppointment, PaymentTransaction
from ..domain.timeutils import DateLike, parse_date
from ..domain.working_hours import WorkingHours

logger = logging.getLogger(__name__)

DEFAULT_SHOP_ID = "default"


class InMemoryShopStore:
    """
    Store holding working hours, appointments and payments in memory.

    Times must be quoted in YAML; unquoted ``10:00`` is read as a
    base-60 integer.

    Fixture layout::

        working_hours:
          - {day_of_week: 1, open_time: "09:00", close_time: "17:00"}
        appointments:
          - {id: a1, date: 2024-01-09, start_time: "10:00", end_time: "11:00", status: confirmed}
        orders:
          ORD-1:
            - {id: p1, amount_cents: 10000, refunded_amount_cents: 0, type: payment}
    """

    def __init__(
        self,
        working_hours: Optional[Mapping[str, WorkingHours]] = None,
        appointments: Optional[Mapping[str, List[ExistingAppointment]]] = None,
        transactions: Optional[Mapping[str, List[PaymentTransaction]]] = None,
    ):
        self._working_hours: Dict[str, WorkingHours] = dict(working_hours or {})
        self._appointments: Dict[str, List[ExistingAppointment]] = {
            shop_id: list(items) for shop_id, items in (appointments or {}).items()
        }
        self._transactions: Dict[str, List[PaymentTransaction]] = {
            order_id: list(items) for order_id, items in (transactions or {}).items()
        }

    @classmethod
    def load_from_yaml(
        cls,
        data_path: Path,
        default_working_hours: Optional[WorkingHours] = None,
        shop_id: str = DEFAULT_SHOP_ID,
    ) -> "InMemoryShopStore":
        """
        Load a fixture file.

        Appointment rows that cannot be read are skipped with a warning;
        malformed payment rows fail the load.

        Raises:
            FileNotFoundError: If the fixture doesn't exist
            ConfigError: If the fixture is invalid
        """
        if not data_path.exists():
            raise FileNotFoundError(f"Data file not found: {data_path}")

        data = load_yaml_mapping(data_path)
        return cls.from_mapping(data, default_working_hours=default_working_hours, shop_id=shop_id)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        default_working_hours: Optional[WorkingHours] = None,
        shop_id: str = DEFAULT_SHOP_ID,
    ) -> "InMemoryShopStore":
        store = cls()

        try:
            if data.get("working_hours"):
                rules = [WorkingHoursConfig(**record).to_rule() for record in data["working_hours"]]
                store.set_working_hours(shop_id, WorkingHours(rules))
            elif default_working_hours is not None:
                store.set_working_hours(shop_id, default_working_hours)

            for record in data.get("appointments") or []:
                try:
                    appointment = ExistingAppointment.from_record(record)
                except (KeyError, ValueError) as e:
                    # Skip invalid rows
                    logger.warning("Skipping appointment row %r: %s", record, e)
                    continue
                store.add_appointment(record.get("shop_id", shop_id), appointment)

            for order_id, records in (data.get("orders") or {}).items():
                for record in records or []:
                    store.add_transaction(str(order_id), PaymentTransaction.from_record(record))
        except (KeyError, ValueError) as exc:
            raise ConfigError(f"Invalid shop data: {exc}") from exc

        return store

    def set_working_hours(self, shop_id: str, working_hours: WorkingHours) -> None:
        self._working_hours[shop_id] = working_hours

    def add_appointment(self, shop_id: str, appointment: ExistingAppointment) -> None:
        self._appointments.setdefault(shop_id, []).append(appointment)

    def add_transaction(self, order_id: str, transaction: PaymentTransaction) -> None:
        self._transactions.setdefault(order_id, []).append(transaction)

    async def get_working_hours(self, shop_id: str) -> WorkingHours:
        return self._working_hours.get(shop_id) or WorkingHours()

    async def get_appointments(self, shop_id: str, date: DateLike) -> List[ExistingAppointment]:
        day = parse_date(date)
        return [
            appointment for appointment in self._appointments.get(shop_id, [])
            if appointment.date == day
        ]

    async def get_transactions(self, order_id: str) -> List[PaymentTransaction]:
        return list(self._transactions.get(order_id, []))
