"""
Working-hours model: which instants and windows fall inside business hours.
"""

from typing import Dict, Iterable, List, Union

from .models import AppointmentWindow, WorkingHoursRule
from .timeutils import DateLike, TimeLike, day_of_week, parse_time


class WorkingHours:
    """
    A shop's weekly opening hours, at most one rule per day of week.

    Days without a rule are closed.
    """

    def __init__(self, rules: Iterable[WorkingHoursRule] = ()):
        self._rules: Dict[int, WorkingHoursRule] = {}
        for rule in rules:
            if rule.day_of_week in self._rules:
                raise ValueError(f"Duplicate working hours for day {rule.day_of_week}")
            self._rules[rule.day_of_week] = rule

    @classmethod
    def from_records(cls, records) -> "WorkingHours":
        return cls(WorkingHoursRule.from_record(record) for record in records)

    def rule_for_day(self, day: int) -> WorkingHoursRule:
        return self._rules.get(day) or WorkingHoursRule.closed(day)

    def rule_for(self, date: DateLike) -> WorkingHoursRule:
        """Get the rule that applies on a specific date."""
        return self.rule_for_day(day_of_week(date))

    def is_working_day(self, date: DateLike) -> bool:
        return not self.rule_for(date).is_closed

    def weekly_rules(self) -> List[WorkingHoursRule]:
        """One rule per day, Sunday first, closed where unspecified."""
        return [self.rule_for_day(day) for day in range(7)]

    def is_open_at(self, date: DateLike, time: TimeLike) -> bool:
        """
        Check if the shop is open at an instant.

        The closing instant itself counts as open, so a last appointment may
        end exactly at close.
        """
        rule = self.rule_for(date)
        if rule.is_closed:
            return False
        return rule.open_time <= parse_time(time) <= rule.close_time

    def is_window_within_hours(self, window: AppointmentWindow) -> bool:
        """Check that a window starts and ends inside one day's open period."""
        rule = self.rule_for(window.date)
        if rule.is_closed:
            return False
        return (
            rule.open_time <= window.start_time
            and window.start_time <= window.end_time
            and window.end_time <= rule.close_time
        )


RulesLike = Union[WorkingHours, Iterable[WorkingHoursRule]]


def _as_working_hours(rules: RulesLike) -> WorkingHours:
    if isinstance(rules, WorkingHours):
        return rules
    return WorkingHours(rules)


def is_open_at(rules: RulesLike, date: DateLike, time: TimeLike) -> bool:
    return _as_working_hours(rules).is_open_at(date, time)


def is_window_within_hours(rules: RulesLike, window: AppointmentWindow) -> bool:
    return _as_working_hours(rules).is_window_within_hours(window)
