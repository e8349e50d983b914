# backend/tests/test_aggregator.py
from datetime import date, datetime

import pytest

from timegrid.services.slots import BookingConfig, ScheduleValidationError, compute_availability
from timegrid.services.slots.aggregator import (
    CLOSED_DAY_MESSAGE,
    NO_EMPLOYEES_MESSAGE,
    EmployeeWindow,
    apply_limit,
    booking_date_range,
    drop_past,
    eligible_employees,
    group_windows,
    iter_dates,
)
from timegrid.services.slots.types import (
    AvailabilityRules,
    CandidateSlot,
    EmployeeInfo,
    ResourceBookingInfo,
    ResourceInfo,
    ServiceInfo,
    TimeRange,
)

TODAY = date(2026, 10, 19)  # Monday
TOMORROW = date(2026, 10, 20)
EARLY = datetime(2026, 10, 19, 6, 0)

ALL_DAYS = frozenset(range(7))
SERVICE = ServiceInfo(id="10", title="Haircut", duration=30)
ANA = EmployeeInfo(id="1", name="Ana", service_ids=frozenset({"10"}))
BEN = EmployeeInfo(id="2", name="Ben", service_ids=frozenset({"10", "11"}))
CAT = EmployeeInfo(id="3", name="Cat", service_ids=frozenset({"11"}))


def _slot(start, end, available=True):
    return {"startTime": start, "endTime": end, "isAvailable": available}


def _rules(**kwargs):
    kwargs.setdefault("open_days", ALL_DAYS)
    return AvailabilityRules(**kwargs)


def _summary(slots):
    return [
        (s.date.isoformat(), s.start_time, s.end_time, [e.name for e in s.employees])
        for s in slots
    ]


class TestEligibility:

    def test_capability_set_must_contain_service(self):
        assert eligible_employees([ANA, BEN, CAT], "10") == [ANA, BEN]

    def test_explicit_employee_filter_applies_first(self):
        assert eligible_employees([ANA, BEN, CAT], "10", employee_id="2") == [BEN]
        assert eligible_employees([ANA, BEN, CAT], "10", employee_id="3") == []


class TestDateRange:

    def test_unlimited_window_is_one_year(self):
        assert booking_date_range(_rules(), TODAY) == (TODAY, date(2027, 10, 19))

    def test_limited_window(self):
        rules = _rules(limit_booking_window=True, booking_window=7)
        assert booking_date_range(rules, TODAY) == (TODAY, date(2026, 10, 26))

    def test_requested_date_ends_the_range(self):
        assert booking_date_range(_rules(), TODAY, TOMORROW) == (TODAY, TOMORROW)

    def test_requested_date_is_clamped_to_limited_window(self):
        rules = _rules(limit_booking_window=True, booking_window=3)
        assert booking_date_range(rules, TODAY, date(2026, 12, 1)) == (TODAY, date(2026, 10, 22))

    def test_horizon_comes_from_config(self):
        config = BookingConfig(max_horizon_days=10)
        assert booking_date_range(_rules(), TODAY, config=config)[1] == date(2026, 10, 29)

    def test_far_future_requested_date_is_clamped_to_horizon(self):
        assert booking_date_range(_rules(), TODAY, date(9999, 12, 31)) == (TODAY, date(2027, 10, 19))

    def test_iter_dates_stops_at_the_last_representable_day(self):
        assert list(iter_dates(date.max, date.max)) == [date.max]


class TestGrouping:

    def test_same_window_collapses_employees_in_iteration_order(self):
        w = TimeRange.from_strings("09:00", "09:30")
        slots = group_windows([
            EmployeeWindow(TOMORROW, w, "2", "Ben"),
            EmployeeWindow(TOMORROW, w, "1", "Ana"),
        ])
        assert _summary(slots) == [("2026-10-20", "09:00", "09:30", ["Ben", "Ana"])]

    def test_employee_listed_once_per_slot(self):
        w = TimeRange.from_strings("09:30", "10:00")
        slots = group_windows([
            EmployeeWindow(TOMORROW, w, "1", "Ana"),
            EmployeeWindow(TOMORROW, w, "1", "Ana"),
        ])
        assert _summary(slots) == [("2026-10-20", "09:30", "10:00", ["Ana"])]

    def test_sorted_by_date_then_start(self):
        slots = group_windows([
            EmployeeWindow(TOMORROW, TimeRange.from_strings("09:00", "09:30"), "1", "Ana"),
            EmployeeWindow(TODAY, TimeRange.from_strings("10:00", "10:30"), "1", "Ana"),
            EmployeeWindow(TODAY, TimeRange.from_strings("08:30", "09:00"), "1", "Ana"),
        ])
        assert [(s.date, s.start_time) for s in slots] == [
            (TODAY, "08:30"),
            (TODAY, "10:00"),
            (TOMORROW, "09:00"),
        ]


class TestFilters:

    def test_past_slots_today_are_dropped(self):
        slots = [
            CandidateSlot(TODAY, "09:00", "09:30"),
            CandidateSlot(TODAY, "10:00", "10:30"),
            CandidateSlot(TOMORROW, "08:00", "08:30"),
        ]
        kept = drop_past(slots, datetime(2026, 10, 19, 9, 45))
        assert [(s.date, s.start_time) for s in kept] == [(TODAY, "10:00"), (TOMORROW, "08:00")]

    def test_slot_starting_now_is_not_future(self):
        kept = drop_past([CandidateSlot(TODAY, "10:00", "10:30")], datetime(2026, 10, 19, 10, 0))
        assert kept == []

    def test_limit_truncates_and_reports(self):
        slots = [CandidateSlot(TOMORROW, f"{h:02d}:00", f"{h:02d}:30") for h in range(9, 14)]
        displayed, applied = apply_limit(slots, _rules(limit_appointments=True, max_appointments_displayed=2))
        assert len(displayed) == 2
        assert applied is True

    def test_limit_not_applied_when_under_cap(self):
        slots = [CandidateSlot(TOMORROW, "09:00", "09:30")]
        displayed, applied = apply_limit(slots, _rules(limit_appointments=True, max_appointments_displayed=5))
        assert displayed == slots
        assert applied is False


class TestComputeAvailability:

    def test_single_employee_full_hour(self):
        schedules = {("1", TODAY): [_slot("09:00", "09:30"), _slot("09:30", "10:00")]}
        rules = _rules(working_hours_start="09:00", working_hours_end="10:00")

        result = compute_availability(SERVICE, [ANA], schedules, rules, today=TODAY, now=EARLY)

        assert _summary(result.slots) == [
            ("2026-10-19", "09:00", "09:30", ["Ana"]),
            ("2026-10-19", "09:30", "10:00", ["Ana"]),
        ]
        assert result.total == 2
        assert result.limit_applied is False
        assert result.message is None

    def test_two_employees_share_a_slot(self):
        schedules = {
            ("1", TOMORROW): [_slot("09:00", "09:30")],
            ("2", TOMORROW): [_slot("09:00", "10:00")],
        }
        result = compute_availability(SERVICE, [ANA, BEN], schedules, _rules(), today=TODAY, now=EARLY)

        assert _summary(result.slots) == [
            ("2026-10-20", "09:00", "09:30", ["Ana", "Ben"]),
            ("2026-10-20", "09:30", "10:00", ["Ben"]),
        ]

    def test_booked_slot_blocks_overlapping_windows(self):
        schedules = {("1", TOMORROW): [
            _slot("09:00", "09:30"),
            _slot("09:30", "10:00", available=False),
            _slot("10:00", "11:00"),
        ]}
        result = compute_availability(SERVICE, [ANA], schedules, _rules(), today=TODAY, now=EARLY)

        assert [s.start_time for s in result.slots] == ["09:00", "10:00", "10:30"]

    def test_no_qualified_employees(self):
        result = compute_availability(SERVICE, [CAT], {}, _rules(), today=TODAY, now=EARLY)

        assert result.slots == []
        assert result.total == 0
        assert result.message == NO_EMPLOYEES_MESSAGE

    def test_closed_days_are_skipped(self):
        schedules = {("1", TOMORROW): [_slot("09:00", "09:30")]}
        rules = _rules(open_days=frozenset({1}))  # Mondays only; TOMORROW is Tuesday

        result = compute_availability(SERVICE, [ANA], schedules, rules, today=TODAY, now=EARLY)

        assert result.slots == []

    def test_requested_closed_day_explains(self):
        rules = _rules(open_days=frozenset({1}))
        result = compute_availability(
            SERVICE, [ANA], {}, rules, today=TODAY, now=EARLY, requested_date=TOMORROW,
        )
        assert result.message == CLOSED_DAY_MESSAGE

    def test_schedules_outside_window_are_ignored(self):
        far = date(2026, 11, 30)
        schedules = {("1", far): [_slot("09:00", "09:30")]}
        rules = _rules(limit_booking_window=True, booking_window=7)

        result = compute_availability(SERVICE, [ANA], schedules, rules, today=TODAY, now=EARLY)

        assert result.slots == []

    def test_limit_reports_true_total(self):
        schedules = {("1", TOMORROW): [_slot("09:00", "12:00")]}
        rules = _rules(limit_appointments=True, max_appointments_displayed=2)

        result = compute_availability(SERVICE, [ANA], schedules, rules, today=TODAY, now=EARLY)

        assert result.displayed_count == 2
        assert result.total == 6
        assert result.limit_applied is True

    def test_far_future_requested_date_is_bounded(self):
        schedules = {("1", TOMORROW): [_slot("09:00", "09:30")]}

        result = compute_availability(
            SERVICE, [ANA], schedules, _rules(), today=TODAY, now=EARLY, requested_date=date(9999, 12, 31),
        )

        assert _summary(result.slots) == [("2026-10-20", "09:00", "09:30", ["Ana"])]

    def test_overlapping_slots_are_malformed(self):
        schedules = {("1", TOMORROW): [_slot("09:00", "10:00"), _slot("09:30", "10:30")]}

        with pytest.raises(ScheduleValidationError, match="Overlapping slots"):
            compute_availability(SERVICE, [ANA], schedules, _rules(), today=TODAY, now=EARLY)

    def test_malformed_schedule_names_employee_and_date(self):
        schedules = {("1", TOMORROW): [{"startTime": "09:00", "isAvailable": True}]}

        with pytest.raises(ScheduleValidationError, match="employee 1 on 2026-10-20"):
            compute_availability(SERVICE, [ANA], schedules, _rules(), today=TODAY, now=EARLY)

    def test_resources_applied_only_when_enabled(self):
        service = ServiceInfo(id="10", title="Massage", duration=30, resource_type_id="5")
        room = ResourceInfo(id="1", name="Room", quantity=1, resource_type_id="5")
        bookings = [ResourceBookingInfo("1", TOMORROW, TimeRange.from_strings("09:00", "09:30"))]
        schedules = {("1", TOMORROW): [_slot("09:00", "10:00")]}

        enabled = compute_availability(
            service, [ANA], schedules, _rules(use_resources=True),
            today=TODAY, now=EARLY, resources=[room], resource_bookings=bookings,
        )
        disabled = compute_availability(
            service, [ANA], schedules, _rules(use_resources=False),
            today=TODAY, now=EARLY, resources=[room], resource_bookings=bookings,
        )

        assert [s.start_time for s in enabled.slots] == ["09:30"]
        assert enabled.slots[0].requires_resource is True
        assert [s.start_time for s in disabled.slots] == ["09:00", "09:30"]
        assert disabled.slots[0].available_resources is None


def test_service_duration_must_be_positive():
    with pytest.raises(ValueError):
        ServiceInfo(id="1", title="Broken", duration=0)
