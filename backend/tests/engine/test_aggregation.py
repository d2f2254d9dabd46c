"""Tests for turning order records into report payloads."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from ticketing.reporting import (
    EventRecord,
    InsufficientDataError,
    OrderRecord,
    build_all_time_report,
    build_daily_report,
    build_monthly_report,
    build_weekly_report,
    week_bounds,
)
from ticketing.reporting.aggregation import INSUFFICIENT_DATA, occupancy_percentage


class TestOccupancy:
    def test_weighted_by_seats(self, concert_events):
        # (80 + 0) / (100 + 50)
        assert occupancy_percentage(concert_events) == pytest.approx(53.3333, rel=1e-4)

    def test_no_seats(self):
        assert occupancy_percentage([]) == 0.0
        assert occupancy_percentage([EventRecord("e", "Empty", 0, 0)]) == 0.0


class TestDaily:
    def test_hourly_buckets(self, concert_orders, concert_events):
        report = build_daily_report(concert_orders, concert_events, date(2024, 5, 1))
        assert report.tickets_sold == 5
        assert report.revenue == 250.0
        assert len(report.sales) == 24
        assert report.sales[10].count == 5
        assert report.sales[10].amount == 250.0
        assert report.sales[18].count == 0
        assert report.date == date(2024, 5, 1)

    def test_occupancy_counts_each_event_once(self, concert_orders, concert_events):
        report = build_daily_report(concert_orders, concert_events, date(2024, 5, 1))
        assert report.occupancy_percentage == pytest.approx(80.0)

    def test_naive_timestamps_are_utc(self, concert_events):
        orders = [OrderRecord("o", "e1", "Jazz Night", datetime(2024, 5, 1, 23, 30), "confirmed", 1, 10.0)]
        report = build_daily_report(orders, concert_events, date(2024, 5, 1))
        assert report.sales[23].count == 1

    def test_empty_day(self, concert_orders, concert_events):
        with pytest.raises(InsufficientDataError) as exc:
            build_daily_report(concert_orders, concert_events, date(2024, 5, 2))
        assert str(exc.value) == INSUFFICIENT_DATA

    def test_pending_only_day_is_empty(self, concert_events):
        orders = [OrderRecord("o", "e1", "Jazz", datetime(2024, 5, 1, 9), "pending", 1, 10.0)]
        with pytest.raises(InsufficientDataError):
            build_daily_report(orders, concert_events, date(2024, 5, 1))


class TestWeekly:
    def test_week_bounds(self):
        assert week_bounds(date(2024, 5, 1)) == (date(2024, 4, 29), date(2024, 5, 5))
        assert week_bounds(date(2024, 4, 29)) == (date(2024, 4, 29), date(2024, 5, 5))
        assert week_bounds(date(2024, 5, 5)) == (date(2024, 4, 29), date(2024, 5, 5))

    def test_weekday_buckets(self, concert_orders, concert_events):
        report = build_weekly_report(concert_orders, concert_events, date(2024, 5, 2))
        assert (report.start_date, report.end_date) == (date(2024, 4, 29), date(2024, 5, 5))
        assert [s.day for s in report.sales] == [
            "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
        ]
        by_day = {s.day: (s.count, s.amount) for s in report.sales}
        assert by_day["Wednesday"] == (5, 250.0)
        assert by_day["Friday"] == (1, 50.0)
        assert by_day["Tuesday"] == (0, 0.0)
        assert report.tickets_sold == 6
        assert report.revenue == 300.0


class TestMonthly:
    def test_day_buckets(self, concert_orders, concert_events):
        report = build_monthly_report(concert_orders, concert_events, 2024, 5)
        assert len(report.sales) == 31
        assert report.sales[0].day == 1
        assert report.sales[0].count == 5
        assert report.sales[19].amount == 80.0
        assert report.tickets_sold == 8
        assert report.revenue == 380.0
        # both events had confirmed sales this month
        assert report.occupancy_percentage == pytest.approx(80 / 150 * 100)

    def test_february_leap_year(self, concert_events):
        orders = [OrderRecord("o", "e1", "Jazz", datetime(2024, 2, 29, 12), "confirmed", 1, 1.0)]
        report = build_monthly_report(orders, concert_events, 2024, 2)
        assert len(report.sales) == 29
        assert report.sales[28].count == 1

    def test_empty_month(self, concert_orders, concert_events):
        with pytest.raises(InsufficientDataError):
            build_monthly_report(concert_orders, concert_events, 2023, 5)


class TestAllTime:
    def test_totals(self, concert_orders, concert_events):
        report = build_all_time_report(concert_orders, concert_events)
        assert report.total_orders == 6
        assert report.confirmed_orders == 4
        assert report.tickets_sold == 8
        assert report.revenue == 380.0
        assert report.occupancy_percentage == pytest.approx(80 / 150 * 100)

    def test_orders_sorted_and_grouped(self, concert_orders, concert_events):
        report = build_all_time_report(concert_orders, concert_events)
        assert report.orders[0].id == "o6"
        assert list(report.orders_by_date) == [
            "2024-04-30", "2024-05-01", "2024-05-03", "2024-05-20",
        ]
        assert len(report.orders_by_date["2024-05-01"]) == 3

    def test_event_summary(self, concert_orders, concert_events):
        report = build_all_time_report(concert_orders, concert_events)
        jazz, rock = report.event_summary
        assert (jazz.total_orders, jazz.confirmed_orders, jazz.tickets_sold, jazz.revenue) == (
            4, 3, 6, 300.0,
        )
        assert jazz.occupancy_percentage == pytest.approx(80.0)
        assert rock.tickets_sold == 2
        assert rock.occupancy_percentage == 0.0

    def test_occupancy_by_date(self, concert_orders, concert_events):
        report = build_all_time_report(concert_orders, concert_events)
        assert report.occupancy_by_date["2024-05-01"] == pytest.approx(80.0)
        assert report.occupancy_by_date["2024-04-30"] == 0.0

    def test_empty_scope_is_all_zero(self):
        report = build_all_time_report([], [])
        assert report.tickets_sold == 0
        assert report.revenue == 0.0
        assert report.occupancy_percentage == 0.0
        assert report.orders == []
        assert report.event_summary == []
