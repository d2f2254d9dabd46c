"""Tests for report payload coercion."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from ticketing.reporting import (
    AllTimeReport,
    DailyReport,
    MonthlyReport,
    ReportPayloadError,
    ReportType,
    WeeklyReport,
    coerce_payload,
)


class TestDaily:
    def test_camel_case_with_separate_revenue(self, camel_daily_payload):
        report = coerce_payload("daily", camel_daily_payload)
        assert isinstance(report, DailyReport)
        assert report.tickets_sold == 120
        assert report.revenue == 6000.0
        assert report.occupancy_percentage == 80.0
        assert report.date == date(2024, 5, 1)
        assert report.sales[10].count == 5
        assert report.sales[10].amount == 250.0

    def test_revenue_rows_matched_by_hour_not_position(self):
        report = coerce_payload(ReportType.DAILY, {
            "ticketsSold": 3, "revenue": 30, "occupancyPercentage": 1,
            "salesData": [{"hour": 9, "count": 1}, {"hour": 10, "count": 2}],
            "revenueData": [{"hour": 10, "amount": 20}, {"hour": 9, "amount": 10}],
        })
        assert [(s.hour, s.amount) for s in report.sales] == [(9, 10.0), (10, 20.0)]

    def test_revenue_rows_without_keys_pair_by_position(self):
        report = coerce_payload("daily", {
            "tickets_sold": 3, "revenue": 30, "occupancy_percentage": 1,
            "sales_data": [{"hour": 9, "count": 1}, {"hour": 10, "count": 2}],
            "revenue_data": [{"amount": 10}, {"amount": 20}],
        })
        assert [s.amount for s in report.sales] == [10.0, 20.0]

    def test_amount_on_sales_row_wins(self):
        report = coerce_payload("daily", {
            "ticketsSold": 1, "revenue": 5, "occupancyPercentage": 0,
            "salesData": [{"hour": 9, "count": 1, "amount": 5}],
            "revenueData": [{"hour": 9, "amount": 99}],
        })
        assert report.sales[0].amount == 5.0

    def test_hour_out_of_range(self):
        with pytest.raises(ReportPayloadError, match="hour"):
            coerce_payload("daily", {
                "ticketsSold": 1, "revenue": 1, "occupancyPercentage": 0,
                "salesData": [{"hour": 24, "count": 1}],
            })


class TestOtherTypes:
    def test_weekly(self):
        report = coerce_payload("weekly", {
            "ticketsSold": 4, "revenue": 40, "occupancyPercentage": 10,
            "startDate": "2024-05-06", "endDate": "2024-05-12",
            "salesData": [{"day": "Monday", "count": 4}],
            "revenueData": [{"day": "Monday", "amount": 40}],
        })
        assert isinstance(report, WeeklyReport)
        assert report.start_date == date(2024, 5, 6)
        assert report.end_date == date(2024, 5, 12)
        assert report.sales[0].day == "Monday"
        assert report.sales[0].amount == 40.0

    def test_monthly(self):
        report = coerce_payload("monthly", {
            "ticketsSold": 4, "revenue": 40, "occupancyPercentage": 10,
            "month": 5, "year": 2024,
            "salesData": [{"day": 2, "count": 3}, {"day": 1, "count": 1}],
        })
        assert isinstance(report, MonthlyReport)
        assert (report.month, report.year) == (5, 2024)
        assert [s.day for s in report.sales] == [2, 1]

    def test_month_out_of_range(self):
        with pytest.raises(ReportPayloadError):
            coerce_payload("monthly", {
                "ticketsSold": 0, "revenue": 0, "occupancyPercentage": 0, "month": 13,
            })

    def test_all_time(self):
        report = coerce_payload("all", {
            "ticketsSold": 2, "revenue": 100, "occupancyPercentage": 5,
            "totalOrders": 1, "confirmedOrders": 1,
            "ordersData": [{
                "_id": "abc", "createdAt": "2024-05-01T10:00:00Z", "eventName": "Gala",
                "status": "confirmed", "ticketCount": 2, "totalAmount": 100,
            }],
            "ordersByDate": {"2024-05-01": [{
                "date": "2024-05-01T10:00:00", "eventName": "Gala", "status": "confirmed",
            }]},
            "eventSummary": [{"name": "Gala", "totalOrders": 1, "revenue": 100}],
            "occupancyByDate": {"2024-05-01": 5},
        })
        assert isinstance(report, AllTimeReport)
        order = report.orders[0]
        assert order.id == "abc"
        assert order.date == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)
        assert report.orders_by_date["2024-05-01"][0].date.tzinfo is not None
        assert report.event_summary[0].revenue == 100.0
        assert report.occupancy_by_date == {"2024-05-01": 5.0}


class TestErrors:
    def test_missing_summary_field(self):
        with pytest.raises(ReportPayloadError, match="tickets_sold"):
            coerce_payload("daily", {"revenue": 1, "occupancyPercentage": 0})

    def test_non_numeric(self):
        with pytest.raises(ReportPayloadError):
            coerce_payload("daily", {"ticketsSold": "many", "revenue": 1, "occupancyPercentage": 0})

    def test_unknown_type(self):
        with pytest.raises(ReportPayloadError, match="unknown report type"):
            coerce_payload("yearly", {})

    def test_typed_payload_passes_through(self, daily_payload):
        assert coerce_payload("daily", daily_payload) is daily_payload

    def test_typed_payload_of_wrong_kind(self, daily_payload):
        with pytest.raises(ReportPayloadError, match="expected a weekly report"):
            coerce_payload("weekly", daily_payload)

    def test_not_a_mapping(self):
        with pytest.raises(ReportPayloadError):
            coerce_payload("daily", [1, 2, 3])

    def test_payload_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            coerce_payload("all", {"ticketsSold": 1, "revenue": 1, "occupancyPercentage": 0,
                                   "ordersByDate": ["not", "a", "mapping"]})
