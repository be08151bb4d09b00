# tests/test_reports.py
"""Unit tests for report rows and CSV / HTML rendering."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date
from parkdesk.schemas.types import PaymentStatus, SpaceType
from parkdesk.schemas.user import User
from parkdesk.schemas.parking_space import ParkingSpace
from parkdesk.schemas.payment import Payment
from parkdesk.services.app_state import AppState
from parkdesk.services.reports import (
    BOM, UNKNOWN_USER, build_report, export_report, format_amount, format_date, to_csv, to_html,
)


@pytest.fixture
def state():
    return AppState(
        users=[User(id="A", name='Anna "Ania" Nowak', email="a@x.pl")],
        parking_spaces=[
            ParkingSpace(id="s1", number="S1", type=SpaceType.PASSENGER_CAR, occupied=True, assigned_user_id="A"),
            ParkingSpace(id="s2", number="S2", type=SpaceType.VAN),
        ],
        payments=[
            Payment(id="p1", user_id="A", amount=100, date=date(2024, 3, 5),
                    status=PaymentStatus.PENDING, description="Payment for March 2024 - Space S1"),
            Payment(id="p2", user_id="gone", amount=12.5, date=date(2024, 2, 1),
                    status=PaymentStatus.PAID, description="<b>Key card</b>"),
        ],
    )


class TestFormatting:
    def test_date(self):
        assert format_date(date(2024, 3, 5)) == "05.03.2024"

    def test_amount(self):
        assert format_amount(12.5, "zł") == "12.50 zł"


class TestBuildReport:
    def test_occupancy(self, state):
        rows = build_report("occupancy", state)
        assert rows[0][0] == "Space"
        assert rows[1][:4] == ["S1", "passenger-car", "Occupied", 'Anna "Ania" Nowak']
        assert rows[1][5] == "-"
        assert rows[2][2:] == ["Free", "-", "-", "-"]

    def test_payments_uses_placeholder_for_missing_user(self, state):
        rows = build_report("payments", state)
        assert rows[2][1] == UNKNOWN_USER
        assert rows[2][3] == "Paid"

    def test_outstanding_skips_paid(self, state):
        rows = build_report("outstanding", state)
        assert len(rows) == 2
        assert rows[1][5] == "Pending"

    def test_unknown_kind(self, state):
        with pytest.raises(ValueError):
            build_report("invoices", state)


class TestCsv:
    def test_layout(self):
        content = to_csv([["a", "b"], ['say "hi"', "x;y"]])
        assert content.startswith(BOM)
        assert content[1:] == '"a";"b"\r\n"say ""hi""";"x;y"'

    def test_no_trailing_line_break(self, state):
        content = to_csv(build_report("payments", state))
        assert not content.endswith("\r\n")
        assert content.count("\r\n") == 2


class TestHtml:
    def test_cells_are_escaped(self, state):
        content = to_html(build_report("payments", state), "Payments Report", date(2024, 3, 5))
        assert "&lt;b&gt;Key card&lt;/b&gt;" in content
        assert "<b>Key card</b>" not in content
        assert "Generated: 05.03.2024" in content


class TestExport:
    def test_csv_filename(self, state):
        filename, media_type, _ = export_report("occupancy", state, "csv", date(2024, 3, 5))
        assert filename == "occupancy_report_2024-03-05.csv"
        assert media_type.startswith("text/csv")

    def test_unknown_format(self, state):
        with pytest.raises(ValueError):
            export_report("occupancy", state, "pdf")
