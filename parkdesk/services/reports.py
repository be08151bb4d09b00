# parkdesk/services/reports.py
"""
Exportable reports over the current snapshot.

Kinds:   occupancy | payments | outstanding (pending + overdue)
Formats: CSV  - UTF-8 with BOM, ';' separated, every cell quoted, CRLF rows
         HTML - standalone document with an escaped table
"""

import csv
import html
import io
from datetime import date
from typing import Optional
from parkdesk.config import settings
from parkdesk.schemas.types import PaymentStatus
from parkdesk.services.app_state import AppState

REPORT_KINDS = ("occupancy", "payments", "outstanding")

TITLES = {
    "occupancy": "Space Occupancy Report",
    "payments": "Payments Report",
    "outstanding": "Outstanding Payments Report",
}

STATUS_LABELS = {
    PaymentStatus.PAID: "Paid",
    PaymentStatus.PENDING: "Pending",
    PaymentStatus.OVERDUE: "Overdue",
}

UNKNOWN_USER = "Unknown user"
BOM = "\ufeff"


def format_date(day: date) -> str:
    return day.strftime("%d.%m.%Y")


def format_amount(amount: float, currency: Optional[str] = None) -> str:
    return f"{amount:.2f} {currency or settings.CURRENCY}"


def build_report(kind: str, state: AppState) -> list[list[str]]:
    """Header row followed by data rows, all cells as strings."""
    if kind == "occupancy":
        rows = [["Space", "Type", "Status", "User", "Email", "Phone"]]
        for space in state.parking_spaces:
            user = state.find_user(space.assigned_user_id)
            rows.append([
                space.number,
                space.type.value,
                "Occupied" if space.occupied else "Free",
                user.name if user else "-",
                user.email if user else "-",
                (user.phone or "-") if user else "-",
            ])
        return rows

    if kind == "payments":
        rows = [["Date", "User", "Amount", "Status", "Description"]]
        for p in state.payments:
            user = state.find_user(p.user_id)
            rows.append([
                format_date(p.date),
                user.name if user else UNKNOWN_USER,
                format_amount(p.amount),
                STATUS_LABELS[p.status],
                p.description or "-",
            ])
        return rows

    if kind == "outstanding":
        rows = [["User", "Email", "Phone", "Amount", "Date", "Status", "Description"]]
        for p in state.payments:
            if p.status == PaymentStatus.PAID:
                continue
            user = state.find_user(p.user_id)
            rows.append([
                user.name if user else UNKNOWN_USER,
                user.email if user else "-",
                (user.phone or "-") if user else "-",
                format_amount(p.amount),
                format_date(p.date),
                STATUS_LABELS[p.status],
                p.description or "-",
            ])
        return rows

    raise ValueError(f"Unknown report kind '{kind}'")


def to_csv(rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=";", quotechar='"',
                        quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    writer.writerows(rows)
    # Rows are joined with CRLF but the file does not end with one
    return BOM + buffer.getvalue()[:-2]


def to_html(rows: list[list[str]], title: str, generated_on: date) -> str:
    header, body = rows[0], rows[1:]
    head_cells = "".join(f"<th>{html.escape(c)}</th>" for c in header)
    body_rows = "\n".join(
        "<tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in row) + "</tr>"
        for row in body
    )
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>{html.escape(title)}</title>
<style>
body {{ font-family: Arial, sans-serif; margin: 20px; color: #333; }}
table {{ width: 100%; border-collapse: collapse; margin-top: 20px; }}
th, td {{ border: 1px solid #ddd; padding: 8px; text-align: left; font-size: 12px; }}
th {{ background-color: #f2f2f2; font-weight: bold; }}
.header {{ text-align: center; margin-bottom: 30px; }}
.date {{ color: #666; font-size: 14px; }}
</style>
</head>
<body>
<div class="header">
<h1>{html.escape(title)}</h1>
<p class="date">Generated: {format_date(generated_on)}</p>
</div>
<table>
<thead><tr>{head_cells}</tr></thead>
<tbody>
{body_rows}
</tbody>
</table>
</body>
</html>
"""


def export_report(kind: str, state: AppState, fmt: str = "csv",
                  today: Optional[date] = None) -> tuple[str, str, str]:
    """Returns (filename, media_type, content)."""
    today = today or date.today()
    rows = build_report(kind, state)
    if fmt == "csv":
        return f"{kind}_report_{today.isoformat()}.csv", "text/csv; charset=utf-8", to_csv(rows)
    if fmt == "html":
        return (f"{kind}_report_{today.isoformat()}.html", "text/html; charset=utf-8",
                to_html(rows, TITLES[kind], today))
    raise ValueError(f"Unknown export format '{fmt}'")
