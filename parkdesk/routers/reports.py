# parkdesk/routers/reports.py
"""Dashboard statistics and report views / file exports."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from parkdesk.dependencies import get_app_state
from parkdesk.services.aggregates import dashboard_stats
from parkdesk.services.app_state import AppState
from parkdesk.services.reports import REPORT_KINDS, build_report, export_report

router = APIRouter()


def _check_kind(kind: str):
    if kind not in REPORT_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown report '{kind}'. Use one of {list(REPORT_KINDS)}")


@router.get("/dashboard", summary="Occupancy, revenue and outstanding payment counts")
def get_dashboard(state: AppState = Depends(get_app_state)):
    return dashboard_stats(state.parking_spaces, state.users, state.payments)


@router.get("/reports/{kind}", summary="Report rows as JSON")
def get_report(kind: str, state: AppState = Depends(get_app_state)):
    _check_kind(kind)
    rows = build_report(kind, state)
    header = rows[0]
    return {"kind": kind, "columns": header, "rows": [dict(zip(header, r)) for r in rows[1:]]}


@router.get("/reports/{kind}/export", summary="Download a report as CSV or HTML")
def export(kind: str, format: str = "csv", state: AppState = Depends(get_app_state)):
    _check_kind(kind)
    if format not in ("csv", "html"):
        raise HTTPException(status_code=422, detail="format must be csv or html")
    filename, media_type, content = export_report(kind, state, format)
    return Response(
        content=content.encode("utf-8"),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
