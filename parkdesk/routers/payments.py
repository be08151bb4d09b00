# parkdesk/routers/payments.py
"""Payments - filtered listing, manual entry, status changes, monthly generation, overdue sweep."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from parkdesk.dependencies import get_data_service, store_failure
from parkdesk.schemas.payment import (
    LifecycleResult, Payment, PaymentCreate, PaymentSummary, PaymentUpdate,
)
from parkdesk.services.aggregates import filter_payments, payment_summary
from parkdesk.services.data_service import DataService

router = APIRouter()


@router.get("/payments", response_model=list[Payment], summary="List payments, newest first")
def list_payments(search: Optional[str] = None,
                  status_filter: Optional[str] = Query(None, alias="status"),
                  date_from: Optional[date] = None, date_to: Optional[date] = None,
                  service: DataService = Depends(get_data_service)):
    """Filter by user name / description, status ('all' for any) and inclusive date range."""
    state = service.state
    return filter_payments(state.payments, date_from, date_to, status_filter, search, state.users)


@router.get("/payments/summary", response_model=PaymentSummary, summary="Totals per status")
def get_summary(date_from: Optional[date] = None, date_to: Optional[date] = None,
                service: DataService = Depends(get_data_service)):
    return payment_summary(service.state.payments, date_from, date_to)


@router.post("/payments", status_code=status.HTTP_201_CREATED, summary="Add a manual payment")
async def add_payment(body: PaymentCreate, service: DataService = Depends(get_data_service)):
    if not service.state.find_user(body.user_id):
        raise HTTPException(status_code=404, detail=f"User '{body.user_id}' not found")
    if not await service.add_payment(body):
        raise store_failure(service)
    return {"status": "created", "user_id": body.user_id}


@router.patch("/payments/{payment_id}", response_model=Payment, summary="Change a payment")
async def update_payment(payment_id: str, body: PaymentUpdate,
                         service: DataService = Depends(get_data_service)):
    if not service.state.find_payment(payment_id):
        raise HTTPException(status_code=404, detail=f"Payment '{payment_id}' not found")
    if not await service.update_payment(payment_id, body):
        raise store_failure(service)
    return service.state.find_payment(payment_id)


@router.post("/payments/generate", response_model=LifecycleResult,
             summary="Create this month's payments for every occupied space")
async def generate_payments(service: DataService = Depends(get_data_service)):
    """
    Zero is a normal answer: it means every occupied space is already billed.
    Failed inserts do not stop the run; the last failure is reported in `error`.
    """
    service.state.clear_error()
    created = await service.generate_monthly_payments()
    return LifecycleResult(processed=created, error=service.state.error)


@router.post("/payments/mark-overdue", response_model=LifecycleResult,
             summary="Mark pending payments older than one month as overdue")
async def mark_overdue(service: DataService = Depends(get_data_service)):
    service.state.clear_error()
    updated = await service.mark_overdue_payments()
    return LifecycleResult(processed=updated, error=service.state.error)
