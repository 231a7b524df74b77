"""Rent payment router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.response import DataResponse
from propertyhub.db.base import get_db
from propertyhub.domain.user import User
from propertyhub.routers.deps import get_current_user, require_staff
from propertyhub.schemas.tenancy import (
    RecordPaymentRequest,
    RentPaymentCreate,
    RentPaymentOut,
    RentPaymentUpdate,
)
from propertyhub.services.tenancy import TenancyService

router = APIRouter(prefix="/rent-payments", tags=["Rent Payments"])


@router.post("", response_model=DataResponse[RentPaymentOut], status_code=status.HTTP_201_CREATED)
async def create_payment(
    body: RentPaymentCreate,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    payment = await TenancyService(session).create_payment(body)
    return {"data": RentPaymentOut.model_validate(payment)}


@router.get("/overdue", response_model=DataResponse[list[RentPaymentOut]])
async def overdue_payments(
    tenancy_id: Optional[str] = Query(default=None, alias="tenancyId"),
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    payments = await TenancyService(session).overdue_payments(tenancy_id)
    return {"data": [RentPaymentOut.model_validate(p) for p in payments]}


@router.get("/{payment_id}", response_model=DataResponse[RentPaymentOut])
async def get_payment(
    payment_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    payment = await TenancyService(session).get_payment(payment_id)
    return {"data": RentPaymentOut.model_validate(payment)}


@router.put("/{payment_id}", response_model=DataResponse[RentPaymentOut])
async def update_payment(
    payment_id: str,
    body: RentPaymentUpdate,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    payment = await TenancyService(session).update_payment(payment_id, body)
    return {"data": RentPaymentOut.model_validate(payment)}


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: str,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    await TenancyService(session).delete_payment(payment_id)


@router.post("/{payment_id}/record-payment", response_model=DataResponse[RentPaymentOut])
async def record_payment(
    payment_id: str,
    body: RecordPaymentRequest,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    payment = await TenancyService(session).record_payment(payment_id, body)
    return {"data": RentPaymentOut.model_validate(payment)}
