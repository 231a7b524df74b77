"""Tenancy agreement router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.pagination import PaginationParams
from propertyhub.core.response import DataResponse, ListResponse, paginated
from propertyhub.db.base import get_db
from propertyhub.domain.enums import TenancyStatus
from propertyhub.domain.user import User
from propertyhub.routers.deps import get_current_user, require_staff
from propertyhub.schemas.tenancy import (
    RentPaymentOut,
    TenancyCreate,
    TenancyFinancialSummary,
    TenancyOut,
    TenancyUpdate,
)
from propertyhub.services.tenancy import TenancyService

router = APIRouter(prefix="/tenancies", tags=["Tenancies"])


@router.get("", response_model=ListResponse[TenancyOut])
async def list_tenancies(
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    tenant_id: Optional[str] = Query(default=None, alias="tenantId"),
    landlord_id: Optional[str] = Query(default=None, alias="landlordId"),
    filter_status: Optional[TenancyStatus] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items, total = await TenancyService(session).list_tenancies(
        pagination,
        property_id=property_id,
        tenant_id=tenant_id,
        landlord_id=landlord_id,
        status=filter_status.value if filter_status else None,
    )
    return paginated(
        [TenancyOut.model_validate(t) for t in items], total, pagination.page, pagination.limit
    )


@router.post("", response_model=DataResponse[TenancyOut], status_code=status.HTTP_201_CREATED)
async def create_tenancy(
    body: TenancyCreate,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    tenancy = await TenancyService(session).create_tenancy(body)
    return {"data": TenancyOut.model_validate(tenancy)}


@router.get("/active", response_model=DataResponse[list[TenancyOut]])
async def active_tenancies(
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items = await TenancyService(session).active_tenancies()
    return {"data": [TenancyOut.model_validate(t) for t in items]}


@router.get("/{tenancy_id}", response_model=DataResponse[TenancyOut])
async def get_tenancy(
    tenancy_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": TenancyOut.model_validate(await TenancyService(session).get_tenancy(tenancy_id))}


@router.put("/{tenancy_id}", response_model=DataResponse[TenancyOut])
async def update_tenancy(
    tenancy_id: str,
    body: TenancyUpdate,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    tenancy = await TenancyService(session).update_tenancy(tenancy_id, body)
    return {"data": TenancyOut.model_validate(tenancy)}


@router.delete("/{tenancy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenancy(
    tenancy_id: str,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    await TenancyService(session).delete_tenancy(tenancy_id)


@router.get(
    "/{tenancy_id}/financial-summary", response_model=DataResponse[TenancyFinancialSummary]
)
async def financial_summary(
    tenancy_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await TenancyService(session).financial_summary(tenancy_id)}


@router.post(
    "/{tenancy_id}/generate-rent-schedule",
    response_model=DataResponse[list[RentPaymentOut]],
    status_code=status.HTTP_201_CREATED,
)
async def generate_rent_schedule(
    tenancy_id: str,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    payments = await TenancyService(session).generate_rent_schedule(tenancy_id)
    return {"data": [RentPaymentOut.model_validate(p) for p in payments]}


@router.get("/{tenancy_id}/rent-payments", response_model=DataResponse[list[RentPaymentOut]])
async def tenancy_rent_payments(
    tenancy_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    payments = await TenancyService(session).list_payments(tenancy_id)
    return {"data": [RentPaymentOut.model_validate(p) for p in payments]}
