"""Property router — listings, search, valuation, market analysis, favourites, images."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.pagination import PaginationParams
from propertyhub.core.response import DataResponse, ListResponse, MessageResponse, paginated
from propertyhub.db.base import get_db
from propertyhub.domain.enums import ListingType, PropertyStatus, PropertyType
from propertyhub.domain.user import User
from propertyhub.routers.deps import get_current_user
from propertyhub.schemas.file_upload import FileUploadOut
from propertyhub.schemas.property import (
    CompareRequest,
    EnergyRating,
    FavoriteStatus,
    MarketAnalysisOut,
    NearbyPropertyOut,
    PropertyComparison,
    PropertyCreate,
    PropertyOut,
    PropertyUpdate,
    SavedSearchCreate,
    SavedSearchOut,
    ValuationOut,
    ValuationRequest,
)
from propertyhub.services.property import PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"])


def _out(items) -> list[PropertyOut]:
    return [PropertyOut.model_validate(p) for p in items]


# ------------------------------------------------------------------
# Collection endpoints
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[PropertyOut])
async def search_properties(
    q: Optional[str] = Query(default=None, description="Free text over title, description, address"),
    location: Optional[str] = Query(default=None, description="City, county or postcode prefix"),
    min_price: Optional[Decimal] = Query(default=None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(default=None, alias="maxPrice", ge=0),
    property_type: Optional[PropertyType] = Query(default=None, alias="propertyType"),
    listing_type: Optional[ListingType] = Query(default=None, alias="listingType"),
    filter_status: Optional[PropertyStatus] = Query(default=None, alias="status"),
    min_bedrooms: Optional[int] = Query(default=None, alias="minBedrooms", ge=0),
    min_bathrooms: Optional[int] = Query(default=None, alias="minBathrooms", ge=0),
    agent_id: Optional[str] = Query(default=None, alias="agentId"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await PropertyService(session).search_properties(
        pagination,
        q=q,
        location=location,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        min_bathrooms=min_bathrooms,
        property_type=property_type.value if property_type else None,
        listing_type=listing_type.value if listing_type else None,
        status=filter_status.value if filter_status else None,
        agent_id=agent_id,
    )
    return paginated(_out(items), total, pagination.page, pagination.limit)


@router.post("", response_model=DataResponse[PropertyOut], status_code=status.HTTP_201_CREATED)
async def create_property(
    body: PropertyCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    prop = await PropertyService(session).create_property(body, user)
    return {"data": PropertyOut.model_validate(prop)}


@router.get("/featured", response_model=DataResponse[list[PropertyOut]])
async def featured_properties(session: AsyncSession = Depends(get_db)):
    return {"data": _out(await PropertyService(session).featured())}


@router.get("/recent", response_model=DataResponse[list[PropertyOut]])
async def recent_properties(
    limit: int = Query(default=10, ge=1, le=50),
    session: AsyncSession = Depends(get_db),
):
    return {"data": _out(await PropertyService(session).recent(limit))}


@router.get("/agent/{agent_id}", response_model=ListResponse[PropertyOut])
async def properties_by_agent(
    agent_id: str,
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await PropertyService(session).search_properties(pagination, agent_id=agent_id)
    return paginated(_out(items), total, pagination.page, pagination.limit)


@router.post("/valuation", response_model=DataResponse[ValuationOut])
async def estimate_valuation(
    body: ValuationRequest,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": PropertyService(session).estimate_value(body)}


@router.post("/compare", response_model=DataResponse[PropertyComparison])
async def compare_properties(
    body: CompareRequest,
    session: AsyncSession = Depends(get_db),
):
    return {"data": await PropertyService(session).compare(body.property_ids)}


@router.get("/favorites", response_model=ListResponse[PropertyOut])
async def list_favorites(
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items, total = await PropertyService(session).list_favorites(user, pagination)
    return paginated(_out(items), total, pagination.page, pagination.limit)


@router.get("/saved-searches", response_model=ListResponse[SavedSearchOut])
async def list_saved_searches(
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items, total = await PropertyService(session).list_saved_searches(user, pagination)
    return paginated(
        [SavedSearchOut.model_validate(s) for s in items], total, pagination.page, pagination.limit
    )


@router.post(
    "/saved-searches",
    response_model=DataResponse[SavedSearchOut],
    status_code=status.HTTP_201_CREATED,
)
async def save_search(
    body: SavedSearchCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    search = await PropertyService(session).save_search(body, user)
    return {"data": SavedSearchOut.model_validate(search)}


@router.delete("/saved-searches/{search_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_search(
    search_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await PropertyService(session).delete_saved_search(search_id, user)


# ------------------------------------------------------------------
# Item endpoints
# ------------------------------------------------------------------

@router.get("/{property_id}", response_model=DataResponse[PropertyOut])
async def get_property(property_id: str, session: AsyncSession = Depends(get_db)):
    prop = await PropertyService(session).get_property(property_id)
    return {"data": PropertyOut.model_validate(prop)}


@router.put("/{property_id}", response_model=DataResponse[PropertyOut])
async def update_property(
    property_id: str,
    body: PropertyUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    prop = await PropertyService(session).update_property(property_id, body, user)
    return {"data": PropertyOut.model_validate(prop)}


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await PropertyService(session).delete_property(property_id, user)


@router.get("/{property_id}/market-analysis", response_model=DataResponse[MarketAnalysisOut])
async def market_analysis(
    property_id: str,
    refresh: bool = Query(default=False),
    session: AsyncSession = Depends(get_db),
):
    analysis = await PropertyService(session).market_analysis(property_id, refresh=refresh)
    return {"data": MarketAnalysisOut.model_validate(analysis)}


@router.get("/{property_id}/nearby", response_model=DataResponse[list[NearbyPropertyOut]])
async def nearby_properties(
    property_id: str,
    radius: float = Query(default=5.0, gt=0, le=100, description="Radius in km"),
    session: AsyncSession = Depends(get_db),
):
    pairs = await PropertyService(session).nearby(property_id, radius)
    data = [
        NearbyPropertyOut.model_validate(p).model_copy(update={"distance_km": distance})
        for p, distance in pairs
    ]
    return {"data": data}


@router.get("/{property_id}/energy-rating", response_model=DataResponse[EnergyRating])
async def get_energy_rating(property_id: str, session: AsyncSession = Depends(get_db)):
    return {"data": await PropertyService(session).get_energy_rating(property_id)}


@router.put("/{property_id}/energy-rating", response_model=DataResponse[EnergyRating])
async def update_energy_rating(
    property_id: str,
    body: EnergyRating,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await PropertyService(session).update_energy_rating(property_id, body, user)}


@router.post("/{property_id}/favorite", response_model=DataResponse[FavoriteStatus])
async def add_favorite(
    property_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await PropertyService(session).add_favorite(property_id, user)
    return {"data": FavoriteStatus(property_id=property_id, is_favorite=True)}


@router.delete("/{property_id}/favorite", response_model=DataResponse[FavoriteStatus])
async def remove_favorite(
    property_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await PropertyService(session).remove_favorite(property_id, user)
    return {"data": FavoriteStatus(property_id=property_id, is_favorite=False)}


@router.post(
    "/{property_id}/images",
    response_model=DataResponse[list[FileUploadOut]],
    status_code=status.HTTP_201_CREATED,
)
async def upload_images(
    property_id: str,
    files: list[UploadFile] = File(...),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    payload = [
        (await f.read(), f.filename or "image", f.content_type or "application/octet-stream")
        for f in files
    ]
    _, uploads = await PropertyService(session).add_images(property_id, payload, user)
    return {"data": [FileUploadOut.model_validate(u) for u in uploads]}


@router.delete("/{property_id}/images/{file_id}", response_model=MessageResponse)
async def delete_image(
    property_id: str,
    file_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await PropertyService(session).delete_image(property_id, file_id, user)
    return {"message": "Image deleted successfully"}
