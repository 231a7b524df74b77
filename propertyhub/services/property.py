"""Property service — listings, search, valuation, market analysis, favourites.

Rule: No FastAPI here. Pure Python business logic.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from propertyhub.core.pagination import PaginationParams
from propertyhub.domain.enums import ADMIN_ROLES, UserRole
from propertyhub.domain.market_analysis import MarketAnalysis
from propertyhub.domain.property import Property, SavedSearch
from propertyhub.domain.user import User
from propertyhub.repositories.property import (
    FavoriteRepository,
    MarketAnalysisRepository,
    PropertyRepository,
    SavedSearchRepository,
)
from propertyhub.schemas.property import (
    EnergyRating,
    PropertyComparison,
    PropertyCreate,
    PropertyUpdate,
    SavedSearchCreate,
    ValuationRequest,
)
from propertyhub.services import valuation
from propertyhub.services.file_upload import FileUploadService

logger = logging.getLogger(__name__)

LISTING_ROLES = frozenset(
    {
        UserRole.ADMIN.value,
        UserRole.SUPER_ADMIN.value,
        UserRole.AGENT.value,
        UserRole.LANDLORD.value,
        UserRole.PROPERTY_MANAGER.value,
    }
)
MAX_IMAGES_PER_UPLOAD = 10


def _is_owner(user: User, prop: Property) -> bool:
    return user.role in ADMIN_ROLES or user.id in (prop.agent_id, prop.landlord_id)


class PropertyService:
    def __init__(self, session: AsyncSession):
        self._repo = PropertyRepository(session)
        self._favorites = FavoriteRepository(session)
        self._searches = SavedSearchRepository(session)
        self._analyses = MarketAnalysisRepository(session)
        self._files = FileUploadService(session)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def search_properties(
        self,
        pagination: PaginationParams,
        *,
        q: str | None = None,
        location: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        min_bedrooms: int | None = None,
        min_bathrooms: int | None = None,
        property_type: str | None = None,
        listing_type: str | None = None,
        status: str | None = None,
        agent_id: str | None = None,
    ):
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationError("minPrice cannot exceed maxPrice")
        return await self._repo.search(
            **pagination.window(),
            q=q,
            location=location,
            min_price=min_price,
            max_price=max_price,
            min_bedrooms=min_bedrooms,
            min_bathrooms=min_bathrooms,
            filters={
                "property_type": property_type,
                "listing_type": listing_type,
                "status": status,
                "agent_id": agent_id,
            },
        )

    async def get_property(self, property_id: str) -> Property:
        prop = await self._repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property", property_id)
        return prop

    async def create_property(self, data: PropertyCreate, user: User) -> Property:
        if user.role not in LISTING_ROLES:
            raise ForbiddenError("Your role cannot create property listings")
        payload = data.model_dump(exclude_none=True)
        payload["postcode"] = payload["postcode"].strip().upper()
        payload.setdefault("agent_id", user.id)
        if user.role == UserRole.LANDLORD.value:
            payload.setdefault("landlord_id", user.id)
        prop = await self._repo.create(**payload, source="manual")
        logger.info("Property %s created by %s", prop.id, user.id)
        return prop

    async def _get_owned(self, property_id: str, user: User) -> Property:
        prop = await self.get_property(property_id)
        if not _is_owner(user, prop):
            raise ForbiddenError("You can only modify your own properties")
        return prop

    async def update_property(
        self, property_id: str, data: PropertyUpdate, user: User
    ) -> Property:
        prop = await self._get_owned(property_id, user)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "postcode" in changes:
            changes["postcode"] = changes["postcode"].strip().upper()
        return await self._repo.apply(prop, **changes)

    async def delete_property(self, property_id: str, user: User) -> None:
        await self._get_owned(property_id, user)
        await self._repo.soft_delete(property_id)
        logger.info("Property %s deleted by %s", property_id, user.id)

    async def featured(self, limit: int = 6) -> list[Property]:
        return await self._repo.featured(limit)

    async def recent(self, limit: int = 10) -> list[Property]:
        return await self._repo.recent(limit)

    # ------------------------------------------------------------------
    # Valuation / comparison / market analysis
    # ------------------------------------------------------------------

    def estimate_value(self, data: ValuationRequest) -> dict:
        return valuation.estimate_value(data.bedrooms, data.bathrooms, data.city)

    async def compare(self, property_ids: list[str]) -> PropertyComparison:
        props = await self._repo.get_many(list(dict.fromkeys(property_ids)))
        if not props:
            raise NotFoundError("Properties")
        prices = [Decimal(p.price) for p in props]
        return PropertyComparison.model_validate(
            {
                "properties": [
                    {
                        "id": p.id,
                        "title": p.title,
                        "price": p.price,
                        "bedrooms": p.bedrooms,
                        "bathrooms": p.bathrooms,
                        "square_feet": p.square_feet,
                        "location": {
                            "address": p.address_line1,
                            "city": p.city,
                            "county": p.county,
                            "postcode": p.postcode,
                        },
                    }
                    for p in props
                ],
                "comparison": {
                    "price_range": {"min": min(prices), "max": max(prices)},
                    "average_price": (sum(prices) / len(prices)).quantize(Decimal("0.01")),
                },
            }
        )

    async def market_analysis(self, property_id: str, refresh: bool = False) -> MarketAnalysis:
        prop = await self.get_property(property_id)
        if not refresh:
            existing = await self._analyses.latest_for_property(property_id)
            if existing:
                return existing
        return await self._generate_analysis(prop)

    async def _generate_analysis(self, prop: Property) -> MarketAnalysis:
        comparables = await self._repo.comparables(prop)
        prices = [Decimal(p.price) for p in comparables if p.price and p.price > 0]
        price = Decimal(prop.price)

        if prices:
            average = sum(prices) / len(prices)
            estimated = average.quantize(Decimal("0.01"))
            min_value, max_value = min(prices), max(prices)
            confidence = valuation.market_confidence(price, average)
        else:
            average = estimated = min_value = max_value = price
            confidence = valuation.NO_COMPARABLES_CONFIDENCE

        score = valuation.investment_score(
            prop.bedrooms, prop.bathrooms, prop.property_type, prop.amenities
        )
        return await self._analyses.create(
            property_id=prop.id,
            estimated_value=estimated,
            min_value=min_value,
            max_value=max_value,
            market_position=valuation.market_position(price, average),
            price_difference_percent=valuation.price_difference_percent(price, average),
            confidence_score=confidence,
            investment_potential=valuation.investment_potential(score),
            comparable_properties=[
                {"id": p.id, "price": float(p.price), "bedrooms": p.bedrooms}
                for p in comparables
            ],
            methodology=valuation.METHODOLOGY,
        )

    async def nearby(
        self, property_id: str, radius_km: float = 5.0, limit: int = 10
    ) -> list[tuple[Property, float | None]]:
        prop = await self.get_property(property_id)
        if prop.latitude is None or prop.longitude is None:
            return [(p, None) for p in await self._repo.in_city(prop.city, prop.id, limit)]

        scored = []
        for other in await self._repo.with_coordinates(prop.id):
            distance = valuation.haversine_km(
                prop.latitude, prop.longitude, other.latitude, other.longitude
            )
            if distance <= radius_km:
                scored.append((other, round(distance, 3)))
        scored.sort(key=lambda pair: pair[1])
        return scored[:limit]

    # ------------------------------------------------------------------
    # Energy rating
    # ------------------------------------------------------------------

    async def get_energy_rating(self, property_id: str) -> EnergyRating:
        prop = await self.get_property(property_id)
        return EnergyRating(epc_rating=prop.epc_rating, epc_score=prop.epc_score)

    async def update_energy_rating(
        self, property_id: str, data: EnergyRating, user: User
    ) -> EnergyRating:
        prop = await self._get_owned(property_id, user)
        prop = await self._repo.apply(prop, **data.model_dump(exclude_unset=True))
        return EnergyRating(epc_rating=prop.epc_rating, epc_score=prop.epc_score)

    # ------------------------------------------------------------------
    # Favourites / saved searches
    # ------------------------------------------------------------------

    async def add_favorite(self, property_id: str, user: User) -> None:
        await self.get_property(property_id)
        existing = await self._favorites.get(user.id, property_id)
        if existing is None:
            await self._favorites.create(user_id=user.id, property_id=property_id)
        elif existing.deleted_at is not None:
            await self._favorites.apply(existing, deleted_at=None)

    async def remove_favorite(self, property_id: str, user: User) -> None:
        existing = await self._favorites.get(user.id, property_id)
        if existing is None or existing.deleted_at is not None:
            raise NotFoundError("Favorite", property_id)
        await self._favorites.soft_delete(existing.id)

    async def list_favorites(self, user: User, pagination: PaginationParams):
        return await self._favorites.properties_for_user(
            user.id, offset=pagination.offset, limit=pagination.limit
        )

    async def save_search(self, data: SavedSearchCreate, user: User) -> SavedSearch:
        return await self._searches.create(user_id=user.id, **data.model_dump())

    async def list_saved_searches(self, user: User, pagination: PaginationParams):
        return await self._searches.list(
            **pagination.window(),
            filters={"user_id": user.id},
        )

    async def delete_saved_search(self, search_id: str, user: User) -> None:
        search = await self._searches.get_by_id(search_id)
        if search is None or search.user_id != user.id:
            raise NotFoundError("Saved search", search_id)
        await self._searches.soft_delete(search_id)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def add_images(
        self, property_id: str, files: list[tuple[bytes, str, str]], user: User
    ):
        """Store ``(content, filename, mime_type)`` images and append their URLs."""
        prop = await self._get_owned(property_id, user)
        if not 1 <= len(files) <= MAX_IMAGES_PER_UPLOAD:
            raise ValidationError(
                f"Upload between 1 and {MAX_IMAGES_PER_UPLOAD} images at a time"
            )
        uploads = []
        for content, filename, mime_type in files:
            uploads.append(
                await self._files.upload(
                    content=content,
                    original_name=filename,
                    mime_type=mime_type,
                    file_type="image",
                    uploaded_by=user,
                    entity_type="property",
                    entity_id=prop.id,
                    is_public=True,
                )
            )
        images = list(prop.images or []) + [u.file_url for u in uploads]
        prop = await self._repo.apply(prop, images=images)
        return prop, uploads

    async def delete_image(self, property_id: str, file_id: str, user: User) -> Property:
        prop = await self._get_owned(property_id, user)
        record = await self._files.get_file(file_id)
        if record.entity_type != "property" or record.entity_id != prop.id:
            raise NotFoundError("Image", file_id)
        await self._files.delete_file(file_id)
        images = [url for url in (prop.images or []) if url != record.file_url]
        return await self._repo.apply(prop, images=images)
