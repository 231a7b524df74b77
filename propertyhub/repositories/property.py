"""Property, favourite, saved-search and market-analysis repositories."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import func, or_, select

from propertyhub.domain.market_analysis import MarketAnalysis
from propertyhub.domain.property import Property, PropertyFavorite, SavedSearch
from propertyhub.repositories.base import BaseRepository


class PropertyRepository(BaseRepository[Property]):
    model = Property

    def _active_query(self):
        return self._base_query().where(Property.is_active.is_(True))

    async def search(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        q: str | None = None,
        location: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        min_bedrooms: int | None = None,
        min_bathrooms: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[Property], int]:
        query = self._apply_filters(self._active_query(), filters)

        if q:
            like = f"%{q}%"
            query = query.where(
                or_(
                    Property.title.ilike(like),
                    Property.description.ilike(like),
                    Property.address_line1.ilike(like),
                )
            )
        if location:
            like = f"%{location}%"
            query = query.where(
                or_(
                    Property.city.ilike(like),
                    Property.county.ilike(like),
                    Property.postcode.ilike(f"{location}%"),
                )
            )
        if min_price is not None:
            query = query.where(Property.price >= min_price)
        if max_price is not None:
            query = query.where(Property.price <= max_price)
        if min_bedrooms is not None:
            query = query.where(Property.bedrooms >= min_bedrooms)
        if min_bathrooms is not None:
            query = query.where(Property.bathrooms >= min_bathrooms)

        return await self._paginate(
            query, offset=offset, limit=limit, order_by=order_by, order=order
        )

    async def featured(self, limit: int = 6) -> list[Property]:
        result = await self._session.execute(
            self._active_query()
            .where(Property.is_featured.is_(True))
            .order_by(Property.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def recent(self, limit: int = 10) -> list[Property]:
        result = await self._session.execute(
            self._active_query().order_by(Property.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def get_many(self, ids: list[str]) -> list[Property]:
        result = await self._session.execute(self._base_query().where(Property.id.in_(ids)))
        return list(result.scalars().all())

    async def find_by_address(self, address_line1: str, postcode: str) -> Property | None:
        result = await self._session.execute(
            self._base_query()
            .where(Property.address_line1 == address_line1)
            .where(Property.postcode == postcode)
        )
        return result.scalars().first()

    async def comparables(self, subject: Property, limit: int = 10) -> list[Property]:
        result = await self._session.execute(
            self._active_query()
            .where(Property.id != subject.id)
            .where(Property.property_type == subject.property_type)
            .where(Property.bedrooms == subject.bedrooms)
            .where(Property.city == subject.city)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def with_coordinates(self, exclude_id: str) -> list[Property]:
        result = await self._session.execute(
            self._active_query()
            .where(Property.id != exclude_id)
            .where(Property.latitude.is_not(None))
            .where(Property.longitude.is_not(None))
        )
        return list(result.scalars().all())

    async def in_city(self, city: str, exclude_id: str, limit: int = 10) -> list[Property]:
        result = await self._session.execute(
            self._active_query()
            .where(Property.id != exclude_id)
            .where(Property.city == city)
            .order_by(Property.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


class FavoriteRepository(BaseRepository[PropertyFavorite]):
    model = PropertyFavorite

    async def get(self, user_id: str, property_id: str) -> PropertyFavorite | None:
        # Includes soft-deleted rows so re-adding revives the unique pair
        result = await self._session.execute(
            select(PropertyFavorite)
            .where(PropertyFavorite.user_id == user_id)
            .where(PropertyFavorite.property_id == property_id)
        )
        return result.scalars().first()

    async def properties_for_user(
        self, user_id: str, *, offset: int, limit: int
    ) -> tuple[list[Property], int]:
        q = (
            select(Property)
            .join(PropertyFavorite, PropertyFavorite.property_id == Property.id)
            .where(PropertyFavorite.user_id == user_id)
            .where(PropertyFavorite.deleted_at.is_(None))
            .where(Property.deleted_at.is_(None))
        )
        total = (
            await self._session.execute(select(func.count()).select_from(q.subquery()))
        ).scalar_one()
        items = (
            await self._session.execute(
                q.order_by(PropertyFavorite.created_at.desc()).offset(offset).limit(limit)
            )
        ).scalars().all()
        return list(items), total


class SavedSearchRepository(BaseRepository[SavedSearch]):
    model = SavedSearch


class MarketAnalysisRepository(BaseRepository[MarketAnalysis]):
    model = MarketAnalysis

    async def latest_for_property(self, property_id: str) -> MarketAnalysis | None:
        result = await self._session.execute(
            self._base_query()
            .where(MarketAnalysis.property_id == property_id)
            .order_by(MarketAnalysis.analysis_date.desc())
            .limit(1)
        )
        return result.scalars().first()
