"""Catalog reader: configured assets joined with their network-wide totals."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_catalog.application.schemas import AssetItem, AssetListResponse
from src.ty_catalog.domain.catalog import AssetCatalog, get_catalog
from src.ty_catalog.infrastructure.persistence import AssetTotalsRepository


class CatalogApplicationService:
    def __init__(
        self,
        catalog: AssetCatalog | None = None,
        totals_repo: AssetTotalsRepository | None = None,
    ) -> None:
        self._catalog = catalog or get_catalog()
        self._totals = totals_repo or AssetTotalsRepository()

    async def list_assets(self, db: AsyncSession) -> AssetListResponse:
        totals = await self._totals.list_totals(db)
        items = [
            AssetItem(
                id=a.id,
                name=a.name,
                cost=a.cost,
                income=a.income,
                in_catalog=True,
                total_invested=totals.get(a.id, (0, 0))[0],
                units_purchased=totals.get(a.id, (0, 0))[1],
            )
            for a in self._catalog.all()
        ]
        # Off-catalog assets that players bought anyway
        for asset_id, (invested, units) in totals.items():
            if self._catalog.get(asset_id) is None:
                items.append(
                    AssetItem(
                        id=asset_id,
                        name=asset_id,
                        cost=0,
                        income=0,
                        in_catalog=False,
                        total_invested=invested,
                        units_purchased=units,
                    )
                )
        return AssetListResponse(items=items)
