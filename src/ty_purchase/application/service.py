"""PurchaseApplicationService: resolves the unit price and owns the transaction."""

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ty_catalog.domain.catalog import AssetCatalog, get_catalog
from src.ty_purchase.application.schemas import PurchaseResponse
from src.ty_purchase.domain.service import PurchaseEngine


class PurchaseApplicationService:
    def __init__(
        self,
        engine: PurchaseEngine | None = None,
        catalog: AssetCatalog | None = None,
    ) -> None:
        self._engine = engine or PurchaseEngine()
        self._catalog = catalog or get_catalog()

    async def purchase(
        self,
        db: AsyncSession,
        account_id: str,
        asset_id: str,
        quantity: int,
        unit_cost: int | None,
    ) -> PurchaseResponse:
        if unit_cost is None:
            unit_cost = self._catalog.unit_cost(asset_id, settings.DEFAULT_UNIT_COST)
        try:
            result = await self._engine.purchase(db, account_id, asset_id, quantity, unit_cost)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PurchaseResponse.from_result(result)
