"""Asset catalog: unit cost and per-mine income per asset type.

Read-only configuration. The catalog is advisory for purchases: ids outside
it can still be bought, but they earn no passive income.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from config.settings import AssetSpec, settings


@dataclass(frozen=True)
class AssetDefinition:
    id: str
    name: str
    cost: int
    income: int


def normalize_asset_id(asset_id: str | None) -> str:
    """'  apple ' -> 'APPLE'. Returns '' for missing ids."""
    return (asset_id or "").strip().upper()


class AssetCatalog:
    def __init__(self, assets: Iterable[AssetDefinition]) -> None:
        self._assets: dict[str, AssetDefinition] = {a.id: a for a in assets}

    @classmethod
    def from_specs(cls, specs: Iterable[AssetSpec]) -> "AssetCatalog":
        return cls(
            AssetDefinition(
                id=normalize_asset_id(s.id), name=s.name, cost=s.cost, income=s.income
            )
            for s in specs
        )

    def get(self, asset_id: str) -> AssetDefinition | None:
        return self._assets.get(normalize_asset_id(asset_id))

    def all(self) -> list[AssetDefinition]:
        return list(self._assets.values())

    def unit_cost(self, asset_id: str, default: int) -> int:
        asset = self.get(asset_id)
        return asset.cost if asset is not None else default

    def passive_income(self, holdings: Mapping[str, int]) -> int:
        """Sum of quantity x income over owned assets; unknown ids contribute 0."""
        total = 0
        for asset_id, quantity in holdings.items():
            asset = self.get(asset_id)
            if asset is not None and quantity:
                total += asset.income * int(quantity)
        return total


_default_catalog: AssetCatalog | None = None


def get_catalog() -> AssetCatalog:
    """Module-level catalog built once from settings.ASSET_CATALOG."""
    global _default_catalog  # noqa: PLW0603
    if _default_catalog is None:
        _default_catalog = AssetCatalog.from_specs(settings.ASSET_CATALOG)
    return _default_catalog
