"""Purchase input checks: run before any statement touches the database."""

from src.ty_catalog.domain.catalog import normalize_asset_id
from src.ty_common.errors import InvalidAssetError, InvalidCostError, InvalidQuantityError

# Largest value a PostgreSQL BIGINT (and asyncpg's int64 codec) can hold
BIGINT_MAX = 2**63 - 1


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_purchase(asset_id: str | None, quantity: int, unit_cost: int) -> str:
    """Return the normalized asset id or raise a validation error."""
    if not _is_int(quantity) or not 0 < quantity <= BIGINT_MAX:
        raise InvalidQuantityError(quantity)
    if not _is_int(unit_cost) or not 0 <= unit_cost <= BIGINT_MAX:
        raise InvalidCostError(unit_cost)
    if unit_cost * quantity > BIGINT_MAX:
        raise InvalidCostError(unit_cost, quantity)
    normalized = normalize_asset_id(asset_id)
    if not normalized:
        raise InvalidAssetError()
    return normalized
