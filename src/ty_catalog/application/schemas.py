from pydantic import BaseModel


class AssetItem(BaseModel):
    id: str
    name: str
    cost: int
    income: int
    in_catalog: bool
    total_invested: int
    units_purchased: int


class AssetListResponse(BaseModel):
    items: list[AssetItem]
