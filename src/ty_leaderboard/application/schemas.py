from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    position: int
    id: str
    username: str | None
    balance: int
    assets: dict[str, int]
    level: int
    rank: str


class LeaderboardResponse(BaseModel):
    items: list[LeaderboardEntry]
    limit: int
