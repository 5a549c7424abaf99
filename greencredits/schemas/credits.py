from pydantic import BaseModel, Field


class RedeemBody(BaseModel):
    cost: int = Field(gt=0)
    reward_name: str = Field(min_length=1)


class RedeemResponse(BaseModel):
    message: str
    balance: int


class LeaderboardEntry(BaseModel):
    rank: int
    name: str
    credits: int
    reports: int
    badges: int
