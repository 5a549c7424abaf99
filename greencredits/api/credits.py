from typing import List

from bson import ObjectId
from fastapi import APIRouter, Depends

from greencredits.api.deps import current_user_id, get_user_service
from greencredits.schemas.auth import UserOut
from greencredits.schemas.credits import LeaderboardEntry, RedeemBody, RedeemResponse
from greencredits.services.users_service import UserService

router = APIRouter(tags=["Credits"])


@router.get("/credits")
async def my_credits(
    user_id: ObjectId = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return await users.credits_summary(user_id)


@router.post("/credits/redeem", response_model=RedeemResponse)
async def redeem(
    body: RedeemBody,
    user_id: ObjectId = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    balance = await users.redeem(user_id, body.cost, body.reward_name)
    return {"message": f"Redeemed {body.reward_name}", "balance": balance}


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def leaderboard(users: UserService = Depends(get_user_service)):
    return await users.leaderboard()


@router.get("/profile", response_model=UserOut)
async def profile(
    user_id: ObjectId = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return await users.profile(user_id)
