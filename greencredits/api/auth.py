from fastapi import APIRouter, Depends

from greencredits.api.deps import get_staff_service, get_user_service
from greencredits.core.rewards import REWARD_CATALOG
from greencredits.schemas.auth import LoginRequest, LoginResponse, SignupRequest, WorkerLoginRequest
from greencredits.schemas.staff import WorkerRegister
from greencredits.services.staff_service import StaffService
from greencredits.services.users_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


# =========================
# Citizens
# =========================
@router.post("/signup", response_model=LoginResponse, status_code=201)
async def signup(body: SignupRequest, users: UserService = Depends(get_user_service)):
    user = await users.signup(body.name, body.email, body.password)
    return {
        "message": f"Welcome! You earned {REWARD_CATALOG.actions.welcome_bonus} bonus credits",
        "user": user,
    }


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, users: UserService = Depends(get_user_service)):
    user = await users.login(body.email, body.password)
    return {"message": "Login successful", "user": user}


# =========================
# Admins / officers
# =========================
@router.post("/admin/login")
async def admin_login(body: LoginRequest, staff: StaffService = Depends(get_staff_service)):
    admin = await staff.admin_login(body.email, body.password)
    return {"message": "Login successful", "admin": admin}


# =========================
# Field workers
# =========================
@router.post("/worker/register", status_code=201)
async def worker_register(body: WorkerRegister, staff: StaffService = Depends(get_staff_service)):
    worker = await staff.register_worker(
        body.name,
        body.mobile,
        password=body.password,
        email=body.email,
        address=body.address,
        assigned_zone=body.assigned_zone,
    )
    return {"message": "Application submitted, awaiting approval", "worker": worker}


@router.post("/worker/login")
async def worker_login(body: WorkerLoginRequest, staff: StaffService = Depends(get_staff_service)):
    worker = await staff.worker_login(body.mobile, body.password)
    return {"message": "Login successful", "worker": worker}
