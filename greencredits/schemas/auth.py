from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class SignupRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class WorkerLoginRequest(BaseModel):
    mobile: str
    password: str


class UserOut(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    current_streak: int = 0
    longest_streak: int = 0


class LoginResponse(BaseModel):
    message: str
    user: UserOut
