from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional


class OfficerCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None
    assigned_zones: List[str] = Field(min_length=1)


class WorkerApprove(BaseModel):
    assigned_zone: Optional[str] = None


class AdminOut(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str
    department: Optional[str] = None
    assigned_zones: List[str] = Field(default_factory=list)
    is_active: bool = True


class WorkerOut(BaseModel):
    id: str
    name: str
    mobile: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    assigned_zone: Optional[str] = None
    status: str
    total_reports_completed: int = 0


class WorkerRegister(BaseModel):
    name: str = Field(min_length=1)
    mobile: str = Field(min_length=4)
    password: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    assigned_zone: Optional[str] = None
