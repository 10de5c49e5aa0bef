from pydantic import BaseModel, Field
from typing import Optional
from app.models.user import Role


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    id: int
    username: str
    role: Role
    full_name: str
    email: Optional[str]

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class PrincipalOut(BaseModel):
    user_id: int
    role: Role
    username: str

    class Config:
        from_attributes = True
