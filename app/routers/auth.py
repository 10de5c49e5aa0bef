"""Login and current-principal endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_principal, require
from app.schemas.auth import LoginRequest, LoginResponse, PrincipalOut, UserSummary
from app.schemas.user import UserProfileOut
from app.services import auth_service, user_service
from app.services.auth_service import Principal

router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse, summary="Exchange username/password for a token")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    result = auth_service.login(db, body.username, body.password)
    return LoginResponse(token=result["token"], user=UserSummary.model_validate(result["user"]))


@router.get("/auth/me", response_model=PrincipalOut, summary="Who am I")
def me(principal: Principal = Depends(get_current_principal)):
    return PrincipalOut(user_id=principal.user_id, role=principal.role, username=principal.username)


@router.get("/auth/me/profile", response_model=UserProfileOut, summary="My account details")
def my_profile(db: Session = Depends(get_db),
               principal: Principal = Depends(require("users.view_own_profile"))):
    return user_service.get_profile(db, principal.user_id)
