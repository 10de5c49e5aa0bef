"""
Account management.
Staff accounts are admin-only; citizen accounts can also be managed by staff.
PUT /users/me is the self-service edit for any signed-in user.
"""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.models.user import Role
from app.schemas.user import (
    UserCreate, UserOut, UserActiveUpdate, UserUpdate, ProfileUpdate, UserProfileOut,
)
from app.services import user_service
from app.services.auth_service import Principal, authorize

router = APIRouter()


@router.get("/users", response_model=list[UserOut], summary="List users")
def list_users(role: Optional[Role] = None, db: Session = Depends(get_db),
               _=Depends(require("users.list"))):
    return user_service.list_users(db, role)


@router.post("/users/staff", response_model=UserOut, status_code=201, summary="Create a staff user")
def create_staff(body: UserCreate, db: Session = Depends(get_db),
                 _=Depends(require("users.create_staff"))):
    return user_service.create_staff(db, body.username, body.password, body.full_name,
                                     body.email, body.phone_number)


@router.post("/users/citizens", response_model=UserOut, status_code=201, summary="Create a citizen account")
def create_citizen(body: UserCreate, db: Session = Depends(get_db),
                   _=Depends(require("users.create_citizen"))):
    return user_service.create_citizen(db, body.username, body.password, body.full_name,
                                       body.email, body.phone_number)


@router.put("/users/me", response_model=UserProfileOut, summary="Edit my own profile")
def update_me(body: ProfileUpdate, db: Session = Depends(get_db),
              principal: Principal = Depends(require("users.update_own_profile"))):
    return user_service.update_own_profile(db, principal.user_id, body.model_dump(exclude_unset=True))


# Citizen-level permission is checked before the lookup; callers without it
# never learn whether a user id exists.
@router.put("/users/{user_id}", response_model=UserOut, summary="Edit a staff or citizen account")
def update_user(user_id: int, body: UserUpdate, db: Session = Depends(get_db),
                principal: Principal = Depends(require("users.update_citizen"))):
    changes = body.model_dump(exclude_unset=True)
    user = user_service.get_user(db, user_id)
    if user.role == Role.CITIZEN:
        return user_service.update_citizen(db, user_id, changes)
    authorize(principal, "users.update_staff")
    return user_service.update_staff(db, user_id, changes)


@router.put("/users/{user_id}/active", response_model=UserOut, summary="Activate or deactivate an account")
def set_active(user_id: int, body: UserActiveUpdate, db: Session = Depends(get_db),
               principal: Principal = Depends(require("users.set_citizen_active"))):
    user = user_service.get_user(db, user_id)
    if user.role != Role.CITIZEN:
        authorize(principal, "users.set_staff_active")
    return user_service.set_active(db, user_id, body.is_active)
