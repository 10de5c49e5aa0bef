# app/models/user.py
"""
Login-capable accounts. Roles are a closed set; every protected operation
lists the roles allowed to call it (see auth_service.OPERATION_ROLES).
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum
from app.database import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CITIZEN = "CITIZEN"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(200), nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.CITIZEN)
    full_name = Column(String(200), nullable=False)
    email = Column(String(200))
    phone_number = Column(String(30))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<User {self.id} {self.username} role={self.role}>"
