"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from stockroom.models.base import Base
from stockroom.models.role import RoleId


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role_id references roles.id (1=Administrator, 2=Manager, 3=Reader); a role
    row cannot be deleted while users still hold it.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(
        Integer,
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=False,
        default=int(RoleId.READER),
    )
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    role = relationship("Role")
