"""ORM model and closed enumeration for user roles."""

from enum import IntEnum

from sqlalchemy import Column, Integer, String

from stockroom.models.base import Base


class RoleId(IntEnum):
    """The three fixed roles. Integer values are the persisted role ids."""

    ADMINISTRATOR = 1
    MANAGER = 2
    READER = 3

    @property
    def label(self) -> str:
        return ROLE_NAMES[self]


ROLE_NAMES = {
    RoleId.ADMINISTRATOR: "Administrator",
    RoleId.MANAGER: "Manager",
    RoleId.READER: "Reader",
}


class Role(Base):
    """Reference data row for a RoleId; seeded once, never edited."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), nullable=False, unique=True)
