"""ORM model for user accounts."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true

from app.models.base import Base


class User(Base):
    """
    User account for registration, login and profile lookup.

    email is the login key and is unique; active=False blocks login.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r}, active={self.active!r})"
