"""SQLAlchemy-backed user store: lookups by email and id, insert with unique email."""

import logging

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User
from app.services.auth import DuplicateEmailError

logger = logging.getLogger(__name__)

EMAIL_UNIQUE_INDEX = "ix_users_email"


def _is_email_conflict(e: IntegrityError) -> bool:
    """True if the violated constraint is the unique index on users.email."""
    # psycopg2 reports the constraint name; SQLite only has the message text.
    diag = getattr(e.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return constraint == EMAIL_UNIQUE_INDEX
    message = str(e.orig)
    return "UNIQUE constraint failed: users.email" in message or EMAIL_UNIQUE_INDEX in message


class SqlAlchemyUserStore:
    """User Store over one SQLAlchemy session (one per request)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def exists_by_email(self, email: str) -> bool:
        return bool(self.session.scalar(select(exists().where(User.email == email))))

    def find_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(User.email == email)).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def save(self, user: User) -> User:
        """
        Persist the user and return it with its assigned id.

        The unique index on email is the final arbiter: if a concurrent
        registration wins the race, the insert fails and DuplicateEmailError
        is raised after rolling back. Other integrity failures propagate.
        """
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if not _is_email_conflict(e):
                raise
            logger.warning("User insert rejected by unique constraint on email")
            raise DuplicateEmailError() from e
        self.session.refresh(user)
        return user
