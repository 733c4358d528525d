"""
Enable or disable login for an existing account. Run from project root:
  python -m app.scripts.set_active EMAIL on|off
"""
import argparse
import logging
import sys

from pydantic import EmailStr, TypeAdapter, ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.user_store import SqlAlchemyUserStore

logger = logging.getLogger(__name__)

# Same normalization registration applies (domain lowercased).
_email_adapter = TypeAdapter(EmailStr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Activate or deactivate a user account.")
    parser.add_argument("email", help="Login email of the account")
    parser.add_argument("state", choices=["on", "off"])
    args = parser.parse_args(argv)
    configure_logging(get_settings().LOG_LEVEL)

    try:
        email = _email_adapter.validate_python(args.email.strip())
    except ValidationError as e:
        print(f"Invalid email: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = SqlAlchemyUserStore(db).find_by_email(email)
        if user is None:
            print(f"No user with email '{email}'.", file=sys.stderr)
            return 1
        user.active = args.state == "on"
        db.commit()
        logger.info("Account active flag changed", extra={"user_id": user.id, "active": user.active})
        print(f"User {user.id} is now {'active' if user.active else 'inactive'}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
