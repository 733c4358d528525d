"""
Create a user account from the command line. Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [--inactive]
Example:
  python -m app.scripts.create_user "Ana Souza" ana@example.org a-secure-password
"""
import argparse
import sys

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.core.security import get_password_hasher, get_token_issuer
from app.schemas.auth import RegisterRequest
from app.services.auth import AuthError, AuthService
from app.services.user_store import SqlAlchemyUserStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an auth-service user account.")
    parser.add_argument("name", help="Display name")
    parser.add_argument("email", help="Login email (must be unique)")
    parser.add_argument("password", help="Password")
    parser.add_argument(
        "--inactive",
        action="store_true",
        help="Create the account with login disabled",
    )
    args = parser.parse_args(argv)
    configure_logging(get_settings().LOG_LEVEL)

    try:
        request = RegisterRequest(name=args.name, email=args.email, password=args.password)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"Invalid {field}: {err['msg']}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        service = AuthService(SqlAlchemyUserStore(db), get_password_hasher(), get_token_issuer())
        try:
            user = service.create_account(
                request.name,
                request.email,
                request.password,
                active=not args.inactive,
            )
        except AuthError as e:
            print(e.message, file=sys.stderr)
            return 1
        state = "active" if user.active else "inactive"
        print(f"Created {state} user '{user.email}' with id {user.id}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
