from fastapi import Request
from sqlalchemy.orm import Session

from models.users import User
from repositories.users import UserRepository
from schemas.user import RegistrationBase
from utils.audit import client_ip, write_log
from utils.errors import ApiError

ACCOUNT_FIELDS = {"name", "email", "password", "role"}


def register_account(
    db: Session,
    request: Request,
    payload: RegistrationBase,
    role: str,
    actor_id=None,
    action: str = "REGISTER",
    resource: str = "auth",
) -> User:
    """Create an account (and its role profile) and audit the attempt.

    Failures are recorded with status FAIL and the error code, then re-raised.
    """
    profile = payload.model_dump(exclude=ACCOUNT_FIELDS) or None
    try:
        user = UserRepository(db).create(
            name=payload.name, email=payload.email, password=payload.password, role=role, profile=profile,
        )
    except ApiError as exc:
        write_log(db, user_id=actor_id, action=action, resource=resource, status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email, "role": role, "reason": exc.code})
        raise

    write_log(db, user_id=actor_id or user.id, action=action, resource=resource,
              ip=client_ip(request), meta={"email": user.email, "role": role, "new_user_id": user.id})
    return user
