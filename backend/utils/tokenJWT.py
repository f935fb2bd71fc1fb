# utils/tokenJWT.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from utils.errors import AuthenticationRequired, InvalidToken, ExpiredToken
from utils.policy import require_role

# Authorization scheme; missing headers are reported by get_current_user itself
bearer_scheme = HTTPBearer(auto_error=False)


# Claims carried by a verified token
@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str


# Identity attached to each authenticated request
@dataclass
class Identity:
    user_id: int
    role: str
    name: str
    email: str
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# Generate a new JWT access token
def create_access_token(user_id: int, role: str, expires_delta: timedelta = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": str(user_id), "role": role, "iat": issued_at, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Validate signature, structure and expiry of a token
def verify_access_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise ExpiredToken()
    except JWTError:
        raise InvalidToken()

    subject, role = payload.get("sub"), payload.get("role")
    if subject is None or role is None:
        raise InvalidToken()
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise InvalidToken()
    return TokenClaims(user_id=user_id, role=role)


# Retrieve the currently authenticated user based on the JWT token
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationRequired()

    claims = verify_access_token(credentials.credentials)

    # The account may have been deleted after the token was issued
    user = db.query(User).filter(User.id == claims.user_id).first()
    if user is None:
        raise InvalidToken("User not found")

    return Identity(
        user_id=user.id,
        role=user.role,
        name=user.name,
        email=user.email,
        patient_id=user.patient_profile.id if user.patient_profile else None,
        doctor_id=user.doctor_profile.id if user.doctor_profile else None,
    )

# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    def _checker(current_user: Identity = Depends(get_current_user)) -> Identity:
        if allowed_roles:
            require_role(current_user, allowed_roles)
        return current_user
    return _checker
