# backend/repositories/users.py
"""
Credential store: user accounts and their role profiles.

A user and its role profile are always written together in one transaction,
and deleting a user removes its assignments and profile first.
"""
import logging
from typing import Optional, Tuple, List

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from database import transaction
from models.users import User, Role
from models.patient import PatientProfile
from models.doctor import DoctorProfile
from models.assignment import Assignment
from utils.errors import (
    DuplicateEmail, DuplicateLicense, InvalidCredentials, InvalidRequest,
    MissingRequiredField, NotFound,
)
from utils.hashing import get_password_hash, verify_password

logger = logging.getLogger(__name__)

# Profile fields that must be present for each role
REQUIRED_PROFILE_FIELDS = {
    Role.PATIENT.value: ("date_of_birth", "phone"),
    Role.DOCTOR.value: ("specialization", "license_number", "phone"),
}

PATIENT_FIELDS = ("date_of_birth", "phone", "address", "blood_type", "medical_history", "allergies")
DOCTOR_FIELDS = ("specialization", "license_number", "phone", "is_available", "experience_years", "bio")


def delete_account_rows(db: Session, user: User) -> None:
    """Delete a user in dependency order: assignments, role profile, account.

    Runs inside the caller's transaction. Rows already loaded in the session
    are marked deleted; every other object stays attached.
    """
    if user.role == Role.PATIENT.value:
        profile_ids = select(PatientProfile.id).where(PatientProfile.user_id == user.id)
        db.query(Assignment).filter(Assignment.patient_id.in_(profile_ids)).delete(synchronize_session="fetch")
        db.query(PatientProfile).filter(PatientProfile.user_id == user.id).delete(synchronize_session="fetch")
    elif user.role == Role.DOCTOR.value:
        profile_ids = select(DoctorProfile.id).where(DoctorProfile.user_id == user.id)
        db.query(Assignment).filter(Assignment.doctor_id.in_(profile_ids)).delete(synchronize_session="fetch")
        db.query(DoctorProfile).filter(DoctorProfile.user_id == user.id).delete(synchronize_session="fetch")
    db.query(User).filter(User.id == user.id).delete(synchronize_session="fetch")


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    # --- lookups ---

    def _query(self, include_profile: bool = False):
        query = self.db.query(User)
        if include_profile:
            query = query.options(joinedload(User.patient_profile), joinedload(User.doctor_profile))
        return query

    def find_by_email(self, email: str, include_profile: bool = False) -> Optional[User]:
        return self._query(include_profile).filter(User.email == email).first()

    def find_by_id(self, user_id: int, include_profile: bool = False) -> Optional[User]:
        return self._query(include_profile).filter(User.id == user_id).first()

    def email_taken(self, email: str, exclude_user_id: int = None) -> bool:
        query = self.db.query(User.id).filter(User.email == email)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    def license_taken(self, license_number: str) -> bool:
        return self.db.query(DoctorProfile.id).filter(DoctorProfile.license_number == license_number).first() is not None

    # --- creation ---

    def create(self, name: str, email: str, password: str, role: str, profile: Optional[dict] = None) -> User:
        """Create an account and, for patients and doctors, its profile row."""
        role = role.value if isinstance(role, Role) else role
        if role not in {r.value for r in Role}:
            raise InvalidRequest("Invalid role. Must be one of: admin, doctor, patient")

        profile = dict(profile or {})
        missing = [f for f in REQUIRED_PROFILE_FIELDS.get(role, ()) if profile.get(f) in (None, "")]
        if missing:
            raise MissingRequiredField(f"Missing required fields for {role}: {', '.join(missing)}")

        if self.email_taken(email):
            raise DuplicateEmail()
        if role == Role.DOCTOR.value and self.license_taken(profile["license_number"]):
            raise DuplicateLicense()

        user = User(name=name, email=email, password_hash=get_password_hash(password), role=role)
        try:
            with transaction(self.db):
                self.db.add(user)
                self.db.flush()
                self._create_profile(user, profile)
        except IntegrityError:
            # Lost a race against a concurrent registration
            if role == Role.DOCTOR.value and self.license_taken(profile["license_number"]):
                raise DuplicateLicense()
            raise DuplicateEmail()

        self.db.refresh(user)
        logger.info("Created %s account id=%s", role, user.id)
        return user

    def _create_profile(self, user: User, profile: dict):
        if user.role == Role.PATIENT.value:
            row = PatientProfile(user_id=user.id, **{k: profile.get(k) for k in PATIENT_FIELDS})
        elif user.role == Role.DOCTOR.value:
            values = {k: profile.get(k) for k in DOCTOR_FIELDS}
            if values["is_available"] is None:
                values["is_available"] = True
            row = DoctorProfile(user_id=user.id, **values)
        else:
            return None
        self.db.add(row)
        self.db.flush()
        return row

    # --- credentials ---

    def compare_password(self, candidate: str, password_hash: str) -> bool:
        return verify_password(candidate, password_hash)

    def authenticate(self, email: str, password: str) -> User:
        # Same error for unknown email and wrong password
        user = self.find_by_email(email)
        if user is None or not self.compare_password(password, user.password_hash):
            raise InvalidCredentials()
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> bool:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        if not self.compare_password(current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect")
        with transaction(self.db):
            user.password_hash = get_password_hash(new_password)
        return True

    def update_account(self, user_id: int, name: str = None, email: str = None) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        if email is not None and email != user.email and self.email_taken(email, exclude_user_id=user_id):
            raise DuplicateEmail()
        try:
            with transaction(self.db):
                if name is not None:
                    user.name = name
                if email is not None:
                    user.email = email
        except IntegrityError:
            raise DuplicateEmail()
        self.db.refresh(user)
        return user

    # --- listing / removal ---

    def list_users(self, role: str = None, search: str = None, limit: int = 10, offset: int = 0) -> Tuple[List[User], int]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        if search:
            like = f"%{search}%"
            query = query.filter(or_(User.name.ilike(like), User.email.ilike(like)))
        total = query.count()
        rows = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit).all()
        return rows, total

    def delete(self, user_id: int) -> bool:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        role = user.role
        with transaction(self.db):
            delete_account_rows(self.db, user)
        logger.info("Deleted %s account id=%s", role, user_id)
        return True
