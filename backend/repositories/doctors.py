# backend/repositories/doctors.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, contains_eager

from database import transaction
from models.users import User, Role
from models.doctor import DoctorProfile
from repositories.users import delete_account_rows
from schemas.doctor import DoctorUpdate
from utils.errors import DuplicateLicense

logger = logging.getLogger(__name__)


class DoctorRepository:
    """Reads, filtering and partial updates of doctor profiles."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return (
            self.db.query(DoctorProfile)
            .join(User, DoctorProfile.user_id == User.id)
            .options(contains_eager(DoctorProfile.user))
        )

    def find_by_id(self, doctor_id: int) -> Optional[DoctorProfile]:
        return self._query().filter(DoctorProfile.id == doctor_id).first()

    def find_by_user_id(self, user_id: int) -> Optional[DoctorProfile]:
        return self._query().filter(DoctorProfile.user_id == user_id).first()

    def find_by_license_number(self, license_number: str) -> Optional[DoctorProfile]:
        return self._query().filter(DoctorProfile.license_number == license_number).first()

    def find_all(
        self,
        search: str = "",
        specialization: Optional[str] = None,
        is_available: Optional[bool] = None,
        min_experience: Optional[int] = None,
        max_experience: Optional[int] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[DoctorProfile], int]:
        query = self._query()

        if search and search.strip():
            like = f"%{search.strip()}%"
            query = query.filter(or_(
                User.name.ilike(like),
                User.email.ilike(like),
                DoctorProfile.license_number.ilike(like),
            ))
        if specialization:
            query = query.filter(DoctorProfile.specialization == specialization)
        if is_available is not None:
            query = query.filter(DoctorProfile.is_available == is_available)
        if min_experience is not None:
            query = query.filter(DoctorProfile.experience_years >= min_experience)
        if max_experience is not None:
            query = query.filter(DoctorProfile.experience_years <= max_experience)

        total = query.count()
        rows = (
            query.order_by(DoctorProfile.created_at.desc(), DoctorProfile.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total

    def get_specializations(self) -> List[str]:
        rows = self.db.query(DoctorProfile.specialization).distinct().order_by(DoctorProfile.specialization).all()
        return [row[0] for row in rows]

    def update(self, user_id: int, updates: DoctorUpdate) -> Optional[DoctorProfile]:
        """Apply the fields present in `updates`; None when nothing to change."""
        changes = updates.changes()
        if not changes:
            return None

        doctor = self.find_by_user_id(user_id)
        if doctor is None:
            return None

        # License numbers stay unique across doctors
        license_number = changes.get("license_number")
        if license_number is not None:
            existing = self.find_by_license_number(license_number)
            if existing is not None and existing.user_id != user_id:
                raise DuplicateLicense()

        try:
            with transaction(self.db):
                for field, value in changes.items():
                    setattr(doctor, field, value)
        except IntegrityError:
            raise DuplicateLicense()

        self.db.refresh(doctor)
        return doctor

    def delete(self, user_id: int) -> bool:
        user = self.db.query(User).filter(User.id == user_id, User.role == Role.DOCTOR.value).first()
        if user is None:
            return False
        with transaction(self.db):
            delete_account_rows(self.db, user)
        logger.info("Deleted doctor account id=%s", user_id)
        return True
