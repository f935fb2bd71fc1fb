# backend/repositories/patients.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, contains_eager

from database import transaction
from models.users import User, Role
from models.patient import PatientProfile
from repositories.users import delete_account_rows
from schemas.patient import PatientUpdate

logger = logging.getLogger(__name__)


class PatientRepository:
    """Reads and partial updates of patient profiles."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return (
            self.db.query(PatientProfile)
            .join(User, PatientProfile.user_id == User.id)
            .options(contains_eager(PatientProfile.user))
        )

    def find_by_id(self, patient_id: int) -> Optional[PatientProfile]:
        return self._query().filter(PatientProfile.id == patient_id).first()

    def find_by_user_id(self, user_id: int) -> Optional[PatientProfile]:
        return self._query().filter(PatientProfile.user_id == user_id).first()

    def find_all(self, search: str = "", limit: int = 10, offset: int = 0) -> Tuple[List[PatientProfile], int]:
        query = self._query()

        # Case-insensitive search by name, email or phone
        if search and search.strip():
            like = f"%{search.strip()}%"
            query = query.filter(or_(User.name.ilike(like), User.email.ilike(like), PatientProfile.phone.ilike(like)))

        total = query.count()
        rows = (
            query.order_by(PatientProfile.created_at.desc(), PatientProfile.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total

    def update(self, user_id: int, updates: PatientUpdate) -> Optional[PatientProfile]:
        """Apply the fields present in `updates`; None when nothing to change."""
        changes = updates.changes()
        if not changes:
            return None

        patient = self.find_by_user_id(user_id)
        if patient is None:
            return None

        with transaction(self.db):
            for field, value in changes.items():
                setattr(patient, field, value)

        self.db.refresh(patient)
        return patient

    def delete(self, user_id: int) -> bool:
        user = self.db.query(User).filter(User.id == user_id, User.role == Role.PATIENT.value).first()
        if user is None:
            return False
        with transaction(self.db):
            delete_account_rows(self.db, user)
        logger.info("Deleted patient account id=%s", user_id)
        return True
