# backend/repositories/assignments.py
"""
Assignment ledger: the patient <-> doctor relation.

There is at most one row per (patient, doctor) pair. Assigning an already
mapped pair reactivates the existing row instead of inserting a new one, and
removing a mapping deletes the row for good.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from database import transaction
from models.assignment import Assignment
from models.doctor import DoctorProfile
from models.patient import PatientProfile
from schemas.assignment import AssignmentUpdate
from utils.errors import InvalidRequest, NotFound, ValidationError

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("active", "inactive", "all")


class AssignmentLedger:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Assignment).options(
            joinedload(Assignment.patient).joinedload(PatientProfile.user),
            joinedload(Assignment.doctor).joinedload(DoctorProfile.user),
        )

    def get(self, mapping_id: int) -> Optional[Assignment]:
        return self._query().filter(Assignment.id == mapping_id).first()

    def find_pair(self, patient_id: int, doctor_id: int) -> Optional[Assignment]:
        return (
            self.db.query(Assignment)
            .filter(Assignment.patient_id == patient_id, Assignment.doctor_id == doctor_id)
            .first()
        )

    def is_assigned(self, patient_id: int, doctor_id: int) -> bool:
        row = (
            self.db.query(Assignment.id)
            .filter(
                Assignment.patient_id == patient_id,
                Assignment.doctor_id == doctor_id,
                Assignment.is_active.is_(True),
            )
            .first()
        )
        return row is not None

    def assign(self, patient_id: int, doctor_id: int, notes: Optional[str] = None) -> Assignment:
        """Insert the pair, or reactivate it and replace its notes when it exists."""
        with transaction(self.db):
            row = self.find_pair(patient_id, doctor_id)
            created = False
            if row is None:
                try:
                    with self.db.begin_nested():
                        row = Assignment(patient_id=patient_id, doctor_id=doctor_id, notes=notes, is_active=True)
                        self.db.add(row)
                    created = True
                except IntegrityError:
                    # A concurrent request inserted the same pair first
                    row = self.find_pair(patient_id, doctor_id)
                    if row is None:
                        raise
                    logger.info("Pair patient=%s doctor=%s inserted concurrently, updating", patient_id, doctor_id)

            if not created:
                row.is_active = True
                row.notes = notes
                row.updated_at = func.now()

        self.db.refresh(row)
        return row

    def update_status(self, mapping_id: int, updates: AssignmentUpdate) -> Assignment:
        row = self.get(mapping_id)
        if row is None:
            raise NotFound("Mapping not found")

        changes = updates.model_dump(exclude_unset=True)
        if changes.get("is_active", True) is None:
            changes.pop("is_active")
        if not changes:
            raise ValidationError("No valid fields to update")

        with transaction(self.db):
            for field, value in changes.items():
                setattr(row, field, value)
            row.updated_at = func.now()

        self.db.refresh(row)
        return row

    def remove(self, mapping_id: int) -> bool:
        with transaction(self.db):
            deleted = (
                self.db.query(Assignment)
                .filter(Assignment.id == mapping_id)
                .delete(synchronize_session="fetch")
            )
        if not deleted:
            raise NotFound("Mapping not found")
        logger.info("Removed mapping id=%s", mapping_id)
        return True

    def list_for_patient(self, patient_id: int) -> List[Assignment]:
        return (
            self._query()
            .filter(Assignment.patient_id == patient_id)
            .order_by(Assignment.assigned_at.desc(), Assignment.id.desc())
            .all()
        )

    def list_for_doctor(self, doctor_id: int, status: str = "active") -> List[Assignment]:
        if status not in STATUS_FILTERS:
            raise InvalidRequest(f"Status must be one of: {', '.join(STATUS_FILTERS)}")

        query = self._query().filter(Assignment.doctor_id == doctor_id)
        if status == "active":
            query = query.filter(Assignment.is_active.is_(True))
        elif status == "inactive":
            query = query.filter(Assignment.is_active.is_(False))
        return query.order_by(Assignment.assigned_at.desc(), Assignment.id.desc()).all()

    def list_all(self, limit: int = 10, offset: int = 0) -> Tuple[List[Assignment], int]:
        total = self.db.query(func.count(Assignment.id)).scalar() or 0
        rows = (
            self._query()
            .order_by(Assignment.assigned_at.desc(), Assignment.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total
