from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from schemas.common import CamelModel, Pagination


# Input schema for assigning a doctor to a patient
class AssignmentCreate(CamelModel):
    patient_id: int = Field(..., ge=1)
    doctor_id: int = Field(..., ge=1)
    notes: Optional[str] = None


# Schema for changing the status or notes of an existing assignment
class AssignmentUpdate(CamelModel):
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class AssignmentOut(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    is_active: bool
    notes: Optional[str] = None
    assigned_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AssignmentResponse(CamelModel):
    success: bool = True
    data: AssignmentOut


# A doctor as seen from one of their patients
class AssignedDoctorOut(CamelModel):
    mapping_id: int
    doctor_id: int
    user_id: int
    name: str
    email: str
    specialization: str
    license_number: str
    phone: str
    is_available: bool
    is_active: bool
    notes: Optional[str] = None
    assigned_at: Optional[datetime] = None

    @classmethod
    def from_assignment(cls, row) -> "AssignedDoctorOut":
        doctor = row.doctor
        return cls(
            mapping_id=row.id,
            doctor_id=doctor.id,
            user_id=doctor.user_id,
            name=doctor.user.name,
            email=doctor.user.email,
            specialization=doctor.specialization,
            license_number=doctor.license_number,
            phone=doctor.phone,
            is_available=doctor.is_available,
            is_active=row.is_active,
            notes=row.notes,
            assigned_at=row.assigned_at,
        )


# A patient as seen from one of their doctors
class AssignedPatientOut(CamelModel):
    mapping_id: int
    patient_id: int
    user_id: int
    name: str
    email: str
    date_of_birth: date
    phone: str
    blood_type: Optional[str] = None
    is_active: bool
    notes: Optional[str] = None
    assigned_at: Optional[datetime] = None

    @classmethod
    def from_assignment(cls, row) -> "AssignedPatientOut":
        patient = row.patient
        return cls(
            mapping_id=row.id,
            patient_id=patient.id,
            user_id=patient.user_id,
            name=patient.user.name,
            email=patient.user.email,
            date_of_birth=patient.date_of_birth,
            phone=patient.phone,
            blood_type=patient.blood_type,
            is_active=row.is_active,
            notes=row.notes,
            assigned_at=row.assigned_at,
        )


# Row of the admin mapping list, with display names of both sides
class MappingOut(AssignmentOut):
    patient_user_id: int
    patient_name: str
    patient_email: str
    doctor_user_id: int
    doctor_name: str
    doctor_email: str
    specialization: str

    @classmethod
    def from_assignment(cls, row) -> "MappingOut":
        return cls(
            id=row.id,
            patient_id=row.patient_id,
            doctor_id=row.doctor_id,
            is_active=row.is_active,
            notes=row.notes,
            assigned_at=row.assigned_at,
            updated_at=row.updated_at,
            patient_user_id=row.patient.user_id,
            patient_name=row.patient.user.name,
            patient_email=row.patient.user.email,
            doctor_user_id=row.doctor.user_id,
            doctor_name=row.doctor.user.name,
            doctor_email=row.doctor.user.email,
            specialization=row.doctor.specialization,
        )


class AssignedDoctorList(CamelModel):
    success: bool = True
    count: int
    data: List[AssignedDoctorOut]


class AssignedPatientList(CamelModel):
    success: bool = True
    count: int
    data: List[AssignedPatientOut]


class MappingPage(CamelModel):
    success: bool = True
    count: int
    pagination: Pagination
    data: List[MappingOut]
