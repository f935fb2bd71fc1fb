# backend/routes/mappings.py
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import Role
from repositories.assignments import AssignmentLedger
from repositories.doctors import DoctorRepository
from repositories.patients import PatientRepository
from schemas.assignment import (
    AssignedDoctorList, AssignedDoctorOut, AssignedPatientList, AssignedPatientOut,
    AssignmentCreate, AssignmentResponse, AssignmentUpdate, MappingOut, MappingPage,
)
from schemas.common import MessageResponse, Pagination
from utils.audit import client_ip, write_log
from utils.errors import AlreadyAssigned, NotFound
from utils.policy import require_owner_or_admin
from utils.tokenJWT import Identity, get_current_user, role_required

router = APIRouter(prefix="/api/mappings", tags=["Mappings"])


# Assign a doctor to a patient (Admin only)
@router.post("", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
def assign_doctor(
    payload: AssignmentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    if PatientRepository(db).find_by_id(payload.patient_id) is None:
        raise NotFound("Patient not found")
    if DoctorRepository(db).find_by_id(payload.doctor_id) is None:
        raise NotFound("Doctor not found")

    ledger = AssignmentLedger(db)
    if ledger.is_assigned(payload.patient_id, payload.doctor_id):
        raise AlreadyAssigned()

    mapping = ledger.assign(payload.patient_id, payload.doctor_id, payload.notes)

    write_log(db, user_id=current_user.user_id, action="MAPPING_ASSIGN", resource="mappings",
              ip=client_ip(request),
              meta={"mapping_id": mapping.id, "patient_id": mapping.patient_id, "doctor_id": mapping.doctor_id})
    return {"success": True, "data": mapping}


# List all patient-doctor mappings, newest first (Admin only)
@router.get("", response_model=MappingPage)
def list_mappings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    offset = (page - 1) * limit
    rows, total = AssignmentLedger(db).list_all(limit=limit, offset=offset)
    data = [MappingOut.from_assignment(row) for row in rows]
    return {
        "success": True,
        "count": len(data),
        "pagination": Pagination.build(total, limit, offset, len(data)),
        "data": data,
    }


# Doctors assigned to a patient (the patient themself or an admin)
@router.get("/patient/{patient_id}", response_model=AssignedDoctorList)
def get_patient_doctors(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    patient = PatientRepository(db).find_by_id(patient_id)
    if patient is None:
        raise NotFound("Patient not found")
    require_owner_or_admin(current_user, patient.user_id, "Not authorized to access these doctor mappings")

    rows = AssignmentLedger(db).list_for_patient(patient_id)
    data = [AssignedDoctorOut.from_assignment(row) for row in rows]
    return {"success": True, "count": len(data), "data": data}


# Patients assigned to a doctor, filtered by status (Admin only)
@router.get("/doctor/{doctor_id}", response_model=AssignedPatientList)
def get_doctor_patients(
    doctor_id: int,
    status_filter: str = Query("active", alias="status", description="active | inactive | all"),
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    if DoctorRepository(db).find_by_id(doctor_id) is None:
        raise NotFound("Doctor not found")

    rows = AssignmentLedger(db).list_for_doctor(doctor_id, status_filter)
    data = [AssignedPatientOut.from_assignment(row) for row in rows]
    return {"success": True, "count": len(data), "data": data}


# Change status or notes of a mapping without deleting it (Admin only)
@router.patch("/{mapping_id}", response_model=AssignmentResponse)
def update_mapping(
    mapping_id: int,
    payload: AssignmentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    mapping = AssignmentLedger(db).update_status(mapping_id, payload)

    write_log(db, user_id=current_user.user_id, action="MAPPING_UPDATE", resource="mappings",
              ip=client_ip(request), meta={"mapping_id": mapping_id, "is_active": mapping.is_active})
    return {"success": True, "data": mapping}


# Remove a doctor from a patient; the row is deleted (Admin only)
@router.delete("/{mapping_id}", response_model=MessageResponse)
def remove_mapping(
    mapping_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    AssignmentLedger(db).remove(mapping_id)

    write_log(db, user_id=current_user.user_id, action="MAPPING_REMOVE", resource="mappings",
              ip=client_ip(request), meta={"mapping_id": mapping_id})
    return {"success": True, "message": "Mapping removed successfully"}
