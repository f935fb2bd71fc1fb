# backend/routes/patients.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import Role
from repositories.patients import PatientRepository
from schemas.common import MessageResponse, Pagination
from schemas.patient import PatientCreate, PatientPage, PatientResponse, PatientUpdate
from utils.accounts import register_account
from utils.audit import client_ip, write_log
from utils.errors import NotFound, ValidationError
from utils.policy import require_owner_or_admin
from utils.tokenJWT import Identity, get_current_user, role_required

router = APIRouter(prefix="/api/patients", tags=["Patients"])


# Load a patient or fail with 404
def _get_patient_or_404(repo: PatientRepository, patient_id: int):
    patient = repo.find_by_id(patient_id)
    if patient is None:
        raise NotFound("Patient not found")
    return patient


# Create a new patient account (Admin only)
@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    payload: PatientCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    user = register_account(db, request, payload, Role.PATIENT.value, actor_id=current_user.user_id,
                            action="PATIENT_CREATE", resource="patients")
    return {"success": True, "data": PatientRepository(db).find_by_user_id(user.id)}


# Admins get all patients (search + pagination); others only their own record
@router.get("", response_model=PatientPage)
def list_patients(
    search: Optional[str] = Query("", description="Search by name, email or phone"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    repo = PatientRepository(db)

    if not current_user.is_admin:
        patient = repo.find_by_user_id(current_user.user_id)
        data = [patient] if patient else []
        return {"success": True, "count": len(data), "data": data}

    offset = (page - 1) * limit
    rows, total = repo.find_all(search=search or "", limit=limit, offset=offset)
    return {
        "success": True,
        "count": len(rows),
        "pagination": Pagination.build(total, limit, offset, len(rows)),
        "data": rows,
    }


# Get a patient (the patient themself or an admin)
@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    patient = _get_patient_or_404(PatientRepository(db), patient_id)
    require_owner_or_admin(current_user, patient.user_id, "Not authorized to access this patient")
    return {"success": True, "data": patient}


# Update a patient profile (the patient themself or an admin)
@router.put("/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    repo = PatientRepository(db)
    patient = _get_patient_or_404(repo, patient_id)
    require_owner_or_admin(current_user, patient.user_id, "Not authorized to update this patient")

    updated = repo.update(patient.user_id, payload)
    if updated is None:
        raise ValidationError("No valid fields to update")

    write_log(db, user_id=current_user.user_id, action="PATIENT_UPDATE", resource="patients",
              ip=client_ip(request), meta={"patient_id": patient_id, "fields": sorted(payload.changes())})
    return {"success": True, "data": updated}


# Delete a patient together with its account and assignments (Admin only)
@router.delete("/{patient_id}", response_model=MessageResponse)
def delete_patient(
    patient_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    repo = PatientRepository(db)
    patient = _get_patient_or_404(repo, patient_id)
    owner_id = patient.user_id

    if not repo.delete(owner_id):
        raise NotFound("Patient not found")

    write_log(db, user_id=current_user.user_id, action="PATIENT_DELETE", resource="patients",
              ip=client_ip(request), meta={"patient_id": patient_id, "user_id": owner_id})
    return {"success": True, "message": "Patient deleted successfully"}
