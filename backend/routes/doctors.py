# backend/routes/doctors.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import Role
from repositories.assignments import AssignmentLedger
from repositories.doctors import DoctorRepository
from schemas.assignment import AssignedPatientList, AssignedPatientOut
from schemas.common import MessageResponse, Pagination
from schemas.doctor import DoctorCreate, DoctorPage, DoctorResponse, DoctorUpdate
from utils.accounts import register_account
from utils.audit import client_ip, write_log
from utils.errors import NotFound, ValidationError
from utils.tokenJWT import Identity, role_required

router = APIRouter(prefix="/api/doctors", tags=["Doctors"])

DOCTOR_ONLY = "Access denied. Only doctors can access this resource."


def _get_doctor_or_404(repo: DoctorRepository, doctor_id: int):
    doctor = repo.find_by_id(doctor_id)
    if doctor is None:
        raise NotFound("Doctor not found")
    return doctor


def _own_profile_or_404(repo: DoctorRepository, current_user: Identity):
    doctor = repo.find_by_user_id(current_user.user_id)
    if doctor is None:
        raise NotFound("Doctor profile not found")
    return doctor


# Create a new doctor account (Admin only)
@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
def create_doctor(
    payload: DoctorCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    user = register_account(db, request, payload, Role.DOCTOR.value, actor_id=current_user.user_id,
                            action="DOCTOR_CREATE", resource="doctors")
    return {"success": True, "data": DoctorRepository(db).find_by_user_id(user.id)}


# Public directory of doctors with filtering and pagination
@router.get("", response_model=DoctorPage)
def list_doctors(
    search: Optional[str] = Query("", description="Search by name, email or license number"),
    specialization: Optional[str] = Query(None),
    is_available: Optional[bool] = Query(None, alias="isAvailable"),
    min_experience: Optional[int] = Query(None, alias="minExperience", ge=0),
    max_experience: Optional[int] = Query(None, alias="maxExperience", ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    repo = DoctorRepository(db)
    offset = (page - 1) * limit
    rows, total = repo.find_all(
        search=search or "",
        specialization=specialization,
        is_available=is_available,
        min_experience=min_experience,
        max_experience=max_experience,
        limit=limit,
        offset=offset,
    )
    return {
        "success": True,
        "count": len(rows),
        "pagination": Pagination.build(total, limit, offset, len(rows)),
        "filters": {"specializations": repo.get_specializations()},
        "data": rows,
    }


# Own profile (Doctor only)
@router.get("/me", response_model=DoctorResponse)
def get_own_profile(
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.DOCTOR)),
):
    return {"success": True, "data": _own_profile_or_404(DoctorRepository(db), current_user)}


@router.put("/me", response_model=DoctorResponse)
def update_own_profile(
    payload: DoctorUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.DOCTOR)),
):
    repo = DoctorRepository(db)
    doctor = _own_profile_or_404(repo, current_user)

    updated = repo.update(current_user.user_id, payload)
    if updated is None:
        raise ValidationError("No valid fields to update")

    write_log(db, user_id=current_user.user_id, action="DOCTOR_UPDATE", resource="doctors",
              ip=client_ip(request), meta={"doctor_id": doctor.id, "fields": sorted(payload.changes())})
    return {"success": True, "data": updated}


# Patients assigned to the calling doctor
@router.get("/me/patients", response_model=AssignedPatientList)
def get_own_patients(
    status_filter: str = Query("active", alias="status", description="active | inactive | all"),
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.DOCTOR)),
):
    doctor = _own_profile_or_404(DoctorRepository(db), current_user)
    rows = AssignmentLedger(db).list_for_doctor(doctor.id, status_filter)
    data = [AssignedPatientOut.from_assignment(row) for row in rows]
    return {"success": True, "count": len(data), "data": data}


# Get doctor by ID (public)
@router.get("/{doctor_id}", response_model=DoctorResponse)
def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": _get_doctor_or_404(DoctorRepository(db), doctor_id)}


# Update doctor (Admin only)
@router.put("/{doctor_id}", response_model=DoctorResponse)
def update_doctor(
    doctor_id: int,
    payload: DoctorUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    repo = DoctorRepository(db)
    doctor = _get_doctor_or_404(repo, doctor_id)

    updated = repo.update(doctor.user_id, payload)
    if updated is None:
        raise ValidationError("No valid fields to update")

    write_log(db, user_id=current_user.user_id, action="DOCTOR_UPDATE", resource="doctors",
              ip=client_ip(request), meta={"doctor_id": doctor_id, "fields": sorted(payload.changes())})
    return {"success": True, "data": updated}


# Delete doctor, its account and all its assignments (Admin only)
@router.delete("/{doctor_id}", response_model=MessageResponse)
def delete_doctor(
    doctor_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    repo = DoctorRepository(db)
    doctor = _get_doctor_or_404(repo, doctor_id)
    owner_id = doctor.user_id

    if not repo.delete(owner_id):
        raise NotFound("Doctor not found")

    write_log(db, user_id=current_user.user_id, action="DOCTOR_DELETE", resource="doctors",
              ip=client_ip(request), meta={"doctor_id": doctor_id, "user_id": owner_id})
    return {"success": True, "message": "Doctor deleted successfully"}
