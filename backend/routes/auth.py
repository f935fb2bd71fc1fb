# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import Role
from repositories.users import UserRepository
from schemas.auth import MeResponse, RegisteredResponse, TokenResponse
from schemas.common import MessageResponse
from schemas.doctor import DoctorCreate
from schemas.patient import PatientCreate
from schemas.user import AccountUpdate, PasswordChange, UserCreate, UserLogin
from utils.accounts import register_account
from utils.audit import client_ip, write_log
from utils.errors import ApiError, InvalidRequest, NotFound, ValidationError
from utils.tokenJWT import Identity, create_access_token, get_current_user, role_required

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# Register a new admin account (public; other roles go through the admin-only routes)
@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, request: Request, db: Session = Depends(get_db)):
    if payload.role != Role.ADMIN.value:
        raise InvalidRequest(
            "Only admin role is allowed for basic registration. "
            "Use /register/patient or /register/doctor for other roles."
        )

    user = register_account(db, request, payload, Role.ADMIN.value)
    token = create_access_token(user.id, user.role)
    return {"success": True, "token": token, "user": user}


# Register a new patient (Admin only)
@router.post("/register/patient", response_model=RegisteredResponse, status_code=status.HTTP_201_CREATED)
def register_patient(
    payload: PatientCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    user = register_account(db, request, payload, Role.PATIENT.value, actor_id=current_user.user_id)
    return {"success": True, "message": "Patient registered successfully", "user": user}


# Register a new doctor (Admin only)
@router.post("/register/doctor", response_model=RegisteredResponse, status_code=status.HTTP_201_CREATED)
def register_doctor(
    payload: DoctorCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    user = register_account(db, request, payload, Role.DOCTOR.value, actor_id=current_user.user_id)
    return {"success": True, "message": "Doctor registered successfully", "user": user}


# Authenticate user and issue JWT token
@router.post("/login", response_model=TokenResponse)
def login(payload: UserLogin, request: Request, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    try:
        user = repo.authenticate(payload.email, payload.password)
    except ApiError:
        known = repo.find_by_email(payload.email)
        write_log(db, user_id=(known.id if known else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise

    token = create_access_token(user.id, user.role)

    write_log(db, user_id=user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": user.email})

    return {"success": True, "token": token, "user": user}


# Retrieve current authenticated user details with the role profile
@router.get("/me", response_model=MeResponse)
def me(db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    user = UserRepository(db).find_by_id(current_user.user_id, include_profile=True)
    if user is None:
        raise NotFound("User not found")
    return {"success": True, "user": user}


# Update own name / email
@router.put("/me", response_model=MeResponse)
def update_me(
    payload: AccountUpdate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No valid fields to update")

    repo = UserRepository(db)
    repo.update_account(current_user.user_id, **changes)
    return {"success": True, "user": repo.find_by_id(current_user.user_id, include_profile=True)}


# Change own password
@router.put("/password", response_model=MessageResponse)
def change_password(
    payload: PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    try:
        UserRepository(db).change_password(current_user.user_id, payload.current_password, payload.new_password)
    except ApiError:
        write_log(db, user_id=current_user.user_id, action="PASSWORD_CHANGE", resource="auth",
                  status="FAIL", ip=client_ip(request))
        raise

    write_log(db, user_id=current_user.user_id, action="PASSWORD_CHANGE", resource="auth",
              status="SUCCESS", ip=client_ip(request))
    return {"success": True, "message": "Password updated successfully"}
