from typing import Optional

from schemas.common import CamelModel
from schemas.doctor import DoctorProfileOut
from schemas.patient import PatientProfileOut
from schemas.user import UserResponse


# Account details together with the role profile
class UserDetail(UserResponse):
    patient_profile: Optional[PatientProfileOut] = None
    doctor_profile: Optional[DoctorProfileOut] = None


# Schema for JWT authentication responses (register/login)
class TokenResponse(CamelModel):
    success: bool = True
    token: str
    user: UserResponse


# Schema for admin-mediated registrations
class RegisteredResponse(CamelModel):
    success: bool = True
    message: str
    user: UserResponse


class MeResponse(CamelModel):
    success: bool = True
    user: UserDetail
