from datetime import datetime
from typing import ClassVar, List, Optional

from pydantic import Field

from schemas.common import CamelModel, Pagination
from schemas.user import RegistrationBase, UserResponse


# Input schema for creating a doctor account. Specialization, license number
# and phone are checked by the credential store (MissingRequiredField).
class DoctorCreate(RegistrationBase):
    specialization: Optional[str] = Field(None, min_length=1, max_length=100)
    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    is_available: bool = True
    experience_years: Optional[int] = Field(None, ge=0)
    bio: Optional[str] = None


# Partial update of a doctor profile; only the fields sent are changed
class DoctorUpdate(CamelModel):
    specialization: Optional[str] = Field(None, min_length=1, max_length=100)
    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    is_available: Optional[bool] = None
    experience_years: Optional[int] = Field(None, ge=0)
    bio: Optional[str] = None

    # Columns that cannot be cleared
    REQUIRED_COLUMNS: ClassVar[tuple] = ("specialization", "license_number", "phone", "is_available")

    def changes(self) -> dict:
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key not in self.REQUIRED_COLUMNS
        }


class DoctorProfileOut(CamelModel):
    id: int
    user_id: int
    specialization: str
    license_number: str
    phone: str
    is_available: bool
    experience_years: Optional[int] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DoctorOut(DoctorProfileOut):
    name: str
    email: str
    user: UserResponse


class DoctorResponse(CamelModel):
    success: bool = True
    data: DoctorOut


class DoctorFilters(CamelModel):
    specializations: List[str]


class DoctorPage(CamelModel):
    success: bool = True
    count: int
    pagination: Pagination
    filters: DoctorFilters
    data: List[DoctorOut]
