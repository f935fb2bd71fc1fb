from datetime import date, datetime
from typing import ClassVar, List, Optional

from pydantic import Field

from schemas.common import CamelModel, Pagination
from schemas.user import RegistrationBase, UserResponse

BLOOD_TYPE_PATTERN = r"^(A|B|AB|O)[+-]$"


# Input schema for creating a patient account. Date of birth and phone are
# checked by the credential store so a missing one reports MissingRequiredField.
class PatientCreate(RegistrationBase):
    date_of_birth: Optional[date] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    address: Optional[str] = None
    blood_type: Optional[str] = Field(None, pattern=BLOOD_TYPE_PATTERN)
    medical_history: Optional[str] = None
    allergies: Optional[str] = None


# Partial update of a patient profile; only the fields sent are changed
class PatientUpdate(CamelModel):
    date_of_birth: Optional[date] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    address: Optional[str] = None
    blood_type: Optional[str] = Field(None, pattern=BLOOD_TYPE_PATTERN)
    medical_history: Optional[str] = None
    allergies: Optional[str] = None

    # Columns that cannot be cleared
    REQUIRED_COLUMNS: ClassVar[tuple] = ("date_of_birth", "phone")

    def changes(self) -> dict:
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key not in self.REQUIRED_COLUMNS
        }


# Output schema for the profile alone (nested under a user)
class PatientProfileOut(CamelModel):
    id: int
    user_id: int
    date_of_birth: date
    phone: str
    address: Optional[str] = None
    blood_type: Optional[str] = None
    medical_history: Optional[str] = None
    allergies: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Output schema for a patient with its owning account
class PatientOut(PatientProfileOut):
    name: str
    email: str
    user: UserResponse


class PatientResponse(CamelModel):
    success: bool = True
    data: PatientOut


class PatientPage(CamelModel):
    success: bool = True
    count: int
    pagination: Optional[Pagination] = None
    data: List[PatientOut]
