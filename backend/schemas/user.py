from pydantic import AfterValidator, Field
from pydantic.networks import validate_email
from typing import Annotated, List, Optional
from datetime import datetime

from schemas.common import CamelModel, Pagination


# Checked like EmailStr but kept exactly as sent; emails compare case-sensitively
def _check_email(value: str) -> str:
    _, normalized = validate_email(value)
    if normalized.lower() != value.lower():
        raise ValueError("value is not a valid email address")
    return value

Email = Annotated[str, AfterValidator(_check_email)]


# Schema for user authentication credentials
class UserLogin(CamelModel):
    email: Email
    password: str

# Fields shared by every registration form
class RegistrationBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Email
    password: str = Field(..., min_length=6)

# Schema for public (admin) registration requests
class UserCreate(RegistrationBase):
    role: str = "admin"

# Output schema for user account details (never includes the password hash)
class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None

# Schema for updating one's own account
class AccountUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[Email] = None

# Schema for password change requests
class PasswordChange(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)

# Schema for paginated user list (admin)
class UsersPage(CamelModel):
    success: bool = True
    count: int
    pagination: Pagination
    data: List[UserResponse]
