# backend/routes/admin.py
from fastapi import APIRouter, Depends, Query, Request
from typing import Optional, Literal
from sqlalchemy.orm import Session

from database import get_db
from models.users import Role
from repositories.users import UserRepository
from schemas.common import MessageResponse, Pagination
from schemas.user import UsersPage
from utils.audit import client_ip, write_log
from utils.errors import InvalidRequest
from utils.tokenJWT import Identity, role_required

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# Retrieve a list of users with filtering and pagination (Admin only)
@router.get("/users", response_model=UsersPage)
def get_all_users(
    search: Optional[str] = Query(None, description="Search by name or email"),
    role: Optional[Literal["admin", "doctor", "patient"]] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    offset = (page - 1) * limit
    users, total = UserRepository(db).list_users(role=role, search=search, limit=limit, offset=offset)
    return {
        "success": True,
        "count": len(users),
        "pagination": Pagination.build(total, limit, offset, len(users)),
        "data": users,
    }


# Delete a user account with its profile and assignments (Admin only)
@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    # Prevent self-deletion
    if user_id == current_user.user_id:
        raise InvalidRequest("You cannot delete your own account")

    UserRepository(db).delete(user_id)

    write_log(db, user_id=current_user.user_id, action="USER_DELETE", resource="users",
              ip=client_ip(request), meta={"deleted_user_id": user_id})
    return {"success": True, "message": f"User {user_id} has been deleted"}
