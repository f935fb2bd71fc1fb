# backend/routes/logs.py
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.log import AuditLog
from models.users import Role
from schemas.common import Pagination
from schemas.log import AuditLogPage
from utils.errors import ValidationError
from utils.tokenJWT import Identity, role_required

router = APIRouter(prefix="/api/logs", tags=["Logs"])


def _parse_date(value: str, end_of_day: bool = False) -> datetime:
    # A bare date as upper bound covers that whole day
    if end_of_day and len(value) == 10:
        value += "T23:59:59"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


# Browse the audit trail, newest first (Admin only)
@router.get("", response_model=AuditLogPage)
def get_logs(
    action: Optional[str] = Query(None, description="e.g. LOGIN, PATIENT_DELETE"),
    user_id: Optional[int] = Query(None, alias="userId"),
    resource: Optional[str] = Query(None),
    status: Optional[Literal["SUCCESS", "FAIL"]] = Query(None),
    date_from: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD or ISO datetime"),
    date_to: Optional[str] = Query(None, alias="to", description="YYYY-MM-DD or ISO datetime"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Identity = Depends(role_required(Role.ADMIN)),
):
    query = db.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action.upper())
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if resource:
        query = query.filter(AuditLog.resource == resource)
    if status:
        query = query.filter(AuditLog.status == status)
    if date_from:
        query = query.filter(AuditLog.ts >= _parse_date(date_from))
    if date_to:
        query = query.filter(AuditLog.ts <= _parse_date(date_to, end_of_day=True))

    offset = (page - 1) * limit
    total = query.count()
    rows = query.order_by(AuditLog.ts.desc(), AuditLog.id.desc()).offset(offset).limit(limit).all()
    return {
        "success": True,
        "count": len(rows),
        "pagination": Pagination.build(total, limit, offset, len(rows)),
        "data": rows,
    }
