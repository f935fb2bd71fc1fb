from datetime import datetime
from typing import Any, List, Optional

from schemas.common import CamelModel, Pagination


class AuditLogOut(CamelModel):
    id: int
    ts: Optional[datetime] = None
    user_id: Optional[int] = None
    actor_email: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    meta: Optional[Any] = None


class AuditLogPage(CamelModel):
    success: bool = True
    count: int
    pagination: Pagination
    data: List[AuditLogOut]
