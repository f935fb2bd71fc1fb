import logging

from fastapi import Request
from sqlalchemy.orm import Session
from models.log import AuditLog

logger = logging.getLogger(__name__)

def client_ip(request: Request):
    return request.client.host if request is not None and request.client else None

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = AuditLog(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
    logger.info("audit %s %s %s user=%s", action, resource, status, user_id)
