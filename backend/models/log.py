from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base


# One audit row per security relevant event (login, registration, record changes)
class AuditLog(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Acting user; kept as NULL once the account is deleted
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(50), nullable=False, index=True)
    resource = Column(String(50), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="SUCCESS", index=True)
    ip = Column(String(64), nullable=True)

    # Event specific context (ids, email tried at login, changed fields)
    meta = Column(JSON, nullable=True)

    actor = relationship("User", lazy="joined", uselist=False)

    @property
    def actor_email(self):
        return self.actor.email if self.actor else None
