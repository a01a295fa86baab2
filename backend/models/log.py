from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base


class Log(Base):
    """
    Append-only audit entry. `action` names the event (REGISTER, CART_ADD,
    CHECKOUT, ...), `resource` the area it touched, `status` is SUCCESS or FAIL.
    """
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), nullable=False, index=True)
    resource = Column(String(50), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="SUCCESS", index=True)
    ip = Column(String(64), nullable=True)
    meta = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Anonymous events (failed registration) have no user
    user = relationship("User")

    def __repr__(self):
        return f"<Log {self.action} {self.resource} {self.status} user={self.user_id}>"
