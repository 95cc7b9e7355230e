from sqlalchemy import Column, BigInteger, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.db.session import Base


class NotificationToken(Base):
    __tablename__ = "notification_tokens"
    __table_args__ = (
        UniqueConstraint("client_id", "device_token", name="uq_notification_tokens_client_token"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    client_id = Column(BigInteger, ForeignKey("client_db.idclient"), nullable=True, index=True)
    device_token = Column(String(512), nullable=False, index=True)
    # 'web' | 'ios' | 'android'
    device_type = Column(String(20), nullable=True, default="web")
    # revocation only flips this flag, rows are never deleted
    is_active = Column(Boolean, nullable=True, default=True)
    last_used = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
