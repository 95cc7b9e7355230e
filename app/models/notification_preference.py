from sqlalchemy import Column, BigInteger, Integer, String, Boolean, DateTime, Time, ForeignKey
from sqlalchemy.sql import func
from app.db.session import Base


class NotificationPreference(Base):
    __tablename__ = "notification_preferences"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    client_id = Column(BigInteger, ForeignKey("client_db.idclient"), unique=True, nullable=True)
    notifications_enabled = Column(Boolean, nullable=True, default=True)
    # orders
    commande_confirmee = Column(Boolean, nullable=True, default=True)
    commande_preparation = Column(Boolean, nullable=True, default=True)
    commande_prete = Column(Boolean, nullable=True, default=True)
    commande_retard = Column(Boolean, nullable=True, default=True)
    # event bookings
    evenement_confirme = Column(Boolean, nullable=True, default=True)
    evenement_rappel_48h = Column(Boolean, nullable=True, default=True)
    evenement_rappel_24h = Column(Boolean, nullable=True, default=True)
    evenement_preparation = Column(Boolean, nullable=True, default=True)
    # marketing
    promotions = Column(Boolean, nullable=True, default=False)
    nouveautes = Column(Boolean, nullable=True, default=False)
    newsletter = Column(Boolean, nullable=True, default=False)
    # admin
    rappel_paiement = Column(Boolean, nullable=True, default=True)
    message_admin = Column(Boolean, nullable=True, default=True)
    quiet_hours_start = Column(Time, nullable=True)
    quiet_hours_end = Column(Time, nullable=True)
    timezone = Column(String(64), nullable=True, default="Europe/Paris")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
