from sqlalchemy import Column, BigInteger, Integer, String, Text, Numeric, Boolean, DateTime
from sqlalchemy.sql import func
from app.db.session import Base


class Extra(Base):
    __tablename__ = "extras_db"

    idextra = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    nom_extra = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    prix = Column(Numeric(10, 2), nullable=False, default=0)
    photo_url = Column(String(500), nullable=True)
    actif = Column(Boolean, nullable=True, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
