from sqlalchemy import Column, BigInteger, Integer, String, Text, Numeric, Boolean, DateTime
from app.db.session import Base


class Plat(Base):
    __tablename__ = "plats_db"

    idplats = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    plat = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    prix = Column(Numeric(10, 2), nullable=True)
    # weekday availability stored as 'oui' / 'non'
    lundi_dispo = Column(String(3), nullable=False, default="non")
    mardi_dispo = Column(String(3), nullable=False, default="non")
    mercredi_dispo = Column(String(3), nullable=False, default="non")
    jeudi_dispo = Column(String(3), nullable=False, default="non")
    vendredi_dispo = Column(String(3), nullable=True)
    samedi_dispo = Column(String(3), nullable=True)
    dimanche_dispo = Column(String(3), nullable=True)
    photo_du_plat = Column(String(500), nullable=True)
    # sold out is temporal: the dish stays in the catalog
    est_epuise = Column(Boolean, nullable=True, default=False)
    epuise_depuis = Column(DateTime(timezone=True), nullable=True)
    epuise_jusqu_a = Column(DateTime(timezone=True), nullable=True)
    raison_epuisement = Column(Text, nullable=True)
    est_vegetarien = Column(Boolean, nullable=True, default=False)
    niveau_epice = Column(Integer, nullable=True)
    categorie = Column(String(100), nullable=True)
