from sqlalchemy import Column, BigInteger, Integer, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.session import Base


class Commande(Base):
    __tablename__ = "commande_db"

    idcommande = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    client_r_id = Column(BigInteger, ForeignKey("client_db.idclient"), nullable=True, index=True)
    # legacy text reference kept from the first schema
    client_r = Column(String(255), nullable=True)
    date_de_prise_de_commande = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    date_et_heure_de_retrait_souhaitees = Column(DateTime(timezone=True), nullable=True)
    # raw enum text as stored, e.g. 'Confirm_e'; see app.services.statuts
    statut_commande = Column(String(50), nullable=True, default="En_attente_de_confirmation")
    statut_paiement = Column(String(50), nullable=True, default="En_attente_sur_place")
    type_livraison = Column(String(50), nullable=True)
    notes_internes = Column(Text, nullable=True)
    demande_special_pour_la_commande = Column(Text, nullable=True)
    adresse_specifique = Column(String(500), nullable=True)
    nom_evenement = Column(String(255), nullable=True)
    epingle = Column(Boolean, nullable=False, default=False)

    details = relationship(
        "DetailCommande",
        backref="commande",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="DetailCommande.iddetails",
    )
    client = relationship("Client", lazy="joined", viewonly=True)
