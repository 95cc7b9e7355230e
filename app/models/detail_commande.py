from sqlalchemy import Column, BigInteger, Integer, String, Numeric, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.db.session import Base


class DetailCommande(Base):
    __tablename__ = "details_commande_db"

    iddetails = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    commande_r = Column(BigInteger, ForeignKey("commande_db.idcommande"), nullable=False, index=True)
    # catalog references carry no FK: the line must survive a deleted dish/extra
    plat_r = Column(BigInteger, nullable=True)
    extra_id = Column(BigInteger, nullable=True)
    # 'plat' | 'extra'
    type = Column(String(10), nullable=True, default="plat")
    # name and unit price captured at order time
    nom_plat = Column(String(255), nullable=True)
    prix_unitaire = Column(Numeric(10, 2), nullable=True)
    quantite_plat_commande = Column(Integer, nullable=True, default=1)
    est_offert = Column(Boolean, nullable=True, default=False)
    spice_distribution = Column(Text, nullable=True)

    plat = relationship(
        "Plat",
        primaryjoin="foreign(DetailCommande.plat_r) == Plat.idplats",
        lazy="joined",
        viewonly=True,
    )
    extra = relationship(
        "Extra",
        primaryjoin="foreign(DetailCommande.extra_id) == Extra.idextra",
        lazy="joined",
        viewonly=True,
    )
