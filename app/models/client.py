from sqlalchemy import Column, BigInteger, Integer, String, Text
from app.db.session import Base


class Client(Base):
    __tablename__ = "client_db"

    idclient = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    # identity issued by the authentication provider (JWT `sub`)
    auth_user_id = Column(String(255), unique=True, index=True, nullable=True)
    nom = Column(String(255), nullable=True)
    prenom = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    numero_de_telephone = Column(String(50), nullable=True)
    adresse_numero_et_rue = Column(String(500), nullable=True)
    ville = Column(String(255), nullable=True)
    code_postal = Column(Integer, nullable=True)
    preference_client = Column(Text, nullable=True)
    photo_client = Column(String(500), nullable=True)
    # 'client' | 'admin'
    role = Column(String(20), nullable=False, default="client", server_default="client")
