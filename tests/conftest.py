import os

# must be set before the app modules build their engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.db.session import Base, SessionLocal, engine, create_db
from app.main import app
from app.models.client import Client
from app.models.commande import Commande
from app.models.detail_commande import DetailCommande
from app.models.plat import Plat
from app.models.extra import Extra
from app.models.notification_token import NotificationToken
from app.schemas.notification import SendResult
from app.services.auth import create_access_token
from app.services.push import PushSender, get_push_sender


class FakeSender(PushSender):
    """Records deliveries; tokens listed in `invalid` are rejected as unknown."""

    def __init__(self, invalid=(), fail=False):
        self.invalid = set(invalid)
        self.fail = fail
        self.sent = []

    def send(self, token, payload):
        if self.fail:
            raise RuntimeError("transport down")
        if token in self.invalid:
            return SendResult(success=False, error="Token invalide ou expiré", invalid_token=True)
        self.sent.append((token, payload))
        return SendResult(success=True, message_id=f"msg-{len(self.sent)}")


@pytest.fixture
def db():
    create_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    with_overrides = TestClient(app)
    yield with_overrides
    app.dependency_overrides.clear()


@pytest.fixture
def sender():
    fake = FakeSender()
    app.dependency_overrides[get_push_sender] = lambda: fake
    return fake


def auth_headers(auth_user_id):
    return {"Authorization": f"Bearer {create_access_token(auth_user_id)}"}


def make_client(db, auth_user_id="auth-alice", role="client", **kw):
    c = Client(auth_user_id=auth_user_id, role=role, nom=kw.pop("nom", "Dupont"), prenom=kw.pop("prenom", "Alice"), **kw)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def make_plat(db, nom="Pad Thaï", prix="12.50", **kw):
    p = Plat(plat=nom, prix=Decimal(prix), lundi_dispo="oui", mardi_dispo="oui", mercredi_dispo="non", jeudi_dispo="oui", **kw)
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def make_extra(db, nom="Riz gluant", prix="2.00"):
    e = Extra(nom_extra=nom, prix=Decimal(prix), actif=True)
    db.add(e)
    db.commit()
    db.refresh(e)
    return e


def make_commande(db, owner, placed=None, lines=(), **kw):
    """Create an order; `lines` holds (nom_plat, prix_unitaire, quantite) tuples
    or dicts of DetailCommande columns."""
    c = Commande(
        client_r_id=owner.idclient if owner is not None else None,
        date_de_prise_de_commande=placed or datetime(2024, 3, 1, 12, 0),
        statut_commande=kw.pop("statut_commande", "En_attente_de_confirmation"),
        statut_paiement=kw.pop("statut_paiement", "En_attente_sur_place"),
        **kw,
    )
    for line in lines:
        if isinstance(line, dict):
            c.details.append(DetailCommande(**line))
        else:
            nom, prix, qty = line
            c.details.append(DetailCommande(nom_plat=nom, prix_unitaire=Decimal(str(prix)), quantite_plat_commande=qty))
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def make_token(db, owner, token, active=True, device_type="web"):
    t = NotificationToken(client_id=owner.idclient, device_token=token, device_type=device_type, is_active=active, last_used=datetime(2024, 1, 1))
    db.add(t)
    db.commit()
    return t
