from datetime import datetime, timezone

import pytest

from app.core.errors import ActionError
from app.models.notification_preference import NotificationPreference
from app.models.notification_token import NotificationToken
from app.schemas.notification import NotificationPayload
from app.services.notifications import DEFAULT_PREFERENCES, is_notification_allowed
from app.services.push import send_notification_to_client
from tests.conftest import FakeSender, auth_headers, make_client, make_token

TOKEN = "fcm-token-0123456789abcdef"


def tokens_of(db, owner):
    db.expire_all()
    return db.query(NotificationToken).filter(NotificationToken.client_id == owner.idclient).all()


# --- device tokens ----------------------------------------------------------

def test_save_token_registers_device(client, db):
    alice = make_client(db)
    res = client.post("/notifications/tokens", json={"token": TOKEN, "deviceType": "android"}, headers=auth_headers("auth-alice"))
    assert res.status_code == 200
    assert res.json() == {"success": True}

    (row,) = tokens_of(db, alice)
    assert row.device_token == TOKEN
    assert row.device_type == "android"
    assert row.is_active is True
    assert row.last_used is not None


def test_save_token_twice_keeps_one_row(client, db):
    alice = make_client(db)
    headers = auth_headers("auth-alice")
    client.post("/notifications/tokens", json={"token": TOKEN}, headers=headers)
    client.post("/notifications/tokens/revoke", json={"token": TOKEN}, headers=headers)
    res = client.post("/notifications/tokens", json={"device_token": TOKEN, "device_type": "ios"}, headers=headers)
    assert res.status_code == 200

    (row,) = tokens_of(db, alice)
    assert row.is_active is True
    assert row.device_type == "ios"


def test_save_token_validation(client, db):
    make_client(db)
    headers = auth_headers("auth-alice")
    res = client.post("/notifications/tokens", json={"token": "short"}, headers=headers)
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Token invalide"}

    res = client.post("/notifications/tokens", json={"token": TOKEN, "deviceType": "desktop"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Type d'appareil invalide"


def test_save_token_requires_a_client_profile(client, db):
    res = client.post("/notifications/tokens", json={"token": TOKEN})
    assert res.status_code == 401
    assert res.json() == {"success": False, "error": "Utilisateur non authentifié"}

    res = client.post("/notifications/tokens", json={"token": TOKEN}, headers=auth_headers("auth-ghost"))
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Profil client introuvable"}


def test_revoke_is_idempotent(client, db):
    alice = make_client(db)
    make_token(db, alice, TOKEN)
    headers = auth_headers("auth-alice")

    for _ in range(2):
        res = client.post("/notifications/tokens/revoke", json={"token": TOKEN}, headers=headers)
        assert res.json() == {"success": True}
    assert [t.is_active for t in tokens_of(db, alice)] == [False]

    res = client.post("/notifications/tokens/revoke", json={"token": "never-registered-token"}, headers=headers)
    assert res.json() == {"success": True}


def test_revoke_requires_authentication(client, db):
    res = client.post("/notifications/tokens/revoke", json={"token": TOKEN})
    assert res.status_code == 401


def test_list_tokens_and_status(client, db):
    alice = make_client(db)
    headers = auth_headers("auth-alice")
    assert client.get("/notifications/status", headers=headers).json() == {"success": True, "active": False}

    make_token(db, alice, TOKEN)
    make_token(db, alice, "old-device-token-0000", active=False)

    body = client.get("/notifications/tokens", headers=headers).json()
    assert [t["device_token"] for t in body["tokens"]] == [TOKEN]
    assert client.get("/notifications/status", headers=headers).json()["active"] is True


def test_status_is_false_when_anonymous_or_unknown(client, db):
    assert client.get("/notifications/status").json()["active"] is False
    assert client.get("/notifications/status", headers=auth_headers("auth-ghost")).json()["active"] is False


# --- preferences ------------------------------------------------------------

def test_preferences_are_created_with_defaults(client, db):
    alice = make_client(db)
    headers = auth_headers("auth-alice")

    first = client.get("/notifications/preferences", headers=headers).json()
    assert first["success"] is True
    prefs = first["preferences"]
    assert prefs["client_id"] == alice.idclient
    assert prefs["notifications_enabled"] is True
    assert prefs["promotions"] is False
    assert prefs["quiet_hours_start"] is None
    assert prefs["timezone"] == "Europe/Paris"

    second = client.get("/notifications/preferences", headers=headers).json()
    assert second["preferences"]["id"] == prefs["id"]
    assert db.query(NotificationPreference).count() == 1


def test_preferences_partial_update(client, db):
    make_client(db)
    headers = auth_headers("auth-alice")
    res = client.patch(
        "/notifications/preferences",
        json={"promotions": True, "quiet_hours_start": "22:00", "quiet_hours_end": "07:30"},
        headers=headers,
    )
    assert res.json() == {"success": True}

    prefs = client.get("/notifications/preferences", headers=headers).json()["preferences"]
    assert prefs["promotions"] is True
    assert prefs["commande_prete"] is True
    assert prefs["quiet_hours_start"] == "22:00"
    assert prefs["quiet_hours_end"] == "07:30"

    client.patch("/notifications/preferences", json={"quiet_hours_start": None, "commande_prete": False}, headers=headers)
    prefs = client.get("/notifications/preferences", headers=headers).json()["preferences"]
    assert prefs["quiet_hours_start"] is None
    assert prefs["quiet_hours_end"] == "07:30"
    assert prefs["commande_prete"] is False
    assert prefs["promotions"] is True


def test_preferences_validation(client, db):
    make_client(db)
    headers = auth_headers("auth-alice")
    res = client.patch("/notifications/preferences", json={"quiet_hours_start": "25h"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Heure invalide (format HH:MM attendu)"

    res = client.patch("/notifications/preferences", json={"timezone": "Mars/Olympus"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Fuseau horaire invalide"


def prefs(**overrides):
    out = dict(DEFAULT_PREFERENCES, quiet_hours_start=None, quiet_hours_end=None)
    out.update(overrides)
    return out


NOON_UTC = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_allowed_by_default():
    assert is_notification_allowed(prefs(), "commande_prete", NOON_UTC)
    assert is_notification_allowed(prefs(), None, NOON_UTC)


def test_master_switch_and_category_toggle():
    assert not is_notification_allowed(prefs(notifications_enabled=False), None, NOON_UTC)
    assert not is_notification_allowed(prefs(commande_prete=False), "commande_prete", NOON_UTC)
    assert is_notification_allowed(prefs(commande_prete=False), "commande_confirmee", NOON_UTC)
    # marketing categories are off unless opted in
    assert not is_notification_allowed(prefs(), "promotions", NOON_UTC)


@pytest.mark.parametrize(
    "utc_hour, allowed",
    [
        (19, True),   # 21:00 in Paris (summer time)
        (20, False),  # 22:00
        (23, False),  # 01:00 next day
        (4, False),   # 06:00
        (5, True),    # 07:00
    ],
)
def test_quiet_hours_wrap_past_midnight(utc_hour, allowed):
    p = prefs(quiet_hours_start="22:00", quiet_hours_end="07:00")
    now = datetime(2024, 6, 1, utc_hour, 0, tzinfo=timezone.utc)
    assert is_notification_allowed(p, "commande_prete", now) is allowed


def test_quiet_hours_use_the_client_timezone():
    p = prefs(quiet_hours_start="12:00", quiet_hours_end="14:00", timezone="UTC")
    assert not is_notification_allowed(p, None, NOON_UTC)
    p["timezone"] = "Asia/Bangkok"
    assert is_notification_allowed(p, None, NOON_UTC)


# --- dispatch ---------------------------------------------------------------

PAYLOAD = NotificationPayload(title="Bonjour", body="Votre commande avance")


def test_send_reaches_every_active_device(db):
    alice = make_client(db)
    make_token(db, alice, "device-one-token-000")
    make_token(db, alice, "device-two-token-000")
    make_token(db, alice, "device-off-token-000", active=False)
    sender = FakeSender()

    result = send_notification_to_client(db, sender, alice.idclient, PAYLOAD)
    assert result == {"success": True, "sentCount": 2}
    assert sorted(t for t, _ in sender.sent) == ["device-one-token-000", "device-two-token-000"]


def test_invalid_tokens_are_deactivated(db):
    alice = make_client(db)
    make_token(db, alice, "device-good-token-00")
    make_token(db, alice, "device-gone-token-00")
    sender = FakeSender(invalid={"device-gone-token-00"})

    result = send_notification_to_client(db, sender, alice.idclient, PAYLOAD)
    assert result["sentCount"] == 1
    active = {t.device_token: t.is_active for t in tokens_of(db, alice)}
    assert active == {"device-good-token-00": True, "device-gone-token-00": False}


def test_send_without_devices(db):
    alice = make_client(db)
    result = send_notification_to_client(db, FakeSender(), alice.idclient, PAYLOAD)
    assert result == {"success": False, "sentCount": 0, "error": "Aucun appareil enregistré pour ce client"}


def test_send_when_every_delivery_fails(db):
    alice = make_client(db)
    make_token(db, alice, "device-one-token-000")
    result = send_notification_to_client(db, FakeSender(fail=True), alice.idclient, PAYLOAD)
    assert result["success"] is False
    assert result["error"] == "Échec de l'envoi de la notification"


def test_send_respects_preferences(db):
    alice = make_client(db)
    make_token(db, alice, "device-one-token-000")
    db.add(NotificationPreference(client_id=alice.idclient, commande_prete=False))
    db.commit()
    sender = FakeSender()

    result = send_notification_to_client(db, sender, alice.idclient, PAYLOAD, category="commande_prete")
    assert result["success"] is False
    assert result["error"] == "Notification bloquée par les préférences du client"
    assert sender.sent == []


def test_send_without_transport(db):
    alice = make_client(db)
    with pytest.raises(ActionError) as exc:
        send_notification_to_client(db, None, alice.idclient, PAYLOAD)
    assert exc.value.status_code == 503


def test_send_endpoint_is_admin_only(client, db, sender):
    alice = make_client(db)
    make_client(db, auth_user_id="auth-chef", role="admin", prenom="Chanthana")
    make_token(db, alice, "device-one-token-000")
    body = {"clientId": alice.idclient, "notification": {"title": "Promo", "body": "Nouveau menu"}}

    res = client.post("/notifications/send", json=body, headers=auth_headers("auth-alice"))
    assert res.status_code == 403
    assert res.json() == {"success": False, "error": "Accès réservé aux administrateurs"}

    res = client.post("/notifications/send", json=body, headers=auth_headers("auth-chef"))
    assert res.status_code == 200
    assert res.json() == {"success": True, "sentCount": 1}
    assert sender.sent[0][1].title == "Promo"


def test_send_endpoint_validation(client, db, sender):
    make_client(db, auth_user_id="auth-chef", role="admin")
    headers = auth_headers("auth-chef")
    res = client.post("/notifications/send", json={"clientId": 0, "notification": {"title": "a", "body": "b"}}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Client ID invalide"

    res = client.post("/notifications/send", json={"clientId": 1, "notification": {"title": "", "body": "b"}}, headers=headers)
    assert res.json()["error"] == "Titre requis"
