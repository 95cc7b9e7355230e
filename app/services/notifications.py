import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.timezone_utils import get_zone
from app.models.notification_token import NotificationToken
from app.models.notification_preference import NotificationPreference
from app.schemas.notification import (
    SaveTokenRequest,
    RevokeTokenRequest,
    NotificationPreferencesUpdate,
    parse_quiet_hour,
)
from app.services.auth import get_client_for_user
from app.core.errors import AuthenticationRequired

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {
    "notifications_enabled": True,
    "commande_confirmee": True,
    "commande_preparation": True,
    "commande_prete": True,
    "commande_retard": True,
    "evenement_confirme": True,
    "evenement_rappel_48h": True,
    "evenement_rappel_24h": True,
    "evenement_preparation": True,
    "promotions": False,
    "nouveautes": False,
    "newsletter": False,
    "rappel_paiement": True,
    "message_admin": True,
    "timezone": "Europe/Paris",
}

PREFERENCE_TOGGLES = tuple(k for k in DEFAULT_PREFERENCES if k not in ("notifications_enabled", "timezone"))


def token_preview(token: Optional[str]) -> str:
    return (token or "")[:20] + "..."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- device tokens ---------------------------------------------------------

def save_notification_token(db: Session, auth_user_id: Optional[str], payload: SaveTokenRequest) -> dict:
    """Register (or reactivate) a device token for the caller."""
    client = get_client_for_user(db, auth_user_id)
    row = (
        db.query(NotificationToken)
        .filter(NotificationToken.client_id == client.idclient, NotificationToken.device_token == payload.token)
        .first()
    )
    if row is None:
        row = NotificationToken(client_id=client.idclient, device_token=payload.token)
    row.device_type = payload.deviceType
    row.is_active = True
    row.last_used = _utcnow()
    db.add(row)
    db.commit()
    logger.info("notification token saved client=%s token=%s", client.idclient, token_preview(payload.token))
    return {"success": True}


def revoke_notification_token(db: Session, auth_user_id: Optional[str], payload: RevokeTokenRequest) -> dict:
    """Soft-delete every row holding this token. Revoking twice is harmless."""
    if not auth_user_id:
        raise AuthenticationRequired()
    count = (
        db.query(NotificationToken)
        .filter(NotificationToken.device_token == payload.token)
        .update({NotificationToken.is_active: False}, synchronize_session=False)
    )
    db.commit()
    logger.info("notification token revoked token=%s rows=%s", token_preview(payload.token), count)
    return {"success": True}


def get_user_notification_tokens(db: Session, auth_user_id: Optional[str]) -> list:
    client = get_client_for_user(db, auth_user_id)
    rows = (
        db.query(NotificationToken)
        .filter(NotificationToken.client_id == client.idclient, NotificationToken.is_active.is_(True))
        .order_by(NotificationToken.last_used.desc())
        .all()
    )
    return [
        {
            "device_token": r.device_token,
            "device_type": r.device_type or "web",
            "last_used": r.last_used or _utcnow(),
        }
        for r in rows
    ]


def has_active_notifications(db: Session, auth_user_id: Optional[str]) -> bool:
    if not auth_user_id:
        return False
    try:
        client = get_client_for_user(db, auth_user_id)
        count = (
            db.query(NotificationToken)
            .filter(NotificationToken.client_id == client.idclient, NotificationToken.is_active.is_(True))
            .count()
        )
    except Exception:
        logger.exception("has_active_notifications failed")
        return False
    return count > 0


# --- preferences ---------------------------------------------------------------

def preferences_to_dict(prefs: Optional[NotificationPreference]) -> dict:
    """Read a preferences row, substituting defaults for NULL columns."""
    out = {
        "id": prefs.id if prefs is not None else None,
        "client_id": prefs.client_id if prefs is not None else None,
    }
    for key, default in DEFAULT_PREFERENCES.items():
        value = getattr(prefs, key, None) if prefs is not None else None
        out[key] = default if value is None else value
    for key in ("quiet_hours_start", "quiet_hours_end"):
        value = getattr(prefs, key, None) if prefs is not None else None
        out[key] = value.strftime("%H:%M") if value is not None else None
    return out


def get_or_create_preferences(db: Session, client_id: int) -> NotificationPreference:
    prefs = db.query(NotificationPreference).filter(NotificationPreference.client_id == client_id).first()
    if prefs is None:
        prefs = NotificationPreference(client_id=client_id, **DEFAULT_PREFERENCES)
        db.add(prefs)
        db.commit()
        db.refresh(prefs)
        logger.info("default notification preferences created client=%s", client_id)
    return prefs


def get_notification_preferences(db: Session, auth_user_id: Optional[str]) -> dict:
    client = get_client_for_user(db, auth_user_id)
    return preferences_to_dict(get_or_create_preferences(db, client.idclient))


def update_notification_preferences(
    db: Session, auth_user_id: Optional[str], updates: NotificationPreferencesUpdate
) -> dict:
    """Merge a partial update into the caller's preferences row."""
    client = get_client_for_user(db, auth_user_id)
    prefs = get_or_create_preferences(db, client.idclient)
    changes = updates.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if key in ("quiet_hours_start", "quiet_hours_end"):
            value = parse_quiet_hour(value)
        elif value is None:
            # explicit null on a toggle keeps the stored value
            continue
        setattr(prefs, key, value)
    db.add(prefs)
    db.commit()
    logger.info("notification preferences updated client=%s fields=%s", client.idclient, sorted(changes))
    return {"success": True}


def _in_quiet_hours(start, end, moment) -> bool:
    if start is None or end is None or start == end:
        return False
    if start < end:
        return start <= moment < end
    # window wraps past midnight, e.g. 22:00 -> 07:00
    return moment >= start or moment < end


def is_notification_allowed(prefs: dict, category: Optional[str], now: datetime) -> bool:
    """Whether a notification of `category` may be delivered at `now`."""
    if not prefs.get("notifications_enabled", True):
        return False
    if category is not None and category in PREFERENCE_TOGGLES and not prefs.get(category, True):
        return False
    start = prefs.get("quiet_hours_start")
    end = prefs.get("quiet_hours_end")
    if start and end:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        local_now = now.astimezone(get_zone(prefs.get("timezone"))).time().replace(second=0, microsecond=0)
        if _in_quiet_hours(parse_quiet_hour(start), parse_quiet_hour(end), local_now):
            return False
    return True
