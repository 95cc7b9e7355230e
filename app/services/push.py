"""Push delivery to a client's registered devices.

The transport itself (Firebase Cloud Messaging, Web Push, ...) is provided by
the deployment through `configure_push_sender`; this module only decides who
receives a message and keeps the token table clean afterwards.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import ActionError
from app.models.notification_token import NotificationToken
from app.models.notification_preference import NotificationPreference
from app.schemas.notification import NotificationPayload, SendResult
from app.services.notifications import is_notification_allowed, preferences_to_dict, token_preview

logger = logging.getLogger(__name__)


class PushSender:
    """Capability interface of a push transport."""

    def send(self, token: str, payload: NotificationPayload) -> SendResult:
        raise NotImplementedError


_sender: Optional[PushSender] = None


def configure_push_sender(sender: Optional[PushSender]) -> None:
    global _sender
    _sender = sender


def get_push_sender() -> Optional[PushSender]:
    """FastAPI dependency returning the configured transport, if any."""
    return _sender


def send_notification_to_client(
    db: Session,
    sender: Optional[PushSender],
    client_id: int,
    payload: NotificationPayload,
    category: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Send `payload` to every active device of a client.

    Returns {"success", "sentCount", "error"?}. Tokens the transport reports
    as invalid are deactivated.
    """
    if sender is None:
        raise ActionError("Service de notification non configuré", 503)

    prefs_row = db.query(NotificationPreference).filter(NotificationPreference.client_id == client_id).first()
    prefs = preferences_to_dict(prefs_row)
    if not is_notification_allowed(prefs, category, now or datetime.now(timezone.utc)):
        logger.info("notification for client %s skipped by preferences (category=%s)", client_id, category)
        return {"success": False, "sentCount": 0, "error": "Notification bloquée par les préférences du client"}

    rows = (
        db.query(NotificationToken)
        .filter(NotificationToken.client_id == client_id, NotificationToken.is_active.is_(True))
        .all()
    )
    if not rows:
        logger.info("no active token for client %s", client_id)
        return {"success": False, "sentCount": 0, "error": "Aucun appareil enregistré pour ce client"}

    sent = 0
    invalid_tokens = []
    for row in rows:
        try:
            result = sender.send(row.device_token, payload)
        except Exception:
            logger.exception("push transport failed for token %s", token_preview(row.device_token))
            continue
        if result.success:
            sent += 1
        elif result.invalid_token:
            invalid_tokens.append(row.device_token)
        else:
            logger.warning("push refused for token %s: %s", token_preview(row.device_token), result.error)

    if invalid_tokens:
        db.query(NotificationToken).filter(NotificationToken.device_token.in_(invalid_tokens)).update(
            {NotificationToken.is_active: False}, synchronize_session=False
        )
        db.commit()
        logger.info("deactivated %s invalid token(s) for client %s", len(invalid_tokens), client_id)

    logger.info("notification sent to client %s: %s/%s device(s)", client_id, sent, len(rows))
    if sent == 0:
        return {"success": False, "sentCount": 0, "error": "Échec de l'envoi de la notification"}
    return {"success": True, "sentCount": sent}
