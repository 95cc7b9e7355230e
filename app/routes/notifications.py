from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.errors import ActionError
from app.db.session import get_db
from app.models.client import Client
from app.schemas.notification import (
    SaveTokenRequest,
    RevokeTokenRequest,
    NotificationPreferencesUpdate,
    NotificationPreferencesRead,
    NotificationTokenRead,
    SendNotificationRequest,
)
from app.services import notifications as notifications_service
from app.services.auth import get_optional_auth_user_id, require_admin
from app.services.push import PushSender, get_push_sender, send_notification_to_client

router = APIRouter(prefix="/notifications", tags=["Notifications"])

logger = logging.getLogger(__name__)


def _unexpected(db: Session, where: str, message: str) -> ActionError:
    db.rollback()
    logger.exception("%s failed", where)
    return ActionError(message, 500)


@router.post("/tokens")
def save_notification_token(
    payload: SaveTokenRequest,
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    try:
        return notifications_service.save_notification_token(db, auth_user_id, payload)
    except ActionError:
        raise
    except Exception:
        raise _unexpected(db, "save_notification_token", "Erreur lors de la sauvegarde du token")


@router.post("/tokens/revoke")
def revoke_notification_token(
    payload: RevokeTokenRequest,
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    try:
        return notifications_service.revoke_notification_token(db, auth_user_id, payload)
    except ActionError:
        raise
    except Exception:
        raise _unexpected(db, "revoke_notification_token", "Erreur lors de la révocation du token")


@router.get("/tokens")
def list_notification_tokens(
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    try:
        tokens = notifications_service.get_user_notification_tokens(db, auth_user_id)
        return {"success": True, "tokens": [NotificationTokenRead(**t) for t in tokens]}
    except ActionError:
        raise
    except Exception:
        raise _unexpected(db, "get_user_notification_tokens", "Erreur lors de la récupération des tokens")


@router.get("/status")
def notification_status(
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    return {"success": True, "active": notifications_service.has_active_notifications(db, auth_user_id)}


@router.get("/preferences")
def get_notification_preferences(
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    try:
        prefs = notifications_service.get_notification_preferences(db, auth_user_id)
        return {"success": True, "preferences": NotificationPreferencesRead(**prefs).model_dump()}
    except ActionError:
        raise
    except Exception:
        raise _unexpected(db, "get_notification_preferences", "Erreur lors de la récupération des préférences")


@router.patch("/preferences")
def update_notification_preferences(
    payload: NotificationPreferencesUpdate,
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    try:
        return notifications_service.update_notification_preferences(db, auth_user_id, payload)
    except ActionError:
        raise
    except Exception:
        raise _unexpected(db, "update_notification_preferences", "Erreur lors de la mise à jour des préférences")


@router.post("/send")
def send_notification(
    payload: SendNotificationRequest,
    db: Session = Depends(get_db),
    admin: Client = Depends(require_admin),
    sender: Optional[PushSender] = Depends(get_push_sender),
):
    try:
        return send_notification_to_client(db, sender, payload.clientId, payload.notification, payload.category)
    except ActionError:
        raise
    except Exception:
        raise _unexpected(db, "send_notification", "Erreur serveur")
