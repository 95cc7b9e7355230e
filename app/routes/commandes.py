from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.errors import ActionError
from app.db.session import get_db
from app.models.client import Client
from app.schemas.commande import CommandeUpdate
from app.services import commandes as commandes_service
from app.services.auth import get_optional_auth_user_id, require_admin
from app.services.push import PushSender, get_push_sender

router = APIRouter(prefix="/commandes", tags=["Commandes"])

logger = logging.getLogger(__name__)


@router.get("/{commande_id}")
def get_commande(
    commande_id: int,
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    try:
        return {"success": True, "data": commandes_service.get_commande_for_viewer(db, auth_user_id, commande_id)}
    except ActionError:
        raise
    except Exception:
        db.rollback()
        logger.exception("get_commande %s failed", commande_id)
        raise ActionError("Erreur lors de la récupération de la commande", 500)


@router.patch("/{commande_id}")
def update_commande(
    commande_id: int,
    payload: CommandeUpdate,
    db: Session = Depends(get_db),
    admin: Client = Depends(require_admin),
    sender: Optional[PushSender] = Depends(get_push_sender),
):
    try:
        data = commandes_service.update_commande(db, sender, commande_id, payload)
        return {"success": True, "data": data}
    except ActionError:
        raise
    except Exception:
        db.rollback()
        logger.exception("update_commande %s failed", commande_id)
        raise ActionError("Impossible de mettre à jour la commande", 500)


@router.post("/{commande_id}/epingle")
def toggle_epingle(
    commande_id: int,
    db: Session = Depends(get_db),
    admin: Client = Depends(require_admin),
):
    try:
        return {"success": True, "data": commandes_service.toggle_epingle(db, commande_id)}
    except ActionError:
        raise
    except Exception:
        db.rollback()
        logger.exception("toggle_epingle %s failed", commande_id)
        raise ActionError("Impossible d'épingler/désépingler la commande", 500)
