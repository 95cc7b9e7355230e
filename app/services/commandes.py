import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import ActionError, NotFound
from app.core.timezone_utils import as_utc, make_aware_local
from app.models.commande import Commande
from app.schemas.commande import CommandeUpdate
from app.schemas.notification import NotificationPayload
from app.services import statuts
from app.services.auth import get_client_for_user, is_admin
from app.services.historique import map_commande
from app.services.push import PushSender, send_notification_to_client

logger = logging.getLogger(__name__)

# (title, body template, preference toggle)
_STATUS_MESSAGES = {
    statuts.CONFIRMEE: (
        "✅ Commande confirmée !",
        "Votre commande #{id} a été confirmée et est en cours de préparation.",
        "commande_confirmee",
    ),
    statuts.EN_PREPARATION: (
        "👨‍🍳 Commande en préparation",
        "Votre commande #{id} est en cours de préparation par nos cuisiniers.",
        "commande_preparation",
    ),
    statuts.PRETE_A_RECUPERER: (
        "🎉 Commande prête !",
        "Votre commande #{id} est prête à être récupérée. Bon appétit !",
        "commande_prete",
    ),
    statuts.RECUPEREE: (
        "✅ Commande récupérée",
        "Merci d'avoir récupéré votre commande #{id}. Bon appétit !",
        None,
    ),
    statuts.ANNULEE: (
        "❌ Commande annulée",
        "Votre commande #{id} a été annulée.",
        None,
    ),
}


def build_status_notification(idcommande: int, statut_ui: Optional[str]):
    """Return (payload, preference category) announcing a new order status."""
    title, body, category = _STATUS_MESSAGES.get(
        statut_ui,
        ("Mise à jour de votre commande", "Votre commande #{id} a été mise à jour.", None),
    )
    payload = NotificationPayload(
        title=title,
        body=body.format(id=idcommande),
        icon="/icons/icon-192x192.png",
        data={
            "type": "order",
            "orderId": str(idcommande),
            "url": f"/suivi-commande/{idcommande}",
        },
    )
    return payload, category


def get_commande_or_404(db: Session, commande_id: int) -> Commande:
    commande = db.query(Commande).filter(Commande.idcommande == commande_id).first()
    if commande is None:
        raise NotFound("Commande introuvable")
    return commande


def get_commande_for_viewer(db: Session, auth_user_id: Optional[str], commande_id: int) -> dict:
    """An order is visible to its owner and to admins only."""
    client = get_client_for_user(db, auth_user_id)
    commande = get_commande_or_404(db, commande_id)
    if commande.client_r_id != client.idclient and not is_admin(client):
        raise NotFound("Commande introuvable")
    return map_commande(commande)


def update_commande(db: Session, sender: Optional[PushSender], commande_id: int, updates: CommandeUpdate) -> dict:
    commande = get_commande_or_404(db, commande_id)
    changes = updates.model_dump(exclude_unset=True)
    previous_status = commande.statut_commande

    if changes.get("statut_commande"):
        mapped = statuts.statut_commande_to_db(changes["statut_commande"])
        if mapped:
            commande.statut_commande = mapped
    if changes.get("statut_paiement"):
        mapped = statuts.statut_paiement_to_db(changes["statut_paiement"])
        if mapped:
            commande.statut_paiement = mapped
    if changes.get("type_livraison"):
        mapped = statuts.type_livraison_to_db(changes["type_livraison"])
        if mapped:
            commande.type_livraison = mapped
    for key in ("notes_internes", "demande_special_pour_la_commande", "adresse_specifique"):
        if key in changes:
            setattr(commande, key, changes[key])
    if changes.get("date_et_heure_de_retrait_souhaitees"):
        # stored as UTC wall time; naive input is restaurant local time
        commande.date_et_heure_de_retrait_souhaitees = as_utc(
            make_aware_local(changes["date_et_heure_de_retrait_souhaitees"])
        )

    db.add(commande)
    db.commit()
    db.refresh(commande)
    logger.info("commande %s updated fields=%s", commande_id, sorted(changes))

    status_changed = commande.statut_commande != previous_status
    if status_changed and commande.client_r_id is not None:
        statut_ui = statuts.map_statut_commande(commande.statut_commande)
        payload, category = build_status_notification(commande.idcommande, statut_ui)
        # the update stands even when the client cannot be notified
        try:
            result = send_notification_to_client(db, sender, commande.client_r_id, payload, category)
            logger.info("status notification for commande %s: %s", commande_id, result)
        except ActionError as e:
            logger.warning("status notification for commande %s not sent: %s", commande_id, e.message)
        except Exception:
            db.rollback()
            logger.exception("status notification for commande %s failed", commande_id)

    return map_commande(commande)


def toggle_epingle(db: Session, commande_id: int) -> dict:
    commande = get_commande_or_404(db, commande_id)
    commande.epingle = not bool(commande.epingle)
    db.add(commande)
    db.commit()
    db.refresh(commande)
    return map_commande(commande)
