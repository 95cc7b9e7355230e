"""Order history for the signed-in client.

Pipeline: build the ownership-scoped predicate, run count + page fetch,
map each raw order to the UI shape, then apply the amount bounds on the
mapped page. Totals are not a stored column, so the amount bounds cannot be
part of the predicate; `total` and `totalPages` therefore ignore them.
"""
import logging
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, List

from sqlalchemy import or_
from sqlalchemy.orm import Session, Query

from app.core.timezone_utils import local_day_range_to_utc, to_iso
from app.models.commande import Commande
from app.models.detail_commande import DetailCommande
from app.schemas.historique import HistoriqueFiltres
from app.services.auth import get_client_for_user
from app.services import statuts

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# largest value of the BIGINT id column
MAX_ID = 2 ** 63 - 1


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def price_str(value) -> Optional[str]:
    """Serialize a stored price as a 2-decimal string, None stays None."""
    if value is None:
        return None
    return str(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def compute_total(details) -> Decimal:
    """Order total: captured unit price times quantity, summed over the lines."""
    total = Decimal("0")
    for d in details or []:
        total += to_decimal(d.prix_unitaire) * (d.quantite_plat_commande or 0)
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_search_id(search: Optional[str]) -> Optional[int]:
    """Return the order id a search term designates, or None for plain text."""
    if not search:
        return None
    s = search.strip()
    if s.isascii() and s.isdigit():
        value = int(s)
        if value <= MAX_ID:
            return value
    return None


def build_history_query(db: Session, client_id: int, filtres: HistoriqueFiltres) -> Query:
    q = db.query(Commande).filter(Commande.client_r_id == client_id)

    if filtres.status and filtres.status != "all":
        q = q.filter(Commande.statut_commande == filtres.status)

    if filtres.startDate:
        start_utc, _ = local_day_range_to_utc(filtres.startDate)
        q = q.filter(Commande.date_de_prise_de_commande >= start_utc)
    if filtres.endDate:
        _, end_utc = local_day_range_to_utc(filtres.endDate)
        q = q.filter(Commande.date_de_prise_de_commande <= end_utc)

    if filtres.search:
        conditions = [
            Commande.details.any(DetailCommande.nom_plat.icontains(filtres.search, autoescape=True)),
            Commande.nom_evenement.icontains(filtres.search, autoescape=True),
        ]
        search_id = parse_search_id(filtres.search)
        if search_id is not None:
            conditions.append(Commande.idcommande == search_id)
        q = q.filter(or_(*conditions))

    return q


def map_plat(plat) -> Optional[dict]:
    if plat is None:
        return None
    return {
        "id": plat.idplats,
        "idplats": plat.idplats,
        "plat": plat.plat,
        "description": plat.description,
        "prix": price_str(plat.prix),
        "lundi_dispo": plat.lundi_dispo,
        "mardi_dispo": plat.mardi_dispo,
        "mercredi_dispo": plat.mercredi_dispo,
        "jeudi_dispo": plat.jeudi_dispo,
        "vendredi_dispo": plat.vendredi_dispo,
        "samedi_dispo": plat.samedi_dispo,
        "dimanche_dispo": plat.dimanche_dispo,
        "photo_du_plat": plat.photo_du_plat,
        "est_epuise": plat.est_epuise,
        "epuise_depuis": to_iso(plat.epuise_depuis),
        "epuise_jusqu_a": to_iso(plat.epuise_jusqu_a),
        "raison_epuisement": plat.raison_epuisement,
        "est_vegetarien": plat.est_vegetarien,
        "niveau_epice": plat.niveau_epice,
        "categorie": plat.categorie,
    }


def map_extra(extra) -> Optional[dict]:
    if extra is None:
        return None
    return {
        "idextra": extra.idextra,
        "nom_extra": extra.nom_extra,
        "description": extra.description,
        "prix": price_str(extra.prix) or "0.00",
        "photo_url": extra.photo_url,
        "actif": extra.actif,
        "created_at": to_iso(extra.created_at),
        "updated_at": to_iso(extra.updated_at),
    }


def map_client(client) -> Optional[dict]:
    if client is None:
        return None
    return {
        "idclient": client.idclient,
        "nom": client.nom,
        "prenom": client.prenom,
        "email": client.email,
        "numero_de_telephone": client.numero_de_telephone,
        "adresse_numero_et_rue": client.adresse_numero_et_rue,
        "ville": client.ville,
        "code_postal": client.code_postal,
        "preference_client": client.preference_client,
        "photo_client": client.photo_client,
        "auth_user_id": client.auth_user_id,
    }


def map_detail(detail: DetailCommande) -> dict:
    # a dish or extra deleted from the catalog leaves plat/extra at None;
    # the captured name and price still describe the line
    return {
        "iddetails": detail.iddetails,
        "commande_r": detail.commande_r,
        "plat_r": detail.plat_r,
        "quantite_plat_commande": detail.quantite_plat_commande if detail.quantite_plat_commande is not None else 1,
        "nom_plat": detail.nom_plat,
        "prix_unitaire": price_str(detail.prix_unitaire),
        "type": detail.type or "plat",
        "extra_id": detail.extra_id,
        "est_offert": bool(detail.est_offert),
        "spice_distribution": detail.spice_distribution,
        "plat": map_plat(detail.plat),
        "extra": map_extra(detail.extra),
    }


def map_commande(c: Commande) -> dict:
    """Flatten a raw order and its relations into the UI view-model."""
    total = compute_total(c.details)
    statut_paiement = statuts.map_statut_paiement(c.statut_paiement)
    date_commande = to_iso(c.date_de_prise_de_commande)
    retrait = to_iso(c.date_et_heure_de_retrait_souhaitees)

    return {
        "id": c.idcommande,
        "idcommande": c.idcommande,
        "client_r_id": int(c.client_r_id) if c.client_r_id is not None else None,
        "created_at": date_commande,
        "statut_commande": statuts.map_statut_commande(c.statut_commande),
        "date_commande": date_commande,
        "heure_retrait": retrait,
        "total": float(total),
        "prix_total": str(total),
        "notes": c.notes_internes or None,
        "notes_internes": c.notes_internes or None,
        "statut_paiement": statut_paiement,
        "moyen_paiement": statuts.moyen_paiement(statut_paiement),
        "type_livraison": statuts.map_type_livraison(c.type_livraison),
        "frais_livraison": 0,
        "adresse_livraison": c.adresse_specifique or None,
        "code_promo": None,
        "remise": 0,
        "source_commande": "Web",
        "est_paye": statuts.is_paid(statut_paiement),
        "version": 1,
        "date_et_heure_de_retrait_souhaitees": retrait,
        "demande_special_pour_la_commande": c.demande_special_pour_la_commande or None,
        "adresse_specifique": c.adresse_specifique or None,
        "client_r": c.client_r or None,
        "date_de_prise_de_commande": date_commande,
        "nom_evenement": c.nom_evenement or None,
        "epingle": bool(c.epingle),
        "client": map_client(c.client),
        "details": [map_detail(d) for d in (c.details or [])],
    }


def filter_by_amount(commandes: List[dict], min_amount: Optional[float] = None, max_amount: Optional[float] = None) -> List[dict]:
    """Keep mapped orders whose total lies within the inclusive bounds."""
    if min_amount is None and max_amount is None:
        return commandes
    out = []
    for c in commandes:
        total = c.get("total") or 0
        if min_amount is not None and total < min_amount:
            continue
        if max_amount is not None and total > max_amount:
            continue
        out.append(c)
    return out


def fetch_history_page(db: Session, auth_user_id: Optional[str], filtres: HistoriqueFiltres) -> dict:
    client = get_client_for_user(
        db,
        auth_user_id,
        auth_message="Vous devez être connecté pour voir votre historique",
        missing_message="Compte client introuvable",
    )

    q = build_history_query(db, client.idclient, filtres)
    total = q.count()
    rows = (
        q.order_by(Commande.date_de_prise_de_commande.desc(), Commande.idcommande.desc())
        .offset((filtres.page - 1) * filtres.pageSize)
        .limit(filtres.pageSize)
        .all()
    )

    data = [map_commande(c) for c in rows]
    amount_filtered = filtres.minAmount is not None or filtres.maxAmount is not None
    if amount_filtered:
        before = len(data)
        data = filter_by_amount(data, filtres.minAmount, filtres.maxAmount)
        logger.debug("amount filter kept %s of %s orders on page %s", len(data), before, filtres.page)

    return {
        "success": True,
        "data": data,
        "totalPages": math.ceil(total / filtres.pageSize),
        "total": total,
        "amountFiltered": amount_filtered,
    }
