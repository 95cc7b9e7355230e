"""Translation between stored enum text and display values.

The database keeps enum members under their generated identifiers, where
accented characters and spaces became underscores (``Confirm_e`` for
``Confirmée``). Older rows carry a second spelling (``Confirm_e_e``,
``Paye_en_ligne``). Every read goes through the ``map_*`` functions below;
every admin write goes through the ``*_to_db`` functions.

Fallbacks differ per field: an unknown order status or delivery type reads
as None, while an unknown payment status reads as "En attente sur place" so
the UI never shows an order without a payment state.
"""
from typing import Dict, Optional

EN_ATTENTE_DE_CONFIRMATION = "En attente de confirmation"
CONFIRMEE = "Confirmée"
EN_PREPARATION = "En préparation"
PRETE_A_RECUPERER = "Prête à récupérer"
RECUPEREE = "Récupérée"
ANNULEE = "Annulée"

STATUTS_COMMANDE = (
    EN_ATTENTE_DE_CONFIRMATION,
    CONFIRMEE,
    EN_PREPARATION,
    PRETE_A_RECUPERER,
    RECUPEREE,
    ANNULEE,
)

EN_ATTENTE_SUR_PLACE = "En attente sur place"
PAYE_SUR_PLACE = "Payé sur place"
PAYE_EN_LIGNE = "Payé en ligne"
NON_PAYE = "Non payé"
PAYEE = "Payée"

STATUTS_PAIEMENT = (EN_ATTENTE_SUR_PLACE, PAYE_SUR_PLACE, PAYE_EN_LIGNE, NON_PAYE, PAYEE)
STATUTS_PAYES = frozenset({PAYE_EN_LIGNE, PAYE_SUR_PLACE, PAYEE})

A_EMPORTER = "À emporter"
LIVRAISON = "Livraison"
SUR_PLACE = "Sur place"

TYPES_LIVRAISON = (A_EMPORTER, LIVRAISON, SUR_PLACE)

_STATUT_COMMANDE_FROM_DB: Dict[str, str] = {
    "En_attente_de_confirmation": EN_ATTENTE_DE_CONFIRMATION,
    "Confirm_e": CONFIRMEE,
    "Confirm_e_e": CONFIRMEE,
    "En_preparation": EN_PREPARATION,
    "En_pr_paration": EN_PREPARATION,
    "Pr_te___r_cup_rer": PRETE_A_RECUPERER,
    "Prete_a_recuperer": PRETE_A_RECUPERER,
    "Recuperee": RECUPEREE,
    "R_cup_r_e": RECUPEREE,
    "Annulee": ANNULEE,
    "Annul_e": ANNULEE,
    # refused orders are shown as cancelled
    "Refusee": ANNULEE,
    "Refus_e": ANNULEE,
}

_STATUT_PAIEMENT_FROM_DB: Dict[str, str] = {
    "En_attente_sur_place": EN_ATTENTE_SUR_PLACE,
    "Paye_en_ligne": PAYE_EN_LIGNE,
    "Pay__en_ligne": PAYE_EN_LIGNE,
    "Paye_sur_place": PAYE_SUR_PLACE,
    "Pay__sur_place": PAYE_SUR_PLACE,
    "En_attente": EN_ATTENTE_SUR_PLACE,
    "Non_pay_": NON_PAYE,
    "Non_paye": NON_PAYE,
    "Pay_e": PAYEE,
    "Payee": PAYEE,
    "Rembourse": NON_PAYE,
}

_TYPE_LIVRAISON_FROM_DB: Dict[str, str] = {
    "emporter": A_EMPORTER,
    "A_emporter": A_EMPORTER,
    "Livraison": LIVRAISON,
    "Sur_place": SUR_PLACE,
}

# canonical spelling written by the admin back-office
_STATUT_COMMANDE_TO_DB: Dict[str, str] = {
    EN_ATTENTE_DE_CONFIRMATION: "En_attente_de_confirmation",
    CONFIRMEE: "Confirm_e",
    EN_PREPARATION: "En_pr_paration",
    PRETE_A_RECUPERER: "Pr_te___r_cup_rer",
    RECUPEREE: "R_cup_r_e",
    ANNULEE: "Annul_e",
}

_STATUT_PAIEMENT_TO_DB: Dict[str, str] = {
    EN_ATTENTE_SUR_PLACE: "En_attente_sur_place",
    PAYE_SUR_PLACE: "Pay__sur_place",
    PAYE_EN_LIGNE: "Pay__en_ligne",
    NON_PAYE: "Non_pay_",
    PAYEE: "Pay_e",
}

_TYPE_LIVRAISON_TO_DB: Dict[str, str] = {
    A_EMPORTER: "emporter",
    LIVRAISON: "Livraison",
    SUR_PLACE: "Sur_place",
}


def _lookup(table: Dict[str, str], canonical, raw: Optional[str], fallback: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    if raw in table:
        return table[raw]
    # rows written with the display value already
    if raw in canonical:
        return raw
    return fallback


def map_statut_commande(raw: Optional[str]) -> Optional[str]:
    return _lookup(_STATUT_COMMANDE_FROM_DB, STATUTS_COMMANDE, raw, None)


def map_statut_paiement(raw: Optional[str]) -> Optional[str]:
    return _lookup(_STATUT_PAIEMENT_FROM_DB, STATUTS_PAIEMENT, raw, EN_ATTENTE_SUR_PLACE)


def map_type_livraison(raw: Optional[str]) -> Optional[str]:
    return _lookup(_TYPE_LIVRAISON_FROM_DB, TYPES_LIVRAISON, raw, None)


def statut_commande_to_db(display: Optional[str]) -> Optional[str]:
    return _STATUT_COMMANDE_TO_DB.get(display) if display else None


def statut_paiement_to_db(display: Optional[str]) -> Optional[str]:
    return _STATUT_PAIEMENT_TO_DB.get(display) if display else None


def type_livraison_to_db(display: Optional[str]) -> Optional[str]:
    return _TYPE_LIVRAISON_TO_DB.get(display) if display else None


def is_paid(statut_paiement: Optional[str]) -> bool:
    """True when a normalized payment status means the order is settled."""
    return statut_paiement in STATUTS_PAYES


def moyen_paiement(statut_paiement: Optional[str]) -> str:
    """Coarse payment-means label derived from the normalized payment status."""
    if statut_paiement and "sur place" in statut_paiement:
        return "Sur place"
    return "En ligne"
