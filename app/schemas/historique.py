from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List

from app.core.timezone_utils import local_day_range_to_utc


class HistoriqueFiltres(BaseModel):
    page: int = Field(1, ge=1)
    pageSize: int = Field(10, ge=1, le=50)
    # raw stored value, compared before normalization; 'all' disables the filter
    status: Optional[str] = None
    search: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    minAmount: Optional[float] = None
    maxAmount: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data):
        # query strings send "" for cleared inputs
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v != ""}
        return data

    @field_validator("startDate", "endDate")
    @classmethod
    def check_date(cls, v):
        if v is None:
            return v
        try:
            local_day_range_to_utc(v)
        except ValueError:
            raise ValueError("Date invalide")
        return v


class PlatUI(BaseModel):
    id: int
    idplats: int
    plat: str
    description: Optional[str] = None
    prix: Optional[str] = None
    lundi_dispo: Optional[str] = None
    mardi_dispo: Optional[str] = None
    mercredi_dispo: Optional[str] = None
    jeudi_dispo: Optional[str] = None
    vendredi_dispo: Optional[str] = None
    samedi_dispo: Optional[str] = None
    dimanche_dispo: Optional[str] = None
    photo_du_plat: Optional[str] = None
    est_epuise: Optional[bool] = None
    epuise_depuis: Optional[str] = None
    epuise_jusqu_a: Optional[str] = None
    raison_epuisement: Optional[str] = None
    est_vegetarien: Optional[bool] = None
    niveau_epice: Optional[int] = None
    categorie: Optional[str] = None


class ExtraUI(BaseModel):
    idextra: int
    nom_extra: str
    description: Optional[str] = None
    prix: str
    photo_url: Optional[str] = None
    actif: Optional[bool] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ClientUI(BaseModel):
    idclient: int
    nom: Optional[str] = None
    prenom: Optional[str] = None
    email: Optional[str] = None
    numero_de_telephone: Optional[str] = None
    adresse_numero_et_rue: Optional[str] = None
    ville: Optional[str] = None
    code_postal: Optional[int] = None
    preference_client: Optional[str] = None
    photo_client: Optional[str] = None
    auth_user_id: Optional[str] = None


class DetailCommandeUI(BaseModel):
    iddetails: int
    commande_r: int
    plat_r: Optional[int] = None
    quantite_plat_commande: int = 1
    nom_plat: Optional[str] = None
    prix_unitaire: Optional[str] = None
    type: Optional[str] = "plat"
    extra_id: Optional[int] = None
    est_offert: bool = False
    spice_distribution: Optional[str] = None
    plat: Optional[PlatUI] = None
    extra: Optional[ExtraUI] = None


class CommandeUI(BaseModel):
    id: int
    idcommande: int
    client_r_id: Optional[int] = None
    created_at: Optional[str] = None
    statut_commande: Optional[str] = None
    date_commande: Optional[str] = None
    heure_retrait: Optional[str] = None
    total: float = 0.0
    prix_total: str = "0.00"
    notes: Optional[str] = None
    notes_internes: Optional[str] = None
    statut_paiement: Optional[str] = None
    moyen_paiement: str = "En ligne"
    type_livraison: Optional[str] = None
    frais_livraison: float = 0
    adresse_livraison: Optional[str] = None
    code_promo: Optional[str] = None
    remise: float = 0
    source_commande: str = "Web"
    est_paye: bool = False
    version: int = 1
    date_et_heure_de_retrait_souhaitees: Optional[str] = None
    demande_special_pour_la_commande: Optional[str] = None
    adresse_specifique: Optional[str] = None
    client_r: Optional[str] = None
    date_de_prise_de_commande: Optional[str] = None
    nom_evenement: Optional[str] = None
    epingle: bool = False
    client: Optional[ClientUI] = None
    details: List[DetailCommandeUI] = []


class HistoriqueResponse(BaseModel):
    success: bool = True
    data: List[CommandeUI] = []
    totalPages: int = 0
    total: int = 0
    # true when minAmount/maxAmount narrowed the page after pagination;
    # total and totalPages do not account for that narrowing
    amountFiltered: bool = False
