from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CommandeUpdate(BaseModel):
    # display values ('Confirmée', 'Payé sur place', 'À emporter'), mapped to
    # the stored spelling; values without a mapping are ignored
    statut_commande: Optional[str] = None
    statut_paiement: Optional[str] = None
    type_livraison: Optional[str] = None
    notes_internes: Optional[str] = None
    demande_special_pour_la_commande: Optional[str] = None
    adresse_specifique: Optional[str] = None
    date_et_heure_de_retrait_souhaitees: Optional[datetime] = None
