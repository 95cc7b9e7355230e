import pytest

from app.services import statuts


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("En_attente_de_confirmation", "En attente de confirmation"),
        ("Confirm_e", "Confirmée"),
        ("Confirm_e_e", "Confirmée"),
        ("En_preparation", "En préparation"),
        ("En_pr_paration", "En préparation"),
        ("Pr_te___r_cup_rer", "Prête à récupérer"),
        ("Prete_a_recuperer", "Prête à récupérer"),
        ("Recuperee", "Récupérée"),
        ("R_cup_r_e", "Récupérée"),
        ("Annulee", "Annulée"),
        ("Annul_e", "Annulée"),
        ("Refusee", "Annulée"),
        ("Refus_e", "Annulée"),
    ],
)
def test_map_statut_commande(raw, expected):
    assert statuts.map_statut_commande(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("En_attente_sur_place", "En attente sur place"),
        ("En_attente", "En attente sur place"),
        ("Paye_en_ligne", "Payé en ligne"),
        ("Pay__en_ligne", "Payé en ligne"),
        ("Paye_sur_place", "Payé sur place"),
        ("Pay__sur_place", "Payé sur place"),
        ("Non_pay_", "Non payé"),
        ("Non_paye", "Non payé"),
        ("Pay_e", "Payée"),
        ("Payee", "Payée"),
        ("Rembourse", "Non payé"),
    ],
)
def test_map_statut_paiement(raw, expected):
    assert statuts.map_statut_paiement(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("emporter", "À emporter"),
        ("A_emporter", "À emporter"),
        ("Livraison", "Livraison"),
        ("Sur_place", "Sur place"),
    ],
)
def test_map_type_livraison(raw, expected):
    assert statuts.map_type_livraison(raw) == expected


def test_unknown_values_use_field_specific_fallbacks():
    assert statuts.map_statut_commande("Perdue") is None
    assert statuts.map_type_livraison("Drone") is None
    assert statuts.map_statut_paiement("Crypto") == "En attente sur place"


@pytest.mark.parametrize(
    "fn", [statuts.map_statut_commande, statuts.map_statut_paiement, statuts.map_type_livraison]
)
def test_absent_values_map_to_none(fn):
    assert fn(None) is None
    assert fn("") is None


def test_display_values_map_to_themselves():
    for value in statuts.STATUTS_COMMANDE:
        assert statuts.map_statut_commande(value) == value
    for value in statuts.STATUTS_PAIEMENT:
        assert statuts.map_statut_paiement(value) == value
    for value in statuts.TYPES_LIVRAISON:
        assert statuts.map_type_livraison(value) == value


def test_reverse_maps_write_stored_spelling():
    assert statuts.statut_commande_to_db("Confirmée") == "Confirm_e"
    assert statuts.statut_commande_to_db("Prête à récupérer") == "Pr_te___r_cup_rer"
    assert statuts.statut_paiement_to_db("Payé en ligne") == "Pay__en_ligne"
    assert statuts.type_livraison_to_db("À emporter") == "emporter"
    assert statuts.statut_commande_to_db("Inconnu") is None
    assert statuts.statut_commande_to_db(None) is None


def test_reverse_maps_read_back_to_the_same_display_value():
    for value in statuts.STATUTS_COMMANDE:
        assert statuts.map_statut_commande(statuts.statut_commande_to_db(value)) == value
    for value in statuts.STATUTS_PAIEMENT:
        assert statuts.map_statut_paiement(statuts.statut_paiement_to_db(value)) == value
    for value in statuts.TYPES_LIVRAISON:
        assert statuts.map_type_livraison(statuts.type_livraison_to_db(value)) == value


def test_is_paid_and_payment_means():
    assert statuts.is_paid("Payé en ligne")
    assert statuts.is_paid("Payé sur place")
    assert statuts.is_paid("Payée")
    assert not statuts.is_paid("En attente sur place")
    assert not statuts.is_paid(None)

    assert statuts.moyen_paiement("En attente sur place") == "Sur place"
    assert statuts.moyen_paiement("Payé sur place") == "Sur place"
    assert statuts.moyen_paiement("Payé en ligne") == "En ligne"
    assert statuts.moyen_paiement(None) == "En ligne"
