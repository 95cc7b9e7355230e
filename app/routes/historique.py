from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.errors import ActionError, ValidationFailed, first_error_message
from app.db.session import get_db
from app.schemas.historique import HistoriqueFiltres, HistoriqueResponse
from app.services.auth import get_optional_auth_user_id
from app.services.historique import fetch_history_page

router = APIRouter(prefix="/historique", tags=["Historique"])

logger = logging.getLogger(__name__)


@router.get("", response_model=HistoriqueResponse)
@router.get("/", response_model=HistoriqueResponse)
def get_paginated_history(
    request: Request,
    db: Session = Depends(get_db),
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
):
    """Paginated order history of the signed-in client.

    Query parameters: page, pageSize, status, search, startDate, endDate,
    minAmount, maxAmount. With minAmount/maxAmount the page is narrowed after
    pagination and `total`/`totalPages` still count the unfiltered matches.
    """
    try:
        filtres = HistoriqueFiltres.model_validate(dict(request.query_params))
    except ValidationError as e:
        raise ValidationFailed(first_error_message(e))
    try:
        return fetch_history_page(db, auth_user_id, filtres)
    except ActionError:
        raise
    except Exception:
        db.rollback()
        logger.exception("get_paginated_history failed")
        raise ActionError("Erreur lors de la récupération de l'historique", 500)
