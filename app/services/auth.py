from datetime import datetime, timedelta, timezone
import uuid
from typing import Optional
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings
from app.core.errors import AuthenticationRequired, ClientProfileNotFound, PermissionDenied
from app.db.session import get_db
from app.models.client import Client

# auto_error=False: a missing header must reach the handler so it can answer
# with the regular {"success": false, "error": ...} body
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(auth_user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a bearer token for an identity of the authentication provider."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": auth_user_id, "exp": expire, "jti": str(uuid.uuid4()), "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_auth_user_id(token: str) -> Optional[str]:
    """Return the `sub` claim of a valid token, None when the token is unusable."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type", "access") != "access":
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None


def get_optional_auth_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    if credentials is None or not credentials.credentials:
        return None
    return decode_auth_user_id(credentials.credentials)


def get_client_for_user(
    db: Session,
    auth_user_id: Optional[str],
    auth_message: str = "Utilisateur non authentifié",
    missing_message: str = "Profil client introuvable",
) -> Client:
    """Resolve the client profile linked to an authenticated identity."""
    if not auth_user_id:
        raise AuthenticationRequired(auth_message)
    client = db.query(Client).filter(Client.auth_user_id == auth_user_id).first()
    if client is None:
        raise ClientProfileNotFound(missing_message)
    return client


def is_admin(client: Client) -> bool:
    return (client.role or "client") == "admin"


def require_admin(
    auth_user_id: Optional[str] = Depends(get_optional_auth_user_id),
    db: Session = Depends(get_db),
) -> Client:
    """Dependency that resolves the caller and ensures it has the admin role.

    Usage in a route:
        @router.patch('/{id}')
        def update(admin=Depends(require_admin)):
            ...
    """
    client = get_client_for_user(db, auth_user_id)
    if not is_admin(client):
        raise PermissionDenied()
    return client
