from pydantic import BaseModel, Field, AliasChoices, field_validator
from typing import Optional, Dict
from datetime import datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEVICE_TYPES = ("web", "ios", "android")


def _check_token(v: str) -> str:
    if not isinstance(v, str) or len(v) < 10:
        raise ValueError("Token invalide")
    return v


class SaveTokenRequest(BaseModel):
    token: str = Field(validation_alias=AliasChoices("token", "device_token"))
    deviceType: str = Field("web", validation_alias=AliasChoices("deviceType", "device_type"))

    @field_validator("token", mode="before")
    @classmethod
    def check_token(cls, v):
        return _check_token(v)

    @field_validator("deviceType", mode="before")
    @classmethod
    def check_device_type(cls, v):
        if v is None:
            return "web"
        if v not in DEVICE_TYPES:
            raise ValueError("Type d'appareil invalide")
        return v


class RevokeTokenRequest(BaseModel):
    token: str = Field(validation_alias=AliasChoices("token", "device_token"))

    @field_validator("token", mode="before")
    @classmethod
    def check_token(cls, v):
        return _check_token(v)


class NotificationTokenRead(BaseModel):
    device_token: str
    device_type: str = "web"
    last_used: Optional[datetime] = None


def parse_quiet_hour(v: Optional[str]) -> Optional[time]:
    """Parse an 'HH:MM' (or 'HH:MM:SS') string into a time of day."""
    if v is None:
        return None
    try:
        return time.fromisoformat(v)
    except (TypeError, ValueError):
        raise ValueError("Heure invalide (format HH:MM attendu)")


class NotificationPreferencesUpdate(BaseModel):
    notifications_enabled: Optional[bool] = None
    commande_confirmee: Optional[bool] = None
    commande_preparation: Optional[bool] = None
    commande_prete: Optional[bool] = None
    commande_retard: Optional[bool] = None
    evenement_confirme: Optional[bool] = None
    evenement_rappel_48h: Optional[bool] = None
    evenement_rappel_24h: Optional[bool] = None
    evenement_preparation: Optional[bool] = None
    promotions: Optional[bool] = None
    nouveautes: Optional[bool] = None
    newsletter: Optional[bool] = None
    rappel_paiement: Optional[bool] = None
    message_admin: Optional[bool] = None
    quiet_hours_start: Optional[str] = None
    quiet_hours_end: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("quiet_hours_start", "quiet_hours_end")
    @classmethod
    def check_quiet_hours(cls, v):
        parse_quiet_hour(v)
        return v

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError("Fuseau horaire invalide")
        return v


class NotificationPreferencesRead(BaseModel):
    id: int
    client_id: int
    notifications_enabled: bool = True
    commande_confirmee: bool = True
    commande_preparation: bool = True
    commande_prete: bool = True
    commande_retard: bool = True
    evenement_confirme: bool = True
    evenement_rappel_48h: bool = True
    evenement_rappel_24h: bool = True
    evenement_preparation: bool = True
    promotions: bool = False
    nouveautes: bool = False
    newsletter: bool = False
    rappel_paiement: bool = True
    message_admin: bool = True
    quiet_hours_start: Optional[str] = None
    quiet_hours_end: Optional[str] = None
    timezone: str = "Europe/Paris"


class NotificationPayload(BaseModel):
    title: str
    body: str
    icon: Optional[str] = None
    badge: Optional[str] = None
    tag: Optional[str] = None
    requireInteraction: Optional[bool] = None
    # push transports only accept string values in data
    data: Optional[Dict[str, str]] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        if not v:
            raise ValueError("Titre requis")
        return v

    @field_validator("body")
    @classmethod
    def check_body(cls, v):
        if not v:
            raise ValueError("Message requis")
        return v


class SendNotificationRequest(BaseModel):
    clientId: int
    notification: NotificationPayload
    # preference toggle consulted before sending, e.g. 'commande_prete'
    category: Optional[str] = None

    @field_validator("clientId")
    @classmethod
    def check_client_id(cls, v):
        if v <= 0:
            raise ValueError("Client ID invalide")
        return v


class SendResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    # the transport rejected the token as unknown or expired
    invalid_token: bool = False
