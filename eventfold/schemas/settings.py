"""Business settings schemas."""

from typing import Optional

from pydantic import Field

from eventfold.schemas.album import CamelModel


class SettingsResponse(CamelModel):
    business_name: Optional[str]
    business_logo: Optional[str]
    contact_whatsapp: Optional[str] = Field(alias="contactWhatsApp")


class SettingsUpdateRequest(CamelModel):
    business_name: Optional[str] = None
    business_logo: Optional[str] = None
    contact_whatsapp: Optional[str] = Field(default=None, alias="contactWhatsApp")
