"""Pydantic input schemas for affiliate registration and links."""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from affiliate_ledger.utils.exceptions import InvalidArgument
from affiliate_ledger.utils.validation import normalize_email


class AffiliateRegistration(BaseModel):
    """Affiliate application profile."""
    model_config = ConfigDict(str_strip_whitespace=True)

    business_name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., max_length=255)
    user_id: Optional[str] = Field(None, max_length=64)
    website_url: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=1000)
    social_media: Optional[dict[str, Any]] = None
    tax_information: Optional[dict[str, Any]] = None
    payment_details: Optional[dict[str, Any]] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        try:
            return normalize_email(v)
        except InvalidArgument as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("website_url")
    @classmethod
    def check_website_url(cls, v: Optional[str]) -> Optional[str]:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Website URL must start with http:// or https://")
        return v


class LinkRequest(BaseModel):
    """Tracked link generation request."""
    model_config = ConfigDict(str_strip_whitespace=True)

    link_type: Literal["general", "product", "category"]
    target_url: str = Field(..., min_length=1, max_length=500)
    campaign_name: Optional[str] = Field(None, max_length=100)

    @field_validator("target_url")
    @classmethod
    def check_target_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://", "/")):
            raise ValueError("Target URL must be absolute or site-relative")
        return v
