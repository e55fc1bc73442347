"""Pydantic input schema for referral click metadata."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClickMetadata(BaseModel):
    """Request metadata captured with a referral click."""
    model_config = ConfigDict(str_strip_whitespace=True)

    referrer: Optional[str] = Field(None, max_length=500)
    landing_page: Optional[str] = Field(None, max_length=500)
    campaign: Optional[str] = Field(None, max_length=100)
    user_agent: Optional[str] = Field(None, max_length=500)
    ip_address: Optional[str] = Field(None, max_length=64)
    link_id: Optional[int] = Field(None, gt=0)
