"""
Intake endpoint response schemas
"""
from typing import Optional

from pydantic import Field

from funding_intake.schemas.base import BaseSchema


class SubmissionAccepted(BaseSchema):
    """Returned when the application was received (email delivered)"""
    success: bool = True
    message_id: Optional[str] = Field(default=None, alias="messageId")
    zoho_lead_id: Optional[str] = Field(default=None, alias="zohoLeadId")


class SubmissionFailed(BaseSchema):
    """Error body for rejected or failed submissions"""
    error: str
    details: Optional[str] = None
    step: Optional[str] = None


class HealthResponse(BaseSchema):
    status: str
    version: str
    cursor_store: str
