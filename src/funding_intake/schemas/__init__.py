"""
Pydantic schemas for request/response validation
"""
from funding_intake.schemas.base import BaseSchema, CamelSchema
from funding_intake.schemas.application import (
    ApplicationDraft,
    PropertyRecord,
    MAX_PROPERTIES,
)
from funding_intake.schemas.zoho_crm import ZohoLeadRecord
from funding_intake.schemas.intake import (
    SubmissionAccepted,
    SubmissionFailed,
    HealthResponse,
)

__all__ = [
    # Base schemas
    "BaseSchema",
    "CamelSchema",
    # Application schemas
    "ApplicationDraft",
    "PropertyRecord",
    "MAX_PROPERTIES",
    # Zoho CRM schemas
    "ZohoLeadRecord",
    # Intake schemas
    "SubmissionAccepted",
    "SubmissionFailed",
    "HealthResponse",
]
