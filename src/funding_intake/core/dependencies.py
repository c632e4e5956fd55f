"""
Shared dependencies for FastAPI routes
"""
from funding_intake.services.intake_service import IntakeService


def get_intake_service() -> IntakeService:
    """A fresh orchestrator per request (it tracks the current step)"""
    return IntakeService()
