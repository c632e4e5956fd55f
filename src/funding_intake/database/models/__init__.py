"""
Database models module
"""
from funding_intake.database.models.base import Base
from funding_intake.database.models.round_robin import RoundRobinCursor  # Import all models here

__all__ = ["Base", "RoundRobinCursor"]
