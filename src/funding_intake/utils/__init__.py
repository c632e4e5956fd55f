"""
Utility functions and helpers
"""
from funding_intake.utils.logging import get_logger, app_logger, get_shared_logger, ops_logger

__all__ = ["get_logger", "app_logger", "get_shared_logger", "ops_logger"]
