"""
Custom exception classes
"""
from fastapi import HTTPException, status


class CRMAPIError(HTTPException):
    """Exception raised when CRM API call fails"""
    def __init__(self, detail: str, status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(status_code=status_code, detail=detail)


class CRMNotConfiguredError(CRMAPIError):
    """Exception raised when CRM credentials are missing"""
    def __init__(self, detail: str = "Zoho CRM credentials not configured"):
        super().__init__(detail=detail, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class EmailNotConfiguredError(HTTPException):
    """Exception raised when the email provider API key is missing"""
    def __init__(self, detail: str = "Email service not configured"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class EmailDeliveryError(HTTPException):
    """Exception raised when the email provider rejects a message"""
    def __init__(self, detail: str = "Failed to send email", reason: str = ""):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
        self.reason = reason


class VerificationFailedError(HTTPException):
    """Exception raised when the human-verification check rejects a submission"""
    def __init__(self, detail: str = "Security verification failed. Please try again."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class FileTooLargeError(HTTPException):
    """Exception raised when a single uploaded file exceeds the per-file limit"""
    def __init__(self, filename: str, size: int):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'"{filename}" is too large. Please compress your PDF files.',
        )
        self.filename = filename
        self.size = size


class TotalFileSizeError(HTTPException):
    """Exception raised when uploaded files together exceed the aggregate limit"""
    def __init__(self, total_size: int):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Total file size is too large. Please compress your PDF files or upload fewer statements.",
        )
        self.total_size = total_size


class ValidationError(HTTPException):
    """Exception raised for validation errors"""
    def __init__(self, detail: str, status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY):
        super().__init__(status_code=status_code, detail=detail)


class IntakeProcessingError(HTTPException):
    """Exception raised when an intake stage fails unexpectedly"""
    def __init__(self, step: str, details: str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process application")
        self.step = step
        self.details = details
