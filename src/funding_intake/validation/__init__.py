"""
Form validation: driver's license rules and wizard step checks
"""
from funding_intake.validation.drivers_license import (
    DRIVERS_LICENSE_RULES,
    DriversLicenseRule,
    LicenseInput,
    validate_drivers_license,
)
from funding_intake.validation.steps import STEPS, Signatures, validate_step

__all__ = [
    "DRIVERS_LICENSE_RULES",
    "DriversLicenseRule",
    "LicenseInput",
    "validate_drivers_license",
    "STEPS",
    "Signatures",
    "validate_step",
]
