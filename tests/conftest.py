"""
Shared fixtures: a complete application payload and mocked HTTP clients
"""
import base64
from typing import Callable

import httpx
import pytest

from funding_intake.schemas.application import ApplicationDraft

# 1x1 transparent PNG
PNG_PIXEL = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
SIGNATURE_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_PIXEL).decode("ascii")


@pytest.fixture
def application_payload() -> dict:
    """Wire form of a complete single-owner application"""
    return {
        "fundingSpecialistName": "Tom Jones",
        "amountRequested": "50000",
        "useOfFunds": "Equipment purchase",
        "legalBusinessName": "Acme Widgets LLC",
        "dba": "Acme",
        "businessAddress": "123 Main St, Springfield, IL 62701",
        "businessPhone": "(217) 555-0100",
        "businessPhoneCountry": "+1",
        "businessStartDate": "2015-03-01",
        "legalStructure": "llc",
        "stateOfIncorporation": "IL",
        "federalTaxId": "123456789",
        "industry": "Manufacturing",
        "website": "acmewidgets.com",
        "ownerFirstName": "Jane",
        "ownerLastName": "Doe",
        "ownerTitle": "CEO",
        "ownershipPercentage": "100",
        "ownerHomeAddress": "9 Elm St, Springfield, IL 62704",
        "ownerSSN": "123456789",
        "ownerDOB": "1980-01-15",
        "ownerPhone": "(217) 555-0199",
        "ownerPhoneCountry": "+1",
        "ownerEmail": "jane@acmewidgets.com",
        "ownerDriversLicense": "D12345678901",
        "ownerDriversLicenseState": "IL",
        "hasSecondOwner": "no",
        "grossAnnualSales": "1200000",
        "averageMonthlyRevenue": "100000",
        "openLoansAdvances": "0",
        "hasBankruptcy": "no",
        "properties": [],
    }


@pytest.fixture
def draft(application_payload) -> ApplicationDraft:
    return ApplicationDraft.model_validate(application_payload)


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for an AsyncClient whose requests are answered by ``handler``"""
    def factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return factory


@pytest.fixture
def png_pixel() -> bytes:
    return PNG_PIXEL


@pytest.fixture
def signature_data_url() -> str:
    return SIGNATURE_DATA_URL
