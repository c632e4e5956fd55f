"""
Tests for the application PDF
"""
import re
from datetime import date

from funding_intake.schemas.application import ApplicationDraft
from funding_intake.services.document_composer import (
    application_filename,
    compose_application_pdf,
    decode_signature,
)

PAGE_OBJECT = re.compile(rb"/Type\s*/Page[^s]")


def _page_count(pdf: bytes) -> int:
    return len(PAGE_OBJECT.findall(pdf))


def test_renders_pdf(draft, signature_data_url):
    pdf = compose_application_pdf(draft, signature_data_url, None, "January 5, 2025", ["jan.pdf"])
    assert pdf.startswith(b"%PDF")
    assert _page_count(pdf) >= 1


def test_missing_and_undecodable_signatures_still_render(application_payload):
    application_payload.update({
        "hasSecondOwner": "yes",
        "secondOwnerFirstName": "John",
        "secondOwnerLastName": "Roe",
        "secondOwnerOwnershipPercentage": "40",
    })
    draft = ApplicationDraft.model_validate(application_payload)
    pdf = compose_application_pdf(draft, None, "data:image/png;base64,bm90LWFuLWltYWdl", "January 5, 2025", [])
    assert pdf.startswith(b"%PDF")


def test_many_properties_flow_onto_more_pages(application_payload, signature_data_url):
    application_payload["properties"] = [
        {
            "address": f"{n} Oak Ave, Springfield, IL 62701",
            "propertyType": "commercial",
            "yearAcquired": "2010",
            "purchasePrice": "250000",
            "currentValue": "400000",
            "loanBalance": "100000",
            "lender": "First Bank",
            "titleHolders": "Jane Doe",
        }
        for n in range(1, 9)
    ]
    draft = ApplicationDraft.model_validate(application_payload)
    pdf = compose_application_pdf(draft, signature_data_url, None, "January 5, 2025", [])
    assert _page_count(pdf) >= 2


def test_non_latin_text_does_not_break_rendering(application_payload):
    application_payload["legalBusinessName"] = "Café Ünïcode 東京 LLC"
    draft = ApplicationDraft.model_validate(application_payload)
    assert compose_application_pdf(draft, None, None, "January 5, 2025", []).startswith(b"%PDF")


def test_application_filename():
    assert application_filename("Acme Widgets, LLC", date(2025, 1, 5)) == "Application_Acme_Widgets__LLC_2025-01-05.pdf"


def test_application_filename_truncates_name():
    name = application_filename("A" * 50, date(2025, 1, 5))
    assert name == f"Application_{'A' * 30}_2025-01-05.pdf"


def test_decode_signature(png_pixel, signature_data_url):
    assert decode_signature(signature_data_url) == png_pixel
    assert decode_signature("") is None
    assert decode_signature(None) is None
