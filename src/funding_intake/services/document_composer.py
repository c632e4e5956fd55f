"""
Application PDF composer.

Renders a sanitized draft onto US Letter pages with the reportlab canvas.
Sections reserve a minimum height and start a new page when less than that
remains. Values are truncated with an ellipsis to their column, never wrapped.
"""
import base64
import re
from datetime import date
from io import BytesIO
from typing import List, Optional, Tuple

from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas
from rich.markup import escape

from funding_intake.core.config import DocumentConfig, settings
from funding_intake.schemas.application import (
    ApplicationDraft,
    legal_structure_name,
    property_type_name,
    state_name,
)
from funding_intake.utils.formatters import format_currency_or_na, format_ein
from funding_intake.utils.helpers import sanitize_string
from funding_intake.utils.logging import get_logger
from funding_intake.utils.masking import format_ssn_for_underwriting, mask_email, mask_phone

logger = get_logger(__name__)

W, H = letter  # 612 x 792
MARGIN = 50
CONTENT_WIDTH = W - MARGIN * 2
COL1_X = MARGIN
COL2_X = MARGIN + CONTENT_WIDTH / 2
COLUMN_WIDTH = 250
FIELD_HEIGHT = 35

# Colors
NAVY = Color(0.06, 0.09, 0.17)
MUTED = Color(0.4, 0.45, 0.55)
GOLD = Color(0.72, 0.53, 0.04)
BODY_GRAY = Color(0.25, 0.25, 0.25)
RULE_GRAY = Color(0.8, 0.8, 0.8)
FOOTER_GRAY = Color(0.5, 0.5, 0.5)

# Minimum vertical space per section
SPACE_BUSINESS = 200
SPACE_OWNER = 250
SPACE_FINANCIALS = 150
SPACE_PROPERTIES = 150
SPACE_PER_PROPERTY = 180
SPACE_BANK_STATEMENTS = 80
SPACE_SIGNATURES = 280
SPACE_SECOND_SIGNATURE = 100
SPACE_FOOTER = 60

SIGNATURE_HEIGHT = 50
SIGNATURE_MAX_WIDTH = 200
WATERMARK_SIZE = 300

AUTHORIZATION_TEXT = [
    'By signing below, each of the businesses and business owners/officers listed above (individually and collectively, "You") authorize Wholesale',
    'Funding Solutions (WFS), and its representatives, successors, assigns, and designees (collectively, "Recipients"), who may be involved in or acquire',
    "commercial loans with daily repayment features or purchases of future receivables (including but not limited to Merchant Cash Advance",
    'transactions, referred to herein as "Transactions"), to obtain consumer, personal, business, and investigative reports, as well as other',
    "information about You from one or more banks, creditors, credit reporting agencies, or other third parties. This authorization includes the right",
    "to access and review financial records, including but not limited to bank statements and credit card processor statements. WFS is further",
    "authorized to transmit this application, together with any information obtained in connection with it, to any or all Recipients for the purposes",
    "described above.",
    "",
    "You further authorize any creditor or financial institution to release information relating to You directly to WFS and its Principals. You also consent",
    "to receive any legally required notices by electronic mail at the email address provided in this application. In addition, You authorize any lender",
    "or Recipient to contact You by telephone call or text message for marketing purposes at the phone number(s) provided in this application, even",
    'if such number(s) appear on a state, federal, or corporate "Do Not Call" registry.',
    "",
    "By signing this form, You consent to receive SMS messages. Message and data rates may apply. Message frequency may vary based on",
    "interactions between You and our agents. You may opt out at any time by replying STOP, or reply HELP for additional assistance.",
]

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")
_FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def pdf_text(value: Optional[str]) -> str:
    """Sanitize and reduce to what the standard PDF fonts can encode (cp1252)"""
    text = sanitize_string(value or "")
    return text.encode("cp1252", "replace").decode("cp1252")


def truncate_to_width(text: str, font: str, size: float, max_width: float) -> str:
    if stringWidth(text, font, size) <= max_width:
        return text
    while text and stringWidth(text + "...", font, size) > max_width:
        text = text[:-1]
    return text + "..."


def application_filename(business_name: str, day: Optional[date] = None) -> str:
    """Application_<first 30 chars, non-alphanumerics as _>_<YYYY-MM-DD>.pdf"""
    day = day or date.today()
    safe_name = _FILENAME_UNSAFE.sub("_", business_name or "")[:30]
    return f"Application_{safe_name}_{day.isoformat()}.pdf"


def decode_signature(data_url: Optional[str]) -> Optional[bytes]:
    if not data_url:
        return None
    try:
        return base64.b64decode(_DATA_URL_PREFIX.sub("", data_url), validate=False)
    except ValueError:
        return b""


class ApplicationDocument:
    """Canvas wrapper tracking the cursor position and page breaks"""

    def __init__(self, document: DocumentConfig):
        self.buffer = BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=letter)
        self.c.setTitle("Business Funding Application")
        self.c.setAuthor(document.company_name)
        self.document = document
        self.logo = self._load_logo(document.logo_path)
        self.page = 1
        self.y = H - MARGIN
        self._draw_watermark()

    @staticmethod
    def _load_logo(logo_path: Optional[str]) -> Optional[ImageReader]:
        if not logo_path:
            return None
        try:
            logo = ImageReader(logo_path)
            logo.getSize()
            return logo
        except Exception as e:
            logger.warning(f"[yellow]⚠️  Logo not loaded from {escape(str(logo_path))}:[/yellow] {escape(str(e))}")
            return None

    def _draw_watermark(self):
        if self.logo is None:
            return
        width, height = self.logo.getSize()
        wm_width = WATERMARK_SIZE
        wm_height = WATERMARK_SIZE / (width / height)
        self.c.saveState()
        self.c.setFillAlpha(0.15)
        self.c.drawImage(self.logo, (W - wm_width) / 2, (H - wm_height) / 2,
                         width=wm_width, height=wm_height, mask="auto")
        self.c.restoreState()

    def new_page(self):
        self.c.showPage()
        self.page += 1
        self.y = H - MARGIN
        self._draw_watermark()

    def ensure_space(self, needed: float):
        if self.y < MARGIN + needed:
            self.new_page()

    # --- Drawing helpers ---

    def text(self, value: str, x: float, y: float, font: str = "Helvetica", size: float = 10,
             color: Color = NAVY):
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        self.c.drawString(x, y, value)

    def centered(self, value: str, font: str, size: float, color: Color):
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        self.c.drawCentredString(W / 2, self.y, value)

    def header(self, submission_date: str):
        if self.logo is not None:
            width, height = self.logo.getSize()
            logo_height = 60
            logo_width = width / height * logo_height
            self.c.drawImage(self.logo, (W - logo_width) / 2, self.y - logo_height,
                             width=logo_width, height=logo_height, mask="auto")
            self.y -= logo_height + 20

        self.centered("Business Funding Application", "Times-Bold", 20, NAVY)
        self.y -= 25
        self.centered(f"Submitted on {pdf_text(submission_date)}", "Helvetica", 10, MUTED)
        self.y -= 40

    def section_header(self, title: str):
        self.c.setStrokeColor(GOLD)
        self.c.setLineWidth(1)
        self.c.line(MARGIN, self.y + 5, W - MARGIN, self.y + 5)
        self.text(title, MARGIN, self.y - 15, font="Helvetica-Bold", size=12, color=GOLD)
        self.y -= 40

    def _field_at(self, label: str, value: str, x: float, max_width: float):
        self.text(label, x, self.y, font="Helvetica", size=9, color=MUTED)
        display = truncate_to_width(pdf_text(value) or "N/A", "Helvetica-Bold", 10, max_width)
        self.text(display, x, self.y - 12, font="Helvetica-Bold", size=10)

    def field(self, label: str, value: str, wide: bool = False):
        self._field_at(label, value, COL1_X, CONTENT_WIDTH if wide else COLUMN_WIDTH)
        self.y -= FIELD_HEIGHT

    def field_row(self, left: Tuple[str, str], right: Tuple[str, str]):
        self._field_at(left[0], left[1], COL1_X, COLUMN_WIDTH)
        self._field_at(right[0], right[1], COL2_X, COLUMN_WIDTH)
        self.y -= FIELD_HEIGHT

    def signature(self, title: str, data_url: Optional[str], signer: str, submission_date: str):
        self.text(title, COL1_X, self.y, font="Helvetica-Bold", size=10)
        self.y -= 15

        image_bytes = decode_signature(data_url)
        if image_bytes is None:
            self.text("[No signature provided]", COL1_X, self.y - 20, color=MUTED)
            self.y -= 40
        else:
            try:
                image = ImageReader(BytesIO(image_bytes))
                width, height = image.getSize()
                sig_width = min(width / height * SIGNATURE_HEIGHT, SIGNATURE_MAX_WIDTH)
                self.c.drawImage(image, COL1_X, self.y - SIGNATURE_HEIGHT,
                                 width=sig_width, height=SIGNATURE_HEIGHT, mask="auto")
                self.y -= SIGNATURE_HEIGHT + 10
            except Exception as e:
                logger.warning(f"[yellow]⚠️  Signature image not rendered:[/yellow] {escape(str(e))}")
                self.text("[Signature on file]", COL1_X, self.y - 20, color=MUTED)
                self.y -= 40

        self.text(f"{pdf_text(signer)} - {pdf_text(submission_date)}", COL1_X, self.y, size=9, color=MUTED)
        self.y -= 30

    def save(self) -> bytes:
        self.c.save()
        return self.buffer.getvalue()


def _license_display(number: str, state: str) -> str:
    return f"{number} ({state_name(state)})"


def _yes_no(value: str) -> str:
    return {"yes": "Yes", "no": "No"}.get(value, "N/A")


def compose_application_pdf(
    draft: ApplicationDraft,
    signature: Optional[str],
    second_signature: Optional[str],
    submission_date: str,
    bank_statement_names: List[str],
    document: Optional[DocumentConfig] = None,
) -> bytes:
    """
    Render the application for underwriting.

    Args:
        draft: Sanitized application
        signature: Primary owner signature as a PNG data URL, or None
        second_signature: Second owner signature as a PNG data URL, or None
        submission_date: Date string shown in the header and signature lines
        bank_statement_names: Names of the statements attached alongside

    Returns:
        PDF bytes
    """
    doc = ApplicationDocument(document or settings.document)
    doc.header(submission_date)

    doc.section_header("Funding Information")
    doc.field_row(
        ("Amount Requested", format_currency_or_na(draft.amount_requested)),
        ("Funding Specialist", draft.funding_specialist_name or "N/A"),
    )
    doc.field("Use of Funds", draft.use_of_funds, wide=True)
    doc.y -= 10

    doc.ensure_space(SPACE_BUSINESS)
    doc.section_header("Business Information")
    doc.field_row(("Legal Business Name", draft.legal_business_name), ("DBA", draft.dba or "N/A"))
    doc.field_row(
        ("Business Phone", mask_phone(draft.business_phone, draft.business_phone_country)),
        ("Business Start Date", draft.business_start_date),
    )
    doc.field_row(
        ("Legal Structure", legal_structure_name(draft.legal_structure)),
        ("State of Incorporation", state_name(draft.state_of_incorporation)),
    )
    doc.field_row(
        ("Federal Tax ID (EIN)", format_ein(draft.federal_tax_id) or "N/A"),
        ("Industry", draft.industry or "N/A"),
    )
    doc.field("Website", draft.website or "N/A")
    doc.field("Business Address", draft.business_address, wide=True)
    doc.y -= 10

    doc.ensure_space(SPACE_OWNER)
    doc.section_header("Primary Owner Information")
    doc.field_row(("Name", draft.owner_full_name), ("Title", draft.owner_title))
    doc.field_row(
        ("Ownership Percentage", f"{draft.ownership_percentage}%"),
        ("Social Security Number", format_ssn_for_underwriting(draft.owner_ssn)),
    )
    doc.field_row(
        ("Date of Birth", draft.owner_dob),
        ("Cell Phone", mask_phone(draft.owner_phone, draft.owner_phone_country)),
    )
    doc.field_row(
        ("Email", mask_email(draft.owner_email)),
        ("Driver's License", _license_display(draft.owner_drivers_license, draft.owner_drivers_license_state)),
    )
    doc.field("Home Address", draft.owner_home_address, wide=True)
    doc.y -= 10

    if draft.second_owner_present:
        doc.ensure_space(SPACE_OWNER)
        doc.section_header("Second Owner Information")
        doc.field_row(
            ("Name", f"{draft.second_owner_first_name} {draft.second_owner_last_name}"),
            ("Title", draft.second_owner_title or "N/A"),
        )
        doc.field_row(
            ("Ownership Percentage", f"{draft.second_owner_ownership_percentage}%"),
            ("Social Security Number", format_ssn_for_underwriting(draft.second_owner_ssn)),
        )
        doc.field_row(
            ("Date of Birth", draft.second_owner_dob or "N/A"),
            ("Cell Phone", mask_phone(draft.second_owner_phone, draft.second_owner_phone_country)),
        )
        doc.field_row(
            ("Email", mask_email(draft.second_owner_email)),
            ("Driver's License", _license_display(
                draft.second_owner_drivers_license, draft.second_owner_drivers_license_state
            )),
        )
        doc.field("Home Address", draft.second_owner_home_address or "N/A", wide=True)
        doc.y -= 10

    doc.ensure_space(SPACE_FINANCIALS)
    doc.section_header("Business Financial Information")
    doc.field_row(
        ("Gross Annual Sales", format_currency_or_na(draft.gross_annual_sales)),
        ("Average Monthly Revenue", format_currency_or_na(draft.average_monthly_revenue)),
    )
    doc.field_row(
        ("Open Loans/Advances", format_currency_or_na(draft.open_loans_advances or "0")),
        ("Bankruptcy History", _yes_no(draft.has_bankruptcy)),
    )
    doc.y -= 10

    if draft.properties:
        doc.ensure_space(SPACE_PROPERTIES)
        doc.section_header("Property Ownership")
        for index, prop in enumerate(draft.properties, start=1):
            doc.ensure_space(SPACE_PER_PROPERTY)
            doc.text(f"Property {index}", COL1_X, doc.y, font="Helvetica-Bold", size=10)
            doc.y -= 20
            doc.field("Address", prop.address or "N/A", wide=True)
            doc.field_row(
                ("Property Type", property_type_name(prop.property_type) or "N/A"),
                ("Year Acquired", prop.year_acquired or "N/A"),
            )
            doc.field_row(
                ("Purchase Price", format_currency_or_na(prop.purchase_price)),
                ("Current Value", format_currency_or_na(prop.current_value)),
            )
            doc.field_row(
                ("Loan Balance", format_currency_or_na(prop.loan_balance)),
                ("Lender", prop.lender or "N/A"),
            )
            doc.field("Title Holders", prop.title_holders or "N/A", wide=True)
            doc.y -= 10

    if bank_statement_names:
        doc.ensure_space(SPACE_BANK_STATEMENTS)
        doc.section_header("Bank Statements")
        doc.text("The following bank statements have been attached:", COL1_X, doc.y, color=MUTED)
        doc.y -= 18
        for name in bank_statement_names:
            doc.text(f"• {pdf_text(name)}", COL1_X + 10, doc.y)
            doc.y -= 15
        doc.y -= 10

    doc.ensure_space(SPACE_SIGNATURES)
    doc.section_header("Authorization & Signatures")
    for line in AUTHORIZATION_TEXT:
        if not line:
            doc.y -= 6
            continue
        doc.text(line, COL1_X, doc.y, size=7.5, color=BODY_GRAY)
        doc.y -= 10
    doc.y -= 15

    doc.signature("Primary Owner Signature", signature, draft.owner_full_name, submission_date)

    if draft.second_owner_present:
        doc.ensure_space(SPACE_SECOND_SIGNATURE)
        doc.signature(
            "Second Owner Signature",
            second_signature,
            f"{draft.second_owner_first_name} {draft.second_owner_last_name}".strip(),
            submission_date,
        )

    doc.ensure_space(SPACE_FOOTER)
    doc.c.setStrokeColor(RULE_GRAY)
    doc.c.setLineWidth(0.5)
    doc.c.line(MARGIN, doc.y, W - MARGIN, doc.y)
    doc.y -= 20
    doc.centered(f"{doc.document.company_name} | {doc.document.company_tagline}", "Helvetica", 9, MUTED)
    doc.y -= 12
    doc.centered(f"This application was submitted electronically on {pdf_text(submission_date)}",
                 "Helvetica", 8, FOOTER_GRAY)

    pdf = doc.save()
    logger.info(f"[green]📄 Application PDF generated[/green] ({doc.page} page(s), {len(pdf)} bytes)")
    return pdf
