"""
Application configuration settings loaded from config.yaml
"""
import os
import yaml
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, field_validator


class DatabasePoolConfig(BaseModel):
    """Database connection pool configuration"""
    size: int = 5  # Number of connections to maintain
    max_overflow: int = 10  # Maximum overflow connections
    timeout: int = 30  # Seconds to wait for a connection
    recycle: int = 3600  # Seconds before recycling a connection
    echo: bool = False  # Log SQL queries


class DatabaseConfig(BaseModel):
    """Database configuration (only used by the persisted round-robin cursor)"""
    server: str
    user: str
    password: str
    db: str
    port: str = "5432"
    schema: str = "public"  # PostgreSQL schema name
    pool: DatabasePoolConfig = DatabasePoolConfig()

    @property
    def url(self) -> str:
        """Construct database URL"""
        return f"postgresql://{self.user}:{self.password}@{self.server}:{self.port}/{self.db}"


class IntakeConfig(BaseModel):
    """Limits applied to every application submission"""
    max_files: int = 4
    max_file_size: int = 4 * 1024 * 1024  # 4 MiB per bank statement
    max_total_size: int = 5 * 1024 * 1024  # 5 MiB across all bank statements
    max_duration_seconds: int = 60


class RecaptchaConfig(BaseModel):
    """reCAPTCHA Enterprise assessment settings"""
    api_key: Optional[str] = None
    project_id: Optional[str] = None
    site_key: Optional[str] = None
    expected_action: str = "submit_application"
    min_score: float = 0.5
    base_url: str = "https://recaptchaenterprise.googleapis.com/v1"
    timeout: int = 10

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.project_id)


class EmailConfig(BaseModel):
    """Outbound email (Resend HTTP API) configuration"""
    api_key: Optional[str] = None
    api_url: str = "https://api.resend.com/emails"
    sender: str = "Wholesale Funding Solutions <applications@wholesalefundingsolutions.com>"
    recipients: List[str] = ["submissions@wholesalefundingsolutions.com"]
    timeout: int = 30

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


class CRMConfig(BaseModel):
    """Zoho CRM API configuration"""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    accounts_url: str = "https://accounts.zoho.com"
    api_base_url: str = "https://www.zohoapis.com"
    module: str = "Leads"
    lead_source: str = "Website - Funding Application"
    timeout: int = 30

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)


class SalesRepConfig(BaseModel):
    """Sales representative taking part in lead rotation"""
    id: str
    name: str


class RoundRobinConfig(BaseModel):
    """Lead ownership rotation settings"""
    cursor_store: str = "crm"  # "crm" or "database"
    roster_key: str = "website-funding-application"
    roster: List[SalesRepConfig] = []

    @field_validator("cursor_store")
    @classmethod
    def check_cursor_store(cls, v: str) -> str:
        v = v.lower()
        if v not in ("crm", "database"):
            raise ValueError("cursor_store must be 'crm' or 'database'")
        return v


class CollaboratorPolicy(BaseModel):
    """Whether a downstream collaborator must succeed for the request to succeed"""
    required: bool


class DeliveryConfig(BaseModel):
    """Per-collaborator delivery policy"""
    email: CollaboratorPolicy = CollaboratorPolicy(required=True)
    crm: CollaboratorPolicy = CollaboratorPolicy(required=False)


class DocumentConfig(BaseModel):
    """Application PDF settings"""
    company_name: str = "Wholesale Funding Solutions"
    company_tagline: str = "Direct Business Capital"
    logo_path: Optional[str] = None


class Settings(BaseModel):
    """Application settings loaded from config.yaml"""

    # Project settings
    project_name: str = "Funding Intake API"
    version: str = "1.0.0"
    description: str = "Business funding application intake and lead routing"
    api_v1_str: str = "/api/v1"

    # CORS settings
    backend_cors_origins: List[str] = []

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    intake: IntakeConfig = IntakeConfig()
    recaptcha: RecaptchaConfig = RecaptchaConfig()
    email: EmailConfig = EmailConfig()
    crm: CRMConfig = CRMConfig()
    round_robin: RoundRobinConfig = RoundRobinConfig()
    delivery: DeliveryConfig = DeliveryConfig()
    document: DocumentConfig = DocumentConfig()

    # Only needed when round_robin.cursor_store is "database"
    database: Optional[DatabaseConfig] = None

    # Logging
    log_level: str = "INFO"


def _find_config_path() -> Path:
    env_path = os.environ.get("FUNDING_INTAKE_CONFIG")
    if env_path:
        return Path(env_path)

    current_dir = Path.cwd() / "config.yaml"
    if current_dir.exists():
        return current_dir

    # Project root (src/funding_intake/core/ -> project root)
    project_root = Path(__file__).parent.parent.parent.parent / "config.yaml"
    if project_root.exists():
        return project_root

    raise FileNotFoundError(
        "config.yaml not found. Please create config.yaml in the project root "
        "or set FUNDING_INTAKE_CONFIG."
    )


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml file. If None, looks in order for:
                    1. The FUNDING_INTAKE_CONFIG environment variable
                    2. config.yaml in the current directory
                    3. config.yaml in the project root

    Returns:
        Settings: Loaded and validated settings
    """
    config_file = Path(config_path) if config_path else _find_config_path()
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    with open(config_file, "r") as f:
        config_data = yaml.safe_load(f)

    if config_data is None:
        raise ValueError("Configuration file is empty or invalid")

    return Settings(**config_data)


# Load settings on module import
settings = load_config()
