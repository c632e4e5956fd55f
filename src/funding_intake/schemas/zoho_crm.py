"""
Zoho CRM specific schemas
"""
from typing import Optional

from funding_intake.schemas.base import BaseSchema


class ZohoLeadRecord(BaseSchema):
    """Model for creating a lead in Zoho CRM (attribute names are Zoho API names)"""
    First_Name: Optional[str] = None
    Last_Name: Optional[str] = None
    Email: Optional[str] = None
    Phone: Optional[str] = None
    Company: Optional[str] = None
    Website: Optional[str] = None
    Industry: Optional[str] = None
    Lead_Source: Optional[str] = None
    Designation: Optional[str] = None  # Owner title

    # Business address
    Street: Optional[str] = None
    City: Optional[str] = None
    State: Optional[str] = None
    Zip_Code: Optional[str] = None

    # Financials
    Amount_Requested: Optional[int] = None
    Monthly_Revenue: Optional[int] = None
    Annual_Revenue: Optional[int] = None
    Use_For_Funding: Optional[str] = None

    # Business details
    DBA: Optional[str] = None
    EIN: Optional[int] = None
    Date_business_opened: Optional[str] = None  # YYYY-MM-DD
    Legal_Structure: Optional[str] = None
    Phone_2: Optional[str] = None  # Business phone

    # Owner 1
    Owner_1_Street: Optional[str] = None
    Owner_1_City: Optional[str] = None
    Owner_1_State: Optional[str] = None
    Owner_1_Zip: Optional[str] = None
    Owner_1_Phone: Optional[str] = None
    Owner_1_Email: Optional[str] = None
    Owner_1_SSN: Optional[str] = None
    Owner_1_Date_of_Birth: Optional[str] = None
    Owner_1_Drivers_License_Number: Optional[str] = None
    Owner_1_DL_State_Issuance: Optional[str] = None
    Owner1_Ownership: Optional[float] = None

    # Owner 2
    Additional_owners: Optional[str] = None  # "Yes" / "No"
    Owner_2_First_Name: Optional[str] = None
    Owner_2_Last_Name: Optional[str] = None
    Owner_2_Street: Optional[str] = None
    Owner_2_City: Optional[str] = None
    Owner_2_State: Optional[str] = None
    Owner_2_Zip: Optional[str] = None
    Owner_2_Phone: Optional[str] = None
    Owner_2_Email: Optional[str] = None
    Owner_2_SSN: Optional[str] = None
    Owner_2_Date_of_Birth: Optional[str] = None
    Owner_2_Ownership: Optional[float] = None

    Have_any_open_loans_advances: Optional[str] = None
    Any_Liens_defaults_bankruptcy: Optional[str] = None
    Description: Optional[str] = None
