"""Deal-related enums."""

from enum import Enum


class DealStatus(str, Enum):
    """
    Lifecycle status of a deal.

    Any status may move to any other; order here is display order only.
    """

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    NEW_CASE = "new_case"
    AWAITING_DIP = "awaiting_dip"
    DIP_APPROVED = "dip_approved"
    REPORTS_INSTRUCTED = "reports_instructed"
    FINAL_UNDERWRITING = "final_underwriting"
    OFFERED = "offered"
    WITH_SOLICITORS = "with_solicitors"
    COMPLETED = "completed"


class LoanType(str, Enum):
    BRIDGING = "bridging"
    MORTGAGE = "mortgage"
    DEVELOPMENT = "development"
    BUSINESS = "business"
    FACTORING = "factoring"
    ASSET = "asset"
    MCA = "mca"
    EQUITY = "equity"
