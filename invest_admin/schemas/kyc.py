"""
Pydantic schemas for KYC document submissions.
"""

import enum

from pydantic import Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class DocumentType(str, enum.Enum):
    ID_CARD = "id_card"
    PASSPORT = "passport"
    DRIVING_LICENSE = "driving_license"


class KYCStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class KYCDocument(PlatformModel):
    """Identity document set submitted by a user for review."""
    id: int = 0
    user_id: int = 0
    document_type: DocumentType | str = Field(
        DocumentType.ID_CARD, union_mode="left_to_right"
    )
    document_front_url: str = ""
    document_back_url: str | None = None
    selfie_url: str = ""
    status: KYCStatus | str = Field(KYCStatus.PENDING, union_mode="left_to_right")
    admin_note: str | None = None
    created_at: UTCDateTime = None
