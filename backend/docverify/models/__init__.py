from docverify.models.area import Area, Household, Member
from docverify.models.document import Document, DocumentHistory

__all__ = ["Area", "Household", "Member", "Document", "DocumentHistory"]
