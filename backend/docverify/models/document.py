from enum import Enum

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from docverify.database import Base


class DocumentKind(str, Enum):
    BAPTISM = "BAPTISM"
    CONFIRMATION = "CONFIRMATION"
    MARRIAGE = "MARRIAGE"
    OTHER = "OTHER"


class DocumentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Singleton slots; also the kinds that count toward onboarding progress.
MANDATORY_KINDS = (DocumentKind.BAPTISM, DocumentKind.CONFIRMATION, DocumentKind.MARRIAGE)

# Statuses that occupy a mandatory slot.
ACTIVE_STATUSES = (DocumentStatus.PENDING.value, DocumentStatus.APPROVED.value)


class Document(Base):
    __tablename__ = "documents"

    id = Column(Text, primary_key=True)
    owner_id = Column(Text, ForeignKey("members.id"), nullable=False)
    kind = Column(Text, nullable=False)
    title = Column(Text)
    file_name = Column(Text, nullable=False)
    file_ref = Column(Text, nullable=False)
    mime_type = Column(Text)
    file_size_bytes = Column(Integer)
    status = Column(Text, nullable=False, default=DocumentStatus.PENDING.value)
    review_note = Column(Text)
    submitted_at = Column(Text, nullable=False)
    submitted_by = Column(Text, nullable=False)
    decided_at = Column(Text)
    decided_by = Column(Text)
    version = Column(Integer, nullable=False, default=1)

    owner = relationship("Member", back_populates="documents")
    history = relationship(
        "DocumentHistory",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DocumentHistory.version",
    )

    @property
    def display_title(self) -> str:
        if self.kind == DocumentKind.OTHER.value:
            return self.title
        return self.kind


class DocumentHistory(Base):
    __tablename__ = "document_history"

    id = Column(Text, primary_key=True)
    document_id = Column(Text, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    action = Column(Text, nullable=False)
    actor = Column(Text, nullable=False)
    note = Column(Text)
    file_name = Column(Text)
    version = Column(Integer, nullable=False)
    occurred_at = Column(Text, nullable=False)

    document = relationship("Document", back_populates="history")
