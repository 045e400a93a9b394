"""Domain errors raised by the verification services.

Each error carries the HTTP status and machine-readable code it maps to at the
API boundary. Services raise them; ``main.py`` renders them.
"""


class DocumentError(Exception):
    status_code = 400
    code = "document_error"
    default_message = "Document operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Forbidden(DocumentError):
    # Never says whether the target exists outside the caller's scope.
    status_code = 403
    code = "forbidden"
    default_message = "Not permitted for this caller"


class UnscopedReviewer(DocumentError):
    status_code = 403
    code = "unscoped_reviewer"
    default_message = "Area reviewer has no assigned area"


class DocumentNotFound(DocumentError):
    status_code = 404
    code = "not_found"
    default_message = "Document not found"


class MemberNotFound(DocumentError):
    status_code = 404
    code = "member_not_found"
    default_message = "Member not found"


class Conflict(DocumentError):
    status_code = 409
    code = "conflict"
    default_message = "Document was modified by another request; reload and retry"


class DuplicateSlot(DocumentError):
    status_code = 409
    code = "duplicate_slot"
    default_message = "An active document of this kind already exists for the member"


class MissingTitle(DocumentError):
    status_code = 400
    code = "missing_title"
    default_message = "A title is required for documents of kind OTHER"


class UnsupportedFileType(DocumentError):
    status_code = 400
    code = "unsupported_file_type"
    default_message = "File type must be PDF, PNG or JPEG"


class FileTooLarge(DocumentError):
    status_code = 413
    code = "file_too_large"
    default_message = "File exceeds the upload size limit"


class MissingReason(DocumentError):
    status_code = 422
    code = "missing_reason"
    default_message = "A review note is required when rejecting a document"


class InvalidState(DocumentError):
    status_code = 422
    code = "invalid_state"
    default_message = "Operation not allowed in the document's current status"
