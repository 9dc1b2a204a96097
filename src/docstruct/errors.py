"""
Error taxonomy and warning records for structure reconstruction.

Token- and page-scoped failures are raised locally and converted into
StructureWarning records by the stage that owns them; only cancellation
ends a run early, and even then the partial structure is returned.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


class DocstructError(Exception):
    """Base class for docstruct errors."""


class MalformedTokenError(DocstructError):
    """A token is missing required geometry (x/y) or has non-numeric values."""


class PageExtractionFailure(DocstructError):
    """A page arrived with an upstream error or without usable tokens."""

    def __init__(self, page_number: int, reason: str):
        super().__init__(f"Page {page_number}: {reason}")
        self.page_number = page_number
        self.reason = reason


class CancellationSignal(DocstructError):
    """Raised between pages when the caller's cancellation signal is set."""


@dataclass(frozen=True)
class StructureWarning:
    """
    A non-fatal, recorded pipeline event.

    Attributes:
        kind: Warning kind (see docstruct.constants WARN_*).
        message: Human-readable description.
        page_number: Page the warning belongs to, or None for document-level.
    """
    kind: str
    message: str
    page_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "pageNumber": self.page_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructureWarning":
        return cls(
            kind=data["kind"],
            message=data["message"],
            page_number=data.get("pageNumber"),
        )
