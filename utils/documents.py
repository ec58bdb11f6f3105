from dataclasses import dataclass
from datetime import date, datetime
from typing import List

DOC_STATUSES = ("Draft", "Approved", "Deprecated")


@dataclass(frozen=True)
class DocumentSOP:
    id: str
    title: str
    content: str
    version: str
    last_updated: date
    status: str = "Draft"

    def __post_init__(self):
        if self.status not in DOC_STATUSES:
            raise ValueError(f"Unknown document status: {self.status!r}")


def new_draft(title: str, content: str, now=None) -> DocumentSOP:
    """Bản nháp mới (thường do AI soạn) – version 0.1-DRAFT."""
    if now is None:
        now = datetime.now()
    millis = int(now.timestamp() * 1000)
    return DocumentSOP(
        id=f"DOC-{millis}",
        title=title.strip(),
        content=content,
        version="0.1-DRAFT",
        last_updated=now.date(),
        status="Draft",
    )


def add_document(documents, doc: DocumentSOP) -> List[DocumentSOP]:
    return [doc] + list(documents)


def preview(content: str, length: int = 150) -> str:
    content = content or ""
    if len(content) <= length:
        return content
    return content[:length] + "..."
