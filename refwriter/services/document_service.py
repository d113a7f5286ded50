import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from urllib.parse import quote

from refwriter.core.config import settings
from refwriter.core.errors import FileReadError, InvalidInputError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = (
    "application/pdf",
    "text/plain",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

EXPORT_SUFFIX = "_content.txt"
EXPORT_ENCODING = "utf-8"


@dataclass
class ReferenceDocument:
    name: str
    content: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def character_count(self) -> int:
        return len(self.content)


class DocumentStore:
    """Lista dei materiali di riferimento della sessione, solo in memoria"""

    def __init__(self):
        self._documents: Dict[str, ReferenceDocument] = {}

    def add(self, name: str, content: str) -> ReferenceDocument:
        document = ReferenceDocument(name=name, content=content)
        self._documents[document.id] = document
        logger.info(f"Document added: {name} ({len(content)} chars) - id {document.id}")
        return document

    def list(self) -> List[ReferenceDocument]:
        return list(self._documents.values())

    def get(self, document_id: str) -> Optional[ReferenceDocument]:
        return self._documents.get(document_id)

    def remove(self, document_id: str) -> bool:
        document = self._documents.pop(document_id, None)
        if document is None:
            return False
        logger.info(f"Document deleted: {document.name} - id {document_id}")
        return True

    def clear(self):
        self._documents.clear()

    def __len__(self) -> int:
        return len(self._documents)


def decode_upload(filename: str, content_type: Optional[str], data: bytes) -> str:
    """
    Legge l'upload come testo semplice.
    PDF e DOCX sono accettati ma decodificati come testo, senza parsing del formato.
    """
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise FileReadError(
            "Please upload a file smaller than 5MB",
            code="FILE_TOO_LARGE",
            status_code=413,
            details={"max_bytes": settings.MAX_UPLOAD_BYTES, "current_bytes": len(data)}
        )

    media_type = (content_type or "").split(';')[0].strip().lower()
    if media_type not in ALLOWED_CONTENT_TYPES:
        raise FileReadError(
            "Please upload a PDF, DOCX, or TXT file",
            code="UNSUPPORTED_FILE_TYPE",
            status_code=415,
            details={"content_type": content_type, "filename": filename}
        )

    # I byte non decodificabili diventano U+FFFD
    return data.decode("utf-8", errors="replace")


def build_export_filename(document_name: Optional[str]) -> str:
    """<nome fino al primo punto>_content.txt, oppure il nome di default"""
    if document_name:
        base = document_name.split('.')[0]
        if base:
            return f"{base}{EXPORT_SUFFIX}"
    return settings.DEFAULT_EXPORT_FILENAME


def build_content_disposition(filename: str) -> str:
    """Header di download, con filename* RFC 5987 se il nome non è ASCII semplice"""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def export_content(content: str) -> bytes:
    if not content or len(content) < settings.MIN_EXPORT_LENGTH:
        raise InvalidInputError(
            "Please generate content first",
            code="NO_CONTENT_TO_EXPORT",
            details={"min_length": settings.MIN_EXPORT_LENGTH, "current_length": len(content or "")}
        )
    return content.encode(EXPORT_ENCODING)


def read_export(data: bytes) -> str:
    return data.decode(EXPORT_ENCODING)


# Istanza globale dello store di sessione
document_store = DocumentStore()
