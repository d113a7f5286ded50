from typing import Optional, Dict, Any


class ContentError(Exception):
    """Errore base della pipeline di contenuti"""

    status_code: int = 500
    code: str = "PROCESSING_FAILED"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_detail(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            **self.details
        }


class InvalidInputError(ContentError):
    """Testo di riferimento vuoto, troppo lungo o contenuto insufficiente"""
    status_code = 400
    code = "INVALID_INPUT"


class FileReadError(ContentError):
    """Upload non leggibile, troppo grande o di tipo non supportato"""
    status_code = 400
    code = "FILE_READ_FAILED"


class ProcessingError(ContentError):
    """Errore inatteso durante analisi o umanizzazione"""
    status_code = 500
    code = "PROCESSING_FAILED"
