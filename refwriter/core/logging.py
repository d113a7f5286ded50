import logging
import json
import uuid
from collections import deque
from datetime import datetime
from typing import Optional, Dict, Any, List
from fastapi import Request, Response
from refwriter.core.config import settings

logger = logging.getLogger("refwriter.api")

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(funcName)-20s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str = "refwriter", log_file: str = "refwriter.log") -> logging.Logger:
    """Configura il logger applicativo (console sempre, file se LOG_TO_FILE)"""
    app_logger = logging.getLogger(name)

    if app_logger.handlers:  # Evita duplicazione handlers
        return app_logger

    app_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    app_logger.addHandler(console)

    if settings.LOG_TO_FILE.lower() == 'true':
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    return app_logger


class APICallLogger:
    """Registro in memoria delle chiamate API e degli eventi di sicurezza della sessione"""

    def __init__(self, max_entries: int = 500):
        self.entries = deque(maxlen=max_entries)

    async def log_api_call(
        self,
        request: Request,
        response: Optional[Response] = None,
        response_time: Optional[float] = None,
        error: Optional[str] = None,
        additional_data: Optional[Dict[str, Any]] = None
    ):
        """
        Logga una chiamata API nel registro di sessione
        """
        try:
            query_params = dict(request.query_params) if request.query_params else None

            log_data = {
                "id": str(uuid.uuid4()),
                "timestamp": datetime.utcnow().isoformat(),
                "client_ip": self._get_client_ip(request),
                "method": request.method,
                "endpoint": str(request.url.path),
                "query_params": json.dumps(query_params) if query_params else None,
                "user_agent": request.headers.get("User-Agent", "Unknown"),
                "response_time_ms": round(response_time, 2) if response_time is not None else None,
                "status_code": response.status_code if response else None,
                "error_message": error,
                "additional_data": json.dumps(additional_data) if additional_data else None,
            }
            self.entries.append(log_data)

            if error:
                logger.error(f"{log_data['method']} {log_data['endpoint']} failed: {error}")
            else:
                logger.info(
                    f"{log_data['method']} {log_data['endpoint']} "
                    f"({log_data['response_time_ms']} ms)"
                )

        except Exception as e:
            # Non interrompere l'API se il logging fallisce
            logger.error(f"Errore nel logging API: {str(e)}")

    async def log_security_event(
        self,
        event_type: str,
        client_ip: str,
        details: str = "",
        severity: str = "warning"
    ):
        """
        Logga eventi di sicurezza
        """
        security_log = {
            "id": str(uuid.uuid4()),
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": "security",
            "client_ip": client_ip,
            "endpoint": f"SECURITY:{event_type}",
            "error_message": details,
            "additional_data": json.dumps({
                "security_event": event_type,
                "severity": severity
            }),
        }
        self.entries.append(security_log)

        logger.warning(f"SECURITY: {event_type} - IP: {client_ip} - {details}")

    def recent(self, limit: int = 50) -> List[Dict[str, Any]]:
        return list(self.entries)[-limit:]

    def clear(self):
        self.entries.clear()

    def _get_client_ip(self, request: Request) -> str:
        """
        Estrae l'IP del client considerando proxy e load balancer
        """
        if request.headers:
            forwarded_for = request.headers.get("X-Forwarded-For")
            if forwarded_for:
                return forwarded_for.split(",")[0].strip()

            real_ip = request.headers.get("X-Real-IP")
            if real_ip:
                return real_ip

        return request.client.host if request.client else "unknown"


# Istanza globale del logger API
api_logger = APICallLogger()
