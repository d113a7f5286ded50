import logging
import redis
from fastapi import Request
from slowapi import Limiter

from refwriter.core.config import settings

logger = logging.getLogger(__name__)


#Funzione per ottenere l'IP reale del client considerando proxy headers
def get_client_ip(request: Request) -> str:
    """Ottieni l'IP reale del client considerando proxy headers"""
    try:
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if hasattr(request, 'client') and request.client:
            return request.client.host

        return "unknown"
    except Exception as e:
        logger.warning(f"Error getting client IP: {e}")
        return "unknown"


def check_redis_available() -> bool:
    """Controllo se Redis è disponibile per il rate limiting"""
    if not settings.redis_configured:
        return False
    try:
        client = redis.Redis.from_url(settings.redis_url, db=1, socket_connect_timeout=2)
        client.ping()
        client.close()
        logger.info("✅ Redis connected for rate limiting")
        return True
    except Exception as e:
        logger.warning(f"⚠️  Redis not available for rate limiting: {e}")
        return False


redis_available = check_redis_available()

# Il limiter viene usato per limitare il numero di richieste per IP
if redis_available:
    limiter = Limiter(
        key_func=get_client_ip,
        storage_uri=f"{settings.redis_url}/1",
        enabled=settings.RATE_LIMIT_ENABLED
    )
else:
    # Se Redis non è disponibile, uso in-memory rate limiting (non è raccomandato per la produzione)
    limiter = Limiter(key_func=get_client_ip, enabled=settings.RATE_LIMIT_ENABLED)
    if settings.RATE_LIMIT_ENABLED:
        logger.warning("⚠️  Using in-memory rate limiting (not recommended for production)")
