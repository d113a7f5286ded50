import os
import ssl
import logging
from celery import Celery
from refwriter.core.config import settings

logger = logging.getLogger(__name__)

# Configurazione SSL per Redis
def get_redis_ssl_config(url):
    """Configurazione SSL per connessioni Redis"""
    if url and url.startswith('rediss://'):
        return {
            'ssl_cert_reqs': ssl.CERT_REQUIRED,
            'ssl_ca_certs': os.getenv('SSL_CA_PATH', '/app/certs/ca.crt'),
            'ssl_certfile': os.getenv('SSL_CERT_PATH', '/app/certs/client.crt'),
            'ssl_keyfile': os.getenv('SSL_KEY_PATH', '/app/certs/client.key'),
            'ssl_check_hostname': False,  # Disabilita per certificati self-signed
        }
    return {}

# URL Redis con parametri SSL per Celery
def get_redis_url_with_ssl(url):
    """Costruisce URL Redis con parametri SSL e password richiesti da Celery"""
    if not url:
        return url

    if url.startswith('rediss://'):
        if "?" in url:
            return f"{url}&ssl_cert_reqs=required&ssl_check_hostname=false"
        return f"{url}?ssl_cert_reqs=required&ssl_check_hostname=false"
    elif url.startswith('redis://'):
        # Per Redis standard, aggiungi password se non presente
        password = settings.REDIS_PASSWORD
        if '@' not in url and password:
            host_port = url.replace('redis://', '')
            return f"redis://:{password}@{host_port}"

    return url

# Ottieni URLs con supporto SSL e password
broker_url = get_redis_url_with_ssl(settings.celery_broker_url)
result_backend_url = get_redis_url_with_ssl(settings.celery_result_backend)

# Create Celery instance
celery_app = Celery(
    "refwriter",
    broker=broker_url,
    backend=result_backend_url,
    include=["refwriter.workers.tasks"]
)

ssl_config = get_redis_ssl_config(broker_url)

# Celery configuration
celery_app.conf.update(
    broker_url=broker_url,
    result_backend=result_backend_url,

    # Configurazioni SSL se necessarie
    broker_use_ssl=ssl_config if ssl_config else None,
    redis_backend_use_ssl=ssl_config if ssl_config else None,

    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # Results
    result_expires=3600,  # 1 hour

    # Task routing
    task_routes={
        "generate_content": {"queue": "content_generation"},
        "humanize_text": {"queue": "content_generation"},
        "check_detection": {"queue": "detection"},
    },

    # Task execution
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    # Retry configuration
    task_default_retry_delay=60,
    task_max_retries=3,

    timezone=os.getenv('CELERY_TIMEZONE', 'UTC'),
    enable_utc=True,

    # Connection reliability
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,

    worker_send_task_events=True,
    task_send_sent_event=True,
)

logger.info(f"Celery broker URL: {broker_url}")
logger.info(f"Celery result backend: {result_backend_url}")
logger.info(f"SSL configuration enabled: {bool(ssl_config)}")
