import os

# Latenze simulate azzerate e rate limiting disattivato prima di importare l'app
os.environ["GENERATION_DELAY_SECONDS"] = "0"
os.environ["DETECTION_DELAY_SECONDS"] = "0"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient

from refwriter.core.logging import api_logger
from refwriter.core.random_source import SequenceRandomSource
from refwriter.main import app
from refwriter.services.document_service import document_store


REFERENCE_TEXT = (
    "Content marketing strategies evolve quickly in modern digital markets. "
    "Marketing teams measure engagement across every channel they publish on. "
    "Good content builds trust with readers over a long period of time. "
    "Strategies that ignore measurement rarely survive a full quarter! "
    "Readers reward marketing that respects their attention and their time? "
    "Channel specific variations outperform identical cross posted content. "
    "Measurement should connect content performance to real business outcomes. "
    "Ok. "
    "Distribution matters as much as production for most marketing teams."
)


@pytest.fixture
def reference_text():
    return REFERENCE_TEXT


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def clean_session_state():
    document_store.clear()
    api_logger.clear()
    yield
    document_store.clear()
    api_logger.clear()


@pytest.fixture
def sequence_source():
    def factory(*values):
        return SequenceRandomSource(list(values))
    return factory
