import logging
from urllib.parse import quote

from refwriter.api.v1.endpoints import content as content_endpoints
from refwriter.core.celery_app import celery_app
from refwriter.core.logging import api_logger


# ================================
# GENERAZIONE
# ================================

def test_generate_content(client, reference_text):
    response = client.post("/api/v1/content/generate", json={
        "document_content": reference_text,
        "document_name": "strategy.notes.txt",
    })
    assert response.status_code == 200
    data = response.json()

    assert data["humanized"] is False
    assert data["seed"] is None
    assert data["content"] == data["draft"]
    assert data["content"].startswith("# Analysis of Document")
    assert [s["name"] for s in data["sections"]] == [
        "title", "key_topics", "main_points", "summary", "detailed_analysis",
        "recommendations", "conclusion", "call_to_action",
    ]
    assert data["topics"][:2] == ["content", "marketing"]
    assert data["detection"]["model"] == "heuristic"
    assert 10 <= data["detection"]["score"] <= 50
    assert data["character_count"] == len(data["content"])
    assert data["export_filename"] == "strategy_content.txt"
    assert api_logger.recent()[-1]["endpoint"] == "/api/v1/content/generate"


def test_generate_accepts_camel_case_config(client, reference_text):
    response = client.post("/api/v1/content/generate", json={
        "document_content": reference_text,
        "config": {"tone": "technical", "includeFaq": True, "includeCta": False},
    })
    assert response.status_code == 200
    data = response.json()
    names = [s["name"] for s in data["sections"]]
    assert "faq" in names
    assert "call_to_action" not in names
    assert "This technical analysis" in data["content"]
    assert data["export_filename"] == "generated_content.txt"


def test_generate_with_humanizer_is_reproducible(client, reference_text):
    payload = {
        "document_content": reference_text,
        "config": {"creativity": 0.9},
        "humanize": True,
        "seed": 2024,
    }
    first = client.post("/api/v1/content/generate", json=payload).json()
    second = client.post("/api/v1/content/generate", json=payload).json()

    assert first["humanized"] is True
    assert first["seed"] == 2024
    assert first["content"] == second["content"]
    assert len(first["content"]) >= len(first["draft"])


def test_generate_rejects_creativity_out_of_range(client, reference_text):
    response = client.post("/api/v1/content/generate", json={
        "document_content": reference_text,
        "config": {"creativity": 1.5},
    })
    assert response.status_code == 422


def test_generate_rejects_empty_reference(client):
    response = client.post("/api/v1/content/generate", json={"document_content": "   "})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "NO_SOURCE_DOCUMENT"


# ================================
# HUMANIZER E DETECTION
# ================================

def test_humanize_endpoint(client):
    text = "The plan is very simple and the team was ready. It works. We think it is fine."
    payload = {"text": text, "creativity": 0.8, "seed": 11}

    first = client.post("/api/v1/content/humanize", json=payload)
    second = client.post("/api/v1/content/humanize", json=payload)
    assert first.status_code == 200
    data = first.json()

    assert data["original_text"] == text
    assert data["seed"] == 11
    assert data["humanized_text"] == second.json()["humanized_text"]
    assert len(data["humanized_text"]) >= len(text)
    assert set(data["comparison"]) == {
        "original_score", "humanized_score", "improvement", "original_matches", "humanized_matches",
    }


def test_humanize_zero_creativity_is_identity(client):
    text = "It is very plain and it was quite short."
    data = client.post("/api/v1/content/humanize", json={"text": text, "creativity": 0}).json()
    assert data["humanized_text"] == text
    assert data["comparison"]["improvement"] == 0
    assert isinstance(data["seed"], int)


def test_humanize_rejects_blank_text(client):
    assert client.post("/api/v1/content/humanize", json={"text": "   "}).status_code == 422


def test_detection_check_requires_content(client):
    response = client.post("/api/v1/content/detection/check", json={"content": "short"})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "INSUFFICIENT_CONTENT"
    assert detail["min_length"] == 100


def test_detection_check_simulated(client, reference_text):
    response = client.post("/api/v1/content/detection/check", json={"content": reference_text})
    assert response.status_code == 200
    data = response.json()
    assert data["model"] == "simulated"
    assert 5 <= data["score"] <= 18
    assert data["verdict"] == "low"


def test_detection_estimate(client):
    response = client.post("/api/v1/content/detection/estimate", json={"content": "very very very very very"})
    assert response.status_code == 200
    data = response.json()
    assert data["model"] == "heuristic"
    assert data["score"] == 40
    assert data["pattern_matches"] == 5
    assert data["verdict"] == "elevated"


# ================================
# EXPORT
# ================================

def test_export_download(client, reference_text):
    response = client.post("/api/v1/content/export", json={
        "content": reference_text,
        "document_name": "brief.final.docx",
    })
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="brief_content.txt"'
    assert response.headers["content-type"].startswith("text/plain")
    assert response.content == reference_text.encode("utf-8")


def test_export_unicode_round_trip(client):
    content = "Caffè e naïveté - 日本語 ✓\n\n" * 10
    response = client.post("/api/v1/content/export", json={"content": content})
    assert response.headers["content-disposition"] == 'attachment; filename="generated_content.txt"'
    assert response.content.decode("utf-8") == content


def test_export_rejects_short_content(client):
    response = client.post("/api/v1/content/export", json={"content": "tiny"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "NO_CONTENT_TO_EXPORT"


def test_export_non_ascii_document_name(client, reference_text):
    response = client.post("/api/v1/content/export", json={
        "content": reference_text,
        "document_name": "日本語.txt",
    })
    assert response.status_code == 200
    assert response.headers["content-disposition"] == (
        "attachment; filename*=utf-8''" + quote("日本語_content.txt")
    )
    assert response.content == reference_text.encode("utf-8")


def test_export_document_name_with_quote(client, reference_text):
    response = client.post("/api/v1/content/export", json={
        "content": reference_text,
        "document_name": 'a"b.txt',
    })
    assert response.status_code == 200
    assert response.headers["content-disposition"] == "attachment; filename*=utf-8''a%22b_content.txt"


# ================================
# TASK IN BACKGROUND
# ================================

class RecordingTask:
    def __init__(self):
        self.calls = []

    def apply_async(self, **kwargs):
        self.calls.append(kwargs)


def test_generate_async_enqueues_task(client, reference_text, monkeypatch):
    task = RecordingTask()
    monkeypatch.setattr(content_endpoints, "generate_content_task", task)

    response = client.post("/api/v1/content/generate/async", json={
        "document_content": reference_text,
        "config": {"includeFaq": True},
        "humanize": True,
        "seed": 5,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"

    assert len(task.calls) == 1
    call = task.calls[0]
    assert call["task_id"] == data["task_id"]
    assert call["queue"] == "content_generation"
    assert call["args"][0] == reference_text
    assert call["args"][1]["include_faq"] is True
    assert call["args"][2:] == [True, 5]


def test_generate_async_validates_before_enqueue(client, monkeypatch):
    task = RecordingTask()
    monkeypatch.setattr(content_endpoints, "generate_content_task", task)

    response = client.post("/api/v1/content/generate/async", json={"document_content": ""})
    assert response.status_code == 400
    assert task.calls == []


def test_unknown_task_is_pending(client):
    response = client.get("/api/v1/content/task/does-not-exist")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    assert data["progress"] == 0


def test_result_of_pending_task(client):
    response = client.get("/api/v1/content/task/does-not-exist/result")
    assert response.status_code == 400


class FinishedResult:
    state = "SUCCESS"

    def __init__(self, info):
        self.info = info


def test_status_of_finished_humanize_task(client, monkeypatch):
    info = {"status": "completed", "progress": 100, "result": {"humanized_text": "Humanized words"}}
    monkeypatch.setattr(celery_app, "AsyncResult", lambda task_id: FinishedResult(info))

    response = client.get("/api/v1/content/task/humanize-1")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["result"] == "Humanized words"

    assert client.get("/api/v1/content/task/humanize-1/result").status_code == 400


def test_status_of_finished_generation_task(client, monkeypatch):
    info = {"status": "completed", "progress": 100, "result": {"processed_text": "Generated words"}}
    monkeypatch.setattr(celery_app, "AsyncResult", lambda task_id: FinishedResult(info))

    data = client.get("/api/v1/content/task/generate-1").json()
    assert data["status"] == "completed"
    assert data["result"] == "Generated words"


def test_cancel_task(client, monkeypatch):
    revoked = []
    monkeypatch.setattr(celery_app.control, "revoke", lambda task_id, **kwargs: revoked.append(task_id))

    response = client.delete("/api/v1/content/task/abc-123")
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert revoked == ["abc-123"]


# ================================
# DOCUMENTI DI RIFERIMENTO
# ================================

def test_upload_and_manage_document(client, reference_text):
    upload = client.post(
        "/api/v1/documents/upload",
        files={"file": ("notes.txt", reference_text.encode("utf-8"), "text/plain")},
    )
    assert upload.status_code == 200
    document = upload.json()
    assert document["name"] == "notes.txt"
    assert document["content"] == reference_text
    assert document["character_count"] == len(reference_text)
    assert document["keywords"]

    listing = client.get("/api/v1/documents").json()
    assert listing["total"] == 1
    assert listing["documents"][0]["id"] == document["id"]

    fetched = client.get(f"/api/v1/documents/{document['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["content"] == reference_text

    generated = client.post(f"/api/v1/documents/{document['id']}/generate", json={})
    assert generated.status_code == 200
    assert generated.json()["export_filename"] == "notes_content.txt"

    deleted = client.delete(f"/api/v1/documents/{document['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["deleted"] is True

    missing = client.get(f"/api/v1/documents/{document['id']}")
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "DOCUMENT_NOT_FOUND"


def test_upload_rejects_unsupported_type(client):
    response = client.post(
        "/api/v1/documents/upload",
        files={"file": ("image.png", b"\x89PNG", "image/png")},
    )
    assert response.status_code == 415
    assert response.json()["detail"]["code"] == "UNSUPPORTED_FILE_TYPE"


def test_create_pasted_document(client, reference_text):
    response = client.post("/api/v1/documents", json={"content": reference_text})
    assert response.status_code == 200
    assert response.json()["name"] == "Pasted text"

    assert client.post("/api/v1/documents", json={"content": "  "}).status_code == 422


def test_delete_unknown_document(client):
    assert client.delete("/api/v1/documents/unknown").status_code == 404


# ================================
# FRONTEND E HEALTH
# ================================

def test_frontend_tones(client):
    response = client.get("/api/v1/frontend/tones")
    assert response.status_code == 200
    assert [tone["id"] for tone in response.json()] == [
        "professional", "conversational", "friendly", "authoritative", "technical",
    ]


def test_frontend_defaults(client):
    data = client.get("/api/v1/frontend/defaults").json()
    assert data["config"]["tone"] == "professional"
    assert data["config"]["creativity"] == 0.7
    assert data["config"]["includeFaq"] is False
    assert data["min_detection_length"] == 100
    assert {option["id"]: option["default"] for option in data["format_options"]} == {
        "include_headings": True,
        "include_bullets": True,
        "include_faq": False,
        "include_conclusion": True,
        "include_cta": True,
    }


def test_root_and_health(client):
    root = client.get("/")
    assert root.status_code == 200
    assert root.json()["rate_limiting"] == "disabled"

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["services"]["celery_broker"] == "memory"


def test_api_calls_reach_the_application_logger(client, caplog):
    response = client.get("/api/v1/frontend/tones")
    assert response.status_code == 200

    records = [r for r in caplog.records if r.name == "refwriter.api"]
    assert any("GET /api/v1/frontend/tones" in r.getMessage() for r in records)
    assert all(r.levelno == logging.INFO for r in records)
