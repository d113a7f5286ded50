import asyncio
import logging
from datetime import datetime
from typing import Dict, Any, Optional

from refwriter.core.celery_app import celery_app
from refwriter.core.logging import setup_logger
from refwriter.schemas.text_schemas import GenerationConfig
from refwriter.services.content_service import content_service, count_words

# Instanza il logger
setup_logger()
logger = logging.getLogger(__name__)


def _run(coroutine):
    """Esegue una coroutine del servizio in un event loop dedicato al task"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coroutine)
    finally:
        loop.close()


@celery_app.task(bind=True, name="generate_content", acks_late=True)
def generate_content_task(
    self,
    document_content: str,
    config: Optional[Dict[str, Any]] = None,
    humanize: bool = False,
    seed: Optional[int] = None
):
    task_id = self.request.id
    try:
        logger.info(f"Starting content generation task {task_id} ({len(document_content)} chars)")

        self.update_state(
            state="PROCESSING",
            meta={
                "status": "processing",
                "progress": 10,
                "message": "Analyzing reference material..."
            }
        )

        generation_config = GenerationConfig(**(config or {}))
        pipeline_result = _run(
            content_service.run_pipeline(
                document_content,
                generation_config,
                humanize=humanize,
                seed=seed
            )
        )

        result = {
            "status": "completed",
            "progress": 100,
            "result": {
                "original_text": document_content,
                "processed_text": pipeline_result.content,
                "topics": pipeline_result.document.topics,
                "humanized": pipeline_result.humanized,
                "seed": pipeline_result.seed,
                "detection_score": pipeline_result.detection.score,
                "word_count_original": count_words(document_content),
                "word_count_processed": count_words(pipeline_result.content),
                "processing_time": pipeline_result.processing_time,
            },
            "message": "Content generation completed successfully"
        }

        logger.info(f"Task {task_id} completed successfully")
        return result

    except Exception as exc:
        logger.error(f"Task {task_id} failed: {str(exc)}")
        self.update_state(
            state="FAILURE",
            meta={
                "status": "failed",
                "progress": 0,
                "error": str(exc),
                "message": "Content generation failed"
            }
        )
        raise exc


@celery_app.task(bind=True, name="humanize_text", acks_late=True)
def humanize_text_task(self, text: str, creativity: float = 0.7, seed: Optional[int] = None):
    task_id = self.request.id
    logger.info(f"Starting humanize task {task_id} ({len(text)} chars, creativity={creativity})")

    outcome = content_service.humanize(text, creativity, seed=seed)
    comparison = content_service.estimator.compare_versions(text, outcome.text)

    return {
        "status": "completed",
        "progress": 100,
        "result": {
            "original_text": text,
            "humanized_text": outcome.text,
            "seed": outcome.seed,
            "modifications_applied": outcome.modifications_applied,
            "comparison": comparison,
        },
        "message": "Humanization completed successfully"
    }


@celery_app.task(bind=True, name="check_detection", acks_late=True)
def check_detection_task(self, content: str):
    task_id = self.request.id
    logger.info(f"Starting detection check task {task_id}")

    simulated_score = _run(content_service.check_ai_detection(content))
    estimate = content_service.estimate_detection(content)

    return {
        "status": "completed",
        "progress": 100,
        "result": {
            "simulated_score": simulated_score,
            "heuristic_score": estimate.score,
            "pattern_matches": estimate.pattern_matches,
            "verdict": estimate.verdict,
        },
        "message": "Detection check completed"
    }


@celery_app.task(name="health_check")
def health_check_task():
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "message": "Worker is running"
    }
