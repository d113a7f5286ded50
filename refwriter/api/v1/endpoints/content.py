from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
import uuid
import logging
import time
from datetime import datetime, timedelta

from refwriter.schemas.text_schemas import (
    DetectionModel,
    DetectionRequest,
    DetectionResult,
    DocumentSectionModel,
    ExportRequest,
    GenerateContentRequest,
    GenerateContentResponse,
    HumanizeRequest,
    HumanizeResponse,
    ProcessedContentResult,
    TaskStatus,
    TaskStatusResponse,
    TextProcessingResponse,
    VersionComparison,
)
from refwriter.core.celery_app import celery_app
from refwriter.core.config import settings
from refwriter.core.errors import ContentError
from refwriter.core.limiter import limiter
from refwriter.core.logging import api_logger
from refwriter.services.content_service import content_service, count_words, PipelineResult
from refwriter.services.document_service import (
    build_content_disposition,
    build_export_filename,
    export_content,
)
from refwriter.utils.humanizer import describe_score
from refwriter.workers.tasks import generate_content_task

logger = logging.getLogger(__name__)
router = APIRouter()

# ================================
# UTILITY FUNCTIONS
# ================================

def to_http_exception(exc: ContentError) -> HTTPException:
    """Converte un errore della pipeline in HTTPException con detail strutturato"""
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())

def build_generate_response(result: PipelineResult, document_name: str = None) -> GenerateContentResponse:
    return GenerateContentResponse(
        content=result.content,
        draft=result.document.content,
        sections=[
            DocumentSectionModel(name=section.name, content=section.content)
            for section in result.document.sections
        ],
        topics=result.document.topics,
        key_sentences=result.document.key_sentences,
        humanized=result.humanized,
        seed=result.seed,
        detection=DetectionResult(
            score=result.detection.score,
            model=DetectionModel.HEURISTIC,
            verdict=result.detection.verdict,
            message=result.detection.message,
            pattern_matches=result.detection.pattern_matches
        ),
        character_count=len(result.content),
        word_count=count_words(result.content),
        export_filename=build_export_filename(document_name),
        processing_time=result.processing_time
    )

# ================================
# ENDPOINTS
# ================================

@router.post("/generate", response_model=GenerateContentResponse)
@limiter.limit(settings.RATE_LIMIT_GENERATION)
async def generate_content(request: Request, payload: GenerateContentRequest):
    """
    Generate a structured document from reference text.

    Runs the analyzer, optionally the humanizer, then scores the result with the
    heuristic detectability model.
    """
    start_time = time.time()
    try:
        result = await content_service.run_pipeline(
            payload.document_content,
            payload.config,
            humanize=payload.humanize,
            seed=payload.seed
        )

        await api_logger.log_api_call(
            request=request,
            response_time=(time.time() - start_time) * 1000,
            additional_data={
                "action": "generate",
                "humanized": payload.humanize,
                "reference_length": len(payload.document_content)
            }
        )
        return build_generate_response(result, payload.document_name)

    except ContentError as e:
        await api_logger.log_api_call(
            request=request,
            response_time=(time.time() - start_time) * 1000,
            error=e.message
        )
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to generate content: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"code": "PROCESSING_FAILED", "message": f"Failed to generate content: {str(e)}"}
        )

@router.post("/humanize", response_model=HumanizeResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def humanize_content(request: Request, payload: HumanizeRequest):
    """
    Humanize arbitrary text (generated or edited by the user)
    """
    try:
        outcome = content_service.humanize(payload.text, payload.creativity, seed=payload.seed)
        comparison = content_service.estimator.compare_versions(payload.text, outcome.text)

        return HumanizeResponse(
            original_text=payload.text,
            humanized_text=outcome.text,
            creativity=payload.creativity,
            seed=outcome.seed,
            word_count_original=count_words(payload.text),
            word_count_processed=count_words(outcome.text),
            comparison=VersionComparison(**comparison)
        )

    except ContentError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to humanize text: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"code": "PROCESSING_FAILED", "message": f"Failed to humanize text: {str(e)}"}
        )

@router.post("/detection/check", response_model=DetectionResult)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def check_ai_detection(request: Request, payload: DetectionRequest):
    """
    Simulated AI detection check: random score between 5% and 18%.
    Requires at least MIN_DETECTION_LENGTH characters of content.
    """
    try:
        score = await content_service.check_ai_detection(payload.content)
        verdict, message = describe_score(score)
        return DetectionResult(
            score=score,
            model=DetectionModel.SIMULATED,
            verdict=verdict,
            message=message
        )
    except ContentError as e:
        raise to_http_exception(e)

@router.post("/detection/estimate", response_model=DetectionResult)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def estimate_ai_detection(request: Request, payload: DetectionRequest):
    """
    Heuristic detectability score (10%-50%) from pattern-match density
    """
    estimate = content_service.estimate_detection(payload.content)
    return DetectionResult(
        score=estimate.score,
        model=DetectionModel.HEURISTIC,
        verdict=estimate.verdict,
        message=estimate.message,
        pattern_matches=estimate.pattern_matches
    )

@router.post("/export")
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def export_document(request: Request, payload: ExportRequest):
    """
    Export the editor content as a plain-text download
    """
    try:
        data = export_content(payload.content)
    except ContentError as e:
        raise to_http_exception(e)

    filename = build_export_filename(payload.document_name)
    logger.info(f"Content exported as \"{filename}\" ({len(data)} bytes)")

    return Response(
        content=data,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": build_content_disposition(filename)}
    )

# ================================
# TASK IN BACKGROUND (CELERY)
# ================================

@router.post("/generate/async", response_model=TextProcessingResponse)
@limiter.limit(settings.RATE_LIMIT_GENERATION)
async def generate_content_async(request: Request, payload: GenerateContentRequest):
    """
    Start content generation as a background task
    """
    try:
        content_service.validate_reference_text(payload.document_content)

        task_id = str(uuid.uuid4())
        analysis = content_service.get_text_analysis(payload.document_content)
        estimated_completion = datetime.utcnow().replace(microsecond=0) + \
                             timedelta(seconds=analysis["estimated_processing_time"])

        generate_content_task.apply_async(
            args=[
                payload.document_content,
                payload.config.model_dump(mode="json"),
                payload.humanize,
                payload.seed
            ],
            task_id=task_id,
            queue="content_generation",
            retry_policy={
                'max_retries': 3,
                'interval_start': 5,
                'interval_step': 10,
                'interval_max': 60,
            }
        )

        logger.info(
            f"✅ Content generation started - Task: {task_id}, "
            f"Reference length: {analysis['character_count']} chars, "
            f"Word count: {analysis['word_count']}"
        )

        return TextProcessingResponse(
            task_id=task_id,
            status=TaskStatus.PENDING,
            message=f"Content generation started. Estimated completion in {analysis['estimated_processing_time']} seconds.",
            estimated_completion=estimated_completion
        )

    except ContentError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to start content generation task: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to start content generation: {str(e)}"
        )

@router.get("/task/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(task_id: str):
    """
    Get status of a content generation task
    """
    try:
        result = celery_app.AsyncResult(task_id)

        # Map Celery states to our TaskStatus
        status_mapping = {
            "PENDING": TaskStatus.PENDING,
            "PROCESSING": TaskStatus.PROCESSING,
            "SUCCESS": TaskStatus.COMPLETED,
            "FAILURE": TaskStatus.FAILED,
            "RETRY": TaskStatus.PROCESSING,
            "REVOKED": TaskStatus.FAILED
        }

        status = status_mapping.get(result.state, TaskStatus.PENDING)
        task_info = result.info if isinstance(result.info, dict) else {}

        response_data = {
            "task_id": task_id,
            "status": status,
            "created_at": datetime.utcnow(),
            "updated_at": datetime.utcnow(),
            "progress": task_info.get("progress", 0 if status == TaskStatus.PENDING else 100),
        }

        if status == TaskStatus.COMPLETED and "result" in task_info:
            task_result = task_info["result"]
            # I task di umanizzazione restituiscono humanized_text
            response_data["result"] = task_result.get("processed_text", task_result.get("humanized_text"))

        if status == TaskStatus.FAILED:
            response_data["error"] = task_info.get("error", str(result.info) if result.info else "Unknown error")

        return TaskStatusResponse(**response_data)

    except Exception as e:
        logger.error(f"Failed to get task status for {task_id}: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get task status: {str(e)}"
        )

@router.get("/task/{task_id}/result", response_model=ProcessedContentResult)
async def get_task_result(task_id: str):
    """
    Get detailed result of a completed content generation task
    """
    try:
        result = celery_app.AsyncResult(task_id)

        if result.state != "SUCCESS":
            raise HTTPException(
                status_code=400,
                detail=f"Task is not completed yet. Current status: {result.state}"
            )

        task_result = result.info.get("result") if isinstance(result.info, dict) else None
        if not task_result:
            raise HTTPException(status_code=404, detail="Task result not found")
        if "processed_text" not in task_result:
            raise HTTPException(status_code=400, detail="Task is not a content generation task")

        return ProcessedContentResult(**task_result)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get task result for {task_id}: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get task result: {str(e)}"
        )

@router.delete("/task/{task_id}")
async def cancel_task(task_id: str):
    """
    Discard a pending or running task
    """
    try:
        celery_app.control.revoke(task_id, terminate=True)

        logger.info(f"Task cancelled: {task_id}")

        return {
            "message": f"Task {task_id} has been cancelled",
            "task_id": task_id,
            "status": "cancelled"
        }

    except Exception as e:
        logger.error(f"Failed to cancel task {task_id}: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to cancel task: {str(e)}"
        )

@router.get("/health")
async def health_check():
    """
    Health check endpoint for the content service
    """
    try:
        inspector = celery_app.control.inspect(timeout=1.0)
        active_tasks = inspector.active()

        return {
            "status": "healthy",
            "celery_workers": len(active_tasks) if active_tasks else 0,
            "generation_delay_seconds": settings.GENERATION_DELAY_SECONDS,
            "detection_delay_seconds": settings.DETECTION_DELAY_SECONDS,
            "timestamp": datetime.utcnow().isoformat()
        }

    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "error": str(e),
            "timestamp": datetime.utcnow().isoformat()
        }
