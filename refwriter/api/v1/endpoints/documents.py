from fastapi import APIRouter, File, HTTPException, Request, UploadFile
import logging
import time

from refwriter.api.v1.endpoints.content import build_generate_response, to_http_exception
from refwriter.core.config import settings
from refwriter.core.errors import ContentError, FileReadError
from refwriter.core.limiter import limiter
from refwriter.core.logging import api_logger
from refwriter.schemas.documents import (
    CreateDocumentRequest,
    DeleteDocumentResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentSummary,
)
from refwriter.schemas.text_schemas import DocumentGenerateRequest, GenerateContentResponse
from refwriter.services.content_service import content_service
from refwriter.services.document_service import ReferenceDocument, decode_upload, document_store

logger = logging.getLogger(__name__)
router = APIRouter()


def to_summary(document: ReferenceDocument) -> DocumentSummary:
    return DocumentSummary(
        id=document.id,
        name=document.name,
        character_count=document.character_count,
        created_at=document.created_at
    )

def to_response(document: ReferenceDocument) -> DocumentResponse:
    return DocumentResponse(
        **to_summary(document).model_dump(),
        content=document.content,
        keywords=content_service.analyzer.extract_keywords_preview(document.content)
    )

def get_document_or_404(document_id: str) -> ReferenceDocument:
    document = document_store.get(document_id)
    if document is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "DOCUMENT_NOT_FOUND", "message": f"Document {document_id} not found"}
        )
    return document


@router.post("/upload", response_model=DocumentResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def upload_document(request: Request, file: UploadFile = File(...)):
    """
    Upload a reference document (TXT, PDF or DOCX, max 5MB), read as plain text
    """
    start_time = time.time()
    filename = file.filename or "document.txt"
    try:
        logger.info(f"Processing document \"{filename}\" ({file.content_type})")
        try:
            data = await file.read()
        except Exception as e:
            raise FileReadError(
                "There was an error reading your file. Please try again.",
                details={"filename": filename, "reason": str(e)}
            )

        content = decode_upload(filename, file.content_type, data)
        document = document_store.add(filename, content)

        await api_logger.log_api_call(
            request=request,
            response_time=(time.time() - start_time) * 1000,
            additional_data={"action": "upload", "bytes": len(data)}
        )
        return to_response(document)

    except ContentError as e:
        await api_logger.log_api_call(
            request=request,
            response_time=(time.time() - start_time) * 1000,
            error=e.message
        )
        raise to_http_exception(e)

@router.post("", response_model=DocumentResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def create_document(request: Request, payload: CreateDocumentRequest):
    """
    Add pasted reference text to the session
    """
    try:
        content_service.validate_reference_text(payload.content)
    except ContentError as e:
        raise to_http_exception(e)

    document = document_store.add(payload.name, payload.content)
    return to_response(document)

@router.get("", response_model=DocumentListResponse)
async def list_documents():
    documents = document_store.list()
    return DocumentListResponse(
        documents=[to_summary(document) for document in documents],
        total=len(documents)
    )

@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str):
    return to_response(get_document_or_404(document_id))

@router.delete("/{document_id}", response_model=DeleteDocumentResponse)
async def delete_document(document_id: str):
    get_document_or_404(document_id)
    document_store.remove(document_id)
    return DeleteDocumentResponse(id=document_id, deleted=True, message="The document has been removed")

@router.post("/{document_id}/generate", response_model=GenerateContentResponse)
@limiter.limit(settings.RATE_LIMIT_GENERATION)
async def generate_from_document(request: Request, document_id: str, payload: DocumentGenerateRequest):
    """
    Generate content from a stored reference document
    """
    document = get_document_or_404(document_id)
    try:
        result = await content_service.run_pipeline(
            document.content,
            payload.config,
            humanize=payload.humanize,
            seed=payload.seed
        )
        return build_generate_response(result, document.name)

    except ContentError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to generate content for document {document_id}: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"code": "PROCESSING_FAILED", "message": f"Failed to generate content: {str(e)}"}
        )
