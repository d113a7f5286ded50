from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from enum import Enum

class TaskStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CONVERSATIONAL = "conversational"
    FRIENDLY = "friendly"
    AUTHORITATIVE = "authoritative"
    TECHNICAL = "technical"

class DetectionModel(str, Enum):
    SIMULATED = "simulated"
    HEURISTIC = "heuristic"

class GenerationConfig(BaseModel):
    """Opzioni di generazione passate esplicitamente dal chiamante"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tone: Tone = Field(default=Tone.PROFESSIONAL)
    length: str = Field(default="1000", description="Advisory target length, not used by the analyzer")
    creativity: float = Field(default=0.7, ge=0.0, le=1.0)
    include_headings: bool = True
    include_bullets: bool = True
    include_faq: bool = False
    include_conclusion: bool = True
    include_cta: bool = True

class GenerateContentRequest(BaseModel):
    document_content: str = Field(..., description="Reference text to generate content from")
    document_name: Optional[str] = None
    config: GenerationConfig = Field(default_factory=GenerationConfig)
    humanize: bool = Field(default=False, description="Run the humanizer on the generated draft")
    seed: Optional[int] = Field(default=None, ge=0, description="Seed for a reproducible humanization")

class DocumentGenerateRequest(BaseModel):
    config: GenerationConfig = Field(default_factory=GenerationConfig)
    humanize: bool = False
    seed: Optional[int] = Field(default=None, ge=0)

class DocumentSectionModel(BaseModel):
    name: str
    content: str

class DetectionResult(BaseModel):
    score: int = Field(..., ge=0, le=100)
    model: DetectionModel
    verdict: str
    message: str
    pattern_matches: Optional[int] = None

class GenerateContentResponse(BaseModel):
    content: str
    draft: str
    sections: List[DocumentSectionModel]
    topics: List[str]
    key_sentences: List[str]
    humanized: bool
    seed: Optional[int] = None
    detection: DetectionResult
    character_count: int
    word_count: int
    export_filename: str
    processing_time: float

class HumanizeRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Text to humanize")
    creativity: float = Field(default=0.7, ge=0.0, le=1.0)
    seed: Optional[int] = Field(default=None, ge=0)

    @field_validator('text')
    @classmethod
    def text_must_not_be_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Text cannot be empty')
        return v

class VersionComparison(BaseModel):
    original_score: int
    humanized_score: int
    improvement: int
    original_matches: int
    humanized_matches: int

class HumanizeResponse(BaseModel):
    original_text: str
    humanized_text: str
    creativity: float
    seed: int
    word_count_original: int
    word_count_processed: int
    comparison: VersionComparison

class DetectionRequest(BaseModel):
    content: str = Field(..., description="Text to score")

class ExportRequest(BaseModel):
    content: str
    document_name: Optional[str] = None

class TextProcessingResponse(BaseModel):
    task_id: str
    status: TaskStatus
    message: str
    estimated_completion: Optional[datetime] = None

class TaskStatusResponse(BaseModel):
    task_id: str
    status: TaskStatus
    progress: Optional[int] = Field(default=0, ge=0, le=100)
    result: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    estimated_completion: Optional[datetime] = None

class ProcessedContentResult(BaseModel):
    original_text: str
    processed_text: str
    topics: List[str]
    humanized: bool
    seed: Optional[int] = None
    detection_score: int
    word_count_original: int
    word_count_processed: int
    processing_time: float
