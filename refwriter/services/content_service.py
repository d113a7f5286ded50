import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Any, Optional

from refwriter.core.config import settings
from refwriter.core.errors import ContentError, InvalidInputError, ProcessingError
from refwriter.core.random_source import RandomSource, SeededRandomSource
from refwriter.schemas.text_schemas import GenerationConfig
from refwriter.utils.analyzer import DocumentAnalyzer, GeneratedDocument
from refwriter.utils.humanizer import (
    DetectabilityEstimator,
    DetectionEstimate,
    Humanizer,
    describe_score,
)

logger = logging.getLogger(__name__)


@dataclass
class HumanizeOutcome:
    text: str
    seed: int
    modifications_applied: int


@dataclass
class PipelineResult:
    document: GeneratedDocument
    content: str
    humanized: bool
    seed: Optional[int]
    detection: DetectionEstimate
    processing_time: float


def count_words(text: str) -> int:
    """
    Conta il numero di parole nel testo
    """
    if not text or not text.strip():
        return 0
    return len(text.split())


class ContentService:
    def __init__(
        self,
        analyzer: Optional[DocumentAnalyzer] = None,
        estimator: Optional[DetectabilityEstimator] = None
    ):
        self.analyzer = analyzer or DocumentAnalyzer()
        self.estimator = estimator or DetectabilityEstimator()
        logger.debug("ContentService initialized")

    # ================================
    # VALIDAZIONE INPUT
    # ================================

    def validate_reference_text(self, document_content: str):
        if not document_content or not document_content.strip():
            raise InvalidInputError(
                "Please upload a document or add text reference first to generate content",
                code="NO_SOURCE_DOCUMENT"
            )
        if len(document_content) > settings.MAX_REFERENCE_LENGTH:
            raise InvalidInputError(
                "Reference text exceeds maximum character length",
                code="TEXT_TOO_LONG",
                details={
                    "max_length": settings.MAX_REFERENCE_LENGTH,
                    "current_length": len(document_content)
                }
            )

    def validate_detection_content(self, content: str):
        if not content or len(content) < settings.MIN_DETECTION_LENGTH:
            raise InvalidInputError(
                "Please generate more content first to analyze",
                code="INSUFFICIENT_CONTENT",
                details={
                    "min_length": settings.MIN_DETECTION_LENGTH,
                    "current_length": len(content or "")
                }
            )

    # ================================
    # GENERAZIONE
    # ================================

    async def generate_content_from_document(
        self,
        document_content: str,
        config: Optional[GenerationConfig] = None,
        delay: Optional[float] = None
    ) -> GeneratedDocument:
        """Analizza il testo di riferimento e assembla il documento, con latenza simulata"""
        config = config or GenerationConfig()
        logger.info(
            "Generating content: %d chars, tone=%s, creativity=%.2f",
            len(document_content), config.tone.value, config.creativity
        )
        try:
            document = await self.analyzer.analyze(document_content, config, delay=delay)
        except ContentError:
            raise
        except Exception as e:
            logger.exception("Unexpected error during document analysis: %s", e)
            raise ProcessingError(f"Document analysis failed: {e}")

        logger.info("Content generated: %d sections, topics=%s", len(document.sections), document.topics)
        return document

    def humanize(
        self,
        text: str,
        creativity: Optional[float] = None,
        seed: Optional[int] = None,
        random_source: Optional[RandomSource] = None
    ) -> HumanizeOutcome:
        if creativity is None:
            creativity = settings.DEFAULT_CREATIVITY
        source = random_source or SeededRandomSource(seed)
        recorded_seed = getattr(source, "seed", seed)

        try:
            humanizer = Humanizer(random_source=source)
            humanized = humanizer.humanize(text, creativity)
        except Exception as e:
            logger.exception("Unexpected error during humanization: %s", e)
            raise ProcessingError(f"Humanization failed: {e}")

        logger.info(
            "Humanized text: %d -> %d chars, %d modifications (seed=%s)",
            len(text), len(humanized), humanizer.modifications_applied, recorded_seed
        )
        return HumanizeOutcome(
            text=humanized,
            seed=recorded_seed,
            modifications_applied=humanizer.modifications_applied
        )

    # ================================
    # DETECTION
    # ================================

    def estimate_detection(self, text: str) -> DetectionEstimate:
        """Modello euristico, punteggio in [10, 50]"""
        return self.estimator.estimate(text)

    async def check_ai_detection(
        self,
        content: str,
        random_source: Optional[RandomSource] = None,
        delay: Optional[float] = None
    ) -> int:
        """Modello simulato, punteggio casuale in [5, 18] indipendente dal testo"""
        self.validate_detection_content(content)
        if delay is None:
            delay = settings.DETECTION_DELAY_SECONDS
        if delay > 0:
            await asyncio.sleep(delay)

        score = self.estimator.simulate_score(random_source or SeededRandomSource())
        verdict, _ = describe_score(score)
        logger.info("Simulated AI detection score: %d%% (%s)", score, verdict)
        return score

    # ================================
    # PIPELINE
    # ================================

    async def run_pipeline(
        self,
        document_content: str,
        config: Optional[GenerationConfig] = None,
        humanize: bool = False,
        seed: Optional[int] = None,
        random_source: Optional[RandomSource] = None,
        delay: Optional[float] = None
    ) -> PipelineResult:
        """Analyzer -> Humanizer (opzionale) -> Estimator"""
        config = config or GenerationConfig()
        self.validate_reference_text(document_content)
        start_time = time.time()

        document = await self.generate_content_from_document(document_content, config, delay=delay)
        content = document.content
        used_seed = None

        if humanize:
            outcome = self.humanize(content, config.creativity, seed=seed, random_source=random_source)
            content = outcome.text
            used_seed = outcome.seed

        detection = self.estimate_detection(content)
        processing_time = round(time.time() - start_time, 3)

        logger.info(
            "✅ Pipeline completed in %.3fs - humanized=%s, score=%d%%",
            processing_time, humanize, detection.score
        )
        return PipelineResult(
            document=document,
            content=content,
            humanized=humanize,
            seed=used_seed,
            detection=detection,
            processing_time=processing_time
        )

    def get_text_analysis(self, text: str) -> Dict[str, Any]:
        word_count = count_words(text)
        return {
            "word_count": word_count,
            "character_count": len(text),
            "sentence_count": len([s for s in text.split('.') if s.strip()]),
            "estimated_processing_time": max(2, int(settings.GENERATION_DELAY_SECONDS) + word_count // 1000),
        }


# Global service instance
content_service = ContentService()
