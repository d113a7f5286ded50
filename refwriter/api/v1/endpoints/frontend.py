from fastapi import APIRouter, Request
import logging
import time
from typing import List

from refwriter.core.config import settings
from refwriter.core.logging import api_logger
from refwriter.schemas.frontend import FormatOption, GenerationDefaults, ToneOption
from refwriter.schemas.text_schemas import GenerationConfig, Tone

router = APIRouter()

logger = logging.getLogger(__name__)

TONES = [
    ToneOption(id=Tone.PROFESSIONAL, name="Professional", description="Clear, polished and businesslike"),
    ToneOption(id=Tone.CONVERSATIONAL, name="Conversational", description="Relaxed, as if talking to the reader"),
    ToneOption(id=Tone.FRIENDLY, name="Friendly", description="Warm and approachable"),
    ToneOption(id=Tone.AUTHORITATIVE, name="Authoritative", description="Confident and expert"),
    ToneOption(id=Tone.TECHNICAL, name="Technical", description="Precise, for a specialist audience"),
]

FORMAT_OPTIONS = [
    ("include_headings", "Include headings"),
    ("include_bullets", "Include bullet points"),
    ("include_faq", "Include FAQ section"),
    ("include_conclusion", "Include conclusion"),
    ("include_cta", "Include call to action"),
]


@router.get("/tones", response_model=List[ToneOption])
async def get_tones(request: Request):
    start_time = time.time()
    await api_logger.log_api_call(
        request=request,
        response_time=(time.time() - start_time) * 1000,
        additional_data={"action": "get_tones", "count": len(TONES)}
    )
    return TONES

@router.get("/defaults", response_model=GenerationDefaults)
async def get_defaults():
    config = GenerationConfig(creativity=settings.DEFAULT_CREATIVITY)
    return GenerationDefaults(
        config=config,
        format_options=[
            FormatOption(id=field, label=label, default=getattr(config, field))
            for field, label in FORMAT_OPTIONS
        ],
        min_detection_length=settings.MIN_DETECTION_LENGTH,
        min_export_length=settings.MIN_EXPORT_LENGTH
    )
