from typing import List
from pydantic import BaseModel

from refwriter.schemas.text_schemas import GenerationConfig, Tone


class ToneOption(BaseModel):
    id: Tone
    name: str
    description: str


class FormatOption(BaseModel):
    id: str
    label: str
    default: bool


class GenerationDefaults(BaseModel):
    config: GenerationConfig
    format_options: List[FormatOption]
    min_detection_length: int
    min_export_length: int
