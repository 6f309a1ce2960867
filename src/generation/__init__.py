"""Content generation backend used by the refinement engine."""

from .generator import (
    ContentGenerator,
    GenerationConfig,
    GenerationOptions,
    GenerationResponse,
)
from .templates import (
    CONTENT_TEMPLATES,
    LENGTH_GUIDANCE,
    TONE_GUIDANCE,
    ContentTemplate,
    build_generation_prompt,
    get_content_template,
    get_length_guidance,
    get_tone_guidance,
)

__all__ = [
    # Generator
    "ContentGenerator",
    "GenerationConfig",
    "GenerationOptions",
    "GenerationResponse",
    # Templates
    "ContentTemplate",
    "CONTENT_TEMPLATES",
    "TONE_GUIDANCE",
    "LENGTH_GUIDANCE",
    "build_generation_prompt",
    "get_content_template",
    "get_tone_guidance",
    "get_length_guidance",
]
