"""Per-content-type prompt templates and tone/length guidance."""

from dataclasses import dataclass, field
from typing import Optional

from src.models.iteration import ContentType


@dataclass
class ContentTemplate:
    """Template for generating one kind of copy."""

    content_type: ContentType
    system_prompt: str
    prompt_template: str
    constraints: list[str] = field(default_factory=list)


# ============================================================================
# Content Templates
# ============================================================================

CONTENT_TEMPLATES: dict[ContentType, ContentTemplate] = {
    ContentType.BLOG: ContentTemplate(
        content_type=ContentType.BLOG,
        system_prompt=(
            "You are an expert blog writer with years of experience creating engaging, "
            "informative content. Your writing style is clear, conversational, and "
            "authoritative. You understand how to structure content for maximum reader "
            "engagement and SEO optimization."
        ),
        prompt_template="""Create a blog post about: {user_brief}

Requirements:
- Write an engaging headline (if appropriate)
- Start with a compelling hook that draws readers in
- Use clear, conversational language that's easy to understand
- Include practical insights and actionable advice
- Structure with logical flow and smooth transitions
- End with a strong conclusion that reinforces key points
{guidance}
Please write the blog post now:""",
        constraints=[
            "Must have clear introduction, body, and conclusion",
            "Use subheadings for better readability",
            "Include practical, actionable advice",
            "Maintain consistent tone throughout",
        ],
    ),

    ContentType.EMAIL: ContentTemplate(
        content_type=ContentType.EMAIL,
        system_prompt=(
            "You are an expert email writer who crafts professional, effective emails "
            "that get results. You understand email etiquette, know how to be concise "
            "while being complete, and can adapt your tone to match the context and "
            "relationship."
        ),
        prompt_template="""Write a professional email about: {user_brief}

Requirements:
- Use appropriate subject line (if needed)
- Get to the point quickly and respectfully
- Use proper email structure and formatting
- Include clear call-to-action when appropriate
- Be concise but complete
{guidance}
Please write the email now:""",
        constraints=[
            "Must be concise and to the point",
            "Include clear subject line when appropriate",
            "Include specific call-to-action if needed",
        ],
    ),

    ContentType.SOCIAL: ContentTemplate(
        content_type=ContentType.SOCIAL,
        system_prompt=(
            "You are an expert social media content creator who knows how to craft "
            "engaging posts that drive interaction. You understand platform-specific "
            "best practices, trending formats, and how to capture attention in crowded "
            "feeds."
        ),
        prompt_template="""Create a social media post about: {user_brief}

Requirements:
- Capture attention with the opening line
- Use engaging, conversational language
- Include relevant hashtags when appropriate
- Encourage interaction and engagement
- Have a clear message or call-to-action
{guidance}
Please create the social media post now:""",
        constraints=[
            "Must be engaging from the first line",
            "Include relevant hashtags",
            "Respect character limits",
        ],
    ),
}


# ============================================================================
# Tone and Length Guidance
# ============================================================================

TONE_GUIDANCE: dict[str, dict[ContentType, str]] = {
    "formal": {
        ContentType.BLOG: "Use professional language, avoid contractions, maintain authoritative voice",
        ContentType.EMAIL: "Use formal business language, proper salutations, respectful tone",
        ContentType.SOCIAL: "Professional but approachable, avoid slang, maintain credibility",
    },
    "casual": {
        ContentType.BLOG: "Use conversational language, contractions welcome, friendly and approachable",
        ContentType.EMAIL: "Friendly but respectful, conversational tone, warm greeting",
        ContentType.SOCIAL: "Relaxed and friendly, use casual language, be personable",
    },
    "professional": {
        ContentType.BLOG: "Expert authority, industry terminology, confident and knowledgeable",
        ContentType.EMAIL: "Business-appropriate, competent tone, clear and direct",
        ContentType.SOCIAL: "Industry expertise, thought leadership, professional insights",
    },
    "friendly": {
        ContentType.BLOG: "Warm and welcoming, personal anecdotes, encouraging tone",
        ContentType.EMAIL: "Warm and personable, show genuine interest, helpful attitude",
        ContentType.SOCIAL: "Approachable and warm, encourage community, be supportive",
    },
}

LENGTH_GUIDANCE: dict[str, dict[ContentType, str]] = {
    "short": {
        ContentType.BLOG: "Keep it concise (300-500 words). Focus on key points, avoid unnecessary details.",
        ContentType.EMAIL: "Brief and to the point (50-100 words). Essential information only.",
        ContentType.SOCIAL: "Short and punchy (50-100 characters). Maximum impact, minimum words.",
    },
    "medium": {
        ContentType.BLOG: "Standard length (800-1200 words). Develop ideas fully with examples.",
        ContentType.EMAIL: "Comprehensive but focused (150-250 words). Include necessary details.",
        ContentType.SOCIAL: "Standard post length (100-200 characters). Good balance of info and engagement.",
    },
    "long": {
        ContentType.BLOG: "In-depth coverage (1500-2500 words). Thorough exploration with examples and analysis.",
        ContentType.EMAIL: "Detailed explanation (300-500 words). Include background and full context.",
        ContentType.SOCIAL: "Extended post (200-300 characters). Tell a story or provide detailed insight.",
    },
}


def get_content_template(content_type: ContentType) -> ContentTemplate:
    """Get the template for a content type."""
    return CONTENT_TEMPLATES[content_type]


def get_tone_guidance(tone: str, content_type: ContentType) -> str:
    """Tone guidance for a content type, with a generic fallback."""
    guidance = TONE_GUIDANCE.get(tone, {}).get(content_type)
    return guidance or f"Write in a {tone} tone appropriate for {content_type.value} content"


def get_length_guidance(length: str, content_type: ContentType) -> str:
    """Length guidance for a content type, with a generic fallback."""
    guidance = LENGTH_GUIDANCE.get(length, {}).get(content_type)
    return guidance or f"Write a {length} {content_type.value} piece"


def build_generation_prompt(
    content_type: ContentType,
    user_brief: str,
    tone: Optional[str] = None,
    length: Optional[str] = None,
    audience: Optional[str] = None,
) -> str:
    """
    Build a first-draft prompt for a brief.

    Args:
        content_type: Kind of copy to write
        user_brief: What the user asked for
        tone: Optional tone name (formal, casual, professional, friendly)
        length: Optional length name (short, medium, long)
        audience: Optional audience description

    Returns:
        The user prompt (the template's system prompt is sent separately)
    """
    template = get_content_template(content_type)

    guidance_lines = []
    if tone:
        guidance_lines.append(f"\nTone: {get_tone_guidance(tone, content_type)}")
    if length:
        guidance_lines.append(f"\nLength: {get_length_guidance(length, content_type)}")
    if audience:
        guidance_lines.append(
            f"\nTarget Audience: Write for {audience}. "
            "Adjust language, examples, and complexity accordingly."
        )
    if template.constraints:
        constraint_lines = "\n".join(f"- {c}" for c in template.constraints)
        guidance_lines.append(f"\nConstraints:\n{constraint_lines}")

    guidance = "\n".join(guidance_lines)
    if guidance:
        guidance += "\n"

    return template.prompt_template.format(user_brief=user_brief, guidance=guidance)
