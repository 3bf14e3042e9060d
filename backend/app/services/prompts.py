"""Prompt templates for every brand generation stage.

Pure string construction: `build_prompt(stage, inputs)` picks the
template for a PromptStage and fills it from PromptInputs. Text stages
ask the completion model for a bare JSON object of a stage-specific
shape; image stages produce the final prompt sent to image generation.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from app.models.brand_brain import COLOR_PALETTE_KEYS
from app.services.archetypes import ArchetypeRecord, archetype_key

HERO_IMAGE_SIZE = "1792x1024"
LOGO_IMAGE_SIZE = "1024x1024"
MOCKUP_IMAGE_SIZE = "1024x1024"

JSON_ONLY_INSTRUCTION = (
    "Return ONLY the JSON object with no markdown formatting, "
    "no code fences and no additional text."
)

ORIGINALITY_NOTES = """IMPORTANT NOTES:
- The design must be completely original
- Do not reproduce any copyrighted or trademarked elements
- Do not copy or imitate any referenced images, artworks or existing designs
- Create something distinctive and ownable"""

# Thematic setting per archetype key, blended into hero image prompts
STYLE_METAPHORS: dict[str, str] = {
    "creator": "artisan's workshop, creative sanctuary",
    "magician": "mystical laboratory, enchanted space",
    "sage": "timeless library, wisdom temple",
    "rebel": "urban underground, raw energy space",
    "architect": "geometric sanctuary, structured harmony",
}


class PromptStage(str, Enum):
    """Generation stages, each with its own template."""

    IDENTITY = "identity"
    ARCHETYPE_MATCH = "archetype_match"
    ARCHETYPE_IDENTITY = "archetype_identity"
    BRAND_NAME = "brand_name"
    HERO_IMAGE = "hero_image"
    LOGO = "logo"
    MOCKUP = "mockup"


@dataclass
class PromptInputs:
    """Values a template may draw from. Each stage uses a subset."""

    description: str | None = None
    brand_name: str | None = None
    brand_type: str | None = None
    available_archetypes: list[str] = field(default_factory=list)
    primary_archetype: str | None = None
    secondary_archetype: str | None = None
    primary_record: ArchetypeRecord | None = None
    secondary_record: ArchetypeRecord | None = None
    color_palette: dict[str, Any] = field(default_factory=dict)
    logo_direction: Any = None
    photo_transform: Any = None
    mockup_type: str | None = None


IDENTITY_SHAPE = """{
  "brand_story": "In the heart of digital innovation, a vision emerged...",
  "tagline": "Transform Thoughts into Reality",
  "tone": "confident, warm, and intellectually playful",
  "voice_traits": ["insightful", "clear", "engaging", "authentic"],
  "primary_archetype": "The Creator",
  "secondary_archetype": "The Sage",
  "color_palette": {
    "primary": "#2A2A8C",
    "secondary": "#F5F5F5",
    "accent": "#FFB800",
    "neutral": "#EFEFEF"
  },
  "font_suggestions": {
    "headings": "Canela",
    "body": "Neue Montreal"
  },
  "logo_direction": {
    "style": "minimal and geometric",
    "elements": ["abstract neural paths", "interconnected nodes", "flowing lines"],
    "concepts": ["connectivity", "transformation", "clarity"]
  },
  "layout_style": {
    "grid": "modular 12-column system",
    "spacing": "generous whitespace with golden ratio",
    "hierarchy": "clear visual weight progression"
  },
  "photo_transform": {
    "style": "high contrast duotone",
    "filters": ["grain overlay", "subtle vignette", "matte finish"],
    "mood": "contemplative and forward-thinking"
  }
}"""

MOCKUP_SCENES: dict[str, str] = {
    "billboard": """Create a photorealistic mockup of a large outdoor billboard for "{brand_name}".
- Show the billboard in a contemporary urban setting at golden hour
- Modern architecture in the background with subtle atmospheric light
- The logo is integrated with care, never simply pasted on
- Use {primary} as the dominant architectural element
- Make it feel like a real location, not a template""",
    "storefront": """Create a photorealistic mockup of the entrance to a "{brand_name}" location.
- A modern, minimalist storefront that fits the brand's aesthetic
- The logo is part of the facade architecture
- Use {primary} and {accent} in the structural elements
- Glass reflections and soft environmental lighting add depth
- Blurred pedestrians or street activity keep the scene alive""",
    "product": """Create a photorealistic product mockup for "{brand_name}" that makes sense for a {brand_type}.
- An elegant, minimal product presentation
- Materials and finishes that reflect premium positioning
- The logo sits subtly and naturally on the product
- Soft natural lighting with delicate shadows
- It should read as a professional product photo shoot""",
    "stationery": """Create a photorealistic mockup of premium business stationery for "{brand_name}".
- Business cards, letterhead and envelopes in an editorial flat-lay
- Use {primary} and {accent} thoughtfully across the materials
- Natural shadows and visible paper texture
- Premium print finishes such as foil, letterpress or emboss
- A few small styling props, never overwhelming""",
    "environment": """Create a photorealistic environmental mockup showing "{brand_name}" in context.
- A space that naturally fits a {brand_type} brand
- Brand colors ({primary}, {accent}) carried by the architecture
- Thoughtful lighting and a lived-in, premium atmosphere
- Brand presence that feels organic, not forced""",
}


def _require(inputs: PromptInputs, stage: PromptStage, *names: str) -> None:
    missing = [name for name in names if not getattr(inputs, name)]
    if missing:
        raise ValueError(f"{stage.value} prompt requires: {', '.join(missing)}")


def _describe(value: Any) -> str:
    """Render a structured-or-text field (logo_direction, photo_transform) as prose."""
    if value is None:
        return ""
    if isinstance(value, dict):
        parts = []
        for key, item in value.items():
            if isinstance(item, list):
                item = ", ".join(str(v) for v in item)
            parts.append(f"{key}: {item}")
        return "; ".join(parts)
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def style_metaphor(archetype: str, fallback_suffix: str) -> str:
    """Thematic phrase for an archetype.

    Unknown archetypes fall back to the name as given, lowercased, plus the
    suffix ("The Jester" -> "the jester realm").
    """
    return STYLE_METAPHORS.get(
        archetype_key(archetype), f"{archetype.strip().lower()} {fallback_suffix}"
    )


def palette_colors(color_palette: dict[str, Any]) -> str:
    """Comma-joined palette colors in primary/secondary/accent/neutral order."""
    colors = [str(color_palette[k]) for k in COLOR_PALETTE_KEYS if color_palette.get(k)]
    return ", ".join(colors) or "harmonious colors"


def logo_icon_color(color_palette: dict[str, Any]) -> str:
    """White icon, unless the background is white-ish (then accent or black)."""
    background = str(color_palette.get("primary") or "")
    if background.lower().startswith("#fff"):
        return str(color_palette.get("accent") or "#000000")
    return "#FFFFFF"


def design_language(
    primary: ArchetypeRecord | None, secondary: ArchetypeRecord | None
) -> str:
    """Composition guidance drawn from the two archetype records."""
    records = [r for r in (primary, secondary) if r is not None]
    layout = [p for r in records for p in r.layout_preferences][:2]
    materials = [t for r in records for t in r.moodboard_tags][:3]
    treatment = [t for r in records for t in r.photo_transforms][:1]
    if not (layout or materials or treatment):
        return ""

    return "\n".join(
        [
            "COMPOSITION GUIDANCE:",
            f"- Layout preference: {', '.join(layout) or 'balanced and intentional'}",
            f"- Materials to feature: {', '.join(materials) or 'honest, tactile materials'}",
            f"- Visual treatment: {', '.join(treatment) or 'clean and natural'}",
            "- Ensure hierarchy through spatial tension and contrast",
        ]
    )


def _archetype_profile(record: ArchetypeRecord) -> str:
    colors = ", ".join(f"{c.hex} ({c.label})" for c in record.color_bias)
    return "\n".join(
        [
            f"{record.name}:",
            f"- Tone: {record.tone_flavor}",
            f"- Voice traits: {', '.join(record.voice_traits)}",
            f"- Color bias: {colors}",
            f"- Font tendencies: {', '.join(record.font_tendencies)}",
        ]
    )


def _identity_prompt(inputs: PromptInputs) -> str:
    _require(inputs, PromptStage.IDENTITY, "description")
    return f"""Analyze this brand description and generate a comprehensive brand identity.
Use this exact structure with creative values (example values shown):

{IDENTITY_SHAPE}

The color_palette must contain exactly the keys primary, secondary, accent and neutral,
each a hex color. font_suggestions must contain the keys headings and body.

Brand description to analyze: {inputs.description}

{JSON_ONLY_INSTRUCTION}"""


def _archetype_match_prompt(inputs: PromptInputs) -> str:
    _require(inputs, PromptStage.ARCHETYPE_MATCH, "description", "available_archetypes")
    options = "\n".join(f"- {name}" for name in inputs.available_archetypes)
    return f"""Choose the two brand archetypes that best fit this brand description.

Available archetypes:
{options}

Brand description: {inputs.description}

Respond with this exact structure:
{{"primary": "<archetype>", "secondary": "<archetype>"}}

Use the archetype names exactly as written in the list above. The primary and
secondary archetypes must be different.

{JSON_ONLY_INSTRUCTION}"""


def _archetype_identity_prompt(inputs: PromptInputs) -> str:
    _require(inputs, PromptStage.ARCHETYPE_IDENTITY, "description")
    primary = inputs.primary_record
    secondary = inputs.secondary_record
    if primary is None or secondary is None:
        raise ValueError("archetype_identity prompt requires both archetype records")
    return f"""Generate a comprehensive brand identity for the brand described below.
Its primary archetype is {primary.name} and its secondary archetype is {secondary.name}.
Let the primary archetype lead and the secondary archetype season it.

ARCHETYPE PROFILES:
{_archetype_profile(primary)}

{_archetype_profile(secondary)}

Draw the palette, fonts and voice from these profiles without copying them outright.
Set "primary_archetype" to "{primary.name}" and "secondary_archetype" to "{secondary.name}".

Use this exact structure with creative values (example values shown):

{IDENTITY_SHAPE}

The color_palette must contain exactly the keys primary, secondary, accent and neutral,
each a hex color. font_suggestions must contain the keys headings and body.

Brand description: {inputs.description}

{JSON_ONLY_INSTRUCTION}"""


def _brand_name_prompt(inputs: PromptInputs) -> str:
    _require(inputs, PromptStage.BRAND_NAME, "description")
    return f"""Suggest a short, memorable, original brand name for this brand description.
If the description already names the brand, use that name.

Brand description: {inputs.description}

Respond with this exact structure:
{{"brand_name": "<name>"}}

{JSON_ONLY_INSTRUCTION}"""


def _hero_image_prompt(inputs: PromptInputs) -> str:
    _require(
        inputs,
        PromptStage.HERO_IMAGE,
        "primary_archetype",
        "secondary_archetype",
    )
    primary_metaphor = style_metaphor(inputs.primary_archetype or "", "space")
    secondary_metaphor = style_metaphor(inputs.secondary_archetype or "", "realm")
    guidance = design_language(inputs.primary_record, inputs.secondary_record)
    photo = _describe(inputs.photo_transform)

    sections = [
        """MOST IMPORTANT:
- Create a COMPLETELY ORIGINAL hero image
- Do NOT reference or copy any existing designs
- Focus on creating a unique, ownable visual world""",
        f"""CREATIVE DIRECTION:
- Blend the essence of {primary_metaphor} with subtle hints of {secondary_metaphor}
- Create an abstract, conceptual environment that feels both familiar and extraordinary
- Use {palette_colors(inputs.color_palette)} as your primary palette
- Keep the composition clean and intentional"""
        + (f"\n- Photographic treatment: {photo}" if photo else ""),
    ]
    if guidance:
        sections.append(guidance)
    sections.append(
        f"""TECHNICAL REQUIREMENTS:
- Output as a {HERO_IMAGE_SIZE} hero image
- Ensure the design works edge-to-edge
- Create clear focal points that draw the eye
- Leave space for text overlay"""
    )
    sections.append(ORIGINALITY_NOTES)
    return "\n\n".join(sections)


def _logo_prompt(inputs: PromptInputs) -> str:
    _require(inputs, PromptStage.LOGO, "brand_name", "color_palette")
    background = inputs.color_palette.get("primary") or "#000000"
    icon = logo_icon_color(inputs.color_palette)
    direction = _describe(inputs.logo_direction) or "clean and confident"

    references = [
        ref
        for record in (inputs.primary_record, inputs.secondary_record)
        if record is not None
        for ref in record.visual_references
    ]
    mood = (
        f"\n- Take loose mood cues from the world of: {', '.join(references[:4])}"
        if references
        else ""
    )

    return f"""Design a single brand icon for "{inputs.brand_name}".

MOST IMPORTANT - BACKGROUND:
- The entire canvas MUST be filled with a solid {background} color
- NO textures, NO gradients, NO patterns

STYLE:
- Flat, modern, minimal and iconic
- Create something original that captures the essence and feeling
- Focus on the brand's core personality: {direction}{mood}

COLOR:
- Background: solid {background}, filling the full square canvas
- Icon: solid {icon}

COMPOSITION:
- Single icon centered in frame with generous padding
- Bold and clear at small sizes
- No text, no letters, just a symbol

TECHNICAL:
- Output as a {LOGO_IMAGE_SIZE} square
- Flat 2D design only: no 3D effects, shadows, gradients or textures
- Just two solid colors: background and icon

{ORIGINALITY_NOTES}"""


def _mockup_prompt(inputs: PromptInputs) -> str:
    _require(inputs, PromptStage.MOCKUP, "brand_name", "mockup_type")
    if inputs.mockup_type not in MOCKUP_SCENES:
        raise ValueError(f"Unknown mockup type: {inputs.mockup_type}")

    palette = inputs.color_palette
    scene = MOCKUP_SCENES[inputs.mockup_type].format(
        brand_name=inputs.brand_name,
        brand_type=inputs.brand_type or "modern brand",
        primary=palette.get("primary") or "the primary brand color",
        accent=palette.get("accent") or "the accent color",
    )

    return f"""IMPORTANT - Create a photorealistic mockup:
- This should look like a professional photograph
- Focus on lighting, shadows and reflections
- Use high-quality materials and textures
- Avoid template-like or generic presentations

{scene}

{ORIGINALITY_NOTES}

Remember: This must be PHOTOREALISTIC, like a high-end commercial photograph."""


_TEMPLATES: dict[PromptStage, Callable[[PromptInputs], str]] = {
    PromptStage.IDENTITY: _identity_prompt,
    PromptStage.ARCHETYPE_MATCH: _archetype_match_prompt,
    PromptStage.ARCHETYPE_IDENTITY: _archetype_identity_prompt,
    PromptStage.BRAND_NAME: _brand_name_prompt,
    PromptStage.HERO_IMAGE: _hero_image_prompt,
    PromptStage.LOGO: _logo_prompt,
    PromptStage.MOCKUP: _mockup_prompt,
}


def build_prompt(stage: PromptStage, inputs: PromptInputs) -> str:
    """Build the prompt text for a stage.

    Raises:
        ValueError: If inputs the stage needs are missing
    """
    return _TEMPLATES[stage](inputs).strip()


def user_messages(prompt: str) -> list[dict[str, str]]:
    """Wrap a prompt as a single-message chat conversation."""
    return [{"role": "user", "content": prompt}]
