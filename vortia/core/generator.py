"""Social content generation: topic -> title, script, caption, hashtags, CTA, hook.

Unlike publishing there is no simulated fallback: a missing LLM key aborts
the request.
"""

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from vortia.config import Settings
from vortia.prompts import content as content_prompt
from vortia.services.errors import UpstreamError
from vortia.services.llm_service import call_llm

logger = logging.getLogger(__name__)

DEFAULT_AUDIENCE = "empresa"
DEFAULT_REGION = "MIXTO"

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass
class GeneratedContent:
    topic: str
    audience_type: str
    region: str
    title: str = ""
    script: str = ""
    caption: str = ""
    hashtags: list[str] = field(default_factory=list)
    cta: str = ""
    hook: str = ""
    generated_at: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


def parse_content_json(text: str) -> dict:
    """Parse the model's JSON object, tolerating a fenced code block."""
    cleaned = text.strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise UpstreamError(f"Content generator returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise UpstreamError("Content generator returned JSON that is not an object")
    return data


def _normalize_hashtags(value) -> list[str]:
    if isinstance(value, str):
        value = value.replace(",", " ").split()
    if not isinstance(value, list):
        return []
    return [str(tag).strip() for tag in value if str(tag).strip()]


def generate_content(
    topic: str,
    settings: Settings,
    audience_type: str | None = None,
    region: str | None = None,
) -> GeneratedContent:
    """Generate social content for a topic.

    Raises:
        ValueError: Empty topic.
        ConfigurationError: No LLM key configured.
        UpstreamError: Provider failure or unparseable output.
    """
    if not isinstance(topic, str) or not topic.strip():
        raise ValueError("Topic is required")
    audience_type = audience_type or DEFAULT_AUDIENCE
    region = region or DEFAULT_REGION

    response = call_llm(
        content_prompt.build_system_prompt(audience_type, region),
        content_prompt.build_user_prompt(topic),
        settings,
        temperature=settings.content_temperature,
        json_output=True,
    )
    data = parse_content_json(response.text)

    result = GeneratedContent(
        topic=topic,
        audience_type=audience_type,
        region=region,
        title=str(data.get("title", "")),
        script=str(data.get("script", "")),
        caption=str(data.get("caption", "")),
        hashtags=_normalize_hashtags(data.get("hashtags")),
        cta=str(data.get("cta", "")),
        hook=str(data.get("hook", "")),
        generated_at=datetime.now(UTC).isoformat(),
    )
    logger.info(
        "Generated content for '%s' (%s/%s): %d hashtags, $%.4f",
        topic[:60],
        audience_type,
        region,
        len(result.hashtags),
        response.cost_usd,
    )
    return result
