"""Social content prompt template: title, script, caption, hashtags, CTA, hook."""

CREATOR_AUDIENCE = "creador"


def build_system_prompt(audience_type: str, region: str) -> str:
    """Build the system prompt for social content generation.

    Args:
        audience_type: ``creador`` targets content creators; anything else
            targets companies and founders.
        region: Target region label, e.g. ``LATAM``, ``España`` or ``MIXTO``.
    """
    if audience_type == CREATOR_AUDIENCE:
        audience = "Creadores de contenido, YouTubers, TikTokers"
    else:
        audience = "Empresas, CEOs, Fundadores de agencias"

    return f"""\
Eres un experto en marketing de contenidos y copywriting para redes sociales.
Tu audiencia objetivo es: {audience}.
Región: {region}.
Genera contenido en español, con tono profesional pero cercano."""


def build_user_prompt(topic: str) -> str:
    return f"""\
Genera contenido para el siguiente tema: "{topic}"

Devuelve un JSON con esta estructura exacta:
{{
  "title": "Título atractivo (máx 60 caracteres)",
  "script": "Guión para video de 30-60 segundos. Incluye HOOK inicial, desarrollo y CTA final.",
  "caption": "Caption para redes sociales (máx 200 caracteres)",
  "hashtags": ["hashtag1", "hashtag2", "hashtag3", "hashtag4", "hashtag5"],
  "cta": "Llamada a la acción específica",
  "hook": "Frase de apertura impactante"
}}"""
