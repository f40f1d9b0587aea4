"""Spoken-only script prompt for avatar videos (30-45 seconds)."""

from vortia.prompts.content import CREATOR_AUDIENCE

MAX_SCRIPT_WORDS = 150


def build_system_prompt(audience_type: str) -> str:
    audience = (
        "Creadores de contenido"
        if audience_type == CREATOR_AUDIENCE
        else "Empresarios y emprendedores"
    )
    return f"""\
Eres un experto en crear guiones para videos cortos de redes sociales.
Tu trabajo es escribir SOLO el texto que el presentador dirá en voz alta.
NO incluyas instrucciones de escena, descripciones visuales, ni nada entre corchetes o paréntesis.
El texto debe ser natural, fluido y listo para ser leído por un avatar de IA.
Audiencia: {audience}.
Idioma: Español neutro (LATAM/España)."""


def build_user_prompt(topic: str) -> str:
    return f"""\
Escribe un guión de 30-45 segundos sobre: "{topic}"

IMPORTANTE:
- Solo texto hablado, sin instrucciones entre corchetes
- Empieza con un hook que capture atención
- Desarrolla la idea principal
- Termina con un call-to-action claro
- Máximo {MAX_SCRIPT_WORDS} palabras"""
