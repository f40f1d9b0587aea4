"""LLM API service wrapper with OpenAI + Anthropic support."""

import logging
from dataclasses import dataclass

from vortia.services.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

# OpenAI GPT-4o pricing (per million tokens)
GPT4O_INPUT_PRICE_PER_M = 2.50
GPT4O_OUTPUT_PRICE_PER_M = 10.0

# Claude Sonnet 4 pricing (per million tokens)
SONNET_INPUT_PRICE_PER_M = 3.0
SONNET_OUTPUT_PRICE_PER_M = 15.0


@dataclass
class LLMResponse:
    """Parsed response from an LLM API call."""

    text: str
    input_tokens: int
    output_tokens: int
    cost_usd: float
    model: str
    provider: str


def calculate_cost(
    input_tokens: int,
    output_tokens: int,
    provider: str = "openai",
) -> float:
    """Calculate estimated cost in USD for an LLM API call."""
    if provider == "anthropic":
        input_cost = (input_tokens / 1_000_000) * SONNET_INPUT_PRICE_PER_M
        output_cost = (output_tokens / 1_000_000) * SONNET_OUTPUT_PRICE_PER_M
    else:
        input_cost = (input_tokens / 1_000_000) * GPT4O_INPUT_PRICE_PER_M
        output_cost = (output_tokens / 1_000_000) * GPT4O_OUTPUT_PRICE_PER_M
    return round(input_cost + output_cost, 6)


def resolve_provider(settings) -> str:
    """Determine which LLM provider to use.

    Priority: ``settings.llm_provider``, falling back to the other provider
    when the preferred key is missing and the other one is present.

    Raises:
        ConfigurationError: If no key is configured for any provider.
    """
    provider = settings.llm_provider
    keys = {
        "openai": settings.openai_api_key,
        "anthropic": settings.anthropic_api_key,
    }
    if provider not in keys:
        raise ConfigurationError(f"Unknown LLM provider: {provider}")
    if keys[provider]:
        return provider

    other = "anthropic" if provider == "openai" else "openai"
    if keys[other]:
        logger.warning("No %s API key set, falling back to %s", provider, other)
        return other
    raise ConfigurationError(
        "OpenAI API key not configured" if provider == "openai"
        else "Anthropic API key not configured"
    )


def call_llm(
    system_prompt: str,
    user_message: str,
    settings,
    temperature: float | None = None,
    json_output: bool = False,
    max_tokens: int | None = None,
) -> LLMResponse:
    """Call the configured LLM provider.

    Args:
        system_prompt: System-level instructions.
        user_message: User message content.
        settings: Application settings.
        temperature: Override for this call (defaults to content temperature).
        json_output: Ask the provider for a JSON object (OpenAI only; the
            prompt must request JSON for Anthropic).
        max_tokens: Override ``settings.llm_max_tokens`` for this call.

    Returns:
        LLMResponse with text, token counts, and cost.

    Raises:
        ConfigurationError: No API key for any provider.
        UpstreamError: The provider call failed.
    """
    provider = resolve_provider(settings)
    effective_temperature = (
        temperature if temperature is not None else settings.content_temperature
    )

    if provider == "anthropic":
        return _call_anthropic(
            system_prompt, user_message, settings, effective_temperature, max_tokens
        )
    return _call_openai(
        system_prompt, user_message, settings, effective_temperature, json_output, max_tokens
    )


def _call_openai(
    system_prompt: str,
    user_message: str,
    settings,
    temperature: float,
    json_output: bool,
    max_tokens: int | None = None,
) -> LLMResponse:
    """Call OpenAI Chat Completions API."""
    from openai import OpenAI, OpenAIError

    model = settings.openai_llm_model
    client = OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.request_timeout_seconds,
        max_retries=0,
    )

    kwargs = {}
    if json_output:
        kwargs["response_format"] = {"type": "json_object"}

    try:
        response = client.chat.completions.create(
            model=model,
            max_tokens=max_tokens or settings.llm_max_tokens,
            temperature=temperature,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            **kwargs,
        )
    except OpenAIError as exc:
        raise UpstreamError(f"OpenAI request failed: {exc}") from exc

    text = response.choices[0].message.content or ""
    input_tokens = response.usage.prompt_tokens
    output_tokens = response.usage.completion_tokens
    cost = calculate_cost(input_tokens, output_tokens, provider="openai")

    logger.info(
        "OpenAI call: %d in / %d out tokens, $%.4f (%s)",
        input_tokens,
        output_tokens,
        cost,
        model,
    )

    return LLMResponse(
        text=text,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cost_usd=cost,
        model=model,
        provider="openai",
    )


def _call_anthropic(
    system_prompt: str,
    user_message: str,
    settings,
    temperature: float,
    max_tokens: int | None = None,
) -> LLMResponse:
    """Call Anthropic Claude Messages API."""
    from anthropic import Anthropic, AnthropicError

    client = Anthropic(
        api_key=settings.anthropic_api_key,
        timeout=settings.request_timeout_seconds,
        max_retries=0,
    )

    try:
        response = client.messages.create(
            model=settings.claude_model,
            max_tokens=max_tokens or settings.llm_max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_message}],
        )
    except AnthropicError as exc:
        raise UpstreamError(f"Anthropic request failed: {exc}") from exc

    text = ""
    for block in response.content:
        if block.type == "text":
            text += block.text

    input_tokens = response.usage.input_tokens
    output_tokens = response.usage.output_tokens
    cost = calculate_cost(input_tokens, output_tokens, provider="anthropic")

    logger.info(
        "Anthropic call: %d in / %d out tokens, $%.4f (%s)",
        input_tokens,
        output_tokens,
        cost,
        settings.claude_model,
    )

    return LLMResponse(
        text=text,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cost_usd=cost,
        model=settings.claude_model,
        provider="anthropic",
    )
