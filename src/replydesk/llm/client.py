"""Anthropic client factory and model configuration for reply generation."""

from anthropic import Anthropic

# Sonnet for nuanced multi-option drafting
COMPOSE_MODEL = "claude-sonnet-4-5-20250929"

DEFAULT_MAX_TOKENS = 4096


def get_anthropic_client(api_key: str | None = None) -> Anthropic:
    """Create an Anthropic client.

    When *api_key* is ``None`` the Anthropic() constructor reads
    ANTHROPIC_API_KEY from the environment automatically.

    Returns:
        Configured Anthropic client instance.
    """
    if api_key:
        return Anthropic(api_key=api_key)
    return Anthropic()
