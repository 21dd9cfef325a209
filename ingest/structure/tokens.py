import math

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Approximate LLM token count for a piece of text."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)
