"""Text helpers for model output"""


def strip_code_fences(text: str) -> str:
    """Remove a ```json / ``` markdown wrapper around model output"""
    cleaned = text.strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[len("```"):]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    return cleaned.strip()
