from pathlib import Path

from ingest.extraction.exceptions import ExtractionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the extraction prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled extraction_prompt.txt.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "extraction_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load prompt template: {exc}") from exc


def load_system_prompt(path: Path | None = None) -> str:
    """Load the system prompt sent with every extraction call.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "system_prompt.txt"
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ExtractionError(f"Failed to load system prompt: {exc}") from exc
