# zchat/ai/parser.py
from zchat.ai.errors import GenerationError
from zchat.utils.logging import get_logger

logger = get_logger(__name__)

CODE_FENCE = "```"


def parse_command_from_response(response_text: str) -> str:
    """
    Extract the command from a model response.

    Strips surrounding whitespace, a surrounding markdown code block (with or
    without a language tag) and stray backticks. Multi-line commands are kept
    intact.

    Raises:
        GenerationError: If nothing is left after cleaning.
    """
    text = response_text.strip()

    if text.startswith(CODE_FENCE):
        lines = text.split("\n")
        if len(lines) > 2:
            # Drop the opening fence (```bash) and the closing fence
            text = "\n".join(lines[1:-1]).strip()

    text = text.strip("`").strip()

    if not text:
        logger.error("Model returned an empty command")
        raise GenerationError("received empty response from model")

    logger.debug(f"Parsed command: {text}")
    return text
