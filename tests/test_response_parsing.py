"""Tests for model response parsing."""
import pytest

from zchat.ai.errors import GenerationError
from zchat.ai.parser import parse_command_from_response


@pytest.mark.parametrize("response", [
    "ls -la",
    "  \n  ls -la  \n  ",
    "```bash\nls -la\n```",
    "```\nls -la\n```",
    "`ls -la`",
])
def test_extracts_command(response):
    assert parse_command_from_response(response) == "ls -la"


def test_multiline_code_block():
    response = "```\nfind . -name '*.py' | \\\n  xargs wc -l\n```"
    assert parse_command_from_response(response) == "find . -name '*.py' | \\\n  xargs wc -l"


def test_short_fence_is_only_stripped_of_backticks():
    assert parse_command_from_response("```ls```") == "ls"


@pytest.mark.parametrize("response", ["", "   \n\n   ", "``````", "```\n```"])
def test_empty_response(response):
    with pytest.raises(GenerationError):
        parse_command_from_response(response)
