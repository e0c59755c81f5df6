# zchat/ai/prompts.py
"""
Prompt building for zchat.

The model is asked for exactly one command and nothing else; the parser in
``zchat.ai.parser`` cleans up what it returns anyway.
"""
from zchat.context.collector import SystemContext

SYSTEM_INSTRUCTIONS = """You are a command-line expert assistant. Generate a single shell command that accomplishes the user's goal.

CRITICAL RULES:
- Output ONLY the command itself, nothing else
- No explanations, no markdown, no code blocks, no backticks
- The command will be executed directly in the shell
- Make sure the command is safe and correct
"""

USER_REQUEST_PREFIX = "User request: "


def build_system_prompt(context: SystemContext) -> str:
    """
    Build the system prompt for a request.

    Args:
        context: The collected system context.

    Returns:
        The instructions followed by a SYSTEM CONTEXT section.
    """
    files = ", ".join(context.files) if context.files else "(none visible)"
    lines = [
        SYSTEM_INSTRUCTIONS,
        "SYSTEM CONTEXT:",
        f"- Operating System: {context.os}",
        f"- Architecture: {context.arch}",
        f"- Shell: {context.shell}",
        f"- Current Directory: {context.working_dir}",
        f"- Available Files: {files}",
        "",
        "Generate the appropriate command for the user's request.",
    ]
    return "\n".join(lines)


def build_full_prompt(query: str, context: SystemContext) -> str:
    """System prompt and user request in one string, for single-prompt backends."""
    return f"{build_system_prompt(context)}\n\n{USER_REQUEST_PREFIX}{query}"
