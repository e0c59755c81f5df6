"""
Constants for the zchat application.
"""
from pathlib import Path
import os

# Application information
APP_NAME = "zchat"
APP_VERSION = "0.1.0"
APP_DESCRIPTION = "Natural-language requests translated into confirmed shell commands"

# Paths
CONFIG_DIR = Path(os.path.expanduser("~/.config/zchat"))
CONFIG_FILE = CONFIG_DIR / "config.toml"
LOG_DIR = CONFIG_DIR / "logs"

# Logging
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[name]} | {message}"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "10 days"

# Providers
PROVIDER_OLLAMA = "ollama"
PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_GEMINI = "gemini"
PROVIDERS = (PROVIDER_OLLAMA, PROVIDER_ANTHROPIC, PROVIDER_GEMINI)

DEFAULT_PROVIDER = PROVIDER_OLLAMA
DEFAULT_MODELS = {
    PROVIDER_OLLAMA: "qwen2.5-coder:7b",
    PROVIDER_ANTHROPIC: "claude-3-5-haiku-latest",
    PROVIDER_GEMINI: "gemini-1.5-flash",
}
DEFAULT_OLLAMA_URL = "http://localhost:11434"
MAX_OUTPUT_TOKENS = 1024
MODEL_TEMPERATURE = 0.2
REQUEST_TIMEOUT = 30  # seconds

# Context
DEFAULT_MAX_CONTEXT_LINES = 20
DEFAULT_SHELL = "/bin/sh"

# Safety
DEFAULT_DANGEROUS_PATTERNS = (
    "rm -rf /",
    "rm -rf /*",
    "rm -rf *",        # everything in the current directory
    "rm -rf ~",
    "rm -rf $HOME",
    "> /dev/sda",
    "dd if=",
    "mkfs",
    "format",
    "diskutil",        # macOS disk utility
    ":(){:|:&};:",     # fork bomb
    "chmod -R 777 /",
    "| sh",
    "| bash",
    "| zsh",
)

# Tokens accepted by the confirmation prompts, after strip() and lower()
STRICT_AFFIRMATIVE = "yes"
STANDARD_AFFIRMATIVES = frozenset({"", "y", "yes"})
