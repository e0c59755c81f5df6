"""
System context collection for zchat.
"""
import os
import platform
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field

from zchat.constants import DEFAULT_MAX_CONTEXT_LINES, DEFAULT_SHELL
from zchat.utils.logging import get_logger

logger = get_logger(__name__)


class SystemContext(BaseModel):
    """Snapshot of the environment a command will run in."""
    working_dir: str
    files: List[str] = Field(default_factory=list)
    shell: str = DEFAULT_SHELL
    os: str
    arch: str


class ContextCollector:
    """
    Gathers the context sent to the model with each request.

    The context includes:
    - Current working directory
    - Visible files in that directory, up to ``max_files``
    - The user's shell
    - Operating system and architecture
    """

    def __init__(
        self,
        max_files: int = DEFAULT_MAX_CONTEXT_LINES,
        cwd: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.max_files = max_files
        self._cwd = cwd
        self._environ = environ

    def collect(self) -> SystemContext:
        """Collect a fresh SystemContext."""
        working_dir = Path(self._cwd) if self._cwd else Path.cwd()
        environ = self._environ if self._environ is not None else os.environ

        context = SystemContext(
            working_dir=str(working_dir),
            files=self.list_files(working_dir),
            shell=environ.get("SHELL") or DEFAULT_SHELL,
            os=platform.system().lower(),
            arch=platform.machine().lower(),
        )
        logger.debug(
            f"Context collected: cwd={context.working_dir}, shell={context.shell}, "
            f"{len(context.files)} files"
        )
        return context

    def list_files(self, directory: Path) -> List[str]:
        """
        List visible entries of ``directory`` in sorted order.

        Hidden entries are skipped. An unreadable directory yields an empty
        list rather than an error.
        """
        try:
            names = sorted(os.listdir(directory))
        except OSError as e:
            logger.warning(f"Could not list {directory}: {e}")
            return []

        files = []
        for name in names:
            if name.startswith("."):
                continue
            files.append(name)
            if len(files) >= self.max_files:
                break
        return files
