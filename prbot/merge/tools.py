"""
External three-way merge tools.

Runs a merge command against temporary copies of the three file
versions. The command template uses {base}, {ours} and {theirs}
placeholders in the git merge-driver convention: the tool merges
{theirs} into {ours} in place and exits 0 on a clean merge.
"""

import asyncio
import logging
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path

from prbot.merge.exceptions import MergeToolError

logger = logging.getLogger(__name__)


@dataclass
class MergeToolResult:
    """Result from one merge tool run."""

    exit_code: int
    content: bytes = b""
    stderr: str = ""

    @property
    def clean(self) -> bool:
        return self.exit_code == 0


class ExternalMergeTool:
    """Runs a command-line three-way merge tool."""

    def __init__(self, command: str, timeout: float = 60.0):
        """
        Initialize the tool.

        Args:
            command: Command template, e.g. "git merge-file {ours} {base} {theirs}"
            timeout: Seconds to wait before killing the tool
        """
        if not command or not command.strip():
            raise ValueError("Merge tool command must not be empty")
        self.command = command
        self.timeout = timeout

    @property
    def name(self) -> str:
        return shlex.split(self.command)[0]

    def _build_argv(self, paths: dict[str, Path]) -> list[str]:
        argv = []
        for arg in shlex.split(self.command):
            for key, path in paths.items():
                arg = arg.replace(f"{{{key}}}", str(path))
            argv.append(arg)
        return argv

    async def merge(self, ours: bytes, base: bytes, theirs: bytes) -> MergeToolResult:
        """
        Run the tool on the three versions.

        The temporary files are removed on every exit path.

        Args:
            ours: Version the result is written over (target branch)
            base: Common ancestor
            theirs: Version merged in (source branch)

        Returns:
            MergeToolResult with the exit code and the content of {ours}
            after the run

        Raises:
            MergeToolError: tool missing or timed out
        """
        with tempfile.TemporaryDirectory(prefix="prbot-merge-") as tmpdir:
            paths = {
                "base": Path(tmpdir) / "base",
                "ours": Path(tmpdir) / "ours",
                "theirs": Path(tmpdir) / "theirs",
            }
            paths["base"].write_bytes(base)
            paths["ours"].write_bytes(ours)
            paths["theirs"].write_bytes(theirs)

            argv = self._build_argv(paths)

            try:
                process = await asyncio.create_subprocess_exec(
                    *argv,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as e:
                raise MergeToolError(f"Could not start {argv[0]}: {e}") from e

            try:
                _, stderr = await asyncio.wait_for(process.communicate(), self.timeout)
            except asyncio.TimeoutError as e:
                raise MergeToolError(
                    f"{argv[0]} did not finish within {self.timeout}s"
                ) from e
            finally:
                if process.returncode is None:
                    process.kill()
                    await process.wait()

            logger.debug(f"{argv[0]} exited with {process.returncode}")

            return MergeToolResult(
                exit_code=process.returncode,
                content=paths["ours"].read_bytes(),
                stderr=stderr.decode("utf-8", errors="replace"),
            )
