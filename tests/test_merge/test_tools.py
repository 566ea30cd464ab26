"""Tests for external merge tools."""

import shlex
import shutil
import sys
from pathlib import Path

import pytest

from prbot.merge.exceptions import MergeToolError
from prbot.merge.tools import ExternalMergeTool

MERGE_SCRIPT = """
import sys

ours, base, theirs, log = sys.argv[1:5]
with open(log, "w") as f:
    f.write(ours)

with open(ours) as f:
    ours_text = f.read()
with open(theirs) as f:
    theirs_text = f.read()

if "conflict" in theirs_text:
    sys.exit(1)

with open(ours, "w") as f:
    f.write(ours_text + theirs_text)
"""

SLOW_SCRIPT = """
import time

time.sleep(30)
"""


def _python_command(script: Path, *args: str) -> str:
    return " ".join([shlex.quote(sys.executable), shlex.quote(str(script)), *args])


class TestExternalMergeTool:
    """Tests for ExternalMergeTool."""

    @pytest.fixture
    def merge_script(self, tmp_path: Path) -> Path:
        script = tmp_path / "merge.py"
        script.write_text(MERGE_SCRIPT)
        return script

    @pytest.fixture
    def log_path(self, tmp_path: Path) -> Path:
        return tmp_path / "ours-path.log"

    @pytest.fixture
    def tool(self, merge_script: Path, log_path: Path) -> ExternalMergeTool:
        return ExternalMergeTool(
            _python_command(merge_script, "{ours}", "{base}", "{theirs}", shlex.quote(str(log_path))),
            timeout=30.0,
        )

    def test_empty_command(self):
        with pytest.raises(ValueError):
            ExternalMergeTool("   ")

    def test_name(self):
        assert ExternalMergeTool("git merge-file {ours} {base} {theirs}").name == "git"

    def test_literal_braces_kept(self, tmp_path: Path):
        tool = ExternalMergeTool("merge-json --path={0} --style={} {ours} {base} {theirs}")
        paths = {
            "base": tmp_path / "base",
            "ours": tmp_path / "ours",
            "theirs": tmp_path / "theirs",
        }

        argv = tool._build_argv(paths)

        assert argv == [
            "merge-json",
            "--path={0}",
            "--style={}",
            str(tmp_path / "ours"),
            str(tmp_path / "base"),
            str(tmp_path / "theirs"),
        ]

    @pytest.mark.asyncio
    async def test_clean_merge(self, tool: ExternalMergeTool):
        result = await tool.merge(ours=b"target\n", base=b"base\n", theirs=b"source\n")

        assert result.clean
        assert result.exit_code == 0
        assert result.content == b"target\nsource\n"

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, tool: ExternalMergeTool):
        result = await tool.merge(ours=b"target\n", base=b"base\n", theirs=b"conflict\n")

        assert not result.clean
        assert result.exit_code == 1

    @pytest.mark.asyncio
    async def test_temporary_files_removed(self, tool: ExternalMergeTool, log_path: Path):
        await tool.merge(ours=b"a\n", base=b"b\n", theirs=b"c\n")

        ours_path = Path(log_path.read_text())
        assert not ours_path.exists()
        assert not ours_path.parent.exists()

    @pytest.mark.asyncio
    async def test_temporary_files_removed_on_failure(self, tool: ExternalMergeTool, log_path: Path):
        await tool.merge(ours=b"a\n", base=b"b\n", theirs=b"conflict\n")

        assert not Path(log_path.read_text()).parent.exists()

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        tool = ExternalMergeTool("prbot-no-such-merge-tool {ours} {base} {theirs}")

        with pytest.raises(MergeToolError):
            await tool.merge(ours=b"", base=b"", theirs=b"")

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path: Path):
        script = tmp_path / "slow.py"
        script.write_text(SLOW_SCRIPT)
        tool = ExternalMergeTool(_python_command(script), timeout=0.5)

        with pytest.raises(MergeToolError):
            await tool.merge(ours=b"", base=b"", theirs=b"")

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    @pytest.mark.asyncio
    async def test_git_merge_file(self):
        tool = ExternalMergeTool("git merge-file {ours} {base} {theirs}")

        result = await tool.merge(
            ours=b"A\nb\nc\nd\ne\n",
            base=b"a\nb\nc\nd\ne\n",
            theirs=b"a\nb\nc\nd\nE\n",
        )

        assert result.clean
        assert result.content == b"A\nb\nc\nd\nE\n"

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    @pytest.mark.asyncio
    async def test_git_merge_file_conflict(self):
        tool = ExternalMergeTool("git merge-file {ours} {base} {theirs}")

        result = await tool.merge(ours=b"x\n", base=b"a\n", theirs=b"y\n")

        assert not result.clean
