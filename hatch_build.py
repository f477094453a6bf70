"""Hatchling build hook that embeds git build info in the wheel."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

from hatchling.builders.hooks.plugin.interface import BuildHookInterface

BUILD_INFO_PATH = "pageflow/_build_info.py"


class CustomBuildHook(BuildHookInterface):
    """Writes pageflow/_build_info.py before the build collects files."""

    def initialize(self, version: str, build_data: dict[str, Any]) -> None:
        root = Path(self.root)
        commit = self._git(["rev-parse", "HEAD"], root)
        date = self._git(["show", "-s", "--format=%cI", "HEAD"], root)
        (root / BUILD_INFO_PATH).write_text(
            "# Auto-generated at build time.\n"
            f"COMMIT = {commit!r}\n"
            f"DATE = {date!r}\n",
            encoding="utf-8",
        )
        build_data.setdefault("artifacts", []).append(BUILD_INFO_PATH)

    def _git(self, args: list[str], cwd: Path) -> str | None:
        try:
            result = subprocess.run(
                ["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True
            )
        except (subprocess.CalledProcessError, OSError):
            # Builds from an sdist or without git still succeed
            return None
        return result.stdout.strip() or None
