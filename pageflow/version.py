"""Version and build information for pageflow."""

from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional

DISTRIBUTION = "pageflow"


class BuildInfo(NamedTuple):
    version: str
    commit: Optional[str]
    date: Optional[str]
    dirty: bool


def package_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return "0+unknown"


def _git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        result = subprocess.run(
            ["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True
        )
    except (subprocess.CalledProcessError, OSError):
        return None
    return result.stdout.strip() or None


def _from_checkout(version: str) -> Optional[BuildInfo]:
    """Build info from the git checkout this package is running from."""
    here = Path(__file__).resolve().parent
    if _git(["rev-parse", "--show-toplevel"], here) is None:
        return None
    commit = _git(["rev-parse", "HEAD"], here)
    if commit is None:
        return None
    date = _git(["show", "-s", "--format=%cI", "HEAD"], here)
    dirty = bool(_git(["status", "--porcelain"], here))
    return BuildInfo(version, commit, date, dirty)


def _from_build_hook(version: str) -> Optional[BuildInfo]:
    """Build info written into the wheel by hatch_build.py."""
    try:
        from . import _build_info  # type: ignore
    except ImportError:
        return None
    commit = getattr(_build_info, "COMMIT", None)
    date = getattr(_build_info, "DATE", None)
    if not (commit or date):
        return None
    return BuildInfo(version, commit, date, False)


def get_build_info() -> BuildInfo:
    version = package_version()
    for source in (_from_checkout, _from_build_hook):
        info = source(version)
        if info is not None:
            return info
    return BuildInfo(version, None, None, False)


def get_version_string() -> str:
    info = get_build_info()
    commit = info.commit[:7] if info.commit else "unknown"
    if info.dirty:
        commit += "-dirty"
    return f"pageflow {info.version} ({commit} {info.date or 'unknown'})"
