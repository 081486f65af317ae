from __future__ import annotations

import importlib.metadata
import json
import os
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional


class BuildInfo(NamedTuple):
    commit: Optional[str]
    date: Optional[str]
    dirty: bool


def _run_git(args: list[str], cwd: Optional[str] = None) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=cwd or os.getcwd(),
                                      stderr=subprocess.DEVNULL)
        return out.decode().strip() or None
    except (subprocess.CalledProcessError, OSError):
        return None


def _from_git_repo() -> Optional[BuildInfo]:
    here = Path(__file__).resolve().parent
    root = _run_git(["rev-parse", "--show-toplevel"], cwd=str(here))
    if not root or not Path(root).exists():
        return None

    commit = _run_git(["rev-parse", "HEAD"], cwd=root)
    date = _run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=root)
    status = _run_git(["status", "--porcelain"], cwd=root)
    return BuildInfo(commit=commit, date=date, dirty=bool(status))


def _from_direct_url() -> Optional[BuildInfo]:
    # PEP 610 direct_url.json may contain VCS commit id when installed from VCS
    try:
        dist = importlib.metadata.distribution("pagerule")
    except importlib.metadata.PackageNotFoundError:
        return None
    text = dist.read_text("direct_url.json")
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    commit = (data.get("vcs_info") or {}).get("commit_id")
    # direct_url doesn't include date; leave as None
    if commit:
        return BuildInfo(commit=commit, date=None, dirty=False)
    return None


def get_build_info() -> BuildInfo:
    # Priority: live git repo -> direct_url.json -> unknowns
    for getter in (_from_git_repo, _from_direct_url):
        info = getter()
        if info and (info.commit or info.date):
            return info
    return BuildInfo(commit=None, date=None, dirty=False)


def get_version_string() -> str:
    info = get_build_info()
    dirty_suffix = "-dirty" if info.dirty else ""
    commit_full = info.commit or "unknown"
    # Use short (7-character) git hashes when available
    commit = commit_full[:7] if commit_full != "unknown" else commit_full
    date = info.date or "unknown"
    return f"{commit}{dirty_suffix} {date}"
