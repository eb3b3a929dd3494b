"""Storage root and path helpers for pomolog."""

from __future__ import annotations

import os
from pathlib import Path

CURRENT_FILE = "current"
HISTORY_FILE = "history"
SETTINGS_FILE = "settings"
EXPORT_FILE = "export.json"


def storage_root() -> Path:
    """Get the storage directory (holds current, history and settings)."""
    return Path(
        os.environ.get("POMODORO_DIR", str(Path.home() / ".pomodoro"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def current_path(root: Path | None = None) -> Path:
    if root is None:
        root = storage_root()
    return root / CURRENT_FILE


def history_path(root: Path | None = None) -> Path:
    if root is None:
        root = storage_root()
    return root / HISTORY_FILE


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = storage_root()
    return root / SETTINGS_FILE


def export_path(root: Path | None = None) -> Path:
    if root is None:
        root = storage_root()
    return root / EXPORT_FILE
