import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from project_control.vault.paths import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_FOLDER = "10 - Project"
DEFAULT_PRIORITIES_FILE = "10 - Project/💫 Project Priorities.md"
DEFAULT_STALE_DAYS = 30


@dataclass
class Settings:
    project_folder: str = DEFAULT_PROJECT_FOLDER
    priorities_file: str = DEFAULT_PRIORITIES_FILE
    stale_days: int = DEFAULT_STALE_DAYS
    collapsed_sections: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_folder": self.project_folder,
            "priorities_file": self.priorities_file,
            "stale_days": self.stale_days,
            "collapsed_sections": list(self.collapsed_sections),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        return cls(
            project_folder=data.get("project_folder", DEFAULT_PROJECT_FOLDER),
            priorities_file=data.get("priorities_file", DEFAULT_PRIORITIES_FILE),
            stale_days=data.get("stale_days", DEFAULT_STALE_DAYS),
            collapsed_sections=list(data.get("collapsed_sections", [])),
        )


def get_vault_root() -> Path:
    return Path(os.getenv("PROJECT_CONTROL_VAULT", "."))


def _get_settings_path() -> Path:
    return Path(os.getenv("PROJECT_CONTROL_SETTINGS_FILE", ".project_control/settings.json"))


def load_settings() -> Settings:
    settings_path = _get_settings_path()
    settings = Settings()
    if settings_path.exists():
        try:
            with open(settings_path, encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                settings = Settings.from_dict(data)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read settings from %s: %s", settings_path, exc)

    corrections = validate_settings(settings)
    if corrections:
        save_settings(settings)
        for correction in corrections:
            logger.warning("Settings corrected: %s", correction)
    return settings


def save_settings(settings: Settings) -> None:
    settings_path = _get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    with open(settings_path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)


def validate_settings(settings: Settings) -> list[str]:
    """Repair invalid values in place and describe what changed."""
    corrections: list[str] = []

    if not isinstance(settings.project_folder, str) or not settings.project_folder.strip():
        settings.project_folder = DEFAULT_PROJECT_FOLDER
        corrections.append(f'Project folder reset to "{DEFAULT_PROJECT_FOLDER}"')
    if not isinstance(settings.priorities_file, str) or not settings.priorities_file.strip():
        settings.priorities_file = DEFAULT_PRIORITIES_FILE
        corrections.append(f'Priorities file reset to "{DEFAULT_PRIORITIES_FILE}"')
    if not isinstance(settings.stale_days, int) or isinstance(settings.stale_days, bool) or settings.stale_days < 1:
        settings.stale_days = DEFAULT_STALE_DAYS
        corrections.append(f"Stale days reset to {DEFAULT_STALE_DAYS}")

    for attribute, label in (
        ("project_folder", "Project folder"),
        ("priorities_file", "Priorities file"),
    ):
        current = getattr(settings, attribute)
        normalized = normalize_path(current)
        if normalized != current:
            setattr(settings, attribute, normalized)
            corrections.append(f'{label} normalized to "{normalized}"')

    return corrections


def section_collapse_key(section_name: str) -> str:
    return f"section:{section_name}"


def category_collapse_key(section_name: str, category: str) -> str:
    return f"category:{section_name}::{category}"


def toggle_collapsed(settings: Settings, key: str, collapsed: bool) -> bool:
    """Record whether a dashboard section is collapsed. Returns True when the list changed."""
    if collapsed and key not in settings.collapsed_sections:
        settings.collapsed_sections.append(key)
        return True
    if not collapsed and key in settings.collapsed_sections:
        settings.collapsed_sections.remove(key)
        return True
    return False
