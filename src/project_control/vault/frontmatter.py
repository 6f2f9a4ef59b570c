import asyncio
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from project_control.vault import AttributeStore
from project_control.vault.paths import ProjectIndex
from project_control.vault.records import AttributeRecord

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)


def split_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """Split a note into (frontmatter mapping, body).

    Returns ``({}, content)`` when the note has no frontmatter block and
    ``(None, body)`` when the block exists but is not a YAML mapping.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content

    body = content[match.end() :]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        return None, body
    if data is None:
        return {}, body
    if not isinstance(data, dict):
        return None, body
    return data, body


def render_frontmatter(data: dict[str, Any], body: str) -> str:
    if not data:
        return body
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"---\n{dumped}---\n{body}"


def update_frontmatter(content: str, updates: dict[str, Any]) -> str:
    data, body = split_frontmatter(content)
    if data is None:
        raise ValueError("frontmatter is not a valid YAML mapping")

    merged = dict(data)
    for key, value in updates.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return render_frontmatter(merged, body)


class FrontmatterAttributeStore(AttributeStore):
    """Attribute records backed by the YAML frontmatter of each project's main note."""

    def __init__(self, index: ProjectIndex) -> None:
        self.index = index

    def get(self, project_name: str) -> AttributeRecord | None:
        project = self.index.resolve(project_name)
        if project is None or project.main_file is None:
            return None
        data, _ = split_frontmatter(project.main_file.read_text(encoding="utf-8"))
        if data is None:
            logger.warning("Ignoring malformed frontmatter in %s", project.main_file)
            data = {}
        return AttributeRecord.from_mapping(data)

    async def update(self, project_name: str, updates: dict[str, Any]) -> bool:
        project = self.index.resolve(project_name)
        if project is None or project.main_file is None:
            logger.warning("No main file for project %s, skipping attribute update", project_name)
            return False
        await asyncio.to_thread(self._rewrite, project.main_file, updates)
        logger.debug("Updated %s frontmatter: %s", project_name, sorted(updates))
        return True

    def list_projects(self) -> list[str]:
        return [project.name for project in self.index.list_projects()]

    def _rewrite(self, path: Path, updates: dict[str, Any]) -> None:
        content = path.read_text(encoding="utf-8")
        path.write_text(update_frontmatter(content, updates), encoding="utf-8")
