import time
from dataclasses import dataclass

from project_control.sync.status import EXEMPT_FROM_STALE, is_complete, parse_status
from project_control.vault import AttributeStore
from project_control.vault.paths import ProjectIndex, ProjectInfo

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class StaleProject:
    name: str
    last_modified: float
    reason: str


def project_last_modified(project: ProjectInfo) -> float:
    latest = 0.0
    for path in project.folder.rglob("*.md"):
        if path.is_file():
            latest = max(latest, path.stat().st_mtime)
    return latest


def find_stale_projects(
    index: ProjectIndex,
    attributes: AttributeStore,
    stale_days: int,
    now: float | None = None,
) -> list[StaleProject]:
    if stale_days < 1:
        raise ValueError("stale_days must be >= 1")

    current = time.time() if now is None else now
    threshold = stale_days * SECONDS_PER_DAY
    stale: list[StaleProject] = []

    for project in index.list_projects():
        record = attributes.get(project.name) if project.main_file is not None else None
        status = record.status if record is not None else None

        if is_complete(status):
            stale.append(
                StaleProject(
                    name=project.name,
                    last_modified=project.main_file.stat().st_mtime,
                    reason="Status: complete",
                )
            )
            continue
        if parse_status(status) in EXEMPT_FROM_STALE:
            continue

        last_modified = project_last_modified(project)
        if current - last_modified > threshold:
            days_ago = int((current - last_modified) // SECONDS_PER_DAY)
            stale.append(
                StaleProject(
                    name=project.name,
                    last_modified=last_modified,
                    reason=f"No activity for {days_ago} days",
                )
            )
    return stale
