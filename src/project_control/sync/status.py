from enum import Enum


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMING_SOON = "coming-soon"
    DEFERRED = "deferred"
    ON_HOLD = "on-hold"
    COMPLETE = "complete"


_STATUS_SECTIONS: dict[ProjectStatus, str] = {
    ProjectStatus.ACTIVE: "Active",
    ProjectStatus.COMING_SOON: "Coming Soon",
    ProjectStatus.DEFERRED: "Deferred Effort",
    ProjectStatus.ON_HOLD: "On Hold",
}

_SECTION_STATUSES: dict[str, ProjectStatus] = {section: status for status, section in _STATUS_SECTIONS.items()}

# Never reported as stale.
EXEMPT_FROM_STALE = frozenset({ProjectStatus.COMING_SOON, ProjectStatus.DEFERRED, ProjectStatus.ON_HOLD})

DEFAULT_SECTION = "Additional"


def parse_status(value: str | None) -> ProjectStatus | None:
    if not value:
        return None
    try:
        return ProjectStatus(value.strip())
    except ValueError:
        return None


def section_for_status(status: str | None) -> str | None:
    parsed = parse_status(status)
    if parsed is None:
        return None
    return _STATUS_SECTIONS.get(parsed)


def status_for_section(section_name: str) -> str | None:
    status = _SECTION_STATUSES.get(section_name)
    return status.value if status is not None else None


def is_complete(status: str | None) -> bool:
    return parse_status(status) is ProjectStatus.COMPLETE
