"""Two-way binding between project attributes and the priorities document.

Forward: a status or group attribute change becomes a structural edit.
Reverse: a manual move becomes a ``status`` / ``priority-group`` update.
"""

from dataclasses import dataclass
from typing import Any

from project_control.priorities.model import (
    Document,
    Entry,
    EntryLocation,
    ensure_section,
    insert_at_section_end,
    insert_at_section_start,
    insert_into_group,
    insert_near_entry,
    move_to_subsection_by_project_name,
    remove_entry,
    remove_project,
)
from project_control.sync.status import is_complete, section_for_status, status_for_section
from project_control.vault.records import AttributeRecord

GROUP_ATTRIBUTE = "priority-group"
STATUS_ATTRIBUTE = "status"


@dataclass(frozen=True)
class SyncResult:
    action: str
    section: str | None = None
    clear_group: bool = False

    @property
    def changed(self) -> bool:
        return self.action in {"inserted", "moved", "removed", "deduplicated"}


@dataclass(frozen=True)
class MoveResult:
    moved: bool
    section_changed: bool = False
    section: str | None = None
    group: str | None = None

    @property
    def changed(self) -> bool:
        return self.moved


def sync_status(
    doc: Document,
    project_name: str,
    status: str | None,
    *,
    emoji: str = "",
    record: AttributeRecord | None = None,
) -> SyncResult:
    if is_complete(status):
        removed = remove_project(doc, project_name)
        return SyncResult("removed" if removed else "unchanged")

    target = section_for_status(status)
    if target is None:
        return SyncResult("ignored")

    locations = _all_locations(doc, project_name)
    if not locations:
        ensure_section(doc, target)
        insert_at_section_start(doc, target, Entry(project_name=project_name, emoji=emoji, record=record))
        return SyncResult("inserted", section=target)

    first = locations[0]
    for duplicate in locations[1:]:
        remove_entry(doc, duplicate.entry)

    if first.section.name == target:
        action = "deduplicated" if len(locations) > 1 else "unchanged"
        return SyncResult(action, section=target)

    remove_entry(doc, first.entry)
    ensure_section(doc, target)
    insert_at_section_start(doc, target, first.entry)
    return SyncResult("moved", section=target, clear_group=True)


def sync_group(doc: Document, project_name: str, group_name: str | None) -> MoveResult:
    if not move_to_subsection_by_project_name(doc, project_name, group_name):
        return MoveResult(moved=False)
    location = doc.find_entry(project_name)
    return _result_for(location, section_changed=False)


def manual_move(
    doc: Document,
    entry: Entry,
    section_name: str,
    group_name: str | None = None,
    *,
    anchor: Entry | None = None,
    before: bool = False,
) -> MoveResult:
    """Relocate ``entry`` the way a drop on the dashboard would.

    Dropping next to ``anchor`` wins over ``group_name``; otherwise the entry
    joins the named group, or the section's top level when no group is given.
    """
    origin = doc.locate(entry)
    if origin is None or doc.section(section_name) is None or anchor is entry:
        return MoveResult(moved=False)

    remove_entry(doc, entry)
    if anchor is not None:
        insert_near_entry(doc, anchor, entry, before, section_name=section_name)
    elif group_name:
        insert_into_group(doc, section_name, group_name, entry)
    else:
        insert_at_section_end(doc, section_name, entry)

    location = doc.locate(entry)
    return _result_for(location, section_changed=location is not None and location.section is not origin.section)


def write_back_fields(result: MoveResult) -> dict[str, Any]:
    if not result.moved:
        return {}
    updates: dict[str, Any] = {GROUP_ATTRIBUTE: result.group}
    if result.section_changed and result.section is not None:
        status = status_for_section(result.section)
        if status is not None:
            updates[STATUS_ATTRIBUTE] = status
    return updates


def status_write_back_fields(result: SyncResult) -> dict[str, Any]:
    if result.clear_group:
        return {GROUP_ATTRIBUTE: None}
    return {}


def _all_locations(doc: Document, project_name: str) -> list[EntryLocation]:
    locations: list[EntryLocation] = []
    for section in doc.sections:
        for entry in section.entries():
            if entry.project_name == project_name:
                location = doc.locate(entry)
                if location is not None:
                    locations.append(location)
    return locations


def _result_for(location: EntryLocation | None, section_changed: bool) -> MoveResult:
    if location is None:
        return MoveResult(moved=False)
    return MoveResult(
        moved=True,
        section_changed=section_changed,
        section=location.section.name,
        group=location.subsection.name if location.subsection else None,
    )
