"""In-memory model of the priorities document and its structural edits.

Every lookup is a linear scan and every "not found" is a silent no-op;
mutators report whether they changed anything.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from project_control.vault.records import AttributeRecord


@dataclass(eq=False)
class Entry:
    project_name: str
    alias: str | None = None
    emoji: str = ""
    record: AttributeRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_name": self.project_name,
            "alias": self.alias,
            "emoji": self.emoji,
            "status": self.record.status if self.record else None,
            "category": self.record.category if self.record else None,
        }


@dataclass(eq=False)
class Subsection:
    name: str
    entries: list[Entry] = field(default_factory=list)


SectionItem = Union[Entry, Subsection]


@dataclass(eq=False)
class Section:
    name: str
    items: list[SectionItem] = field(default_factory=list)

    def subsection(self, name: str) -> Subsection | None:
        for item in self.items:
            if isinstance(item, Subsection) and item.name == name:
                return item
        return None

    def entries(self) -> list[Entry]:
        flattened: list[Entry] = []
        for item in self.items:
            if isinstance(item, Subsection):
                flattened.extend(item.entries)
            else:
                flattened.append(item)
        return flattened


@dataclass(frozen=True)
class EntryLocation:
    section: Section
    subsection: Subsection | None
    entry: Entry


@dataclass(eq=False)
class Document:
    sections: list[Section] = field(default_factory=list)
    unlisted: list[str] = field(default_factory=list)

    def section(self, name: str) -> Section | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def locate(self, entry: Entry) -> EntryLocation | None:
        for section in self.sections:
            for item in section.items:
                if item is entry:
                    return EntryLocation(section, None, entry)
                if isinstance(item, Subsection) and any(candidate is entry for candidate in item.entries):
                    return EntryLocation(section, item, entry)
        return None

    def find_entry(self, project_name: str) -> EntryLocation | None:
        for section in self.sections:
            for item in section.items:
                if isinstance(item, Subsection):
                    for candidate in item.entries:
                        if candidate.project_name == project_name:
                            return EntryLocation(section, item, candidate)
                elif item.project_name == project_name:
                    return EntryLocation(section, None, item)
        return None

    def project_names(self) -> list[str]:
        names: list[str] = []
        for section in self.sections:
            for entry in section.entries():
                if entry.project_name not in names:
                    names.append(entry.project_name)
        return names

    def to_dict(self) -> dict[str, Any]:
        sections = []
        for section in self.sections:
            items: list[dict[str, Any]] = []
            for item in section.items:
                if isinstance(item, Subsection):
                    items.append(
                        {
                            "type": "subsection",
                            "name": item.name,
                            "entries": [entry.to_dict() for entry in item.entries],
                        }
                    )
                else:
                    items.append({"type": "entry", **item.to_dict()})
            sections.append({"name": section.name, "count": count_section_entries(section), "items": items})
        return {"sections": sections, "unlisted": list(self.unlisted)}


def count_section_entries(section: Section) -> int:
    return len(section.entries())


def remove_entry(doc: Document, entry: Entry) -> bool:
    for section in doc.sections:
        for index, item in enumerate(section.items):
            if item is entry:
                del section.items[index]
                return True
            if isinstance(item, Subsection):
                for sub_index, candidate in enumerate(item.entries):
                    if candidate is entry:
                        del item.entries[sub_index]
                        return True
    return False


def remove_project(doc: Document, project_name: str) -> bool:
    removed = False
    location = doc.find_entry(project_name)
    while location is not None:
        remove_entry(doc, location.entry)
        removed = True
        location = doc.find_entry(project_name)
    return removed


def ensure_section(doc: Document, section_name: str) -> Section:
    section = doc.section(section_name)
    if section is None:
        section = Section(name=section_name)
        doc.sections.append(section)
    return section


def insert_at_section_end(doc: Document, section_name: str, entry: Entry) -> bool:
    section = doc.section(section_name)
    if section is None:
        return False
    section.items.append(entry)
    return True


def insert_at_section_start(doc: Document, section_name: str, entry: Entry) -> bool:
    section = doc.section(section_name)
    if section is None:
        return False
    section.items.insert(0, entry)
    return True


def insert_into_group(doc: Document, section_name: str, group_name: str, entry: Entry) -> bool:
    section = doc.section(section_name)
    if section is None:
        return False
    group = section.subsection(group_name)
    if group is None:
        return insert_at_section_end(doc, section_name, entry)
    group.entries.append(entry)
    return True


def insert_near_entry(
    doc: Document,
    target: Entry,
    new_entry: Entry,
    before: bool,
    section_name: str | None = None,
) -> bool:
    """Splice ``new_entry`` next to ``target`` inside whichever container holds it.

    When ``target`` is not in the document the entry is appended to the
    top level of ``section_name`` instead (if given and present).
    """
    for section in doc.sections:
        for index, item in enumerate(section.items):
            if item is target:
                section.items.insert(index if before else index + 1, new_entry)
                return True
            if isinstance(item, Subsection):
                for sub_index, candidate in enumerate(item.entries):
                    if candidate is target:
                        item.entries.insert(sub_index if before else sub_index + 1, new_entry)
                        return True
    if section_name is None:
        return False
    return insert_at_section_end(doc, section_name, new_entry)


def move_to_subsection_by_project_name(doc: Document, project_name: str, group_name: str | None) -> bool:
    location = doc.find_entry(project_name)
    if location is None:
        return False

    section = location.section
    entry = location.entry
    remove_entry(doc, entry)

    if group_name:
        group = section.subsection(group_name)
        if group is not None:
            group.entries.append(entry)
        else:
            section.items.append(entry)
        return True

    insert_at = len(section.items)
    for index, item in enumerate(section.items):
        if isinstance(item, Subsection):
            insert_at = index
            break
    section.items.insert(insert_at, entry)
    return True
