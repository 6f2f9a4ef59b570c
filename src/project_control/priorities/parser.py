import re
from collections.abc import Callable, Iterable

from project_control.priorities.model import Document, Entry, Section, Subsection
from project_control.priorities.unlisted import find_unlisted
from project_control.vault.records import AttributeRecord

SECTION_PATTERN = re.compile(r"^## (.+)$")
SUBSECTION_PATTERN = re.compile(r"^### (.+)$")
LINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")
LIST_MARKER_PATTERN = re.compile(r"^\s*-\s*")
TRAILING_DELIMITER = "---"

AttributeLookup = Callable[[str], AttributeRecord | None]


def find_trailing_delimiter(text: str) -> int | None:
    """Offset of the first line that reads `---` once trimmed, or None."""
    offset = 0
    for line in text.split("\n"):
        if line.strip() == TRAILING_DELIMITER:
            return offset
        offset += len(line) + 1
    return None


def parse_priorities(
    text: str,
    lookup: AttributeLookup | None = None,
    tagged_projects: Iterable[str] = (),
) -> Document:
    sections: list[Section] = []
    current_section: Section | None = None
    current_subsection: Subsection | None = None
    delimiter = find_trailing_delimiter(text)
    body = text if delimiter is None else text[:delimiter]

    for line in body.split("\n"):
        line = line.rstrip("\r")

        section_match = SECTION_PATTERN.match(line)
        if section_match:
            if current_section is not None and current_subsection is not None:
                current_section.items.append(current_subsection)
            current_subsection = None
            current_section = Section(name=section_match.group(1).strip())
            sections.append(current_section)
            continue

        subsection_match = SUBSECTION_PATTERN.match(line)
        if subsection_match:
            if current_section is None:
                continue
            if current_subsection is not None:
                current_section.items.append(current_subsection)
            current_subsection = Subsection(name=subsection_match.group(1).strip())
            continue

        link_match = LINK_PATTERN.search(line)
        if link_match is None or current_section is None:
            continue

        entry = _build_entry(line, link_match, lookup)
        if current_subsection is not None:
            current_subsection.entries.append(entry)
        else:
            current_section.items.append(entry)

    if current_section is not None and current_subsection is not None:
        current_section.items.append(current_subsection)

    doc = Document(sections=sections)
    doc.unlisted = find_unlisted(tagged_projects, doc.project_names())
    return doc


def _build_entry(line: str, link_match: re.Match, lookup: AttributeLookup | None) -> Entry:
    project_name = link_match.group(1)
    alias = link_match.group(2) or None
    prefix = line[: link_match.start()]
    line_emoji = LIST_MARKER_PATTERN.sub("", prefix, count=1).strip()

    record = lookup(project_name) if lookup is not None else None
    emoji = record.emoji if record is not None and record.emoji else line_emoji
    return Entry(project_name=project_name, alias=alias, emoji=emoji, record=record)
