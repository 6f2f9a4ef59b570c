from project_control.priorities.model import Document, Entry, Subsection
from project_control.priorities.parser import find_trailing_delimiter


def trailing_region(original_text: str) -> str:
    """Untouched suffix, starting at the newline before the first `---` line."""
    delimiter = find_trailing_delimiter(original_text)
    if delimiter is None:
        return ""
    return original_text[max(delimiter - 1, 0) :]


def format_entry(entry: Entry) -> str:
    emoji_part = f"{entry.emoji} " if entry.emoji else ""
    if entry.alias:
        link = f"[[{entry.project_name}|{entry.alias}]]"
    else:
        link = f"[[{entry.project_name}]]"
    return f"- {emoji_part}{link}"


def serialize_priorities(doc: Document, original_text: str) -> str:
    lines: list[str] = []
    for section in doc.sections:
        lines.append(f"## {section.name}")
        for item in section.items:
            if isinstance(item, Subsection):
                lines.append(f"### {item.name}")
                lines.extend(format_entry(entry) for entry in item.entries)
            else:
                lines.append(format_entry(item))
        lines.append("")
    return "\n".join(lines) + trailing_region(original_text)
