from dataclasses import dataclass, field
from typing import Any

RECOGNIZED_KEYS = ("status", "category", "priority", "priority-group", "emoji", "title", "tags")
TRACKABLE_TAG = "project-page"


@dataclass
class AttributeRecord:
    """Frontmatter snapshot for one project.

    Recognized keys are exposed as fields; everything else rides along in
    ``extra`` so a write-back never drops unrelated attributes.
    """

    status: str | None = None
    category: str | None = None
    priority: str | None = None
    priority_group: str | None = None
    emoji: str | None = None
    title: str | None = None
    tags: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "AttributeRecord":
        data = dict(data or {})
        extra = {key: value for key, value in data.items() if key not in RECOGNIZED_KEYS}
        return cls(
            status=_as_text(data.get("status")),
            category=_as_text(data.get("category")),
            priority=_as_text(data.get("priority")),
            priority_group=_as_text(data.get("priority-group")),
            emoji=_as_text(data.get("emoji")),
            title=_as_text(data.get("title")),
            tags=_as_tags(data.get("tags")),
            extra=extra,
        )

    def has_tag(self, tag: str) -> bool:
        wanted = tag.lstrip("#")
        return any(item == wanted for item in self.tags)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        raw = [part for part in value.replace(",", " ").split()]
    elif isinstance(value, (list, tuple)):
        raw = [str(item) for item in value if item is not None]
    else:
        raw = [str(value)]
    tags: list[str] = []
    for item in raw:
        cleaned = item.strip().lstrip("#")
        if cleaned:
            tags.append(cleaned)
    return tags
