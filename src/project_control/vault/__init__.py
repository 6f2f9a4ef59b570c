from abc import ABC, abstractmethod
from typing import Any

from project_control.vault.records import AttributeRecord


class AttributeStore(ABC):
    @abstractmethod
    def get(self, project_name: str) -> AttributeRecord | None:
        """Return the current attribute snapshot, or None if the project is unknown."""
        pass

    @abstractmethod
    async def update(self, project_name: str, updates: dict[str, Any]) -> bool:
        """Merge updates into the record. None values delete the key. Returns True on success."""
        pass

    @abstractmethod
    def list_projects(self) -> list[str]:
        """List every known project name."""
        pass

    def snapshot(self) -> dict[str, AttributeRecord | None]:
        """Read every known project's record once."""
        return {name: self.get(name) for name in self.list_projects()}


def tagged_names(records: dict[str, AttributeRecord | None], tag: str) -> list[str]:
    return [name for name, record in records.items() if record is not None and record.has_tag(tag)]


class PrioritiesStore(ABC):
    @abstractmethod
    async def read(self) -> str | None:
        """Return the raw priorities text, or None when the document does not exist."""
        pass

    @abstractmethod
    async def write(self, text: str) -> None:
        """Persist the raw priorities text."""
        pass
