import asyncio
from typing import Any

from project_control.vault import AttributeStore, PrioritiesStore
from project_control.vault.records import AttributeRecord


class InMemoryAttributeStore(AttributeStore):
    def __init__(self, records: dict[str, dict[str, Any]] | None = None) -> None:
        self._records: dict[str, dict[str, Any]] = {
            name: dict(data) for name, data in (records or {}).items()
        }
        self.update_log: list[tuple[str, dict[str, Any]]] = []

    def get(self, project_name: str) -> AttributeRecord | None:
        data = self._records.get(project_name)
        if data is None:
            return None
        return AttributeRecord.from_mapping(data)

    async def update(self, project_name: str, updates: dict[str, Any]) -> bool:
        await asyncio.sleep(0)
        data = self._records.get(project_name)
        if data is None:
            return False
        for key, value in updates.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        self.update_log.append((project_name, dict(updates)))
        return True

    def list_projects(self) -> list[str]:
        return sorted(self._records)

    def raw(self, project_name: str) -> dict[str, Any]:
        return dict(self._records[project_name])


class InMemoryPrioritiesStore(PrioritiesStore):
    """Priorities text held in memory; every read and write yields to the event loop."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.writes: list[str] = []

    async def read(self) -> str | None:
        await asyncio.sleep(0)
        return self.text

    async def write(self, text: str) -> None:
        await asyncio.sleep(0)
        if self.text is None:
            raise FileNotFoundError("priorities document does not exist")
        self.text = text
        self.writes.append(text)
