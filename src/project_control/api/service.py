import asyncio
import logging
from collections.abc import Callable
from typing import Any

from project_control.priorities.model import Document, Entry, ensure_section, insert_at_section_start, remove_project
from project_control.priorities.parser import parse_priorities
from project_control.priorities.serializer import serialize_priorities
from project_control.sync.reconcile import (
    MoveResult,
    SyncResult,
    manual_move,
    status_write_back_fields,
    sync_group,
    sync_status,
    write_back_fields,
)
from project_control.sync.status import DEFAULT_SECTION
from project_control.sync.write_queue import Notifier, WriteQueue, log_notice
from project_control.vault import AttributeStore, PrioritiesStore, tagged_names
from project_control.vault.records import TRACKABLE_TAG, AttributeRecord

logger = logging.getLogger(__name__)

PRIORITIES_NOT_FOUND = "Priorities file not found"


class ProjectControlService:
    def __init__(
        self,
        attributes: AttributeStore,
        priorities: PrioritiesStore,
        notify: Notifier | None = None,
        trackable_tag: str = TRACKABLE_TAG,
    ) -> None:
        self.attributes = attributes
        self.priorities = priorities
        self._notify = notify or log_notice
        self._trackable_tag = trackable_tag
        self.queue = WriteQueue(notify=self._notify)

    async def parse(self, text: str) -> Document:
        records = await asyncio.to_thread(self.attributes.snapshot)
        return parse_priorities(
            text,
            lookup=records.get,
            tagged_projects=tagged_names(records, self._trackable_tag),
        )

    async def load_document(self) -> Document | None:
        await self.queue.drain()
        text = await self.priorities.read()
        if text is None:
            return None
        return await self.parse(text)

    async def current_section(self, project_name: str) -> str | None:
        doc = await self.load_document()
        if doc is None:
            return None
        location = doc.find_entry(project_name)
        return location.section.name if location is not None else None

    async def unlisted_projects(self) -> list[str]:
        doc = await self.load_document()
        return list(doc.unlisted) if doc is not None else []

    def on_status_changed(self, project_name: str, status: str | None) -> "asyncio.Task[SyncResult | None]":
        return self.queue.enqueue(
            lambda: self._sync_status_job(project_name, status),
            f"sync status of {project_name}",
        )

    def on_group_changed(self, project_name: str, group_name: str | None) -> "asyncio.Task[MoveResult | None]":
        async def job() -> MoveResult | None:
            return await self._edit(lambda doc: sync_group(doc, project_name, group_name))

        return self.queue.enqueue(job, f"move {project_name} to its group")

    def on_manual_move(
        self,
        project_name: str,
        section_name: str,
        group_name: str | None = None,
        *,
        anchor: str | None = None,
        before: bool = False,
    ) -> "asyncio.Task[MoveResult | None]":
        async def job() -> MoveResult | None:
            def mutate(doc: Document) -> MoveResult:
                location = doc.find_entry(project_name)
                if location is None:
                    self._notify(f"{project_name} is not listed in priorities")
                    return MoveResult(moved=False)
                anchor_entry = None
                if anchor is not None:
                    anchor_location = doc.find_entry(anchor)
                    anchor_entry = anchor_location.entry if anchor_location is not None else None
                return manual_move(doc, location.entry, section_name, group_name, anchor=anchor_entry, before=before)

            result = await self._edit(mutate)
            if result is not None:
                await self._write_back(project_name, write_back_fields(result))
            return result

        return self.queue.enqueue(job, f"move {project_name}")

    def add_to_priorities(
        self,
        project_name: str,
        section_name: str = DEFAULT_SECTION,
        emoji: str | None = None,
    ) -> "asyncio.Task[bool | None]":
        async def job() -> bool | None:
            record = await self._record(project_name)

            def mutate(doc: Document) -> bool:
                if doc.find_entry(project_name) is not None:
                    return False
                entry_emoji = emoji if emoji is not None else (record.emoji if record and record.emoji else "")
                ensure_section(doc, section_name)
                return insert_at_section_start(
                    doc, section_name, Entry(project_name=project_name, emoji=entry_emoji, record=record)
                )

            return await self._edit(mutate)

        return self.queue.enqueue(job, f"add {project_name} to priorities")

    def remove_from_priorities(self, project_name: str) -> "asyncio.Task[bool | None]":
        async def job() -> bool | None:
            return await self._edit(lambda doc: remove_project(doc, project_name))

        return self.queue.enqueue(job, f"remove {project_name} from priorities")

    def change_project_status(self, project_name: str, status: str) -> "asyncio.Task[SyncResult | None]":
        if not status or not status.strip():
            raise ValueError("status is required")

        async def job() -> SyncResult | None:
            if await self._record(project_name) is None:
                self._notify(f"No main file found for {project_name}")
                return None
            if not await self.attributes.update(project_name, {"status": status}):
                self._notify(f"Could not update status of {project_name}")
                return None
            result = await self._sync_status_job(project_name, status)
            self._notify(f"{project_name} status changed to: {status}")
            return result

        return self.queue.enqueue(job, f"change status of {project_name}")

    def change_project_group(self, project_name: str, group_name: str | None) -> "asyncio.Task[MoveResult | None]":
        async def job() -> MoveResult | None:
            if not await self.attributes.update(project_name, {"priority-group": group_name or None}):
                self._notify(f"Could not update group of {project_name}")
                return None
            return await self._edit(lambda doc: sync_group(doc, project_name, group_name or None))

        return self.queue.enqueue(job, f"change group of {project_name}")

    async def bulk_resync(self, projects: list[str] | None = None) -> dict[str, int]:
        names = projects if projects is not None else await asyncio.to_thread(self.attributes.list_projects)
        tasks = []
        skipped = 0
        for name in names:
            record = await self._record(name)
            if record is None or not record.status:
                skipped += 1
                continue
            tasks.append(self.on_status_changed(name, record.status))

        if tasks:
            await asyncio.gather(*tasks)
        summary = {"synced": len(tasks), "skipped": skipped}
        self._notify(f"Synced {summary['synced']} projects to priorities ({skipped} skipped - no status)")
        return summary

    async def _sync_status_job(self, project_name: str, status: str | None) -> SyncResult | None:
        record = await self._record(project_name)
        emoji = record.emoji if record is not None and record.emoji else ""
        result = await self._edit(lambda doc: sync_status(doc, project_name, status, emoji=emoji, record=record))
        if result is not None:
            await self._write_back(project_name, status_write_back_fields(result))
        return result

    async def _record(self, project_name: str) -> AttributeRecord | None:
        return await asyncio.to_thread(self.attributes.get, project_name)

    async def _edit(self, mutate: Callable[[Document], Any]) -> Any:
        text = await self.priorities.read()
        if text is None:
            self._notify(PRIORITIES_NOT_FOUND)
            return None

        doc = await self.parse(text)
        result = mutate(doc)
        if _is_change(result):
            await self.priorities.write(serialize_priorities(doc, text))
        return result

    async def _write_back(self, project_name: str, updates: dict[str, Any]) -> None:
        if not updates:
            return
        if await self._record(project_name) is None:
            logger.debug("Skipping write-back for %s: no attribute record", project_name)
            return
        if not await self.attributes.update(project_name, updates):
            logger.warning("Attribute write-back for %s was rejected", project_name)


def _is_change(result: Any) -> bool:
    if isinstance(result, (SyncResult, MoveResult)):
        return result.changed
    return bool(result)
