import asyncio
import threading
import unittest
from collections import Counter

from project_control.api.service import PRIORITIES_NOT_FOUND, ProjectControlService
from project_control.vault.memory import InMemoryAttributeStore, InMemoryPrioritiesStore

TEXT = """## Active
- 🎯 [[Alpha]]
### Foundation
- [[Beta]]
## Coming Soon
## On Hold
---
notes
"""


def make_records():
    return {
        "Alpha": {"status": "active", "emoji": "🎯", "tags": ["project-page"]},
        "Beta": {"status": "active", "priority-group": "Foundation", "tags": ["project-page"]},
        "Gamma": {"status": "coming-soon", "tags": ["project-page"]},
        "Delta": {"tags": ["project-page"]},
    }


class ProjectControlServiceTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.notices = []
        self.attributes = InMemoryAttributeStore(make_records())
        self.priorities = InMemoryPrioritiesStore(TEXT)
        self.service = ProjectControlService(self.attributes, self.priorities, notify=self.notices.append)

    async def test_status_change_then_removal_apply_in_order(self):
        first = self.service.on_status_changed("Alpha", "on-hold")
        second = self.service.remove_from_priorities("Alpha")

        moved, removed = await asyncio.gather(first, second)

        self.assertEqual(moved.action, "moved")
        self.assertTrue(removed)
        self.assertEqual(
            self.priorities.writes,
            [
                "## Active\n### Foundation\n- [[Beta]]\n\n## Coming Soon\n\n## On Hold\n- 🎯 [[Alpha]]\n\n---\nnotes\n",
                "## Active\n### Foundation\n- [[Beta]]\n\n## Coming Soon\n\n## On Hold\n\n---\nnotes\n",
            ],
        )
        self.assertNotIn("[[Alpha]]", self.priorities.text)
        self.assertEqual(self.attributes.update_log, [("Alpha", {"priority-group": None})])

    async def test_status_change_within_section_writes_nothing(self):
        result = await self.service.on_status_changed("Beta", "active")

        self.assertFalse(result.changed)
        self.assertEqual(self.priorities.writes, [])
        self.assertEqual(self.attributes.raw("Beta")["priority-group"], "Foundation")

    async def test_complete_status_removes_project(self):
        await self.service.on_status_changed("Beta", "complete")

        self.assertEqual(await self.service.current_section("Beta"), None)
        self.assertIn("### Foundation\n\n## Coming Soon", self.priorities.text)

    async def test_group_change_moves_entry(self):
        result = await self.service.on_group_changed("Alpha", "Foundation")

        self.assertEqual(result.group, "Foundation")
        self.assertIn("### Foundation\n- [[Beta]]\n- 🎯 [[Alpha]]\n", self.priorities.text)

    async def test_manual_move_writes_status_and_clears_group(self):
        result = await self.service.on_manual_move("Beta", "On Hold")

        self.assertTrue(result.section_changed)
        self.assertEqual(self.attributes.raw("Beta"), {"status": "on-hold", "tags": ["project-page"]})
        self.assertIn("## On Hold\n- [[Beta]]\n", self.priorities.text)

    async def test_manual_move_next_to_anchor(self):
        await self.service.on_manual_move("Alpha", "Active", anchor="Beta", before=False)

        self.assertEqual(self.attributes.raw("Alpha")["priority-group"], "Foundation")
        self.assertNotIn("status", self.attributes.update_log[0][1])
        self.assertIn("### Foundation\n- [[Beta]]\n- 🎯 [[Alpha]]\n", self.priorities.text)

    async def test_manual_move_of_unlisted_project_is_reported(self):
        result = await self.service.on_manual_move("Delta", "Active")

        self.assertFalse(result.moved)
        self.assertEqual(self.notices, ["Delta is not listed in priorities"])
        self.assertEqual(self.priorities.writes, [])
        self.assertEqual(self.attributes.update_log, [])

    async def test_missing_document_is_reported(self):
        service = ProjectControlService(self.attributes, InMemoryPrioritiesStore(None), notify=self.notices.append)

        result = await service.on_status_changed("Alpha", "on-hold")

        self.assertIsNone(result)
        self.assertEqual(self.notices, [PRIORITIES_NOT_FOUND])
        self.assertIsNone(await service.load_document())

    async def test_bulk_resync_counts_synced_and_skipped(self):
        summary = await self.service.bulk_resync()

        self.assertEqual(summary, {"synced": 3, "skipped": 1})
        self.assertEqual(self.notices, ["Synced 3 projects to priorities (1 skipped - no status)"])
        self.assertEqual(await self.service.current_section("Gamma"), "Coming Soon")
        self.assertEqual(len(self.priorities.writes), 1)

    async def test_add_to_priorities_creates_default_section(self):
        added = await self.service.add_to_priorities("Delta", emoji="🌱")
        again = await self.service.add_to_priorities("Delta")

        self.assertTrue(added)
        self.assertFalse(again)
        self.assertEqual(len(self.priorities.writes), 1)
        self.assertTrue(self.priorities.text.endswith("## On Hold\n\n## Additional\n- 🌱 [[Delta]]\n\n---\nnotes\n"))

    async def test_add_to_priorities_uses_record_emoji(self):
        await self.service.on_status_changed("Alpha", "complete")

        await self.service.add_to_priorities("Alpha", "Coming Soon")

        self.assertIn("## Coming Soon\n- 🎯 [[Alpha]]\n", self.priorities.text)

    async def test_remove_unknown_project_writes_nothing(self):
        self.assertFalse(await self.service.remove_from_priorities("Missing"))
        self.assertEqual(self.priorities.writes, [])

    async def test_change_project_status_updates_attribute_and_document(self):
        result = await self.service.change_project_status("Gamma", "active")

        self.assertEqual(result.action, "inserted")
        self.assertEqual(self.attributes.raw("Gamma")["status"], "active")
        self.assertEqual(await self.service.current_section("Gamma"), "Active")
        self.assertEqual(self.notices, ["Gamma status changed to: active"])

    async def test_change_project_status_requires_known_project(self):
        self.assertIsNone(await self.service.change_project_status("Missing", "active"))
        self.assertEqual(self.notices, ["No main file found for Missing"])

    async def test_change_project_status_rejects_blank_status(self):
        with self.assertRaises(ValueError):
            self.service.change_project_status("Alpha", " ")

    async def test_change_project_group(self):
        await self.service.change_project_group("Beta", None)

        self.assertNotIn("priority-group", self.attributes.raw("Beta"))
        self.assertIn("## Active\n- 🎯 [[Alpha]]\n- [[Beta]]\n### Foundation\n", self.priorities.text)

    async def test_unlisted_projects(self):
        self.assertEqual(await self.service.unlisted_projects(), ["Delta", "Gamma"])

    async def test_failed_write_is_reported_and_later_jobs_run(self):
        async def broken_write(text):
            raise OSError("read-only vault")

        original_write = self.priorities.write
        self.priorities.write = broken_write
        with self.assertLogs("project_control.sync.write_queue", level="ERROR"):
            failed = await self.service.on_status_changed("Alpha", "on-hold")
        self.priorities.write = original_write

        self.assertIsNone(failed)
        self.assertEqual(self.notices, ["Failed to sync status of Alpha: read-only vault"])
        await self.service.on_status_changed("Alpha", "on-hold")
        self.assertEqual(await self.service.current_section("Alpha"), "On Hold")


class CountingAttributeStore(InMemoryAttributeStore):
    def __init__(self, records):
        super().__init__(records)
        self.reads = Counter()
        self.reader_threads = set()

    def get(self, project_name):
        self.reads[project_name] += 1
        self.reader_threads.add(threading.get_ident())
        return super().get(project_name)


class AttributeReadTests(unittest.IsolatedAsyncioTestCase):
    async def test_each_note_is_read_once_per_parse_off_the_event_loop(self):
        attributes = CountingAttributeStore(make_records())
        service = ProjectControlService(attributes, InMemoryPrioritiesStore(TEXT), notify=lambda message: None)

        await service.on_status_changed("Alpha", "on-hold")
        doc = await service.load_document()

        self.assertEqual(attributes.reads["Beta"], 2)
        self.assertEqual(attributes.reads["Gamma"], 2)
        self.assertEqual(attributes.reads["Delta"], 2)
        self.assertEqual(doc.unlisted, ["Delta", "Gamma"])
        self.assertNotIn(threading.get_ident(), attributes.reader_threads)


if __name__ == "__main__":
    unittest.main()
