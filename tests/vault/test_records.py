import unittest

from project_control.vault import tagged_names
from project_control.vault.memory import InMemoryAttributeStore
from project_control.vault.records import AttributeRecord


class AttributeRecordTests(unittest.TestCase):
    def test_from_mapping_splits_known_and_extra_keys(self):
        record = AttributeRecord.from_mapping(
            {"status": "active", "priority-group": "Foundation", "tags": "#project-page, work", "owner": "sam"}
        )

        self.assertEqual(record.status, "active")
        self.assertEqual(record.priority_group, "Foundation")
        self.assertEqual(record.tags, ["project-page", "work"])
        self.assertEqual(record.extra, {"owner": "sam"})

    def test_blank_values_read_as_missing(self):
        record = AttributeRecord.from_mapping({"status": "  ", "emoji": None})

        self.assertIsNone(record.status)
        self.assertIsNone(record.emoji)


class InMemoryAttributeStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_update_and_tagged_names(self):
        store = InMemoryAttributeStore(
            {
                "Beta": {"tags": ["project-page"]},
                "Alpha": {"status": "active", "tags": ["project-page"]},
                "Notes": {},
            }
        )

        self.assertTrue(await store.update("Alpha", {"status": None}))
        self.assertFalse(await store.update("Missing", {"status": "active"}))

        self.assertIsNone(store.get("Alpha").status)
        self.assertEqual(tagged_names(store.snapshot(), "project-page"), ["Alpha", "Beta"])
        self.assertEqual(store.update_log, [("Alpha", {"status": None})])


if __name__ == "__main__":
    unittest.main()
