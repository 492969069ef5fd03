import tempfile
import unittest
from pathlib import Path

from youtuply.core.exceptions import LoadError
from youtuply.models.instance import BotSettings
from youtuply.repositories.settings import SettingsRepository, parse_record_name, record_name
from youtuply.repositories.storage import JsonFileStore


class JsonFileStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = Path(self._tmp.name) / "nested" / "settings"
        self.store = JsonFileStore(self.directory)

    async def asyncTearDown(self) -> None:
        self._tmp.cleanup()

    async def test_directory_is_created_on_first_write(self) -> None:
        self.assertFalse(self.directory.exists())
        await self.store.save("record", {"a": 1})
        self.assertTrue(self.directory.is_dir())
        self.assertEqual(await self.store.load("record"), {"a": 1})

    async def test_list_names_ignores_other_files(self) -> None:
        self.assertEqual(await self.store.list_names(), [])
        await self.store.save("b", {})
        await self.store.save("a", {})
        (self.directory / "notes.txt").write_text("x")
        self.assertEqual(await self.store.list_names(), ["a", "b"])

    async def test_save_replaces_without_leaving_temp_files(self) -> None:
        await self.store.save("record", {"v": 1})
        await self.store.save("record", {"v": 2})
        self.assertEqual(await self.store.load("record"), {"v": 2})
        self.assertEqual([p.name for p in self.directory.iterdir()], ["record.json"])

    async def test_delete(self) -> None:
        await self.store.save("record", {})
        self.assertTrue(await self.store.delete("record"))
        self.assertFalse(await self.store.delete("record"))
        with self.assertRaises(FileNotFoundError):
            await self.store.load("record")


class RecordNameTests(unittest.TestCase):
    def test_record_name(self) -> None:
        self.assertEqual(record_name(BotSettings(user_id="U1", server_id="S1")), "S1_U1")
        self.assertEqual(record_name(BotSettings(user_id="U1")), "U1")

    def test_parse_record_name(self) -> None:
        self.assertEqual(parse_record_name("C1_U1"), ("C1", "U1"))
        self.assertEqual(parse_record_name("U2"), ("", "U2"))
        self.assertEqual(parse_record_name("U2_"), ("", "U2_"))


class SettingsRepositoryTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = Path(self._tmp.name)
        self.repo = SettingsRepository(JsonFileStore(self.directory))

    async def asyncTearDown(self) -> None:
        self._tmp.cleanup()

    async def test_save_and_load_round_trip(self) -> None:
        settings = BotSettings(
            user_id="U1", server_id="S1", server_name="Server", connections={"C1": "PL1"}
        )
        name = await self.repo.save(settings)
        self.assertEqual(name, "S1_U1")
        self.assertEqual(await self.repo.load(name), settings)

    async def test_legacy_record_without_ids(self) -> None:
        (self.directory / "U2.json").write_text('{"server": "Old", "connections": {"C9": "PL9"}}')
        settings = await self.repo.load("U2")
        self.assertEqual(settings.user_id, "U2")
        self.assertEqual(settings.server_id, "")
        self.assertEqual(settings.server_name, "Old")
        self.assertEqual(settings.connections, {"C9": "PL9"})

    async def test_unparsable_record_raises_load_error(self) -> None:
        (self.directory / "S1_U1.json").write_text("{not json")
        with self.assertRaises(LoadError) as ctx:
            await self.repo.load("S1_U1")
        self.assertEqual(ctx.exception.name, "S1_U1")

    async def test_invalid_connections_raise_load_error(self) -> None:
        (self.directory / "U1.json").write_text('{"userId": "U1", "connections": ["C1"]}')
        with self.assertRaises(LoadError):
            await self.repo.load("U1")


if __name__ == "__main__":
    unittest.main()
