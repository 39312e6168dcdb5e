import base64
from unittest import IsolatedAsyncioTestCase, TestCase

from chat_client.attachments import CHUNK_SIZE, LocalFile, PreviewRegistry, encode_file, encode_files
from chat_client.progress import HIGH_WATER, READ_END, READ_START, TRANSMIT_END, UploadProgress


class UploadProgressTestCase(TestCase):

    def test_phases_are_monotonic_and_bounded(self):
        values = []
        progress = UploadProgress(2, on_change=values.append)

        progress.file_read(0, 0.5)
        progress.file_read(0, 1.0)
        progress.file_read(0, 0.2)
        progress.file_read(1, 1.0)
        progress.read_done()
        progress.transmitted(0.5)
        progress.transmitted(0.1)
        progress.transmitted(1.0)

        self.assertEqual(values, sorted(values))
        self.assertEqual(len(values), len(set(values)))
        self.assertTrue(all(READ_START < value <= TRANSMIT_END for value in values))
        self.assertEqual(progress.value, TRANSMIT_END)

    def test_read_phase_ends_at_read_end(self):
        progress = UploadProgress(3)
        progress.file_read(2, 1.0)
        self.assertEqual(progress.value, READ_END)

    def test_high_water_never_moves_backwards(self):
        progress = UploadProgress(1)
        progress.read_done()
        progress.high_water()
        self.assertEqual(progress.value, HIGH_WATER)

        progress.transmitted(0.1)
        self.assertEqual(progress.value, HIGH_WATER)


class PreviewRegistryTestCase(TestCase):

    def test_create_and_revoke(self):
        registry = PreviewRegistry()
        photo = LocalFile(name="a.png", data=b"x")

        url = registry.create(photo)

        self.assertTrue(url.startswith("preview://"))
        self.assertIs(registry.resolve(url), photo)
        registry.revoke(url)
        self.assertNotIn(url, registry)
        self.assertEqual(len(registry), 0)


class EncodeFilesTestCase(IsolatedAsyncioTestCase):

    async def test_chunked_encoding_matches_single_pass(self):
        data = bytes(range(256)) * ((CHUNK_SIZE * 2) // 256 + 3)
        local_file = LocalFile(name="scan.pdf", data=data)
        fractions = []

        url = await encode_file(local_file, fractions.append)

        self.assertEqual(url, "data:application/pdf;base64," + base64.b64encode(data).decode("ascii"))
        self.assertEqual(fractions, sorted(fractions))
        self.assertEqual(fractions[-1], 1.0)

    async def test_encode_files_reports_progress_in_order(self):
        values = []
        progress = UploadProgress(2, on_change=values.append)
        files = [LocalFile(name="one.txt", data=b"hello"), LocalFile(name="two.txt", data=b"")]

        payload = await encode_files(files, progress)

        self.assertEqual([item["name"] for item in payload], ["one.txt", "two.txt"])
        self.assertEqual(payload[0]["type"], "text/plain")
        self.assertEqual(payload[0]["size"], 5)
        self.assertEqual(payload[1]["url"], "data:text/plain;base64,")
        self.assertEqual(values[-1], READ_END)
        self.assertEqual(values, sorted(values))
