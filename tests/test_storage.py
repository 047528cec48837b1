"""Tests for the CSV and JSON Lines sinks."""

import csv
import json
import os
import tempfile
import unittest

from deface_crawler.models import RECORD_HEADER, Record
from deface_crawler.storage import CsvStorage, JsonlStorage, open_storage

RECORD = Record("A", "VN", "http://x", "1.2.3.4", "2024-01-01")


class _TempDirCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def path(self, name):
        return os.path.join(self._tmp.name, name)


class TestCsvStorage(_TempDirCase):
    """Verify the CSV layout: header first, one row per record."""

    def test_header_then_rows(self):
        path = self.path("out.csv")
        with CsvStorage(path) as sink:
            sink.write_records([RECORD, RECORD])
            sink.write_records([])
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], list(RECORD_HEADER))
        self.assertEqual(rows[1:], [list(RECORD.as_row())] * 2)

    def test_header_written_even_without_records(self):
        path = self.path("empty.csv")
        CsvStorage(path).close()
        with open(path, newline="", encoding="utf-8") as f:
            self.assertEqual(list(csv.reader(f)), [list(RECORD_HEADER)])

    def test_close_is_idempotent(self):
        sink = CsvStorage(self.path("out.csv"))
        sink.close()
        sink.close()
        self.assertTrue(sink.closed)

    def test_write_after_close_raises(self):
        sink = CsvStorage(self.path("out.csv"))
        sink.close()
        with self.assertRaises(ValueError):
            sink.write_records([RECORD])

    def test_closed_on_exception(self):
        with self.assertRaises(RuntimeError):
            with CsvStorage(self.path("out.csv")) as sink:
                raise RuntimeError("boom")
        self.assertTrue(sink.closed)


class TestJsonlStorage(_TempDirCase):
    def test_one_object_per_record(self):
        path = self.path("out.jsonl")
        with JsonlStorage(path) as sink:
            sink.write_records([RECORD])
        with open(path, encoding="utf-8") as f:
            lines = [json.loads(line) for line in f]
        self.assertEqual(lines, [dict(zip(RECORD_HEADER, RECORD.as_row()))])


class TestOpenStorage(_TempDirCase):
    def test_picks_by_extension(self):
        csv_sink = open_storage(self.path("a.csv"))
        jsonl_sink = open_storage(self.path("a.JSONL"))
        other = open_storage(self.path("a.out"))
        for sink in (csv_sink, jsonl_sink, other):
            sink.close()
        self.assertIsInstance(csv_sink, CsvStorage)
        self.assertIsInstance(jsonl_sink, JsonlStorage)
        self.assertIsInstance(other, CsvStorage)


if __name__ == "__main__":
    unittest.main()
