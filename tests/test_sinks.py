"""Tests for file sinks."""

from __future__ import annotations

import base64
import io
import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from govstream.pipeline import (
    PathLocks,
    SinkWriter,
    decode_fallback_line,
    encode_fallback_line,
    serialize_record,
)
from govstream.pipeline.sinks import DEFAULT_LOCKS


@pytest.fixture
def record():
    return {"category": "Signup", "message": "héllo", "ssn": "***REDACTED***"}


class TestFallbackEncoding:
    """Tests for the fallback line encoding."""

    def test_encoded_line_is_base64_of_payload(self, record):
        """Test the fallback line is base64 of the JSON payload."""
        payload = serialize_record(record)
        line = encode_fallback_line(payload)
        assert base64.b64decode(line).decode("utf-8") == payload

    def test_decode(self, record):
        """Test decoding an encoded line."""
        line = encode_fallback_line(serialize_record(record))
        assert decode_fallback_line(line + "\n") == record

    def test_decode_invalid(self):
        """Test invalid lines raise ValueError."""
        with pytest.raises(ValueError):
            decode_fallback_line("not base64!!")

    def test_serialize_non_json_values(self):
        """Test values without a JSON form are stringified."""
        payload = serialize_record({"path": Path("logs") / "app.log"})
        assert json.loads(payload) == {"path": str(Path("logs") / "app.log")}

    def test_serialize_keeps_unicode(self):
        """Test non-ASCII text is not escaped."""
        assert "héllo" in serialize_record({"m": "héllo"})


class TestSinkWriter:
    """Tests for SinkWriter."""

    def test_writes_primary_and_encoded_fallback(self, tmp_path, record):
        """Test one line per sink, fallback encoded."""
        primary = tmp_path / "logs" / "primary.log"
        fallback = tmp_path / "logs" / "fallback.log"
        writer = SinkWriter(primary, fallback)

        assert writer.write(record) == []

        assert json.loads(primary.read_text(encoding="utf-8")) == record
        lines = fallback.read_text().splitlines()
        assert len(lines) == 1
        assert decode_fallback_line(lines[0]) == record
        assert "REDACTED" not in lines[0]

    def test_plain_fallback(self, tmp_path, record):
        """Test the fallback holds plaintext when encoding is off."""
        fallback = tmp_path / "fallback.log"
        writer = SinkWriter(tmp_path / "primary.log", fallback, fallback_encoded=False)
        writer.write(record)
        assert json.loads(fallback.read_text(encoding="utf-8")) == record

    def test_no_fallback(self, tmp_path, record):
        """Test only the primary file is written without a fallback path."""
        writer = SinkWriter(tmp_path / "primary.log")
        writer.write(record)
        assert writer.paths == [tmp_path / "primary.log"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["primary.log"]

    def test_appends(self, tmp_path):
        """Test records are appended one per line."""
        primary = tmp_path / "primary.log"
        writer = SinkWriter(primary)
        writer.write({"n": 1})
        writer.write({"n": 2})
        assert [json.loads(line)["n"] for line in primary.read_text().splitlines()] == [1, 2]

    def test_failure_contained(self, tmp_path, record):
        """Test a failing primary does not stop the fallback write."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        primary = blocker / "primary.log"
        fallback = tmp_path / "fallback.log"
        writer = SinkWriter(primary, fallback)

        failed = writer.write(record)

        assert failed == [primary]
        assert decode_fallback_line(fallback.read_text().strip()) == record

    def test_unencodable_characters_written(self, tmp_path):
        """Test a lone surrogate is escaped instead of dropping the record."""
        primary = tmp_path / "primary.log"
        fallback = tmp_path / "fallback.log"
        record = {"name": "bad\udcff.txt"}
        writer = SinkWriter(primary, fallback)

        assert writer.write(record) == []

        assert json.loads(primary.read_text(encoding="utf-8")) == record
        assert decode_fallback_line(fallback.read_text().strip()) == record

    def test_fallback_encoding_failure_contained(self, tmp_path, record):
        """Test a fallback encoding error is reported as a failed sink."""
        primary = tmp_path / "primary.log"
        fallback = tmp_path / "fallback.log"
        writer = SinkWriter(primary, fallback)

        with patch("govstream.pipeline.sinks.encode_fallback_line", side_effect=ValueError("bad")):
            failed = writer.write(record)

        assert failed == [fallback]
        assert json.loads(primary.read_text(encoding="utf-8")) == record

    def test_stream_echo(self, tmp_path, record):
        """Test every record is echoed to the stream as plaintext."""
        stream = io.StringIO()
        writer = SinkWriter(tmp_path / "primary.log", tmp_path / "fallback.log", stream=stream)
        writer.write(record)
        writer.write({"n": 2})

        lines = stream.getvalue().splitlines()
        assert [json.loads(line) for line in lines] == [record, {"n": 2}]

    def test_stream_failure_contained(self, tmp_path, record):
        """Test a closed stream does not fail the file sinks."""
        stream = io.StringIO()
        stream.close()
        writer = SinkWriter(tmp_path / "primary.log", stream=stream)
        assert writer.write(record) == []

    def test_creation_time_recorded_once(self, tmp_path):
        """Test the creation time is set on the first write only."""
        locks = PathLocks()
        primary = tmp_path / "primary.log"
        writer = SinkWriter(primary, locks=locks)

        assert locks.created_at(primary) is None
        writer.write({"n": 1})
        first = locks.created_at(primary)
        writer.write({"n": 2})

        assert first is not None
        assert locks.created_at(primary) == first

    def test_concurrent_writes_do_not_interleave(self, tmp_path):
        """Test concurrent writers produce whole lines."""
        primary = tmp_path / "primary.log"
        writer = SinkWriter(primary)

        def worker(n):
            for i in range(50):
                writer.write({"thread": n, "i": i, "pad": "x" * 200})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = primary.read_text().splitlines()
        assert len(lines) == 200
        for line in lines:
            json.loads(line)


class TestPathLocks:
    """Tests for PathLocks."""

    def test_same_path_same_lock(self, tmp_path):
        """Test equivalent paths share a lock."""
        locks = PathLocks()
        assert locks.get(tmp_path / "a.log") is locks.get(str(tmp_path / "a.log"))
        assert len(locks) == 1

    def test_different_paths(self, tmp_path):
        """Test different paths get different locks."""
        locks = PathLocks()
        assert locks.get(tmp_path / "a.log") is not locks.get(tmp_path / "b.log")

    def test_shared_registry(self, tmp_path):
        """Test an empty registry passed in is used as-is."""
        locks = PathLocks()
        writer = SinkWriter(tmp_path / "a.log", locks=locks)
        assert writer.locks is locks

    def test_default_registry_shared(self, tmp_path):
        """Test writers without a registry share the process-wide one."""
        first = SinkWriter(tmp_path / "a.log")
        second = SinkWriter(tmp_path / "b.log")
        assert first.locks is DEFAULT_LOCKS
        assert second.locks is DEFAULT_LOCKS

    def test_forget(self, tmp_path):
        """Test forgetting a path drops its creation time."""
        locks = PathLocks()
        path = tmp_path / "a.log"
        locks.mark_created(path, datetime.now(UTC))
        locks.forget(str(path))
        assert locks.created_at(path) is None
