"""Tests for the timer session caches and client settings."""
import pytest
from datetime import datetime, timezone
from pathlib import Path


class TestFileSessionCache:
    """Tests for the on-disk cache."""

    def test_round_trip(self, tmp_path):
        from kaizen.client.cache import FileSessionCache

        cache = FileSessionCache(tmp_path / "nested")
        cache.write("user123", '{"a": 1}')

        assert cache.read("user123") == '{"a": 1}'
        assert list((tmp_path / "nested").iterdir()) == [
            tmp_path / "nested" / "timer_user123.json"
        ]

    def test_keys_are_isolated(self, tmp_path):
        from kaizen.client.cache import FileSessionCache

        cache = FileSessionCache(tmp_path)
        cache.write("alice", "a")
        cache.write("bob", "b")
        cache.clear("alice")

        assert cache.read("alice") is None
        assert cache.read("bob") == "b"

    def test_unsafe_key_stays_inside_directory(self, tmp_path):
        from kaizen.client.cache import FileSessionCache

        cache = FileSessionCache(tmp_path)
        cache.write("../evil/key", "x")

        assert cache.read("../evil/key") == "x"
        assert [p.parent for p in tmp_path.iterdir()] == [tmp_path]

    def test_clear_missing_is_noop(self, tmp_path):
        from kaizen.client.cache import FileSessionCache

        FileSessionCache(tmp_path).clear("nobody")


class TestMemorySessionCache:
    def test_shared_instance(self):
        from kaizen.client.cache import MemorySessionCache

        cache = MemorySessionCache()
        cache.write("user123", "payload")

        assert cache.read("user123") == "payload"
        cache.clear("user123")
        cache.clear("user123")
        assert cache.read("user123") is None


class TestTimerSession:
    def test_start_time_normalized_to_utc(self):
        from kaizen.client.session import TimerSession

        session = TimerSession(
            task_id="t1",
            task_name="Write report",
            project_id="p1",
            project_name="Work",
            project_color="#FF5733",
            start_time=datetime(2024, 1, 5, 12, 0),
        )

        assert session.start_time == datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


class TestClientSettings:
    def test_env_prefix(self, monkeypatch, tmp_path):
        from kaizen.client.config import ClientSettings

        monkeypatch.setenv("KAIZEN_API_URL", "http://api.example.com")
        monkeypatch.setenv("KAIZEN_CACHE_DIR", str(tmp_path))

        settings = ClientSettings()

        assert settings.api_url == "http://api.example.com"
        assert settings.resolved_cache_dir == tmp_path

    def test_default_cache_dir(self, monkeypatch):
        from kaizen.client.config import ClientSettings

        monkeypatch.delenv("KAIZEN_CACHE_DIR", raising=False)

        settings = ClientSettings()

        assert isinstance(settings.resolved_cache_dir, Path)
        assert "kaizen" in str(settings.resolved_cache_dir)


class TestSessionCacheContract:
    def test_partial_subclass_rejected(self):
        from kaizen.client.cache import SessionCache

        class ReadOnlyCache(SessionCache):
            def read(self, user_key):
                return None

        with pytest.raises(TypeError):
            ReadOnlyCache()


class TestRestoreFromDisk:
    """Tests for restoring a session from a damaged cache file."""

    def test_undecodable_file_dropped(self, tmp_path):
        from unittest.mock import AsyncMock
        from kaizen.client.cache import FileSessionCache
        from kaizen.client.timer import TimerManager

        path = tmp_path / "timer_u1.json"
        path.write_bytes(b"\xff\xfe garbage")

        manager = TimerManager(AsyncMock(), FileSessionCache(tmp_path), "u1")

        assert manager.restore() is None
        assert manager.session is None
        assert not path.exists()
