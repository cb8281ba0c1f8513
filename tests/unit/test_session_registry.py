"""Unit tests for the live session registry."""

import uuid
from concurrent.futures import ThreadPoolExecutor

from catalog.notifications.registry import SessionRegistry


class _Channel:
    async def send_json(self, data):
        pass


class TestSessionRegistry:
    """Tests for SessionRegistry."""

    def test_lookup_missing_returns_none(self):
        registry = SessionRegistry()
        assert registry.lookup(uuid.uuid4()) is None
        assert len(registry) == 0

    def test_register_and_lookup(self):
        registry = SessionRegistry()
        recipient = uuid.uuid4()
        channel = _Channel()

        assert registry.register(recipient, channel) is None
        assert registry.lookup(recipient) is channel
        assert recipient in registry

    def test_last_writer_wins(self):
        registry = SessionRegistry()
        recipient = uuid.uuid4()
        old, new = _Channel(), _Channel()

        registry.register(recipient, old)
        replaced = registry.register(recipient, new)

        assert replaced is old
        assert registry.lookup(recipient) is new

    def test_stale_channel_cannot_evict_replacement(self):
        """A late close of the old socket must not remove the new one."""
        registry = SessionRegistry()
        recipient = uuid.uuid4()
        old, new = _Channel(), _Channel()
        registry.register(recipient, old)
        registry.register(recipient, new)

        assert registry.unregister(recipient, old) is False
        assert registry.lookup(recipient) is new

        assert registry.unregister(recipient, new) is True
        assert registry.lookup(recipient) is None

    def test_unregister_without_handle_removes_entry(self):
        registry = SessionRegistry()
        recipient = uuid.uuid4()
        registry.register(recipient, _Channel())

        assert registry.unregister(recipient) is True
        assert registry.unregister(recipient) is False

    def test_unregister_by_handle(self):
        registry = SessionRegistry()
        shared, other = _Channel(), _Channel()
        a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        registry.register(a, shared)
        registry.register(b, shared)
        registry.register(c, other)

        removed = registry.unregister_by_handle(shared)

        assert set(removed) == {a, b}
        assert registry.recipients() == [c]
        assert registry.unregister_by_handle(shared) == []

    def test_concurrent_registration(self):
        registry = SessionRegistry()
        recipients = [uuid.uuid4() for _ in range(200)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda rid: registry.register(rid, _Channel()), recipients))

        assert len(registry) == 200
        assert set(registry.recipients()) == set(recipients)
