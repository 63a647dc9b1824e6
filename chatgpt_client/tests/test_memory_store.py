import logging
import threading

import pytest

from chatgpt_client.domain.conversation import Conversation, ConversationConfig
from chatgpt_client.infrastructure.logging.logger import logger
from chatgpt_client.infrastructure.storage.memory_store import MemoryConversationStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _factory(conversation_id, **kw):
    return lambda: Conversation(client=None, cfg=ConversationConfig(id=conversation_id, **kw))


def test_get_or_create_returns_existing_conversation():
    store = MemoryConversationStore(2, clock=FakeClock())
    first = store.get_or_create("c1", _factory("c1", model="a"), 60)
    second = store.get_or_create("c1", _factory("c1", model="b"), 60)
    assert second is first
    assert second.model == "a"


def test_capacity_evicts_least_recently_used():
    store = MemoryConversationStore(2, clock=FakeClock())
    store.get_or_create("c1", _factory("c1"), 60)
    store.get_or_create("c2", _factory("c2"), 60)
    # 访问 c1 后，c2 成为最久未访问的条目
    assert store.get("c1") is not None
    store.get_or_create("c3", _factory("c3"), 60)
    assert len(store) == 2
    assert "c2" not in store
    assert "c1" in store
    assert "c3" in store


def test_expired_entry_is_treated_as_absent():
    clock = FakeClock()
    store = MemoryConversationStore(5, clock=clock)
    old = store.get_or_create("c1", _factory("c1", model="a"), 10)
    clock.advance(9)
    assert store.get("c1") is old
    clock.advance(1)
    assert store.get("c1") is None
    new = store.get_or_create("c1", _factory("c1", model="b"), 10)
    assert new is not old
    assert new.model == "b"


def test_entries_have_independent_ttl():
    clock = FakeClock()
    store = MemoryConversationStore(5, clock=clock)
    store.get_or_create("short", _factory("short"), 5)
    store.get_or_create("long", _factory("long"), 50)
    clock.advance(6)
    assert len(store) == 1
    assert "long" in store


def test_delete_and_clear():
    store = MemoryConversationStore(5, clock=FakeClock())
    for cid in ("c1", "c2", "c3"):
        store.get_or_create(cid, _factory(cid), 60)
    store.delete("c1")
    store.delete("missing")
    assert store.get("c1") is None
    assert len(store) == 2
    store.clear()
    assert len(store) == 0


def test_invalid_capacity():
    with pytest.raises(ValueError):
        MemoryConversationStore(0)


def test_concurrent_get_or_create_creates_once():
    store = MemoryConversationStore(10)
    created = []

    def factory():
        conversation = Conversation(client=None, cfg=ConversationConfig(id="shared"))
        created.append(conversation)
        return conversation

    results = []

    def worker():
        results.append(store.get_or_create("shared", factory, 60))

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(created) == 1
    assert all(r is created[0] for r in results)


class LockStateHandler(logging.Handler):
    """记录每条日志写出时，其他线程能否拿到存储的锁。"""

    def __init__(self, lock):
        super().__init__()
        self._lock = lock
        self.records = []

    def emit(self, record):
        free = []

        def try_lock():
            acquired = self._lock.acquire(blocking=False)
            if acquired:
                self._lock.release()
            free.append(acquired)

        t = threading.Thread(target=try_lock)
        t.start()
        t.join()
        self.records.append((record.getMessage(), free[0]))


def test_store_events_are_logged_outside_the_lock():
    clock = FakeClock()
    store = MemoryConversationStore(1, clock=clock)
    handler = LockStateHandler(store._lock)
    logger.addHandler(handler)
    try:
        store.get_or_create("c1", _factory("c1"), 10)
        store.get_or_create("c2", _factory("c2"), 10)
        clock.advance(10)
        assert store.get("c2") is None
    finally:
        logger.removeHandler(handler)

    assert handler.records == [("store.evict", True), ("store.expired", True)]
