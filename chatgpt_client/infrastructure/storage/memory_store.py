"""进程内会话存储。

容量有限的 LRU 缓存，每个条目带独立的存活时间（秒）：

- 访问已过期的条目等同于条目不存在，并在这次访问时顺手淘汰（没有后台清理线程）。
- 插入新条目导致超出容量时，淘汰最久未被访问的条目。
- 所有读改写操作都在同一把锁内完成，多个调用方不会看到中间状态。
  日志在释放锁之后才写出。
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional

from chatgpt_client.domain.conversation import Conversation, ConversationStore
from chatgpt_client.infrastructure.logging.logger import logger


@dataclass
class _Entry:
    conversation: Conversation
    expires_at: float


class MemoryConversationStore(ConversationStore):
    def __init__(self, max_conversations: int, clock: Callable[[], float] = time.monotonic):
        if max_conversations < 1:
            raise ValueError("max_conversations must be greater than 0")
        self._capacity = max_conversations
        self._clock = clock
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = threading.RLock()

    def get(self, conversation_id: str) -> Optional[Conversation]:
        expired: List[str] = []
        with self._lock:
            entry = self._touch(conversation_id, expired)
        self._log_removed(expired, [])
        return entry.conversation if entry else None

    def get_or_create(
        self,
        conversation_id: str,
        factory: Callable[[], Conversation],
        max_age: int,
    ) -> Conversation:
        """命中则原样返回已有会话（忽略新参数），否则调用 factory 创建并插入。"""

        expired: List[str] = []
        evicted: List[str] = []
        with self._lock:
            entry = self._touch(conversation_id, expired)
            if entry is not None:
                conversation = entry.conversation
            else:
                conversation = factory()
                self._entries[conversation_id] = _Entry(conversation, self._clock() + max_age)
                while len(self._entries) > self._capacity:
                    evicted_id, _ = self._entries.popitem(last=False)
                    evicted.append(evicted_id)
        self._log_removed(expired, evicted)
        return conversation

    def delete(self, conversation_id: str) -> None:
        with self._lock:
            self._entries.pop(conversation_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.expires_at <= now]
            for conversation_id in expired:
                del self._entries[conversation_id]
            size = len(self._entries)
        self._log_removed(expired, [])
        return size

    def __contains__(self, conversation_id: str) -> bool:
        expired: List[str] = []
        with self._lock:
            entry = self._entries.get(conversation_id)
            if entry is not None and entry.expires_at <= self._clock():
                del self._entries[conversation_id]
                expired.append(conversation_id)
                entry = None
        self._log_removed(expired, [])
        return entry is not None

    def _touch(self, conversation_id: str, expired: List[str]) -> Optional[_Entry]:
        # 调用方需已持有锁；过期的 id 记入 expired，由调用方在锁外写日志
        entry = self._entries.get(conversation_id)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[conversation_id]
            expired.append(conversation_id)
            return None
        self._entries.move_to_end(conversation_id)
        return entry

    @staticmethod
    def _log_removed(expired: List[str], evicted: List[str]) -> None:
        for conversation_id in expired:
            logger.info("store.expired", extra={"extra": {"conversation_id": conversation_id}})
        for conversation_id in evicted:
            logger.info("store.evict", extra={"extra": {"conversation_id": conversation_id}})
