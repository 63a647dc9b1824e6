from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol

from chatgpt_client.domain.models import AskConfig, Message
from chatgpt_client.prompts import build_prompt
from chatgpt_client.providers.registry import is_chat_model

if TYPE_CHECKING:
    from chatgpt_client.client import ChatGPTClient


@dataclass
class ConversationConfig:
    """新建会话时的参数，空值由 ChatGPTClient 用全局配置补齐。"""

    id: str = ""
    model: str = ""
    context: str = ""
    language: str = ""
    chatgpt_name: str = ""
    max_age: int = 0  # 秒
    max_request_response_tokens: int = 0
    max_response_tokens: int = 0


def _today() -> str:
    return datetime.now().strftime("%Y-%m-%d")


class Conversation:
    """一个多轮会话：历史消息 + 会话级配置。

    历史只追加不重排；一次提问成功后问题和回答成对追加，失败时历史保持不变。
    """

    def __init__(self, client: "ChatGPTClient", cfg: ConversationConfig):
        self._client = client
        self._cfg = cfg
        self._model = cfg.model
        self._messages: List[Message] = []
        self._lock = threading.RLock()

    @property
    def id(self) -> str:
        return self._cfg.id

    @property
    def model(self) -> str:
        with self._lock:
            return self._model

    @property
    def context(self) -> str:
        return self._cfg.context

    @property
    def language(self) -> str:
        return self._cfg.language

    @property
    def chatgpt_name(self) -> str:
        return self._cfg.chatgpt_name

    @property
    def max_age(self) -> int:
        return self._cfg.max_age

    def set_model(self, model: str) -> None:
        with self._lock:
            self._model = model

    def messages(self) -> List[Message]:
        """返回历史消息快照（最旧在前）。"""

        with self._lock:
            return list(self._messages)

    def ask(self, question: str, user: str = "") -> str:
        """向模型提问并把问答追加到历史，返回去掉首尾空白的回答。"""

        question_message = Message(text=question, user=user, role="user")
        with self._lock:
            history = self._messages + [question_message]
            model = self._model

        ask_cfg = self._build_ask_config(model, history)
        answer = self._client.ask(ask_cfg)

        with self._lock:
            self._messages.append(question_message)
            self._messages.append(Message(text=answer, is_chatgpt=True, role="assistant"))
        return answer

    def _build_ask_config(self, model: str, history: List[Message]) -> AskConfig:
        context = self._full_context()
        if is_chat_model(model):
            messages = list(history)
            if context:
                messages.insert(0, Message(text=context, role="system"))
            return AskConfig(
                model=model,
                messages=messages,
                max_request_response_tokens=self._cfg.max_request_response_tokens,
                max_response_tokens=self._cfg.max_response_tokens,
            )

        max_length = self._cfg.max_request_response_tokens - self._cfg.max_response_tokens
        prompt = build_prompt(context, _today(), history, max_length, self._cfg.chatgpt_name)
        return AskConfig(
            model=model,
            prompt=prompt,
            max_request_response_tokens=self._cfg.max_request_response_tokens,
            max_response_tokens=self._cfg.max_response_tokens,
        )

    def _full_context(self) -> str:
        if not self._cfg.language:
            return self._cfg.context
        instruction = f"Please answer in {self._cfg.language}."
        if not self._cfg.context:
            return instruction
        return f"{self._cfg.context}\n{instruction}"


class ConversationStore(Protocol):
    def get(self, conversation_id: str) -> Optional[Conversation]:
        ...

    def get_or_create(
        self,
        conversation_id: str,
        factory: Callable[[], Conversation],
        max_age: int,
    ) -> Conversation:
        ...

    def delete(self, conversation_id: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def __len__(self) -> int:
        ...
