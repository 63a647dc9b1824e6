"""ChatGPT 客户端。

对外提供提问与会话管理能力：

- ask: 按模型类型选择 chat 或 completion 接口，返回去掉首尾空白的回答。
- get_or_create_conversation / get_conversation: 按 id 获取（或创建）会话。
- reset_conversation / reset_conversations: 丢弃会话。
- change_conversation_model: 修改某个会话使用的模型。

远端调用失败时异常原样抛出，本层不做重试。
"""

from typing import Optional

from chatgpt_client.config.settings import Settings
from chatgpt_client.domain.conversation import Conversation, ConversationConfig, ConversationStore
from chatgpt_client.domain.exceptions import ConversationNotFoundError, RemoteCallError
from chatgpt_client.domain.models import AskConfig, ChatRequest, CompletionRequest
from chatgpt_client.infrastructure.logging.logger import logger, setup_logger
from chatgpt_client.infrastructure.storage.memory_store import MemoryConversationStore
from chatgpt_client.prompts import build_chat_messages, calc_max_response_tokens
from chatgpt_client.providers import create_provider
from chatgpt_client.providers.base import CompletionProvider
from chatgpt_client.providers.registry import is_chat_model


class ChatGPTClient:
    def __init__(
        self,
        settings: Settings,
        provider: Optional[CompletionProvider] = None,
        store: Optional[ConversationStore] = None,
    ):
        setup_logger(settings)
        self._settings = settings
        self._provider = provider or create_provider(settings)
        self._store = store or MemoryConversationStore(settings.max_conversations)

    @property
    def settings(self) -> Settings:
        return self._settings

    def ask(self, cfg: AskConfig) -> str:
        max_request_response_tokens = cfg.max_request_response_tokens or self._settings.max_request_response_tokens
        max_response_tokens = cfg.max_response_tokens or self._settings.max_response_tokens
        logger.info("client.ask.start", extra={"extra": {"model": cfg.model}})
        try:
            if is_chat_model(cfg.model):
                answer = self._ask_chat(cfg, max_request_response_tokens, max_response_tokens)
            else:
                answer = self._ask_completion(cfg, max_request_response_tokens, max_response_tokens)
        except RemoteCallError as e:
            logger.error(
                "client.ask.failed",
                extra={"extra": {"model": cfg.model, "code": e.code, "error": e.message}},
            )
            raise
        logger.info("client.ask.done", extra={"extra": {"model": cfg.model, "answer_length": len(answer)}})
        return answer

    def _ask_chat(self, cfg: AskConfig, max_request_response_tokens: int, max_response_tokens: int) -> str:
        messages = build_chat_messages(cfg.messages)
        message_length = sum(len(m.content) for m in messages)
        max_tokens = calc_max_response_tokens(message_length, max_request_response_tokens, max_response_tokens)
        result = self._provider.create_chat_completion(
            ChatRequest(model=cfg.model, messages=messages, max_tokens=max_tokens, temperature=0.1)
        )
        return result.choices[0].message.content.strip()

    def _ask_completion(self, cfg: AskConfig, max_request_response_tokens: int, max_response_tokens: int) -> str:
        max_tokens = calc_max_response_tokens(len(cfg.prompt), max_request_response_tokens, max_response_tokens)
        result = self._provider.create_completion(
            CompletionRequest(model=cfg.model, prompt=cfg.prompt, max_tokens=max_tokens)
        )
        return result.choices[0].text.strip()

    def get_or_create_conversation(
        self,
        conversation_id: str,
        cfg: Optional[ConversationConfig] = None,
    ) -> Conversation:
        """获取会话，不存在或已过期时用 cfg（空字段以全局配置补齐）新建。

        已存在的会话原样返回，cfg 被忽略。会话总是以 conversation_id 为键存放。
        """

        cfg = self._merge_config(conversation_id, cfg or ConversationConfig())
        created = []

        def _create() -> Conversation:
            conversation = Conversation(self, cfg)
            created.append(conversation)
            return conversation

        conversation = self._store.get_or_create(conversation_id, _create, cfg.max_age)
        if created:
            logger.info(
                "conversation.created",
                extra={"extra": {"conversation_id": conversation_id, "model": cfg.model, "max_age": cfg.max_age}},
            )
        return conversation

    def get_conversation(self, conversation_id: str) -> Conversation:
        conversation = self._store.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    def reset_conversations(self) -> None:
        self._store.clear()

    def reset_conversation(self, conversation_id: str) -> None:
        self._store.delete(conversation_id)

    def change_conversation_model(self, conversation_id: str, model: str) -> None:
        conversation = self.get_conversation(conversation_id)
        conversation.set_model(model)
        logger.info(
            "conversation.model_changed",
            extra={"extra": {"conversation_id": conversation_id, "model": model}},
        )

    def _merge_config(self, conversation_id: str, cfg: ConversationConfig) -> ConversationConfig:
        s = self._settings
        return ConversationConfig(
            id=cfg.id or conversation_id,
            model=cfg.model or s.default_model,
            context=cfg.context or s.conversation_context,
            language=cfg.language or s.conversation_language,
            chatgpt_name=cfg.chatgpt_name or s.chatgpt_name,
            max_age=cfg.max_age or s.conversation_max_age,
            max_request_response_tokens=cfg.max_request_response_tokens or s.max_request_response_tokens,
            max_response_tokens=cfg.max_response_tokens or s.max_response_tokens,
        )
