"""ChatGPT Client 顶层包。

该包在调用方与远端大模型 completion API 之间做中转，
包括配置加载、会话缓存、prompt 窗口构造与 Provider 适配。
"""

from chatgpt_client.client import ChatGPTClient
from chatgpt_client.config.settings import Settings, load_settings
from chatgpt_client.domain.conversation import Conversation, ConversationConfig
from chatgpt_client.domain.models import AskConfig, Message

__all__ = [
    "AskConfig",
    "ChatGPTClient",
    "Conversation",
    "ConversationConfig",
    "Message",
    "Settings",
    "load_settings",
]
