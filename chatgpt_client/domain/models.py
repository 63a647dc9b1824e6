"""统一的消息、请求与结果数据模型。

本模块定义了客户端内部与 Provider 之间共享的标准数据结构：

- Message: 会话历史中的一条消息（用户或 ChatGPT 的一轮发言）。
- AskConfig: 调用方发起一次提问时的参数。
- ChatMessage / ChatRequest / ChatResult: 对话式（chat completion）模型的请求与响应。
- CompletionRequest / CompletionResult: 文本补全式（completion）模型的请求与响应。

Provider 适配器（如 OpenAIClient）只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, List


# 与 OpenAI chat completion 的 role 字段对应
Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Message:
    """会话历史中的一条消息。

    - text: 消息文本。
    - is_chatgpt: 是否为助手（ChatGPT）的回答。
    - user: 可选的发言人名称，渲染 prompt 时替代默认的 "User"。
    - role: chat 模型使用的角色字段。

    消息追加进会话后不可再修改，因此使用 frozen dataclass。
    """

    text: str
    is_chatgpt: bool = False
    user: str = ""
    role: Role = "user"


@dataclass
class AskConfig:
    """一次 Client.ask 调用的参数。

    chat 模型读取 messages，其余模型读取 prompt。
    max_request_response_tokens / max_response_tokens 为 0 时使用 Settings 中的默认值。
    """

    model: str
    prompt: str = ""
    messages: List[Message] = field(default_factory=list)
    max_request_response_tokens: int = 0
    max_response_tokens: int = 0


@dataclass
class ChatMessage:
    """chat completion 请求/响应中的一条消息。"""

    role: Role
    content: str


@dataclass
class ChatRequest:
    model: str
    messages: List[ChatMessage]
    max_tokens: int
    temperature: float = 0.1


@dataclass
class CompletionRequest:
    model: str
    prompt: str
    max_tokens: int


@dataclass
class Usage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class CompletionChoice:
    index: int
    text: str
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次 chat completion 调用的结果。raw 保存原始响应 JSON，便于调试。"""

    model: str
    choices: List[ChatChoice]
    usage: Optional[Usage] = None
    raw: Optional[dict] = None


@dataclass
class CompletionResult:
    model: str
    choices: List[CompletionChoice]
    usage: Optional[Usage] = None
    raw: Optional[dict] = None
