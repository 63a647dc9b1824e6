"""Provider 抽象接口。

ChatGPTClient 不直接依赖具体的 HTTP 实现，而是依赖此协议，
测试时可以用任意实现了这两个方法的桩对象替换真实的远端调用。
"""

from typing import Protocol

from chatgpt_client.domain.models import ChatRequest, ChatResult, CompletionRequest, CompletionResult


class CompletionProvider(Protocol):
    """远端 completion API 协议。

    - create_completion(req): 文本补全，答案位于 choices[0].text。
    - create_chat_completion(req): 对话补全，答案位于 choices[0].message.content。

    重试、退避与鉴权都是实现者自己的事情。
    """

    name: str

    def create_completion(self, req: CompletionRequest) -> CompletionResult:
        ...

    def create_chat_completion(self, req: ChatRequest) -> ChatResult:
        ...
