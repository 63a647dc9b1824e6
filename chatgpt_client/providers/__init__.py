"""远端 completion API 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 登记模型属于 chat 还是 completion 接口 (registry)。
- 提供 OpenAI HTTP 实现 (openai_client)。
"""

from chatgpt_client.config.settings import Settings
from chatgpt_client.providers.base import CompletionProvider
from chatgpt_client.providers.openai_client import OpenAIClient


def create_provider(settings: Settings) -> CompletionProvider:
    return OpenAIClient(settings)
