"""模型配置。

本模块集中登记已知模型属于哪一类接口：

- chat 模型：走 /v1/chat/completions，请求体是带 role 的消息列表。
- completion 模型：走 /v1/completions，请求体是一整段拼接好的 prompt。

未登记的模型一律按 completion 模型处理。
"""

from dataclasses import dataclass
from typing import Mapping


MODEL_GPT3_5_TURBO = "gpt-3.5-turbo"
MODEL_GPT3_5_TURBO_0301 = "gpt-3.5-turbo-0301"
MODEL_TEXT_DAVINCI_003 = "text-davinci-003"
MODEL_TEXT_DAVINCI_002 = "text-davinci-002"


@dataclass(frozen=True)
class ModelConfig:
    """单个模型的配置。"""

    name: str
    chat: bool


MODEL_REGISTRY: Mapping[str, ModelConfig] = {
    MODEL_GPT3_5_TURBO: ModelConfig(name=MODEL_GPT3_5_TURBO, chat=True),
    MODEL_GPT3_5_TURBO_0301: ModelConfig(name=MODEL_GPT3_5_TURBO_0301, chat=True),
    MODEL_TEXT_DAVINCI_003: ModelConfig(name=MODEL_TEXT_DAVINCI_003, chat=False),
    MODEL_TEXT_DAVINCI_002: ModelConfig(name=MODEL_TEXT_DAVINCI_002, chat=False),
}


def get_model_config(name: str) -> ModelConfig:
    """根据名称获取 ModelConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in MODEL_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown model: {name!r}")


def is_chat_model(name: str) -> bool:
    try:
        return get_model_config(name).chat
    except KeyError:
        return False
