"""配置管理模块。

支持从初始化参数、环境变量、.env 以及 config.yaml 加载配置，优先级依次降低。
模块导入时不创建任何实例，由调用方通过 load_settings() 构造一次后显式传给客户端。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_SERVER = "https://api.openai.com"
DEFAULT_MODEL = "text-davinci-003"
DEFAULT_CHATGPT_NAME = "ChatGPT"
DEFAULT_MAX_RESPONSE_TOKENS = 1000
DEFAULT_MAX_REQUEST_RESPONSE_TOKENS = 4096
DEFAULT_MAX_CONVERSATIONS = 100
DEFAULT_CONVERSATION_MAX_AGE = 3 * 24 * 60 * 60


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("CHATGPT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(Path.cwd() / "config.yaml")

    for path in candidates:
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """客户端配置。"""

    # ---- 远端 API ----
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API 密钥")
    openai_api_server: str = Field(default=DEFAULT_API_SERVER, description="OpenAI API 服务地址")
    proxy: Optional[str] = Field(
        default=None,
        description="请求代理，支持 http/https/socks5，例如 socks5://127.0.0.1:17890",
    )
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")
    default_model: str = Field(default=DEFAULT_MODEL, description="新会话默认使用的模型")

    # ---- token 预算 ----
    max_response_tokens: int = Field(
        default=DEFAULT_MAX_RESPONSE_TOKENS,
        description="单次回答的最少 token 数",
    )
    max_request_response_tokens: int = Field(
        default=DEFAULT_MAX_REQUEST_RESPONSE_TOKENS,
        description="请求 + 回答合计的 token 上限（按字符数近似）",
    )

    # ---- 会话缓存 ----
    max_conversations: int = Field(default=DEFAULT_MAX_CONVERSATIONS, description="同时存活的最大会话数")
    conversation_max_age: int = Field(
        default=DEFAULT_CONVERSATION_MAX_AGE,
        description="会话默认存活时间（秒）",
    )
    conversation_context: str = Field(default="", description="新会话默认的上下文提示")
    conversation_language: str = Field(default="", description="新会话默认的回答语言")
    chatgpt_name: str = Field(default=DEFAULT_CHATGPT_NAME, description="prompt 中助手的名称")

    # ---- 日志 ----
    log_dir: Optional[str] = Field(default=None, description="日志目录，为空时不写文件")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator(
        "max_response_tokens",
        "max_request_response_tokens",
        "max_conversations",
        "conversation_max_age",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @field_validator("chatgpt_name")
    @classmethod
    def validate_chatgpt_name(cls, v: str) -> str:
        return v.strip() or DEFAULT_CHATGPT_NAME

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


def load_settings(**overrides: Any) -> Settings:
    """构造一份配置；overrides 优先级最高。"""

    return Settings(**overrides)
