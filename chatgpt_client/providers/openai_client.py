"""OpenAI Provider 适配器。

本模块负责：

1. 接收统一的 CompletionRequest / ChatRequest。
2. 将其转换为 OpenAI HTTP API 的请求体（/v1/completions 与 /v1/chat/completions）。
3. 调用 HTTP 接口并把网络/限流/服务端错误转换为 RemoteCallError 子类。
4. 将响应 JSON 解析为统一的 CompletionResult / ChatResult。

代理支持 http://、https://、socks5://，socks5 依赖 httpx[socks]。
"""

from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from chatgpt_client.config.settings import Settings
from chatgpt_client.domain.exceptions import ApiError, ConfigurationError, NetworkError, RateLimitError
from chatgpt_client.domain.models import (
    ChatChoice,
    ChatMessage,
    ChatRequest,
    ChatResult,
    CompletionChoice,
    CompletionRequest,
    CompletionResult,
    Usage,
)


SUPPORTED_PROXY_SCHEMES = ("http", "https", "socks5")


def validate_proxy(proxy: Optional[str]) -> Optional[str]:
    """校验代理地址，空值返回 None。"""

    if not proxy:
        return None
    parsed = urlparse(proxy)
    if parsed.scheme not in SUPPORTED_PROXY_SCHEMES or not parsed.hostname:
        raise ConfigurationError(
            code="INVALID_PROXY",
            message=f"unsupported proxy {proxy!r}, expected http://, https:// or socks5://",
        )
    return proxy


class OpenAIClient:
    """OpenAI 远端客户端实现。"""

    name = "openai"

    def __init__(self, settings: Settings):
        if not settings.openai_api_key:
            # 配置缺失走 ConfigurationError，方便上层统一处理
            raise ConfigurationError(code="MISSING_API_KEY", message="OPENAI_API_KEY not set")
        self._settings = settings
        self._base_url = settings.openai_api_server.rstrip("/")
        self._proxy = validate_proxy(settings.proxy)

    def create_completion(self, req: CompletionRequest) -> CompletionResult:
        payload = {
            "model": req.model,
            "prompt": req.prompt,
            "max_tokens": req.max_tokens,
        }
        data = self._post("/v1/completions", payload)
        choices = [
            CompletionChoice(
                index=ch.get("index", i),
                text=ch.get("text") or "",
                finish_reason=ch.get("finish_reason"),
            )
            for i, ch in enumerate(data.get("choices") or [])
        ]
        if not choices:
            raise ApiError(code="EMPTY_CHOICES", message="completion response has no choices")
        return CompletionResult(model=req.model, choices=choices, usage=self._parse_usage(data), raw=data)

    def create_chat_completion(self, req: ChatRequest) -> ChatResult:
        payload = {
            "model": req.model,
            "messages": [{"role": m.role, "content": m.content} for m in req.messages],
            "max_tokens": req.max_tokens,
            "temperature": req.temperature,
        }
        data = self._post("/v1/chat/completions", payload)
        choices = []
        for i, ch in enumerate(data.get("choices") or []):
            msg = ch.get("message") or {}
            choices.append(
                ChatChoice(
                    index=ch.get("index", i),
                    message=ChatMessage(role=msg.get("role") or "assistant", content=msg.get("content") or ""),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        if not choices:
            raise ApiError(code="EMPTY_CHOICES", message="chat completion response has no choices")
        return ChatResult(model=req.model, choices=choices, usage=self._parse_usage(data), raw=data)

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with httpx.Client(
                timeout=self._settings.http_timeout,
                proxy=self._proxy,
                trust_env=False,
            ) as client:
                resp = client.post(
                    f"{self._base_url}{path}",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._settings.openai_api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时、代理不可达等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="OpenAI rate limit", http_status=429)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="INVALID_RESPONSE", message=str(e), http_status=resp.status_code)
        if not isinstance(data, dict):
            raise ApiError(code="INVALID_RESPONSE", message="response body is not an object")
        return data

    @staticmethod
    def _parse_usage(data: Dict[str, Any]) -> Optional[Usage]:
        usage_raw = data.get("usage") or {}
        if not usage_raw:
            return None
        return Usage(
            prompt_tokens=usage_raw.get("prompt_tokens", 0),
            completion_tokens=usage_raw.get("completion_tokens", 0),
            total_tokens=usage_raw.get("total_tokens", 0),
        )
