import pytest

from chatgpt_client.client import ChatGPTClient
from chatgpt_client.config.settings import load_settings
from chatgpt_client.domain.models import (
    ChatChoice,
    ChatMessage,
    ChatResult,
    CompletionChoice,
    CompletionResult,
)


class FakeProvider:
    name = "fake"

    def __init__(self, answer="  ok  ", error=None):
        self.answer = answer
        self.error = error
        self.completion_requests = []
        self.chat_requests = []

    def create_completion(self, req):
        self.completion_requests.append(req)
        if self.error:
            raise self.error
        return CompletionResult(model=req.model, choices=[CompletionChoice(index=0, text=self.answer)])

    def create_chat_completion(self, req):
        self.chat_requests.append(req)
        if self.error:
            raise self.error
        return ChatResult(
            model=req.model,
            choices=[ChatChoice(index=0, message=ChatMessage(role="assistant", content=self.answer))],
        )


@pytest.fixture
def settings(tmp_path, monkeypatch):
    # 避免读到工作目录下的 .env / config.yaml
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CHATGPT_CONFIG_FILE", raising=False)
    return load_settings(
        openai_api_key="sk-test-key",
        conversation_context="You are helpful",
        max_conversations=3,
    )


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(settings, provider):
    return ChatGPTClient(settings, provider=provider)


@pytest.fixture
def make_provider():
    return FakeProvider
