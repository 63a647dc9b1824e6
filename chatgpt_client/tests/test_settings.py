import json
import logging

import pytest
from pydantic import ValidationError

from chatgpt_client.config.settings import load_settings
from chatgpt_client.infrastructure.logging.logger import JsonFormatter, logger, setup_logger


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("CHATGPT_CONFIG_FILE", "OPENAI_API_KEY", "MAX_CONVERSATIONS", "CHATGPT_NAME", "PROXY"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def test_defaults(clean_env):
    s = load_settings()
    assert s.openai_api_server == "https://api.openai.com"
    assert s.default_model == "text-davinci-003"
    assert s.max_response_tokens == 1000
    assert s.max_request_response_tokens == 4096
    assert s.max_conversations == 100
    assert s.conversation_max_age == 259200
    assert s.chatgpt_name == "ChatGPT"
    assert s.log_dir is None


def test_yaml_and_env_sources(clean_env, monkeypatch):
    cfg = clean_env / "custom.yaml"
    cfg.write_text("max_conversations: 7\nchatgpt_name: Bot\nproxy: http://127.0.0.1:8080\n", encoding="utf-8")
    monkeypatch.setenv("CHATGPT_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("CHATGPT_NAME", "EnvBot")
    s = load_settings()
    assert s.max_conversations == 7
    assert s.proxy == "http://127.0.0.1:8080"
    # 环境变量优先于 yaml
    assert s.chatgpt_name == "EnvBot"
    # 初始化参数优先级最高
    assert load_settings(max_conversations=2).max_conversations == 2


def test_invalid_values(clean_env):
    with pytest.raises(ValidationError):
        load_settings(max_conversations=0)
    with pytest.raises(ValidationError):
        load_settings(conversation_max_age=-1)


def test_blank_chatgpt_name_falls_back(clean_env):
    assert load_settings(chatgpt_name="  ").chatgpt_name == "ChatGPT"


def test_json_formatter():
    record = logging.LogRecord("chatgpt_client", logging.INFO, __file__, 1, "store.evict", None, None)
    record.extra = {"conversation_id": "c1"}
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "store.evict"
    assert payload["level"] == "INFO"
    assert payload["conversation_id"] == "c1"
    assert payload["ts"].endswith("Z")


def test_setup_logger_is_idempotent(clean_env):
    s = load_settings(log_dir=str(clean_env / "logs"))
    before = len(logger.handlers)
    setup_logger(s)
    setup_logger(s)
    added = logger.handlers[before:]
    try:
        assert len(added) == 1
        assert (clean_env / "logs" / "chatgpt_client.log").exists()
    finally:
        for handler in added:
            logger.removeHandler(handler)
            handler.close()


def test_unknown_logging_switch_is_ignored(clean_env):
    settings = load_settings(log_redact_content=True)
    assert not hasattr(settings, "log_redact_content")
