import pytest

from chatgpt_client.providers.registry import ModelConfig, get_model_config, is_chat_model


def test_chat_models_are_case_insensitive():
    assert is_chat_model("gpt-3.5-turbo")
    assert is_chat_model("GPT-3.5-Turbo-0301")
    assert not is_chat_model("text-davinci-003")


def test_unknown_model_is_completion_model():
    assert not is_chat_model("my-custom-model")
    with pytest.raises(KeyError):
        get_model_config("my-custom-model")


def test_model_config_only_carries_endpoint_kind():
    assert get_model_config("text-davinci-002") == ModelConfig(name="text-davinci-002", chat=False)
