"""Prompt 构造工具。

- build_prompt: 把会话历史拼成 completion 模型使用的单段 prompt，
  在字符预算内从最新消息往前保留，整条消息为单位截断。
- build_chat_messages: 把会话历史转换成 chat 模型使用的 role 消息列表，不截断。
- calc_max_response_tokens: 计算本次请求允许的回答 token 数。

长度一律按字符数近似 token 数。
"""

from typing import List, Sequence

from chatgpt_client.config.settings import DEFAULT_CHATGPT_NAME
from chatgpt_client.domain.models import ChatMessage, Message


END_OF_TEXT = "<|endoftext|>\n\n"


def render_message(message: Message, chatgpt_name: str = DEFAULT_CHATGPT_NAME) -> str:
    if message.is_chatgpt:
        return f"{chatgpt_name}:\n\n{message.text}"
    if message.user:
        return f"{message.user}:\n\n{message.text}"
    return f"User:\n\n{message.text}"


def build_prompt(
    context: str,
    date: str,
    messages: Sequence[Message],
    max_length: int,
    chatgpt_name: str = DEFAULT_CHATGPT_NAME,
) -> str:
    """拼接 completion prompt。

    Args:
        context: 会话上下文，作为 prompt 头部。
        date: 当前日期，拼在上下文之后。
        messages: 按时间顺序（最旧在前）排列的历史消息。
        max_length: 字符预算；<= 0 表示不限制。
        chatgpt_name: 助手名称，用于助手消息和结尾提示。

    从最新的消息开始累计长度，一旦某条消息放不下就停止，
    更旧的消息全部丢弃，不会跳过这条继续尝试更短的旧消息。
    """

    context_message = f"{context}\nCurrent date: {date}"
    end_message = f"{chatgpt_name}:"

    char_count = len(context_message) + len(end_message)
    accepted: List[str] = []
    for message in reversed(messages):
        current = render_message(message, chatgpt_name) + END_OF_TEXT
        if max_length > 0 and char_count + len(current) >= max_length:
            break
        char_count += len(current)
        accepted.append(current)

    accepted.reverse()
    return f"{context_message}{END_OF_TEXT}{''.join(accepted)}{end_message}"


def build_chat_messages(messages: Sequence[Message]) -> List[ChatMessage]:
    return [ChatMessage(role=message.role, content=message.text) for message in messages]


def calc_max_response_tokens(
    prompt_length: int,
    max_request_response_tokens: int,
    max_response_tokens: int,
) -> int:
    # 剩余空间不足时仍保证 max_response_tokens 的下限
    return max(max_response_tokens, min(max_request_response_tokens - prompt_length, max_response_tokens))
