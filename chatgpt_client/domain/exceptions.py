"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
调用方可以只捕获 BusinessError 做统一提示，也可以按子类区分处理。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "CONVERSATION_NOT_FOUND"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 conversation_id、model 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class RemoteCallError(BusinessError):
    """调用远端 completion API 失败，原样抛给调用方，本层不做重试。"""


class NetworkError(RemoteCallError):
    """网络层错误，例如连接失败、超时、代理不可达等。"""


class ApiError(RemoteCallError):
    """远端返回非 2xx/429 错误，或响应体缺少 choices 时抛出。"""


class RateLimitError(RemoteCallError):
    """远端限流（HTTP 429），由上层负责重试/退避策略。"""


class ConversationNotFoundError(BusinessError):
    """会话不存在或已过期被淘汰。"""

    def __init__(self, conversation_id: str):
        super().__init__(
            code="CONVERSATION_NOT_FOUND",
            message=f"conversation(id: {conversation_id}) not found",
            http_status=404,
            conversation_id=conversation_id,
        )


class ConfigurationError(BusinessError):
    """客户端构造参数非法，例如缺少 API Key 或代理协议不受支持。"""
