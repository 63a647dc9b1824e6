"""领域层模型与协议。

包含：
- models: Message / AskConfig 以及 chat、completion 请求与结果模型。
- conversation: 会话对象、会话配置与 ConversationStore 抽象。
- exceptions: 业务异常类型定义。
"""
