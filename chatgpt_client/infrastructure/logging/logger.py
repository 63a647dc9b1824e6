import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from chatgpt_client.config.settings import Settings


logger = logging.getLogger("chatgpt_client")
logger.setLevel(logging.INFO)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        return json.dumps(payload, ensure_ascii=False)


def setup_logger(settings: Settings) -> logging.Logger:
    """按配置挂载 JSON 文件日志；log_dir 为空时什么也不做。重复调用不会重复挂载。"""

    if not settings.log_dir:
        return logger
    log_dir = Path(settings.log_dir)
    log_file = (log_dir / "chatgpt_client.log").resolve()
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_file:
            return logger
    log_dir.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonFormatter())
    logger.addHandler(fh)
    return logger
