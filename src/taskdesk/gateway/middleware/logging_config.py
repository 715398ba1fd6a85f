"""structlog 配置

structlog 事件与标准库 logging 记录共用一条处理链，经由 ProcessorFormatter 输出：
dev 为控制台可读格式，json 为单行 JSON。
"""

import logging
import os

import structlog

# 每条 SQL 都会打 debug 日志的第三方 logger
_NOISY_LOGGERS = ("aiosqlite",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _build_renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 与根 logger

    Args:
        log_format: "json" 或 "dev"；缺省读取 TASKDESK_LOG_FORMAT
        log_level: 根 logger 级别名；缺省读取 TASKDESK_LOG_LEVEL，无法识别时为 INFO
    """
    log_format = (log_format or os.environ.get("TASKDESK_LOG_FORMAT", "dev")).lower()
    log_level = log_level or os.environ.get("TASKDESK_LOG_LEVEL", "INFO")

    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_build_renderer(log_format),
            foreign_pre_chain=shared,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
