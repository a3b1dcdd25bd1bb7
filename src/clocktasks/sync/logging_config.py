"""structlog 配置模块

dev 模式输出可读文本，json 模式输出结构化 JSON；
两种模式都经由标准库 logging，第三方库（aiosqlite）的日志走同一条处理链。
"""

import logging
import os

import structlog

# aiosqlite 在 DEBUG 级别逐条记录 SQL 操作，单独限制
_NOISY_LOGGERS = ("aiosqlite",)


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 配置

    Args:
        log_format: "json" 或 "dev"，默认读取 CLOCKTASKS_LOG_FORMAT（未设置时为 dev）
        log_level: 日志级别名称，默认读取 CLOCKTASKS_LOG_LEVEL（未设置时为 INFO）
    """
    log_format = log_format or os.environ.get("CLOCKTASKS_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("CLOCKTASKS_LOG_LEVEL", "INFO")
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if log_format == "json":
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
