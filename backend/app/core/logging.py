"""Structured logging configuration.

Everything goes to stdout; JSON lines in production, plain text locally.
Besides `get_logger`, three domain loggers give the recurring events a
fixed shape so they can be filtered on in the log pipeline:

- db_logger: connection failures (masked URL), slow transactions,
  rollbacks and migrations
- openai_logger: outbound completion/image calls with model, timing,
  status and token usage (never the API key)
- pipeline_logger: start/finish/failure of each brand generation stage
"""

import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

from pythonjsonlogger import jsonlogger

from app.core.config import get_settings

_PASSWORD_IN_URL = re.compile(r"(://[^:/@]+:)([^@]+)(@)")


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined]
    """JSON formatter adding timestamp, level, logger and service fields."""

    def __init__(self, *args: Any, service: str = "", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        if self.service:
            log_record["service"] = self.service
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def mask_connection_string(conn_str: str) -> str:
    """Replace the password in a connection URL with ****."""
    if not conn_str:
        return ""
    return _PASSWORD_IN_URL.sub(r"\1****\3", conn_str)


def truncate_text(text: str, max_length: int = 500) -> str:
    """Cut text to max_length, noting the original size."""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... (truncated, {len(text)} chars)"


def setup_logging() -> None:
    """Configure the root logger from LOG_LEVEL and LOG_FORMAT."""
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter: logging.Formatter
    if settings.log_format == "json":
        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            service=settings.app_name,
        )
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Third-party chatter
    for noisy in ("uvicorn.access", "httpx", "httpcore", "botocore", "boto3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


class DatabaseLogger:
    """Database events: connection errors, slow transactions, rollbacks, migrations."""

    def __init__(self) -> None:
        self.logger = get_logger("database")

    def connection_error(self, error: Exception, connection_string: str) -> None:
        self.logger.error(
            "Database connection failed",
            extra={
                "connection_string": mask_connection_string(connection_string),
                "error_type": type(error).__name__,
                "error_message": str(error),
            },
        )

    def slow_query(self, query: str, duration_ms: float, table: str | None = None) -> None:
        self.logger.warning(
            "Slow query detected",
            extra={
                "duration_ms": round(duration_ms, 2),
                "query": truncate_text(query, 200),
                "table": table,
            },
        )

    def transaction_failure(
        self, error: Exception, table: str | None = None, context: str | None = None
    ) -> None:
        self.logger.error(
            "Transaction failed, rolling back",
            extra={
                "error_type": type(error).__name__,
                "error_message": str(error),
                "table": table,
                "rollback_context": context,
            },
        )

    def migration_start(self, version: str, description: str) -> None:
        self.logger.info(
            "Starting database migration",
            extra={"migration_version": version, "description": description},
        )

    def migration_end(self, version: str, success: bool) -> None:
        self.logger.log(
            logging.INFO if success else logging.ERROR,
            "Database migration completed" if success else "Database migration failed",
            extra={"migration_version": version, "success": success},
        )


class OpenAILogger:
    """Outbound OpenAI calls. Bodies only at DEBUG and always truncated."""

    def __init__(self) -> None:
        self.logger = get_logger("openai")

    def call_started(
        self,
        path: str,
        model: str,
        prompt_length: int,
        messages: list[dict[str, str]] | None = None,
    ) -> None:
        extra: dict[str, Any] = {"endpoint": path, "model": model, "prompt_length": prompt_length}
        if messages:
            extra["message_count"] = len(messages)
            extra["last_message"] = truncate_text(messages[-1].get("content", ""), 500)
        self.logger.debug(f"OpenAI call: {path}", extra=extra)

    def call_succeeded(
        self, path: str, model: str, duration_ms: float, request_id: str | None = None
    ) -> None:
        self.logger.debug(
            f"OpenAI call completed: {path}",
            extra={
                "endpoint": path,
                "model": model,
                "duration_ms": round(duration_ms, 2),
                "request_id": request_id,
                "success": True,
            },
        )

    def call_failed(
        self,
        path: str,
        model: str,
        duration_ms: float,
        error: str,
        error_type: str,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        """4xx (including auth) and timeouts at WARNING; everything else at ERROR."""
        client_side = status_code is not None and 400 <= status_code < 500
        level = logging.WARNING if client_side or error_type == "TimeoutError" else logging.ERROR
        self.logger.log(
            level,
            f"OpenAI call failed: {path}",
            extra={
                "endpoint": path,
                "model": model,
                "duration_ms": round(duration_ms, 2),
                "status_code": status_code,
                "error": error,
                "error_type": error_type,
                "request_id": request_id,
                "success": False,
            },
        )

    def completion_reply(
        self,
        model: str,
        text: str,
        finish_reason: str | None,
        usage: dict[str, Any] | None = None,
    ) -> None:
        self.logger.debug(
            "OpenAI completion reply",
            extra={
                "model": model,
                "response_text": truncate_text(text, 500),
                "finish_reason": finish_reason,
            },
        )
        prompt_tokens = (usage or {}).get("prompt_tokens")
        completion_tokens = (usage or {}).get("completion_tokens")
        if prompt_tokens is not None and completion_tokens is not None:
            self.logger.info(
                "OpenAI token usage",
                extra={
                    "model": model,
                    "prompt_tokens": prompt_tokens,
                    "completion_tokens": completion_tokens,
                    "total_tokens": prompt_tokens + completion_tokens,
                },
            )

    def image_finished(self, model: str, size: str, duration_ms: float, success: bool) -> None:
        self.logger.log(
            logging.INFO if success else logging.WARNING,
            "Image generation completed" if success else "Image generation failed",
            extra={
                "model": model,
                "size": size,
                "duration_ms": round(duration_ms, 2),
                "success": success,
            },
        )


class PipelineLogger:
    """Stage boundaries of a brand generation run, keyed by stage name."""

    def __init__(self) -> None:
        self.logger = get_logger("pipeline")

    def stage_started(self, stage: str, **context: Any) -> None:
        self.logger.info(f"{stage} started", extra={"stage": stage, **context})

    def stage_completed(self, stage: str, duration_ms: float, **context: Any) -> None:
        self.logger.info(
            f"{stage} completed",
            extra={"stage": stage, "duration_ms": round(duration_ms, 2), **context},
        )

    def stage_failed(self, stage: str, error: Exception, **context: Any) -> None:
        self.logger.warning(
            f"{stage} failed",
            extra={
                "stage": stage,
                "error_code": getattr(error, "code", type(error).__name__),
                "error": getattr(error, "message", str(error)),
                **context,
            },
        )


db_logger = DatabaseLogger()
openai_logger = OpenAILogger()
pipeline_logger = PipelineLogger()
