"""
Logging configuration.
Console output is rendered for humans, the on-disk log is one JSON object per line.
"""
import json
import logging
import os
from datetime import date, datetime
from logging.handlers import BaseRotatingHandler
from pathlib import Path
from typing import Any, Dict, List

from groq_proxy.config.settings import Settings
from groq_proxy.utils.constants import SERVICE_CONFIG

PACKAGE_LOGGER = "groq_proxy"
BOX_WIDTH = 80

# Attributes every LogRecord has; anything else was passed through ``extra``
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def get_extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the structured fields attached to a record via ``extra``."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


def _format_timestamp(created: float) -> str:
    ts = datetime.fromtimestamp(created)
    return ts.strftime("%Y-%m-%d %H:%M:%S.") + f"{ts.microsecond // 1000:03d}"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log files."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "service": SERVICE_CONFIG["NAME"],
            "logger": record.name,
        }
        payload.update(get_extra_fields(record))
        if record.exc_info:
            payload["stack"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-oriented console rendering.

    Request, response and upstream-success events are drawn as boxes so a
    single exchange is easy to follow in a terminal.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        header = f"{_format_timestamp(record.created)} [{record.levelname.lower()}] {message}"
        fields = get_extra_fields(record)

        if message == "Incoming request":
            rendered = header + "\n" + self._render_request(fields)
        elif message == "Outgoing response":
            rendered = header + "\n" + self._render_response(fields)
        elif message == "Groq API call successful":
            rendered = header + "\n" + self._render_completion(fields)
        elif fields:
            rendered = f"{header} {json.dumps(fields, default=str)}"
        else:
            rendered = header

        if record.exc_info:
            rendered += "\n" + self.formatException(record.exc_info)
        return rendered

    def _render_request(self, fields: Dict[str, Any]) -> str:
        lines = [
            f"│ METHOD: {fields.get('method')} │",
            f"│ URL: {fields.get('url')} │",
            None,
            "│ HEADERS: │",
            *self._dump(fields.get("headers")),
        ]
        if fields.get("body") is not None:
            lines += [None, "│ BODY: │", *self._dump(fields["body"])]
        return self._box(lines)

    def _render_response(self, fields: Dict[str, Any]) -> str:
        lines = [
            f"│ REQUEST: {fields.get('method')} {fields.get('url')} │",
            f"│ STATUS: {fields.get('status_code')} | DURATION: {fields.get('duration')}"
            f" | SIZE: {fields.get('response_size')} bytes │",
            None,
            "│ RESPONSE: │",
        ]
        if fields.get("response") is not None:
            lines += self._dump(fields["response"])
        return self._box(lines)

    def _render_completion(self, fields: Dict[str, Any]) -> str:
        usage = fields.get("usage") or {}
        total_time = usage.get("total_time") if isinstance(usage, dict) else None
        time_str = f"{total_time * 1000:.0f}ms" if isinstance(total_time, (int, float)) else "N/A"
        tokens = usage.get("total_tokens", "N/A") if isinstance(usage, dict) else "N/A"
        lines = [
            f"│ MODEL: {fields.get('model')} │",
            f"│ CHOICES: {fields.get('choices')} | TOKENS: {tokens} | TIME: {time_str} │",
            None,
            "│ USAGE DETAILS: │",
        ]
        if usage:
            lines += self._dump(usage)
        return self._box(lines)

    @staticmethod
    def _dump(value: Any) -> List[str]:
        if value is None:
            return []
        text = json.dumps(value, indent=2, default=str)
        return [f"│ {line}" for line in text.splitlines()]

    @staticmethod
    def _box(lines: List[Any]) -> str:
        top = "┌" + "─" * (BOX_WIDTH - 2) + "┐"
        divider = "├" + "─" * (BOX_WIDTH - 2) + "┤"
        bottom = "└" + "─" * (BOX_WIDTH - 2) + "┘"
        body = [divider if line is None else line for line in lines]
        return "\n".join([top, *body, bottom])


class DailyRotatingFileHandler(BaseRotatingHandler):
    """
    Writes to ``<directory>/YYYY-MM-DD.log``.

    Starts a new file at the first record of each day, and a numbered
    overflow file (``YYYY-MM-DD.1.log``) when the current one exceeds
    ``max_bytes``. Only the newest ``backup_count`` files are kept.
    """

    def __init__(self, directory: str, max_bytes: int = 0, backup_count: int = 0, encoding: str = "utf-8"):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.current_date = date.today()
        self.index = 0
        super().__init__(self._path_for(self.current_date, self.index), "a", encoding=encoding, delay=True)

    def _path_for(self, day: date, index: int) -> str:
        suffix = f".{index}" if index else ""
        return str(self.directory / f"{day.isoformat()}{suffix}.log")

    def shouldRollover(self, record: logging.LogRecord) -> bool:
        if date.today() != self.current_date:
            return True
        if self.max_bytes > 0:
            if self.stream is None:
                self.stream = self._open()
            message = f"{self.format(record)}\n"
            self.stream.seek(0, 2)
            position = self.stream.tell()
            if position > 0 and position + len(message.encode(self.encoding or "utf-8")) >= self.max_bytes:
                return True
        return False

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None

        today = date.today()
        if today != self.current_date:
            self.current_date = today
            self.index = 0
        else:
            self.index += 1

        self.baseFilename = os.path.abspath(self._path_for(self.current_date, self.index))
        self._prune()

    def _prune(self) -> None:
        if self.backup_count <= 0:
            return
        files = sorted(self.directory.glob("*.log"), key=lambda path: path.stat().st_mtime)
        for stale in files[: max(len(files) - self.backup_count, 0)]:
            stale.unlink(missing_ok=True)


def configure_logging(settings: Settings, log_to_file: bool = True) -> logging.Logger:
    """
    Attach console and file handlers to the package logger.

    Safe to call more than once; previously installed handlers are replaced.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(settings.log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)

    if log_to_file:
        file_handler = DailyRotatingFileHandler(
            settings.log_dir,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count,
        )
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    # Records are already written by our handlers
    logger.propagate = False
    return logger
