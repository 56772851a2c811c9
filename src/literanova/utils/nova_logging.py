# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
'''
Logging for every LiteraNova module.

    log = get_ctx_logger("literanova.wallet(resolver)")

    log.trace(...)      per-endpoint chatter, normally off
    log.debug(...)      details worth having when diagnosing
    log.info(...)       user-visible milestones (sent, accepted, unlocked)
    log.warning(...)    degraded but handled (corrupt slot, endpoint down)
    log.error(...)      an operation could not complete
    log.exception(...)  same as error, with traceback

Pass `extra={"account": ..., "conv": ..., "req": ...}` to tag a record.
Untagged fields print as "-". Nothing is written until `setup_logging()` runs.
'''

from __future__ import annotations

import os, logging, re, json, time, hashlib
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Dict, Optional, Union

from literanova.utils import config as CFG

TRACE = 9
logging.addLevelName(TRACE, "TRACE")


def _logger_trace(self, msg, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


logging.Logger.trace = _logger_trace

ROOT_LOGGER = "literanova"
CTX_FIELDS = ("account", "conv", "req")
DATEFMT = "%Y-%m-%d %H:%M:%S"


def _plain_format() -> str:
    proc = "%(processName)s" if CFG.LOG_SHOW_PROCESS else CFG.LOG_PROC_PLACEHOLDER
    return f"%(asctime)s [%(levelname)s] {proc} %(name)s [%(account)s %(conv)s %(req)s]: %(message)s"


# ---------------- Filters ----------------
class RedactFilter(logging.Filter):
    """Blank out anything shaped like a session signature or a raw private key."""
    PATTERNS = (
        (re.compile(r"\b(?:0x)?[0-9a-fA-F]{130}\b"), "[REDACTED_SIG]"),
        (re.compile(r"\b(?:0x)?[0-9a-fA-F]{64}\b"), "[REDACTED_KEY]"),
    )

    def filter(self, record: logging.LogRecord) -> bool:
        text = record.getMessage()
        for rx, repl in self.PATTERNS:
            text = rx.sub(repl, text)
        record.msg, record.args = text, None
        return True


class RateLimitFilter(logging.Filter):
    """Drop repeats of the same call site within `min_interval` seconds."""

    def __init__(self, min_interval: float):
        super().__init__()
        self.min_interval = float(min_interval)
        self._seen: Dict[str, float] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        key = hashlib.blake2b(f"{record.name}|{record.levelno}|{record.msg}".encode(), digest_size=8).hexdigest()
        now = time.monotonic()
        if now - self._seen.get(key, float("-inf")) < self.min_interval:
            return False
        self._seen[key] = now
        return True


# ---------------- Formatters ----------------
class SafeFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        for k in CTX_FIELDS:
            if not hasattr(record, k):
                setattr(record, k, "-")
        return super().format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per line. Context fields appear only when set."""

    def format(self, record: logging.LogRecord) -> str:
        out = {
            "ts": self.formatTime(record, DATEFMT),
            "lvl": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if CFG.LOG_SHOW_PROCESS:
            out["proc"] = record.processName
        out.update({k: getattr(record, k) for k in CTX_FIELDS if getattr(record, k, "-") not in (None, "-")})
        if record.exc_info:
            out["exc"] = self.formatException(record.exc_info)
        return json.dumps(out, ensure_ascii=False)


# ---------------- Adapter ----------------
class ContextAdapter(logging.LoggerAdapter):
    """Keeps the per-call `extra` and fills the rest from the adapter's defaults."""

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        defaults = self.extra or {}
        for k in CTX_FIELDS:
            extra.setdefault(k, defaults.get(k, "-"))
        return msg, kwargs

    def trace(self, msg, *args, **kwargs):
        if self.logger.isEnabledFor(TRACE):
            self.log(TRACE, msg, *args, **kwargs)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or ROOT_LOGGER)


def get_ctx_logger(name: str = ROOT_LOGGER, **ctx) -> ContextAdapter:
    return ContextAdapter(get_logger(name), ctx)


# ---------------- Setup ----------------
def _level(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    lvl = logging.getLevelName(str(value).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _dress(handler: logging.Handler, as_json: bool, rate_seconds: float) -> logging.Handler:
    handler.setFormatter(JsonFormatter() if as_json else SafeFormatter(_plain_format(), DATEFMT))
    handler.addFilter(RedactFilter())
    if rate_seconds > 0.0:
        handler.addFilter(RateLimitFilter(rate_seconds))
    return handler


def setup_logging(
    log_file: Union[str, os.PathLike, None] = None,
    level: Union[int, str, None] = None,
    to_console: Optional[bool] = None,
    force: bool = False,
) -> logging.Logger:
    """Attach the rotating file handler (and optionally stderr) using the active CFG profile."""
    path = Path(log_file or CFG.LOG_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = str(CFG.LOG_FORMAT).lower() == "json"
    console = CFG.LOG_TO_CONSOLE if to_console is None else bool(to_console)

    handlers = [_dress(
        RotatingFileHandler(path, maxBytes=int(CFG.LOG_ROTATE_MAX_BYTES),
                            backupCount=int(CFG.LOG_BACKUP_COUNT), encoding="utf-8", delay=True),
        as_json, float(CFG.LOG_FILE_RATE_LIMIT_SECONDS))]
    if console:
        handlers.append(_dress(logging.StreamHandler(), as_json, float(CFG.LOG_RATE_LIMIT_SECONDS)))

    lvl = _level(CFG.LOG_LEVEL if level is None else level)
    logging.basicConfig(level=lvl, handlers=handlers, force=force)
    root = get_logger()
    root.trace("logging ready: level=%s file=%s json=%s console=%s",
               logging.getLevelName(lvl), path, as_json, console)
    return root
