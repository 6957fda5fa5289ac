import logging
import sys

# --- Configuration ---
LOG_FORMAT = "[INFO] %(message)s"
ERROR_FORMAT = "[ERROR] %(message)s"


class _CurrentStream:
    """Resolves sys.stdout/sys.stderr at write time, so redirected streams are honoured."""

    def __init__(self, name: str):
        self.name = name

    def write(self, message: str) -> int:
        return getattr(sys, self.name).write(message)

    def flush(self) -> None:
        getattr(sys, self.name).flush()


def _build_logger(name: str, stream_name: str, fmt: str, level: int) -> logging.Logger:
    built = logging.getLogger(name)
    if not built.handlers:
        handler = logging.StreamHandler(_CurrentStream(stream_name))
        handler.setFormatter(logging.Formatter(fmt))
        built.addHandler(handler)
    built.setLevel(level)
    built.propagate = False # Keep CLI messages out of the root logger
    return built


# --- Logger Instances ---
# INFO messages while stdout is free (stdout)
stdout_info_logger = _build_logger("figma_css.cli.stdout", "stdout", LOG_FORMAT, logging.INFO)
# INFO messages while stdout carries the converted document (stderr)
stderr_info_logger = _build_logger("figma_css.cli.stderr", "stderr", LOG_FORMAT, logging.INFO)
# ERROR messages (stderr)
error_logger = _build_logger("figma_css.cli.error", "stderr", ERROR_FORMAT, logging.ERROR)

# --- Global State ---
is_stdout_reserved = False


# --- Public API ---
def set_stdout_reserved(reserved: bool):
    """Routes info messages to stderr while stdout carries output."""
    global is_stdout_reserved
    is_stdout_reserved = reserved

def log(*args):
    """Logs messages at INFO level on whichever stream is free."""
    message = " ".join(map(str, args))
    if is_stdout_reserved:
        stderr_info_logger.info(message)
    else:
        stdout_info_logger.info(message)

def error(*args):
    """Logs messages at ERROR level."""
    message = " ".join(map(str, args))
    error_logger.error(message)


class LoggerWrapper:
    def set_stdout_reserved(self, reserved: bool):
        set_stdout_reserved(reserved)

    def log(self, *args):
        log(*args)

    def error(self, *args):
        error(*args)


Logger = LoggerWrapper()
