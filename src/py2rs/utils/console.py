"""
Logging Setup.

py2rs reports through the standard `logging` package under the ``py2rs``
logger. Records are rendered by a `rich` handler writing to stderr, so
generated Rust printed on stdout by a host stays clean.

The console behind the handler can be swapped at runtime (`set_console`),
which is how tests capture log output.
"""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOGGER_NAME = "py2rs"

# Sits between INFO (20) and WARNING (30)
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "bold green",
    "rule": "magenta",
    "rust": "bold blue",
  }
)

logger = logging.getLogger(LOGGER_NAME)


def _default_console() -> Console:
  return Console(theme=_THEME, stderr=True)


def _bind_handler(target: Console) -> None:
  """Points the package logger at `target`, dropping any previous rich handler."""
  for old in [h for h in logger.handlers if isinstance(h, RichHandler)]:
    logger.removeHandler(old)

  logger.addHandler(
    RichHandler(console=target, show_time=False, show_path=False, markup=True, rich_tracebacks=True)
  )
  logger.setLevel(logging.INFO)
  logger.propagate = False


class _ConsoleProxy:
  """
  Long-lived handle on whichever `Console` is active.

  Modules keep a reference to the proxy; swapping the active console
  re-binds the log handler so later records follow it.
  """

  def __init__(self) -> None:
    self._active = _default_console()
    _bind_handler(self._active)

  @property
  def active(self) -> Console:
    return self._active

  def swap(self, target: Optional[Console]) -> None:
    """Activates `target`, or a fresh stderr console when None."""
    self._active = target if target is not None else _default_console()
    _bind_handler(self._active)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._active, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Sends package logging to `new_console`.

  Args:
      new_console (Console): e.g. ``Console(file=StringIO())`` to capture output.
  """
  console.swap(new_console)


def reset_console() -> None:
  console.swap(None)


def get_console() -> Console:
  return console.active


def _emit(level: int, msg: str) -> None:
  logger.log(level, msg, extra={"markup": True})


def log_info(msg: str) -> None:
  """
  Logs at INFO.

  Args:
      msg (str): Message text; rich markup such as ``[rule]...[/rule]`` is
          rendered, so escape any dynamic content first.
  """
  _emit(logging.INFO, msg)


def log_success(msg: str) -> None:
  _emit(SUCCESS_LEVEL_NUM, msg)


def log_warning(msg: str) -> None:
  _emit(logging.WARNING, msg)


def log_error(msg: str) -> None:
  _emit(logging.ERROR, msg)
