from __future__ import annotations

import logging
import os
from functools import cache
from functools import wraps
from typing import Any
from typing import Callable
from typing import Optional

from rich.prompt import Prompt
from typing_extensions import ParamSpec
from typing_extensions import TypeVar

from zbx.output.console import err_console
from zbx.output.console import error
from zbx.output.console import exit_err
from zbx.output.style import Icon

T = TypeVar("T")
P = ParamSpec("P")


logger = logging.getLogger(__name__)


def no_headless(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator that causes application to exit if called from a headless environment
    when the prompt does not have a default value (i.e. required input).

    If the prompt has a default value, that value is returned instead."""

    @wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        if is_headless():
            default = kwargs.get("default")
            if default is not None:
                logger.debug("Returning default value from %s(%s)", f.__name__, args)
                return default  # type: ignore
            # Assume first arg is the prompt:
            prompt = args[0] if args else kwargs.get("prompt", "")
            exit_err(f"Cannot proceed! User input required for {prompt!r}. Exiting...")
        return f(*args, **kwargs)

    return wrapper


HEADLESS_VARS_SET = ["CI", "ZBX_HEADLESS"]
"""Envvars that indicate headless environ when set (1, true)."""
HEADLESS_VARS_SET_MAP = {"DEBIAN_FRONTEND": "noninteractive"}
"""Envvars that indicate headless environ when set to a specific value."""


# NOTE: if testing this function, clear cache after each test
@cache
def is_headless() -> bool:
    """Determines if we are running in a headless environment (e.g. CI, Docker, etc.)"""
    for envvar in HEADLESS_VARS_SET:
        if os.environ.get(envvar, "").lower() in ["1", "true"]:
            return True

    for envvar, value in HEADLESS_VARS_SET_MAP.items():
        if os.environ.get(envvar, None) == value:
            return True

    import shellingham  # pyright: ignore[reportMissingTypeStubs]

    try:
        shellingham.detect_shell()  # pyright: ignore[reportUnknownMemberType]
    except shellingham.ShellDetectionFailure:
        # If we can't detect the shell, assume we're in a headless environment
        return True

    return False


def prompt_msg(*msgs: str) -> str:
    return f"[bold][green]{Icon.PROMPT}[/green] {' '.join(msg.strip() for msg in filter(None, msgs))}[/bold]"


@no_headless
def str_prompt(
    prompt: str,
    *,
    default: Optional[str] = None,
    password: bool = False,
    empty_ok: bool = False,
) -> str:
    """Prompts the user for a string input.

    Loops until a non-empty input is provided, unless `empty_ok` is set.
    Passwords are never echoed and their defaults are never shown.
    """
    msg = prompt_msg(prompt)
    kwargs: dict[str, Any] = {}
    if default is not None:
        kwargs["default"] = default

    while True:
        inp = Prompt.ask(
            msg,
            console=err_console,
            password=password,
            show_default=not password and bool(default),
            **kwargs,
        )
        if empty_ok or (inp and not inp.isspace()):
            break
        error("Input cannot be empty.")
    return inp.strip()
