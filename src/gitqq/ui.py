#!/usr/bin/env python3
"""
ui - Terminal helpers shared by the interactive menus.

Numbered menus read from input(); Ctrl+C or EOF anywhere raises
UserCancelled so callers can back out to the previous menu.
"""

from typing import Any, Callable, List, Optional, Sequence, Tuple

from gitqq.errors import UserCancelled


# ANSI color codes
class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'

    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_CYAN = '\033[96m'


def safe_input(prompt: str = "") -> str:
    """
    Drop-in replacement for input() that raises UserCancelled on Ctrl+C
    instead of letting KeyboardInterrupt propagate up as a traceback.
    """
    try:
        return input(prompt)
    except (KeyboardInterrupt, EOFError):
        raise UserCancelled()


def header(title: str):
    print(f"\n{Colors.BOLD}{'=' * 60}{Colors.RESET}")
    print(f"{Colors.BOLD}{title}{Colors.RESET}")
    print(f"{Colors.BOLD}{'=' * 60}{Colors.RESET}")


def choose(message: str, options: Sequence[Tuple[str, Any]], default: Optional[int] = None) -> Any:
    """
    Show a numbered menu and return the value of the picked option.

    Options are (label, value) pairs; a label of None prints a blank
    separator line and is not selectable.
    """
    selectable: List[Any] = []
    print(f"\n{Colors.CYAN}{message}{Colors.RESET}")
    for label, value in options:
        if label is None:
            print()
            continue
        selectable.append(value)
        print(f"  {len(selectable)}. {label}")

    hint = f"1-{len(selectable)}"
    if default is not None:
        hint += f", default={default}"

    while True:
        choice = safe_input(f"\n{Colors.BRIGHT_BLUE}Choice ({hint}):{Colors.RESET} ").strip()
        if not choice and default is not None:
            return selectable[default - 1]
        try:
            idx = int(choice) - 1
        except ValueError:
            idx = -1
        if 0 <= idx < len(selectable):
            return selectable[idx]
        print(f"{Colors.RED}Invalid selection. Please choose {hint.split(',')[0]}{Colors.RESET}")


def confirm(message: str, default: bool = False) -> bool:
    suffix = "(Y/n)" if default else "(y/N)"
    answer = safe_input(f"{Colors.YELLOW}{message} {suffix}:{Colors.RESET} ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def ask(message: str, default: Optional[str] = None,
        validate: Optional[Callable[[str], Optional[str]]] = None) -> str:
    """
    Prompt for a line of text.

    ``validate`` returns an error message for bad input, or None when the
    value is acceptable; the prompt repeats until it passes.
    """
    prompt = f"{Colors.CYAN}{message}"
    if default:
        prompt += f" [{default}]"
    prompt += f":{Colors.RESET} "

    while True:
        value = safe_input(prompt).strip()
        if not value and default is not None:
            value = default
        error = validate(value) if validate else None
        if error is None:
            return value
        print(f"{Colors.RED}{error}{Colors.RESET}")


def success(message: str):
    print(f"{Colors.GREEN}✅ {message}{Colors.RESET}")


def info(message: str):
    print(f"{Colors.BLUE}🔄 {message}{Colors.RESET}")


def warn(message: str):
    print(f"{Colors.YELLOW}⚠️  {message}{Colors.RESET}")


def fail(message: str):
    print(f"{Colors.RED}❌ {message}{Colors.RESET}")
