"""Interactive terminal prompts for picking one or several options."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

InputFunc = Callable[[str], str]

_NEXT_PAGE = "n"
_PREVIOUS_PAGE = "p"


class PromptInterrupted(Exception):
    """Raised when the user aborts a prompt with Ctrl+C or end of input."""


def _ask(input_func: InputFunc, text: str) -> str:
    try:
        return input_func(text)
    except (KeyboardInterrupt, EOFError) as exc:
        raise PromptInterrupted("Operation interrupted by user") from exc


def _page_size(count: int, page_size: int | None) -> int:
    if page_size is None or page_size <= 0:
        return max(count, 1)
    return page_size


def _show_page(message: str, options: Sequence[str], start: int, size: int, hint: str) -> None:
    print(message)
    for number, option in enumerate(options[start:start + size], start + 1):
        print(f"  {number:>3}) {option}")
    if len(options) > size:
        page = start // size + 1
        pages = (len(options) - 1) // size + 1
        print(f"  page {page}/{pages} ({_NEXT_PAGE}: next, {_PREVIOUS_PAGE}: previous)")
    print(f"  {hint}")


def _resolve(token: str, options: Sequence[str]) -> int | None:
    if token.isdigit():
        number = int(token)
        if 1 <= number <= len(options):
            return number - 1
        return None
    try:
        return list(options).index(token)
    except ValueError:
        return None


def _turn_page(answer: str, start: int, size: int, count: int) -> int | None:
    last_start = ((count - 1) // size) * size if count else 0
    if answer == _NEXT_PAGE:
        return min(start + size, last_start)
    if answer == _PREVIOUS_PAGE:
        return max(start - size, 0)
    return None


def select(
    message: str,
    options: Sequence[str],
    page_size: int | None = None,
    input_func: InputFunc = input,
) -> str:
    """Ask the user to pick one option by number or by its exact text."""
    choices = list(options)
    if not choices:
        raise ValueError("There are no options to choose from.")
    size = _page_size(len(choices), page_size)
    start = 0
    while True:
        _show_page(message, choices, start, size, "Enter a number:")
        answer = _ask(input_func, "> ").strip()
        new_start = _turn_page(answer, start, size, len(choices))
        if new_start is not None:
            start = new_start
            continue
        index = _resolve(answer, choices)
        if index is not None:
            return choices[index]
        print("Invalid selection, try again.")


def multi_select(
    message: str,
    options: Sequence[str],
    page_size: int | None = None,
    input_func: InputFunc = input,
) -> list[str]:
    """Ask the user to pick any number of options; an empty answer picks none."""
    choices = list(options)
    if not choices:
        return []
    size = _page_size(len(choices), page_size)
    start = 0
    while True:
        _show_page(
            message, choices, start, size,
            "Enter numbers separated by spaces or commas (empty for none):",
        )
        answer = _ask(input_func, "> ").strip()
        new_start = _turn_page(answer, start, size, len(choices))
        if new_start is not None:
            start = new_start
            continue
        tokens = [token for token in re.split(r"[,\s]+", answer) if token]
        indices = [_resolve(token, choices) for token in tokens]
        if any(index is None for index in indices):
            print("Invalid selection, try again.")
            continue
        picked = set(indices)
        return [option for index, option in enumerate(choices) if index in picked]