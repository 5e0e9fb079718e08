# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Confirmation gate for operations that touch a whole account.
"""

from typing import Callable

import structlog

from streamvault.exceptions import ConfirmationError

logger = structlog.get_logger()

AskFunc = Callable[[str, bool], bool]

_YES = {"y", "yes"}
_NO = {"n", "no"}


def ask_confirmation(
    prompt: str,
    default: bool,
    *,
    input_func: Callable[[str], str] = input,
) -> bool:
    """
    Ask the operator a yes/no question.

    An empty answer selects the default, unrecognised answers ask again.

    Raises:
        ConfirmationError: If no answer can be read (closed stdin, interrupt)
    """
    suffix = "(Y/n)" if default else "(y/N)"

    while True:
        try:
            answer = input_func(f"{prompt}? {suffix} ")
        except (EOFError, KeyboardInterrupt, OSError) as e:
            raise ConfirmationError(
                f"Could not obtain confirmation: {type(e).__name__}",
                details={"prompt": prompt},
            ) from e

        answer = answer.strip().lower()
        if not answer:
            return default
        if answer in _YES:
            return True
        if answer in _NO:
            return False


def confirm(
    prompt: str,
    default: bool,
    *,
    force: bool,
    ask: AskFunc = ask_confirmation,
) -> bool:
    """Return True immediately when forced, otherwise defer to ``ask``."""
    if force:
        logger.debug("confirmation_skipped", prompt=prompt)
        return True

    return ask(prompt, default)
