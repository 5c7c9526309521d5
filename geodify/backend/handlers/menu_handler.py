#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Menu Handler Module
Line-based prompts for the Geodify CLI: numbered menus, yes/no confirmation
and path entry with tab completion
"""

import os
import glob
import logging
from typing import Callable, List, Optional, Tuple

from geodify.shared.colors import (
    COLOR_PROMPT, COLOR_SELECTION, COLOR_RESET, COLOR_INFO, COLOR_ERROR
)

# Initialize logger
logger = logging.getLogger(__name__)

# --- Readline for tab completion ---
READLINE_AVAILABLE = False
try:
    import readline
    READLINE_AVAILABLE = True
    logging.debug("Readline imported for tab completion")
except ImportError:
    logging.debug("readline not available. Tab completion for paths will be disabled.")


def shell_path_completer(text, state):
    """
    Shell-like pathname completer for readline.
    Expands ~ and completes inside directories, adding '/' to directory matches.
    """
    expanded = os.path.expanduser(os.path.expandvars(text))
    if not text:
        pattern = '*'
    elif os.path.isdir(expanded) and expanded.endswith('/'):
        pattern = os.path.join(expanded, '*')
    else:
        pattern = expanded + '*'
    matches = sorted(glob.glob(pattern))
    matches = [m + ('/' if os.path.isdir(m) else '') for m in matches]
    try:
        return matches[state]
    except IndexError:
        return None


class MenuHandler:
    """
    Prompts used by the setup wizard.

    input_func is injectable so tests can script the answers.
    """

    def __init__(self, input_func: Callable[[str], str] = input):
        self.input_func = input_func
        self.logger = logger

    def pick_option(self, prompt: str, options: List[str], default: Optional[int] = None) -> int:
        """
        Show a numbered menu and return the zero-based index of the chosen option.

        Re-asks until the answer is a number in range. An empty answer picks
        default when one is given.
        """
        print(prompt)
        for i, option in enumerate(options, start=1):
            print(f"  {COLOR_SELECTION}{i}{COLOR_RESET}) {option}")

        while True:
            reply = self.input_func(f"  Choice [1-{len(options)}]: ").strip()
            if not reply and default is not None:
                return default
            if reply.isdigit() and 1 <= int(reply) <= len(options):
                return int(reply) - 1
            print(f"  {COLOR_ERROR}Invalid.{COLOR_RESET} Enter a number between 1 and {len(options)}.")

    def confirm(self, message: str) -> bool:
        """Yes/no question; Enter counts as yes."""
        while True:
            reply = self.input_func(f"{message} [Y/n]: ").strip().lower()
            if reply in ('', 'y', 'yes'):
                return True
            if reply in ('n', 'no'):
                return False

    def get_path(self, prompt_message: str,
                 validator: Optional[Callable[[str], Tuple[bool, str]]] = None,
                 normalizer: Optional[Callable[[str], str]] = None) -> Optional[str]:
        """
        Ask for a path until validator accepts it.

        Returns:
            The accepted path, or None on EOF / Ctrl+C
        """
        if READLINE_AVAILABLE:
            readline.set_completer_delims(' \t\n;')
            readline.set_completer(shell_path_completer)
            readline.parse_and_bind('tab: complete')
        try:
            while True:
                try:
                    raw = self.input_func(f"  {COLOR_PROMPT}{prompt_message}:{COLOR_RESET} ")
                except (EOFError, KeyboardInterrupt):
                    print(f"\n{COLOR_INFO}Input cancelled.{COLOR_RESET}")
                    return None
                value = normalizer(raw) if normalizer else os.path.expanduser(raw.strip())
                if validator is None:
                    return value
                valid, reason = validator(value)
                if valid:
                    return value
                self.logger.debug(f"Rejected path {value!r}: {reason}")
                print(f"  {COLOR_ERROR}Invalid:{COLOR_RESET} {reason}")
        finally:
            if READLINE_AVAILABLE:
                readline.set_completer(None)
