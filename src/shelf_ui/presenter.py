"""Presentation collaborator interface and a terminal implementation."""

from __future__ import annotations

import logging
from typing import Protocol

import click

from shelf_ui.state import ViewState

log = logging.getLogger(__name__)

INFO = "info"
SUCCESS = "success"
ERROR = "error"

_LEVEL_STYLES = {
    INFO: ("·", "bright_black"),
    SUCCESS: ("✓", "green"),
    ERROR: ("✗", "red"),
}


class Presenter(Protocol):
    """Receives view snapshots and user-facing notifications."""

    def render(self, state: ViewState) -> None: ...

    def notify(self, message: str, level: str = INFO) -> None: ...


class EchoPresenter:
    """Prints notifications to the terminal; rendering is left to the caller."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet
        self.last_state: ViewState | None = None

    def render(self, state: ViewState) -> None:
        self.last_state = state

    def notify(self, message: str, level: str = INFO) -> None:
        if self.quiet and level != ERROR:
            return
        mark, color = _LEVEL_STYLES.get(level, _LEVEL_STYLES[INFO])
        click.echo(f"  {click.style(mark, fg=color)} {message}", err=level == ERROR)
