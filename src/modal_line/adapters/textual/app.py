"""Executable Textual app that hosts a modal line prompt."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence

import grapheme

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use modal_line.adapters.textual.app"
    ) from exc

from modal_line.editor import BasicCompleter, LineSnapshot
from modal_line.keymaps import EndOfInput
from modal_line.runtime import EngineConfig, EscapeSequence, telemetry

from .controller import TextualLineAdapter, TextualUIHooks

DEMO_WORDS = ("history", "insert", "normal", "replace", "undo", "redo", "yank")


def _escape_markup(text: str) -> str:
    return text.replace("[", "\\[")


def render_line(snapshot: LineSnapshot) -> str:
    """Markup for the prompt line with the cursor cell shown in reverse video."""

    before = grapheme.slice(snapshot.text, 0, snapshot.cursor)
    under = grapheme.slice(snapshot.text, snapshot.cursor, snapshot.cursor + 1) or " "
    after = grapheme.slice(snapshot.text, snapshot.cursor + 1)
    line = (
        f"> {_escape_markup(before)}[reverse]{_escape_markup(under)}[/reverse]"
        f"{_escape_markup(after)}"
    )
    if snapshot.completions:
        line += "\n" + "  ".join(_escape_markup(c) for c in snapshot.completions)
    return line


@dataclass
class UIState:
    line_markup: str = ""
    status_text: str = ""
    submitted: List[str] = field(default_factory=list)


class ModalLineApp(App[None]):
    """Minimal Textual UI embedding the line editor."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#transcript {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#prompt-line {
		height: auto;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        super().__init__()
        self._config = config
        self._state = UIState()
        self.adapter: TextualLineAdapter | None = None
        self._transcript_widget: Static | None = None
        self._prompt_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="transcript-area"):
            self._transcript_widget = Static("", id="transcript")
            yield self._transcript_widget
        self._prompt_widget = Static("", id="prompt-line")
        self._status_widget = Static("", id="status-line")
        yield self._prompt_widget
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_line=self._update_line,
            update_status=self._update_status,
            submit_line=self._submit_line,
            log=self._log_line,
        )
        self.adapter = TextualLineAdapter(
            hooks,
            self._config,
            completer=BasicCompleter(DEMO_WORDS),
        )

    def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key == "ctrl+q":
            return
        try:
            self.adapter.handle_textual_key(event.key, character=event.character)
        except EndOfInput:
            self.exit()
        event.stop()

    def _update_line(self, snapshot: LineSnapshot) -> None:
        self._state.line_markup = render_line(snapshot)
        if self._prompt_widget:
            self._prompt_widget.update(self._state.line_markup)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _submit_line(self, line: str) -> None:
        self._state.submitted.append(line)
        if self._transcript_widget:
            self._transcript_widget.update(
                "\n".join(_escape_markup(entry) for entry in self._state.submitted)
            )

    def _log_line(self, line: str) -> None:
        self.log.debug(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the modal line editor demo.")
    parser.add_argument(
        "--normal",
        action="store_true",
        help="Start every line in normal mode instead of insert mode",
    )
    parser.add_argument(
        "--escape",
        metavar="KEYS",
        help="Two-key insert-mode alias for Escape, e.g. 'jk'",
    )
    parser.add_argument(
        "--history-size",
        type=int,
        help="Maximum number of submitted lines kept in history",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Apply command-line overrides on top of ``MODAL_LINE_*`` settings."""

    config = EngineConfig.from_env()
    if args.normal:
        config = replace(config, start_in_normal=True)
    if args.escape:
        config = replace(config, escape_sequence=EscapeSequence.parse(args.escape))
    if args.history_size is not None:
        config = replace(config, history_size=args.history_size)
    return config


def main(argv: Optional[Sequence[str]] = None) -> None:
    telemetry.configure()
    args = _parse_args(argv)
    app = ModalLineApp(build_config(args))
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
