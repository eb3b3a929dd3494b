#!/usr/bin/env python3
"""pomolog TUI: terminal focus timer powered by Textual."""

from __future__ import annotations

import logging
import os
import sys

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import DataTable, Footer, Header, Input, Label, Static

from pomolog import (
    DecodeError,
    Session,
    Store,
    daily_progress,
    summarize,
)

CSS = """
Screen {
    background: $surface;
}

#timer {
    height: 5;
    content-align: center middle;
    text-style: bold;
    border: tall $primary-background-darken-2;
}

#timer.active {
    color: $success;
}

#timer.done {
    color: $warning;
}

#progress {
    height: auto;
    padding: 0 1;
}

#description-input {
    display: none;
    margin: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#history-table {
    height: 1fr;
}
"""


def _format_remaining(minutes: int) -> str:
    if minutes < 0:
        return f"{-minutes} min over"
    return f"{minutes} min left"


class PomologApp(App):
    """Start, finish and review focus sessions."""

    TITLE = "pomolog"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("s", "start", "Start"),
        Binding("n", "start_described", "Start…"),
        Binding("f", "finish", "Finish"),
        Binding("c", "cancel", "Cancel"),
        Binding("x", "clear", "Clear"),
        Binding("e", "export", "Export"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, store: Store) -> None:
        super().__init__()
        self.store = store

    def compose(self) -> ComposeResult:
        yield Header()
        yield Vertical(
            Static(id="timer"),
            Input(placeholder="Description (enter to start)", id="description-input"),
            Static(id="progress"),
            Label("History", classes="section-title"),
            DataTable(id="history-table"),
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#history-table", DataTable)
        table.add_columns("Started", "Minutes", "Description", "Tags")
        self._refresh()
        self.set_interval(1.0, self._tick)

    def _tick(self) -> None:
        try:
            self._render_timer(self.store.current_session())
        except (DecodeError, OSError) as e:
            self.query_one("#timer", Static).update(f"Error: {e}")

    def _refresh(self) -> None:
        """Reload every file and repopulate widgets."""
        try:
            state = self.store.state()
        except (DecodeError, OSError) as e:
            self.notify(f"Error: {e}", title="Error", severity="error")
            return
        now = self.store.clock()

        self._render_timer(state.session)

        progress = daily_progress(state.log, state.settings, now)
        week = summarize(state.log, now, days=7)
        parts = [f"Today: {progress['completed']}"]
        if progress["goal"]:
            parts[0] += f" / {progress['goal']}"
        parts.append(
            f"Last 7 days: {week['total_sessions']} sessions, {week['total_minutes']} min"
        )
        self.query_one("#progress", Static).update("\n".join(parts))

        table = self.query_one("#history-table", DataTable)
        table.clear()
        for s in reversed(state.log.sessions[-30:]):
            table.add_row(
                s.start_time.astimezone().strftime("%Y-%m-%d %H:%M"),
                str(s.duration_minutes()),
                s.description,
                ", ".join(s.tags),
            )

    def _render_timer(self, session: Session) -> None:
        now = self.store.clock()
        timer = self.query_one("#timer", Static)
        timer.remove_class("active", "done")
        if session.is_inactive():
            timer.update("No session")
            return
        label = session.description or "Focus"
        timer.update(f"{label}\n{_format_remaining(session.remaining_minutes(now))}")
        timer.add_class("active" if session.is_active(now) else "done")

    # ── Actions ────────────────────────────────────────────────

    def action_start(self) -> None:
        self._run(lambda: self.store.start(Session()), "Session started")

    def action_start_described(self) -> None:
        box = self.query_one("#description-input", Input)
        box.display = True
        box.focus()

    @on(Input.Submitted, "#description-input")
    def _on_description(self, event: Input.Submitted) -> None:
        description = event.value.strip()
        event.input.value = ""
        event.input.display = False
        self.set_focus(None)
        self._run(lambda: self.store.start(Session(description=description)), "Session started")

    def action_finish(self) -> None:
        self._run(self.store.finish, "Session finished")

    def action_cancel(self) -> None:
        self._run(self.store.cancel, "Session cancelled")

    def action_clear(self) -> None:
        self._run(self.store.clear, "Session cleared")

    def action_export(self) -> None:
        self._run(self.store.export, "Exported to export.json")

    def action_blur_focus(self) -> None:
        self.query_one("#description-input", Input).display = False
        self.set_focus(None)

    def action_quit_app(self) -> None:
        self.exit()

    @work(thread=True, exclusive=True)
    def _run(self, operation, message: str) -> None:
        """Run a store operation in a worker thread, then refresh."""
        try:
            operation()
        except (DecodeError, OSError) as e:
            self.call_from_thread(self.notify,
                f"Error: {e}", title="Error", severity="error")
            return
        self.call_from_thread(self.notify, message, severity="information")
        self.call_from_thread(self._refresh)


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG if os.environ.get("POMODORO_DEBUG") else logging.WARNING,
        filename=os.environ.get("POMODORO_LOG") or None,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = Store()
    try:
        store.state()
    except (DecodeError, OSError) as e:
        print(f"Cannot read {store.root}: {e}")
        sys.exit(1)

    app = PomologApp(store)
    app.run()


if __name__ == "__main__":
    main()
