"""File-backed session store for pomolog.

The store owns three files under its root: ``current`` (zero or one session),
``history`` (the session log) and ``settings``. Every operation is a
read-modify-write of whole files. Writes to different files are not
transactional; each operation lists its writes in order, and a failure
part-way leaves the earlier writes in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pomolog.clock import Clock, system_clock
from pomolog.fileio import append_line, ensure_dir, read_text, write_json_atomic, write_text_atomic
from pomolog.history import SessionLog
from pomolog.models import DEFAULT_SETTINGS, Session, Settings, merge_defaults
from pomolog.workspace import current_path, export_path, history_path, settings_path, storage_root

logger = logging.getLogger(__name__)


@dataclass
class StoreState:
    session: Session = field(default_factory=Session)
    log: SessionLog = field(default_factory=SessionLog)
    settings: Settings = field(default_factory=Settings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.session.to_dict(),
            **self.log.to_dict(),
            "settings": self.settings.to_dict(),
        }


class Store:
    def __init__(self, root: Path | None = None, clock: Clock | None = None) -> None:
        self.root = root if root is not None else storage_root()
        self.clock = clock if clock is not None else system_clock

    def __repr__(self) -> str:
        return f"Store(root={str(self.root)!r})"

    # ── Reads ─────────────────────────────────────────────────

    def current_session(self) -> Session:
        """The session in ``current``; inactive if the file is missing or empty."""
        text = read_text(current_path(self.root))
        if not text:
            return Session()
        return Session.from_text(text)

    def session_log(self) -> SessionLog:
        return SessionLog.from_text(read_text(history_path(self.root)))

    def effective_settings(self) -> Settings:
        """Settings from file with unset fields filled from the defaults."""
        loaded = Settings.from_text(read_text(settings_path(self.root)))
        return merge_defaults(loaded, DEFAULT_SETTINGS)

    def state(self) -> StoreState:
        return StoreState(
            session=self.current_session(),
            log=self.session_log(),
            settings=self.effective_settings(),
        )

    # ── Lifecycle ─────────────────────────────────────────────

    def start(self, session: Session | None = None) -> Session:
        """Start *session* now and return it.

        An active current session is cancelled first (removed from history);
        a done one is left in history and simply replaced. Writes ``current``,
        then appends to ``history``.
        """
        if session is None:
            session = Session()

        ensure_dir(self.root)
        now = self.clock()

        current = self.current_session()
        if current.is_active(now):
            logger.debug("superseding active session started %s", current.start_time)
            self.cancel()

        session.start_time = now.replace(microsecond=0)
        session.apply_settings(self.effective_settings())

        self._write_current(session)
        self._append_history(session)
        logger.debug("started session: %s", session)
        return session

    def finish(self) -> Session | None:
        """Finish the current session, recording its actual duration.

        Clears ``current``, then rewrites ``history`` with the final record.
        Returns the finished session, or None if nothing was running (in
        which case ``current`` is still cleared and history is untouched).
        """
        session = self.current_session()
        now = self.clock()
        self.clear()
        if session.is_inactive():
            return None

        session.duration = now - session.start_time
        self._update_history(session)
        logger.debug("finished session after %d min: %s", session.duration_minutes(), session)
        return session

    def cancel(self) -> Session | None:
        """Discard the current session and its history record.

        Clears ``current``, then rewrites ``history`` without the record.
        No-op returning None if nothing is current.
        """
        ensure_dir(self.root)
        session = self.current_session()
        if session.is_inactive():
            return None

        self._write_current(Session())
        self._delete_history(session)
        logger.debug("cancelled session: %s", session)
        return session

    def clear(self) -> None:
        """Empty ``current`` without touching history."""
        ensure_dir(self.root)
        self._write_current(Session())

    def save_settings(self, settings: Settings) -> None:
        ensure_dir(self.root)
        write_text_atomic(settings_path(self.root), settings.to_text())

    def export(self, path: Path | None = None) -> Path:
        """Write current session, history and effective settings as JSON.

        Defaults to ``export.json`` under the root. Returns the path written.
        """
        path = path if path is not None else export_path(self.root)
        write_json_atomic(path, self.state().to_dict())
        logger.debug("exported state to %s", path)
        return path

    # ── Internals ─────────────────────────────────────────────

    def _write_current(self, session: Session) -> None:
        write_text_atomic(current_path(self.root), session.to_text())

    def _append_history(self, session: Session) -> None:
        if session.is_inactive():
            return
        append_line(history_path(self.root), session.to_text())

    def _update_history(self, session: Session) -> None:
        log = self.session_log()
        log.update(session)
        self._write_history(log)

    def _delete_history(self, session: Session) -> None:
        log = self.session_log()
        log.delete(session)
        self._write_history(log)

    def _write_history(self, log: SessionLog) -> None:
        log.sort()
        write_text_atomic(history_path(self.root), log.to_text())
        logger.debug("rewrote history with %d sessions", log.count())
