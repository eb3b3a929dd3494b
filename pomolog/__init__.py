"""pomolog core library: focus sessions persisted as small text files.

Public API re-exports for convenient imports:
    from pomolog import Store, Session, SessionLog, Settings, ...
"""

# Errors
from pomolog.errors import DecodeError

# Clock
from pomolog.clock import Clock, FrozenClock, system_clock

# Workspace & paths
from pomolog.workspace import (
    storage_root,
    current_path,
    history_path,
    settings_path,
    export_path,
)

# File I/O
from pomolog.fileio import (
    read_text,
    write_text_atomic,
    write_json_atomic,
    append_line,
    ensure_dir,
)

# Models
from pomolog.models import (
    DEFAULT_SETTINGS,
    MATCH_TOLERANCE,
    Session,
    Settings,
    merge_defaults,
    same_session,
)

# History
from pomolog.history import SessionLog

# Stats
from pomolog.stats import daily_progress, summarize

# Store
from pomolog.store import Store, StoreState
