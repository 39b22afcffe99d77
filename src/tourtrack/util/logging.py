# tourtrack/util/logging.py
from __future__ import annotations

import datetime

def log(msg: str, *, file=None) -> None:
    """Print a timestamped log line (local time with timezone)."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}", file=file)
