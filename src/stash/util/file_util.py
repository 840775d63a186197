import json
import os
from datetime import datetime, timezone
from pathlib import Path

CHUNK_SIZE = 64 * 1024


def list_files(path):
    """Regular files directly under path (no recursion), sorted by name."""
    result = []
    with os.scandir(path) as it:
        for entry in it:
            if entry.is_file(follow_symlinks=False):
                result.append(Path(entry.path))
    return sorted(result)


def copy_stream(src, dst, chunk_size=CHUNK_SIZE) -> int:
    total = 0
    while True:
        chunk = src.read(chunk_size)
        if not chunk:
            break
        dst.write(chunk)
        total += len(chunk)
    dst.flush()
    return total


def created_at(st: os.stat_result) -> datetime:
    # birth time isn't exposed everywhere (most notably linux), ctime is the closest we get
    ts = getattr(st, "st_birthtime", None)
    if ts is None:
        ts = st.st_ctime
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def format_timestamp(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    if dt.microsecond:
        return dt.isoformat(timespec="microseconds").replace("+00:00", "Z")
    return dt.isoformat(timespec="seconds").replace("+00:00", "Z")


def parse_json(filename):
    with open(filename, "r", encoding="utf8") as f:
        return json.load(f)
