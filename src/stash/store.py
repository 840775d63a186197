"""
A stash store is one flat directory with one file per entry.

Entries are named "<name>_<index>" and every name forms its own stack: the
entry with the highest index is the newest one. The directory is handed to
the store explicitly, nothing in here knows where the user's data lives.
"""
from __future__ import annotations

import io
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import NamedTuple, Optional

from rich.markup import escape

from .errors import NotFound, StashIOError
from .identifier import DEFAULT_SEPARATORS, StashId, format_id, from_filename, to_filename, validate_name
from .util import file_util, log

# how many times push() moves on to the next index when someone else got there first
MAX_CREATE_ATTEMPTS = 16


class Entry(NamedTuple):
    name: str
    index: int
    created: datetime
    path: Path

    @property
    def id(self) -> str:
        return format_id(self.name, self.index)


def _describe(name, index):
    if index is not None:
        return format_id(name, index)
    if name:
        return f"{name} (newest)"
    return "anonymous stash (newest)"


class StashStore:
    def __init__(self, root, separators=DEFAULT_SEPARATORS):
        self.root = Path(root)
        self.separators = separators

    @classmethod
    def open(cls, root, separators=DEFAULT_SEPARATORS):
        root = Path(root)
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StashIOError("create directory", root, e) from e
        return cls(root, separators)

    def _scan(self):
        """Yield (StashId, path) for every file that looks like an entry."""
        try:
            files = file_util.list_files(self.root)
        except OSError as e:
            raise StashIOError("read directory", self.root, e) from e

        for path in files:
            try:
                path.name.encode("utf-8")
            except UnicodeEncodeError as e:
                raise StashIOError("read", path, e) from e
            stash_id = from_filename(path.name)
            if stash_id is None:
                log.debug(f"Ignoring foreign file: {escape(path.name)}")
                continue
            yield stash_id, path

    def _paths(self):
        """Map every (name, index) in the store to its file."""
        found = {}
        for stash_id, path in self._scan():
            # "_3" wins over a bare "3" left behind by the numeric-only stack
            if stash_id not in found or path.name.startswith("_"):
                found[stash_id] = path
        return found

    def _indices(self, name):
        return {index: path for (n, index), path in self._paths().items() if n == name}

    def _stat(self, path):
        try:
            return path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StashIOError("stat", path, e) from e

    def _entry(self, name, index, path) -> Optional[Entry]:
        st = self._stat(path)
        if st is None:
            return None
        return Entry(name, index, file_util.created_at(st), path)

    def _lookup(self, name, index) -> Optional[Entry]:
        candidates = [to_filename(name, index)]
        if not name:
            candidates.append(str(index))
        for filename in candidates:
            entry = self._entry(name, index, self.root / filename)
            if entry is not None:
                return entry
        return None

    def resolve(self, stash_id: StashId) -> Entry:
        name, index = stash_id
        if index is None:
            indices = self._indices(name)
            if indices:
                index = max(indices)
                entry = self._entry(name, index, indices[index])
            else:
                entry = None
        else:
            entry = self._lookup(name, index)
        if entry is None:
            raise NotFound(_describe(*stash_id))
        return entry

    def push(self, name, stream) -> int:
        """Store everything readable from stream as the next entry of name, returns its index."""
        validate_name(name, self.separators)
        indices = self._indices(name)
        index = max(indices) + 1 if indices else 0

        for _attempt in range(MAX_CREATE_ATTEMPTS):
            path = self.root / to_filename(name, index)
            try:
                fp = open(path, "xb")
            except FileExistsError:
                log.debug(f"{escape(path.name)} appeared while pushing, trying the next index")
                index += 1
                continue
            except OSError as e:
                raise StashIOError("create", path, e) from e

            with fp:
                self._write(stream, fp, path)
            log.debug(f"Stored {escape(format_id(name, index))} in {escape(str(path))}")
            return index

        raise StashIOError("create", self.root / to_filename(name, index),
                           FileExistsError(f"gave up after {MAX_CREATE_ATTEMPTS} attempts"))

    def push_bytes(self, name, data: bytes) -> int:
        return self.push(name, io.BytesIO(data))

    def append(self, name, stream, index=None) -> int:
        """Append to an entry (the newest one unless told otherwise), pushing a new one if name has none."""
        validate_name(name, self.separators)
        if index is None:
            indices = self._indices(name)
            if not indices:
                return self.push(name, stream)
            index = max(indices)
            path = indices[index]
        else:
            entry = self._lookup(name, index)
            if entry is None:
                raise NotFound(_describe(name, index))
            path = entry.path

        try:
            fp = open(path, "ab")
        except OSError as e:
            raise StashIOError("open", path, e) from e
        with fp:
            self._write(stream, fp, path)
        return index

    def _write(self, stream, fp, path):
        try:
            file_util.copy_stream(stream, fp)
        except OSError as e:
            raise StashIOError("write", path, e) from e

    def list(self) -> list[Entry]:
        """Every entry in the store, newest first."""
        result = []
        for (name, index), path in self._paths().items():
            entry = self._entry(name, index, path)
            if entry is not None:
                result.append(entry)
        result.sort(key=lambda e: (e.created, e.index), reverse=True)
        return result

    def entries(self, name) -> list[Entry]:
        result = []
        for index, path in self._indices(name).items():
            entry = self._entry(name, index, path)
            if entry is not None:
                result.append(entry)
        result.sort(key=lambda e: e.index, reverse=True)
        return result

    @contextmanager
    def open_entry(self, name, index=None):
        entry = self.resolve(StashId(name, index))
        try:
            fp = open(entry.path, "rb")
        except FileNotFoundError:
            raise NotFound(_describe(name, index))
        except OSError as e:
            raise StashIOError("open", entry.path, e) from e
        with fp:
            yield fp

    def _read(self, entry):
        try:
            return entry.path.read_bytes()
        except OSError as e:
            raise StashIOError("read", entry.path, e) from e

    def _remove(self, path):
        try:
            path.unlink()
        except OSError as e:
            raise StashIOError("delete", path, e) from e

    def get(self, name, index) -> bytes:
        return self._read(self.resolve(StashId(name, index)))

    def get_newest(self, name) -> bytes:
        return self.get(name, None)

    def pop(self, name) -> bytes:
        entry = self.resolve(StashId(name, None))
        data = self._read(entry)
        self._remove(entry.path)
        return data

    def delete(self, name, index=None):
        entry = self.resolve(StashId(name, index))
        self._remove(entry.path)
        return entry

    def clear(self) -> int:
        """Remove every file in the store, entry or not. Returns how many went."""
        try:
            files = file_util.list_files(self.root)
        except OSError as e:
            raise StashIOError("read directory", self.root, e) from e
        for path in files:
            self._remove(path)
        return len(files)
