# core/storage/records.py
import csv
import io
import logging
import os
import stat
import tempfile
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import (
    Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union
)

from core.errors import CascadeError, MalformedRecordError, StorageError

logger = logging.getLogger(__name__)

Row = List[str]
PathLike = Union[str, Path]

_READ_ERRORS = (OSError, csv.Error, UnicodeDecodeError)


class RawRecord(NamedTuple):
    """A data row together with the exact text it was read from"""
    fields: Row
    line: str


Entry = Union[Row, RawRecord]


class LoadDiagnostics:
    """Per-file counts of rows dropped by the most recent lenient load"""

    def __init__(self):
        self.skipped: Dict[str, int] = {}
        self.errors: Dict[str, str] = {}

    def record_skipped(self, path: str, count: int) -> None:
        self.skipped[path] = count

    def record_error(self, path: str, message: str) -> None:
        self.errors[path] = message

    def skipped_in(self, path: PathLike) -> int:
        return self.skipped.get(str(path), 0)

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())

    def reset(self) -> None:
        self.skipped.clear()
        self.errors.clear()


class RecordStore:
    """Whole-file access to comma-delimited record files with a header row.

    Files are read in full and rewritten in full. Rewrites go through a
    temporary file that replaces the target, and ``transaction()`` stages
    several files so they are all replaced together or not at all.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.diagnostics = LoadDiagnostics()
        self._staged: Optional[Dict[str, Tuple[Row, List[Entry]]]] = None

    @property
    def in_transaction(self) -> bool:
        return self._staged is not None

    def load_all(
        self,
        path: PathLike,
        min_columns: int,
        parse: Optional[Callable[[Row], Any]] = None,
        for_update: bool = False,
    ) -> List[Any]:
        """Load every data row of a file.

        Args:
            path: File to read. A missing file has no rows.
            min_columns: Rows with fewer fields are malformed.
            parse: Optional converter applied to each row; a ValueError marks
                the row as malformed.
            for_update: Raise StorageError on an unreadable file instead of
                treating it as empty, for callers about to rewrite it.

        Returns:
            Parsed rows (or raw field lists) in file order.

        Raises:
            MalformedRecordError: In strict mode, on the first malformed row.
        """
        key = str(path)
        results = []
        skipped = 0
        for line_number, row in enumerate(self._rows(path, for_update), start=2):
            if not any(field.strip() for field in row):
                continue
            if len(row) < min_columns:
                reason = f"expected at least {min_columns} fields, found {len(row)}"
            else:
                try:
                    results.append(parse(row) if parse else row)
                    continue
                except ValueError as e:
                    reason = str(e).splitlines()[0]
            if self.strict:
                raise MalformedRecordError(key, line_number, reason)
            logger.debug("Skipping %s line %d: %s", key, line_number, reason)
            skipped += 1

        self.diagnostics.record_skipped(key, skipped)
        if skipped:
            logger.warning("Skipped %d malformed row(s) in %s", skipped, key)
        return results

    def load_records(self, path: PathLike) -> List[RawRecord]:
        """Load every data row with its original text, for a rewrite that
        must leave untouched rows exactly as they were.

        Raises:
            StorageError: If the file exists but cannot be read.
        """
        return [
            entry if isinstance(entry, RawRecord) else RawRecord(list(entry), _format_line(entry))
            for entry in self._entries(path, for_update=True)
        ]

    def append_row(self, path: PathLike, header: Sequence[str], row: Sequence[str]) -> None:
        """Append one row, creating the file with its header if needed"""
        key = str(path)
        if self._staged is not None:
            entries = self._entries(path, for_update=True)
            self._staged[key] = (list(header), entries + [list(row)])
            return

        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            needs_header = not path.exists() or path.stat().st_size == 0
            needs_newline = not needs_header and not _ends_with_newline(path)
            with open(path, "a", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, lineterminator="\n")
                if needs_header:
                    writer.writerow(header)
                elif needs_newline:
                    f.write("\n")
                writer.writerow(row)
        except OSError as e:
            raise StorageError(f"Could not append to {key}: {e}") from e

    def rewrite_all(self, path: PathLike, header: Sequence[str], rows: Sequence[Entry]) -> None:
        """Replace the whole file with header + rows.

        A RawRecord is written back as its original text; any other row is
        serialized field by field.
        """
        key = str(path)
        rows = [row if isinstance(row, RawRecord) else list(row) for row in rows]
        if self._staged is not None:
            self._staged[key] = (list(header), rows)
            return

        path = Path(path)
        tmp = self._write_temp(path, header, rows)
        try:
            os.replace(tmp, path)
        except OSError as e:
            with suppress(OSError):
                os.remove(tmp)
            raise StorageError(f"Could not replace {key}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator["RecordStore"]:
        """Stage every write made inside the block and commit them together.

        Loads inside the block see the staged content. An exception inside
        the block discards everything staged. Nested blocks join the
        outermost one.
        """
        if self._staged is not None:
            yield self
            return

        self._staged = {}
        try:
            yield self
        except BaseException:
            self._staged = None
            raise
        staged, self._staged = self._staged, None
        self._commit(staged)

    def _rows(self, path: PathLike, for_update: bool) -> List[Row]:
        return [
            list(entry.fields) if isinstance(entry, RawRecord) else list(entry)
            for entry in self._entries(path, for_update)
        ]

    def _entries(self, path: PathLike, for_update: bool) -> List[Entry]:
        key = str(path)
        if self._staged is not None and key in self._staged:
            return list(self._staged[key][1])
        try:
            with open(path, newline="", encoding="utf-8") as f:
                records = _read_records(f)
        except FileNotFoundError:
            return []
        except _READ_ERRORS as e:
            if for_update or self._staged is not None:
                raise StorageError(f"Could not read {key}: {e}") from e
            logger.error("Error reading %s: %s", key, e)
            self.diagnostics.record_error(key, str(e))
            return []
        return records[1:]

    def _write_temp(self, path: Path, header: Sequence[str], rows: Sequence[Entry]) -> str:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            mode = _target_mode(path)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
        try:
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
                # mkstemp creates the file 0600
                os.chmod(tmp, mode)
                writer = csv.writer(f, lineterminator="\n")
                writer.writerow(header)
                for row in rows:
                    if isinstance(row, RawRecord):
                        f.write(row.line + "\n")
                    else:
                        writer.writerow(row)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            with suppress(OSError):
                os.remove(tmp)
            raise StorageError(f"Could not write {path}: {e}") from e
        return tmp

    def _commit(self, staged: Dict[str, Tuple[Row, List[Entry]]]) -> None:
        temps: List[Tuple[str, str]] = []
        try:
            for key, (header, rows) in staged.items():
                temps.append((key, self._write_temp(Path(key), header, rows)))
        except StorageError:
            for _, tmp in temps:
                with suppress(OSError):
                    os.remove(tmp)
            raise

        committed: List[str] = []
        for index, (key, tmp) in enumerate(temps):
            try:
                os.replace(tmp, key)
            except OSError as e:
                pending = [k for k, _ in temps[index:]]
                for _, leftover in temps[index:]:
                    with suppress(OSError):
                        os.remove(leftover)
                if not committed:
                    raise StorageError(f"Could not replace {key}: {e}") from e
                raise CascadeError(committed, pending, e) from e
            committed.append(key)
        if committed:
            logger.info("Committed %d file(s): %s", len(committed), ", ".join(committed))


def _read_records(f) -> List[RawRecord]:
    """Parse a file into records, keeping the physical lines behind each one.

    A quoted field may span several lines; those lines stay together.
    """
    consumed: List[str] = []

    def lines():
        for line in f:
            consumed.append(line)
            yield line

    records = []
    for fields in csv.reader(lines()):
        records.append(RawRecord(fields, "".join(consumed).rstrip("\r\n")))
        consumed.clear()
    return records


def _format_line(row: Sequence[str]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="").writerow(row)
    return buffer.getvalue()


def _target_mode(path: Path) -> int:
    """Permission bits a rewrite of ``path`` should keep"""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _ends_with_newline(path: Path) -> bool:
    with open(path, "rb") as f:
        f.seek(-1, os.SEEK_END)
        return f.read(1) == b"\n"
