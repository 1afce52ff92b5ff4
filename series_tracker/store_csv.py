
from __future__ import annotations

import csv
import logging
import math
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .data_model import DEFAULT_SERIES_NAME, DataSeries, Point, SeriesStore
from .errors import PersistenceLoadError, PersistenceSaveError

logger = logging.getLogger(__name__)

HEADER = ["name", "x", "y"]


def series_to_long_rows(series: List[DataSeries]) -> List[Tuple[str, float, float]]:
    rows: List[Tuple[str, float, float]] = []
    for s in series:
        for x, y in s.data:
            rows.append((s.name, x, y))
    return rows


def _write_rows(f, series: List[DataSeries]) -> None:
    w = csv.writer(f)
    w.writerow(HEADER)
    for row in series_to_long_rows(series):
        w.writerow(row)


def _is_header(row: List[str]) -> bool:
    return [c.strip().lower() for c in row] == HEADER


def _parse_value(text: str, label: str, line_no: int) -> float:
    try:
        v = float(text)
    except ValueError:
        raise PersistenceLoadError(f"Line {line_no}: {label} value {text!r} is not a number.") from None
    if not math.isfinite(v):
        raise PersistenceLoadError(f"Line {line_no}: {label} value {text!r} is not finite.")
    return v


def parse_long_rows(lines: Iterable[str]) -> List[DataSeries]:
    """
    Group (name, x, y) rows into series.

    Series come out in first-seen name order; each series is stably sorted
    by x so points sharing an x keep their file order. Any malformed row
    fails the whole parse.
    """
    grouped: Dict[str, List[Point]] = {}
    reader = csv.reader(lines)
    first = True
    for row in reader:
        line_no = reader.line_num
        if not row:
            continue
        if first:
            first = False
            if _is_header(row):
                continue
        if len(row) != 3:
            raise PersistenceLoadError(f"Line {line_no}: expected 3 fields (name,x,y), got {len(row)}.")
        name, xs, ys = row
        x = _parse_value(xs, "x", line_no)
        y = _parse_value(ys, "y", line_no)
        grouped.setdefault(name, []).append(Point(x, y))

    return [DataSeries(name, sorted(pts, key=lambda p: p.x)) for name, pts in grouped.items()]


def read_long_csv(path: str | Path) -> List[DataSeries]:
    try:
        with open(path, "r", newline="", encoding="utf-8") as f:
            return parse_long_rows(f)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise PersistenceLoadError(f"Could not read {Path(path).name}: {e}") from e


def _backup_unreadable(path: Path) -> Optional[Path]:
    if not path.is_file():
        return None
    backup = path.with_name(path.name + ".bak")
    try:
        os.replace(path, backup)
    except OSError as e:
        logger.error("Could not move unreadable %s aside: %s", path, e)
        return None
    logger.warning("Moved unreadable %s to %s", path, backup)
    return backup


def load_store(path: str | Path, default_name: str = DEFAULT_SERIES_NAME) -> Tuple[SeriesStore, Optional[str]]:
    """
    Load the store from disk.

    Never raises: a missing or malformed file yields a store holding only an
    empty default series, plus the message to show the user. A file that
    exists but cannot be loaded is moved aside to <name>.bak first, so the
    save on exit does not overwrite it.
    """
    try:
        series = read_long_csv(path)
    except PersistenceLoadError as e:
        logger.warning("Load failed, starting with an empty '%s' series: %s", default_name, e)
        message = f"Load failed: {e}"
        backup = _backup_unreadable(Path(path))
        if backup is not None:
            message += f" (kept as {backup.name})"
        return SeriesStore(default_name=default_name), message

    store = SeriesStore(series, default_name=default_name)
    logger.info("Loaded %d series (%d points) from %s", len(store), store.point_count(), path)
    return store, None


def save_store(store: SeriesStore, path: str | Path) -> None:
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
            _write_rows(f, store.series)
        if path.exists():
            shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        logger.error("Save to %s failed: %s", path, e)
        raise PersistenceSaveError(f"Save failed: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)
    logger.info("Saved %d series (%d points) to %s", len(store), store.point_count(), path)
