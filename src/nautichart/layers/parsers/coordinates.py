"""Parse uploaded coordinate files into GeoPoints and overlay Bounds.

Two independent sources of geometry are read from every upload:

- the filename, ``{swLat}_{swLng}_{neLat}_{neLng}.{ext}``, which marks the
  file as a georeferenced image and yields its Bounds;
- the body, plain text with one ``lat lng`` pair per line (whitespace
  separated, CR/LF or LF line endings, blank lines ignored).

A file may carry both. Bad lines, bad filenames and unreadable files are
never fatal: they simply contribute nothing.
"""

from __future__ import annotations

import asyncio
import math
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from loguru import logger

from nautichart.geo import Bounds, GeoPoint

# Optionally signed decimal, optionally fractional, optional exponent
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LINE_BREAK_RE = re.compile(r"\r?\n")


@dataclass
class CoordinateFile:
    """Everything extracted from one uploaded file.

    Attributes:
        filename: Name of the upload (without directories).
        data: Raw file bytes, kept for building an image overlay.
        bounds: Overlay bounds from the filename, or None.
        points: Coordinates from the body, in file order.
    """

    filename: str
    data: bytes = b""
    bounds: Bounds | None = None
    points: list[GeoPoint] = field(default_factory=list)


def _parse_decimal(token: str) -> float | None:
    if not _DECIMAL_RE.fullmatch(token):
        return None
    value = float(token)
    return value if math.isfinite(value) else None


def parse_bounds_from_filename(filename: str) -> Bounds | None:
    """Extract overlay Bounds from a ``swLat_swLng_neLat_neLng.ext`` name.

    Returns:
        Bounds if the stem is exactly four valid decimal coordinates,
        None otherwise.
    """
    stem = PurePath(filename).name
    stem, dot, _ext = stem.rpartition(".")
    if not dot or not stem:
        stem = PurePath(filename).name
    tokens = stem.split("_")
    if len(tokens) != 4:
        return None

    values = [_parse_decimal(t) for t in tokens]
    if any(v is None for v in values):
        return None
    sw_lat, sw_lng, ne_lat, ne_lng = values
    try:
        return Bounds(GeoPoint(sw_lat, sw_lng), GeoPoint(ne_lat, ne_lng))
    except ValueError:
        return None


def parse_coordinates(text: str) -> list[GeoPoint]:
    """Parse ``lat lng`` lines into GeoPoints, skipping anything malformed.

    Only the first two whitespace-separated tokens of a line are read, so
    trailing columns (altitude, names) are ignored.
    """
    points: list[GeoPoint] = []
    for line in _LINE_BREAK_RE.split(text):
        line = line.strip()
        if not line:
            continue
        tokens = line.split()
        if len(tokens) < 2:
            continue
        lat = _parse_decimal(tokens[0])
        lng = _parse_decimal(tokens[1])
        if lat is None or lng is None:
            continue
        try:
            points.append(GeoPoint(lat, lng))
        except ValueError:
            continue
    return points


def serialize_coordinates(points: list[GeoPoint]) -> str:
    """Write points in the same ``lat lng`` per-line format."""
    return "".join(f"{p.lat!r} {p.lng!r}\n" for p in points)


def parse_coordinate_file(filename: str, data: bytes) -> CoordinateFile:
    """Parse one upload: bounds from the name, points from the body.

    Both are always attempted. A body that is not UTF-8 text yields no
    points but does not prevent the filename bounds.
    """
    name = PurePath(filename).name
    result = CoordinateFile(filename=name, data=data)
    result.bounds = parse_bounds_from_filename(name)

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        if result.bounds is None:
            logger.warning(f"Upload {name} is neither coordinate text nor a georeferenced image")
        return result

    result.points = parse_coordinates(text)
    return result


def read_coordinate_file(path: str | Path) -> CoordinateFile:
    """Read and parse a file from disk.

    An unreadable file gives an empty result instead of raising.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return CoordinateFile(filename=path.name)
    return parse_coordinate_file(path.name, data)


async def read_coordinate_file_async(path: str | Path) -> CoordinateFile:
    """Like read_coordinate_file, without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, read_coordinate_file, path)
