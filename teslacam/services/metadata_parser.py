# teslacam/services/metadata_parser.py
"""
Parses an event folder's event.json and thumbnail into a ParsedEventMetadata.

Every field is parsed independently: a bad value is logged, recorded in
`errors` and left at its default, the remaining fields are still applied.
The parser never raises for a malformed folder.

event.json fields (all strings):
  reason, city, street, timestamp (required), est_lat/est_lon (or legacy lat/long), camera
"""

import asyncio
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from teslacam.config import settings
from teslacam.services.geocoder import NullGeocoder
from teslacam.utils.json_parser import safe_load_json, get_str
from teslacam.utils.logger import get_logger

logger = get_logger(__name__)

# Seconds fraction; fromisoformat on 3.10 only takes exactly 3 or 6 digits
_FRACTION_RE = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


@dataclass
class ParsedEventMetadata:
    type: str = "unknown"
    city: str = ""
    street: str = ""
    timestamp: Optional[datetime] = None   # None → caller falls back to discovery time
    latitude: str = ""
    longitude: str = ""
    camera: Optional[int] = None
    thumbnail: Optional[bytes] = None
    errors: list = field(default_factory=list)


def parse_event_timestamp(text: str) -> datetime:
    """
    ISO-8601-ish timestamp → naive UTC datetime. Text without an offset is taken as UTC.
    Raises ValueError if the text is empty or unparseable.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("timestamp is empty")
    text = _FRACTION_RE.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _as_coordinate(text: str) -> Optional[float]:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


class MetadataParser:
    """Holds the optional geocoder so parsing logic doesn't branch on a config flag."""

    def __init__(self, geocoder=None, metadata_file: str = settings.EVENT_METADATA_FILE,
                 thumbnail_file: str = settings.EVENT_THUMBNAIL_FILE):
        self.geocoder = geocoder or NullGeocoder()
        self.metadata_file = metadata_file
        self.thumbnail_file = thumbnail_file

    async def parse(self, folder: Path) -> ParsedEventMetadata:
        folder = Path(folder)
        meta = ParsedEventMetadata()

        meta_path = folder / self.metadata_file
        if meta_path.is_file():
            data = await asyncio.to_thread(safe_load_json, meta_path)
            if data is None:
                self._fail(meta, folder, f"{self.metadata_file} is not a readable JSON object")
            else:
                self._apply_fields(meta, data, folder)
        else:
            logger.debug(f"[META] {folder.name}: no {self.metadata_file}")

        meta.thumbnail = await self._read_thumbnail(folder)

        await self._enrich(meta, folder)
        return meta

    def _apply_fields(self, meta: ParsedEventMetadata, data: dict, folder: Path):
        meta.type = get_str(data, "reason") or "unknown"
        meta.city = get_str(data, "city")
        meta.street = get_str(data, "street")

        if "timestamp" not in data:
            self._fail(meta, folder, "timestamp not found")
        else:
            raw_ts = get_str(data, "timestamp")
            try:
                meta.timestamp = parse_event_timestamp(raw_ts)
            except ValueError:
                self._fail(meta, folder, f"failed to parse timestamp '{raw_ts}'")

        # Newer firmware writes est_lat/est_lon, older writes lat/long
        meta.latitude = get_str(data, "est_lat", "lat")
        meta.longitude = get_str(data, "est_lon", "long")

        if data.get("camera") is not None:
            raw_cam = get_str(data, "camera")
            try:
                meta.camera = int(raw_cam.strip())
            except ValueError:
                self._fail(meta, folder, f"failed to parse camera value '{raw_cam}'")

        logger.debug(f"[META] {folder.name}: type={meta.type} ts={meta.timestamp} "
                     f"lat={meta.latitude} lon={meta.longitude} camera={meta.camera}")

    async def _read_thumbnail(self, folder: Path) -> Optional[bytes]:
        thumb_path = folder / self.thumbnail_file
        if not thumb_path.is_file():
            return None
        try:
            return await asyncio.to_thread(thumb_path.read_bytes)
        except OSError as e:
            logger.warning(f"[META] {folder.name}: failed to read {self.thumbnail_file}: {e}")
            return None

    async def _enrich(self, meta: ParsedEventMetadata, folder: Path):
        lat, lon = _as_coordinate(meta.latitude), _as_coordinate(meta.longitude)
        if lat is None or lon is None:
            return

        result = await self.geocoder.reverse(lat, lon)
        if result is None:
            return

        # Street from the lookup wins; a city already in event.json is kept
        if result.street:
            meta.street = result.street
        if not meta.city and result.city:
            meta.city = result.city
        logger.info(f"[GEO] {folder.name}: {meta.street}, {meta.city}")

    @staticmethod
    def _fail(meta: ParsedEventMetadata, folder: Path, message: str):
        meta.errors.append(message)
        logger.warning(f"[META] {folder.name}: {message}")
