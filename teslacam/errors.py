# teslacam/errors.py
"""Exceptions raised by the ingestion pipeline's external-tool and storage layers."""


class IngestError(Exception):
    """Base class for per-item ingestion failures."""


class TranscodeError(IngestError):
    """ffmpeg/ffprobe failed, was not found, or produced unusable output."""


class StorageError(IngestError):
    """Object storage rejected a bucket check or an upload."""
