# teslacam/services/video_consolidator.py
"""
Video consolidation — merges one camera's per-minute clips into a single video.

Multiple clips are joined with ffmpeg's concat demuxer as a stream copy (no
re-encode). A single clip is passed through untouched. Either way the result
is probed with ffprobe for its duration.

The transcoder is a narrow interface so the pipeline can run against a fake:
    concat(inputs, output) -> output
    probe_duration(path)   -> seconds
"""

import asyncio
import os
import shutil
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from teslacam.config import settings
from teslacam.errors import TranscodeError
from teslacam.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ConsolidatedVideo:
    path: Path
    duration_seconds: float
    size_bytes: int


def write_concat_manifest(inputs: Sequence[Path], manifest: Path) -> Path:
    """Concat demuxer list file. Single quotes in paths are escaped as '\\''."""
    lines = []
    for p in inputs:
        escaped = str(Path(p).resolve()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'\n")
    Path(manifest).write_text("".join(lines), encoding="utf-8")
    return Path(manifest)


class FFmpegTranscoder:
    def __init__(self, ffmpeg: str = settings.FFMPEG_BINARY, ffprobe: str = settings.FFPROBE_BINARY):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe

    async def concat(self, inputs: Sequence[Path], output: Path) -> Path:
        output = Path(output)
        manifest = write_concat_manifest(inputs, output.with_suffix(".txt"))
        try:
            await self._run(
                self.ffmpeg, "-hide_banner", "-loglevel", "error", "-y",
                "-f", "concat", "-safe", "0", "-i", str(manifest),
                "-c", "copy", str(output),
            )
        finally:
            manifest.unlink(missing_ok=True)
        if not output.is_file():
            raise TranscodeError(f"ffmpeg reported success but {output.name} was not written")
        return output

    async def probe_duration(self, path: Path) -> float:
        out = await self._run(
            self.ffprobe, "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=nw=1:nk=1",
            str(path),
        )
        raw = out.strip()
        try:
            return float(raw)
        except ValueError:
            raise TranscodeError(f"ffprobe returned no duration for {path}: '{raw}'")

    async def _run(self, *args: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise TranscodeError(f"{args[0]} executable not found") from exc

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            raise

        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip()
            raise TranscodeError(f"{os.path.basename(args[0])} exited with {proc.returncode}: {err[-500:]}")
        return stdout.decode("utf-8", errors="replace")


class VideoConsolidator:
    def __init__(self, transcoder=None, work_dir: Optional[str] = settings.WORK_DIR):
        self.transcoder = transcoder or FFmpegTranscoder()
        self.work_dir = work_dir

    @asynccontextmanager
    async def consolidate(self, inputs: Sequence[Path], name: str = "merged.mp4"):
        """
        Yields a ConsolidatedVideo for `inputs` (already in capture order).
        Anything created in the temporary work dir is removed when the block exits,
        including on error or cancellation. A single input is yielded as-is and never deleted.
        """
        inputs = [Path(p) for p in inputs]
        if not inputs:
            raise ValueError("consolidate() needs at least one input clip")

        if len(inputs) == 1:
            source = inputs[0]
            duration = await self.transcoder.probe_duration(source)
            logger.debug(f"[CONCAT] Single clip {source.name}, passthrough ({duration:.1f}s)")
            yield ConsolidatedVideo(source, duration, source.stat().st_size)
            return

        tmp_dir = Path(tempfile.mkdtemp(prefix="teslacam-", dir=self.work_dir))
        try:
            output = tmp_dir / name
            logger.debug(f"[CONCAT] Joining {len(inputs)} clips → {output}")
            await self.transcoder.concat(inputs, output)
            duration = await self.transcoder.probe_duration(output)
            yield ConsolidatedVideo(output, duration, output.stat().st_size)
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)
