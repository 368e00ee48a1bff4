"""
Offline Speech-to-Text Source
=============================

Stage 4 of the transcript cascade: download the audio track and run a local
speech-recognition binary over it.

Features:
- AudioDownloader / SpeechTranscriber capabilities so tests can swap in fakes
- yt-dlp audio download (16 kHz mono WAV) and whisper.cpp transcription
- Scratch directory unique per video and run, removed on every exit path
"""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

from .sources import TranscriptSource

logger = logging.getLogger(__name__)


class ExternalToolError(RuntimeError):
    """An external binary exited non-zero or produced no output file."""
    pass


def run_command(cmd: List[str]) -> subprocess.CompletedProcess:
    logger.debug("Running: %s", " ".join(cmd))
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()[-500:]
        raise ExternalToolError(f"{Path(cmd[0]).name} exited {result.returncode}: {detail}")
    return result


class AudioDownloader:
    """Fetches the audio-only stream of a video into a directory."""

    def download(self, video_id: str, workdir: Path) -> Path:
        raise NotImplementedError


class SpeechTranscriber:
    """Turns an audio file into plain text."""

    def transcribe(self, audio_path: Path, workdir: Path) -> str:
        raise NotImplementedError


class YtDlpAudioDownloader(AudioDownloader):

    def __init__(self, binary: str = "yt-dlp"):
        self.binary = binary

    def download(self, video_id: str, workdir: Path) -> Path:
        out_template = workdir / "audio.%(ext)s"
        run_command([
            self.binary,
            "-f", "bestaudio/best",
            "--no-playlist",
            "-x", "--audio-format", "wav",
            "--postprocessor-args", "ffmpeg:-ar 16000 -ac 1",
            "-o", str(out_template),
            f"https://www.youtube.com/watch?v={video_id}",
        ])
        produced = sorted(workdir.glob("audio.*"), key=lambda p: p.stat().st_mtime, reverse=True)
        if not produced:
            raise ExternalToolError("yt-dlp ran but no audio file was produced.")
        return produced[0]


class WhisperCppTranscriber(SpeechTranscriber):
    """whisper.cpp CLI: -m model -f input -otxt -of output_stem."""

    def __init__(self, binary: str, model_path: Path):
        self.binary = binary
        self.model_path = Path(model_path)

    def transcribe(self, audio_path: Path, workdir: Path) -> str:
        stem = workdir / "transcript"
        run_command([
            self.binary,
            "-m", str(self.model_path),
            "-f", str(audio_path),
            "-otxt",
            "-of", str(stem),
        ])
        out = stem.with_suffix(".txt")
        if not out.is_file():
            raise ExternalToolError(f"Speech recognizer produced no output at {out}")
        return out.read_text(encoding="utf-8", errors="replace").strip()


class OfflineSpeechSource(TranscriptSource):
    """Last-resort transcript from the audio itself."""

    name = "offline-stt"

    def __init__(self, downloader: Optional[AudioDownloader], transcriber: Optional[SpeechTranscriber]):
        self.downloader = downloader
        self.transcriber = transcriber

    def _fetch(self, video_id: str) -> Optional[str]:
        if self.downloader is None or self.transcriber is None:
            logger.debug("Offline speech-to-text not configured; skipping %s", video_id)
            return None

        with tempfile.TemporaryDirectory(prefix=f"yt-tldr-{video_id}-") as td:
            workdir = Path(td)
            audio = self.downloader.download(video_id, workdir)
            logger.info("Transcribing downloaded audio for %s", video_id)
            return self.transcriber.transcribe(audio, workdir)
