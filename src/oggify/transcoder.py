import logging
import subprocess
from pathlib import Path

from .config import VORBIS_CODEC, VORBIS_QUALITY
from .errors import TranscodeError
from .models import ConversionRequest, TranscodeResult

logger = logging.getLogger(__name__)


def build_command(transcoder_path: Path, request: ConversionRequest) -> list[str]:
    return [
        str(transcoder_path),
        "-i", str(request.source_path),
        "-c:a", VORBIS_CODEC,
        "-qscale:a", VORBIS_QUALITY,
        str(request.target_path),
    ]


def invoke(transcoder_path: Path, request: ConversionRequest) -> TranscodeResult:
    """Run the transcoder on a single file and wait for it to finish.

    There is no timeout: a transcoder that hangs blocks the whole batch.
    Raises TranscodeError if the process cannot be started at all; a non-zero
    exit is returned in the result with the captured stderr.
    """
    cmd = build_command(transcoder_path, request)
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        completed = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise TranscodeError(f"Could not start {transcoder_path}: {e}") from e

    if completed.returncode != 0:
        logger.debug(f"Transcoder exited with {completed.returncode} for {request.source_path}")

    return TranscodeResult(exit_code=completed.returncode, stderr_text=completed.stderr or "")
