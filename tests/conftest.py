import os
import stat
from pathlib import Path

import pytest

from oggify.models import ConversionRequest, TranscodeResult

STUB_OK = """#!/bin/sh
# Stand-in for ffmpeg: copies the file after -i to the last argument.
echo "$@" >> "$(dirname "$0")/calls.log"
in=""
while [ $# -gt 1 ]; do
  if [ "$1" = "-i" ]; then in="$2"; fi
  shift
done
if [ -e "$1" ]; then
  echo "File '$1' already exists. Exiting." >&2
  exit 1
fi
cp "$in" "$1"
"""

STUB_FAIL = """#!/bin/sh
echo "$@" >> "$(dirname "$0")/calls.log"
echo "Invalid data found when processing input" >&2
exit 1
"""

posix_only = pytest.mark.skipif(os.name != "posix", reason="stub transcoder is a shell script")


def write_stub(directory: Path, body: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "ffmpeg"
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def stub_calls(stub: Path) -> list[str]:
    log = stub.parent / "calls.log"
    if not log.exists():
        return []
    return log.read_text().splitlines()


@pytest.fixture
def ffmpeg_stub(tmp_path):
    return write_stub(tmp_path / "bin", STUB_OK)


@pytest.fixture
def failing_ffmpeg_stub(tmp_path):
    return write_stub(tmp_path / "bin-fail", STUB_FAIL)


@pytest.fixture
def music_dir(tmp_path):
    path = tmp_path / "music"
    path.mkdir()
    return path


@pytest.fixture
def transcoder_file(tmp_path):
    """An existing file to pass as the transcoder when a fake transcode() is injected."""
    path = tmp_path / "tools" / "ffmpeg"
    path.parent.mkdir()
    path.touch()
    return path


class FakeTranscoder:
    """In-process replacement for transcoder.invoke that records each request."""

    def __init__(self, exit_code: int = 0, stderr: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        self.calls: list[ConversionRequest] = []

    def __call__(self, transcoder_path: Path, request: ConversionRequest) -> TranscodeResult:
        self.calls.append(request)
        if request.target_path.exists():
            return TranscodeResult(1, f"File '{request.target_path}' already exists. Exiting.")
        if self.exit_code == 0:
            request.target_path.write_bytes(b"OggS" + request.source_path.read_bytes())
        return TranscodeResult(self.exit_code, self.stderr)
