from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import NamedTuple


class SourceFormat(str, Enum):
    WAV = ".wav"
    MP3 = ".mp3"


@dataclass(frozen=True)
class ConversionRequest:
    source_path: Path
    source_format: SourceFormat
    target_path: Path


@dataclass(frozen=True)
class TranscodeResult:
    exit_code: int
    stderr_text: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class OutcomeKind(Enum):
    CONVERTED = "converted"
    SKIPPED_EXISTING = "skipped_existing"
    SKIPPED_DECLINED = "skipped_declined"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionOutcome:
    """Terminal classification of one file.

    A converted file whose source could not be deleted stays CONVERTED and
    carries the deletion error in ``warning``.
    """

    kind: OutcomeKind
    reason: str | None = None
    warning: str | None = None
    overwritten: bool = False
    source_deleted: bool = False

    @property
    def converted(self) -> bool:
        return self.kind is OutcomeKind.CONVERTED


class ConversionResult(NamedTuple):
    request: ConversionRequest
    outcome: ConversionOutcome
