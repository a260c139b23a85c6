import logging
from collections.abc import Callable
from pathlib import Path

from .errors import ConfigurationError, TranscodeError, TranscoderNotFoundError
from .models import (
    ConversionOutcome,
    ConversionRequest,
    ConversionResult,
    OutcomeKind,
    SourceFormat,
    TranscodeResult,
)
from .policy import ConversionOptions, Decision, decide
from .scanner import compute_output_path, discover
from .transcoder import invoke

logger = logging.getLogger(__name__)

ConfirmOverwrite = Callable[[ConversionRequest], bool]
OutcomeCallback = Callable[[ConversionRequest, ConversionOutcome], None]
Transcode = Callable[[Path, ConversionRequest], TranscodeResult]


def decline_all(request: ConversionRequest) -> bool:
    """Confirmation callback for non-interactive runs: never overwrite."""
    return False


def build_request(source: Path, source_format: SourceFormat) -> ConversionRequest:
    return ConversionRequest(
        source_path=source,
        source_format=source_format,
        target_path=compute_output_path(source),
    )


def convert_file(
    request: ConversionRequest,
    options: ConversionOptions,
    transcoder_path: Path,
    confirm: ConfirmOverwrite = decline_all,
    transcode: Transcode = invoke,
) -> ConversionOutcome:
    """Take a single request through policy, transcoding and source cleanup."""
    output_exists = request.target_path.exists()
    decision = decide(output_exists, options, lambda: confirm(request))
    if decision is Decision.SKIP_EXISTING:
        return ConversionOutcome(OutcomeKind.SKIPPED_EXISTING)
    if decision is Decision.SKIP_DECLINED:
        return ConversionOutcome(OutcomeKind.SKIPPED_DECLINED)

    overwritten = False
    if output_exists:
        # The transcoder refuses to overwrite, so the old output goes first.
        try:
            request.target_path.unlink()
        except OSError as e:
            return ConversionOutcome(
                OutcomeKind.FAILED, reason=f"Could not remove existing {request.target_path}: {e}"
            )
        overwritten = True
        logger.info(f"Removed existing {request.target_path}")

    try:
        result = transcode(transcoder_path, request)
    except TranscodeError as e:
        return ConversionOutcome(OutcomeKind.FAILED, reason=str(e), overwritten=overwritten)

    if not result.succeeded:
        reason = result.stderr_text.strip() or f"transcoder exited with code {result.exit_code}"
        logger.debug(f"Transcoder failed on {request.source_path}:\n{reason}")
        return ConversionOutcome(OutcomeKind.FAILED, reason=reason, overwritten=overwritten)

    if not options.delete_source:
        return ConversionOutcome(OutcomeKind.CONVERTED, overwritten=overwritten)

    try:
        request.source_path.unlink()
    except OSError as e:
        logger.debug(f"Could not delete {request.source_path}: {e}")
        return ConversionOutcome(
            OutcomeKind.CONVERTED,
            warning=f"Could not delete {request.source_path}: {e}",
            overwritten=overwritten,
        )
    return ConversionOutcome(OutcomeKind.CONVERTED, overwritten=overwritten, source_deleted=True)


def run(
    directory: Path,
    options: ConversionOptions,
    transcoder_path: Path,
    source_format: SourceFormat = SourceFormat.WAV,
    confirm: ConfirmOverwrite = decline_all,
    on_outcome: OutcomeCallback | None = None,
    transcode: Transcode = invoke,
) -> list[ConversionResult]:
    """Convert every matching file in directory, one at a time.

    Fails with ConfigurationError before touching any file if the directory or
    transcoder is missing. Per-file failures never stop the batch; each outcome
    is passed to on_outcome as soon as it is known.
    """
    if not directory.is_dir():
        raise ConfigurationError(f"Input directory not found: {directory}")
    if not transcoder_path.is_file():
        raise TranscoderNotFoundError(f"Transcoder not found: {transcoder_path}")

    files = discover(directory, source_format.value, recursive=options.recursive)
    if not files:
        logger.info(f"No {source_format.value} files in {directory}, nothing to do")
        return []

    logger.info(f"Found {len(files)} {source_format.value} files in {directory}")

    results = []
    # target -> source; a.WAV and a.wav would both write a.ogg
    claimed: dict[Path, Path] = {}
    for source in files:
        request = build_request(source, source_format)
        other = claimed.get(request.target_path)
        if other is not None:
            outcome = ConversionOutcome(
                OutcomeKind.FAILED,
                reason=f"{request.target_path.name} is already the output of {other.name}",
            )
        else:
            claimed[request.target_path] = source
            outcome = convert_file(request, options, transcoder_path, confirm=confirm, transcode=transcode)
        results.append(ConversionResult(request, outcome))
        if on_outcome is not None:
            on_outcome(request, outcome)
    return results
