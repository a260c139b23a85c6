import json
import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from .config import CONFIG_DIR, CONFIG_FILE, CONFIG_HOME_ENV, DEFAULT_FFMPEG
from .errors import ConfigurationError, TranscoderNotFoundError

logger = logging.getLogger(__name__)

FFMPEG_PATH_KEY = "ffmpeg_path"


def config_path() -> Path:
    """Location of the settings file, honouring OGGIFY_HOME."""
    home = os.environ.get(CONFIG_HOME_ENV)
    base = Path(home) if home else Path.home() / CONFIG_DIR
    return base / CONFIG_FILE


def load_settings(path: Path | None = None) -> dict | None:
    """Load settings from an explicit path or the default location.

    Returns the parsed dict or None if no settings file exists.
    """
    path = path or config_path()
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Settings file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")
    return data


class FfmpegPathStore:
    """Persisted transcoder path, stored in the settings file."""

    def __init__(self, path: Path | None = None):
        self.path = path or config_path()

    def resolve(self) -> Path | None:
        settings = load_settings(self.path)
        if not settings or not settings.get(FFMPEG_PATH_KEY):
            return None
        return Path(settings[FFMPEG_PATH_KEY])

    def persist(self, ffmpeg_path: Path) -> None:
        settings = load_settings(self.path) or {}
        settings[FFMPEG_PATH_KEY] = str(ffmpeg_path)
        self._write(settings)
        logger.info(f"Saved transcoder path {ffmpeg_path} to {self.path}")

    def clear(self) -> bool:
        """Forget the persisted path. Returns False if none was set."""
        settings = load_settings(self.path)
        if not settings or FFMPEG_PATH_KEY not in settings:
            return False
        del settings[FFMPEG_PATH_KEY]
        self._write(settings)
        return True

    def _write(self, settings: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings, indent=2) + "\n")


def resolve_transcoder_path(
    override: Path | None,
    store: FfmpegPathStore,
    prompt: Callable[[], Path] | None = None,
) -> Path:
    """Find the transcoder: CLI override, persisted path, PATH lookup, then prompt.

    A path entered at the prompt is persisted; a CLI override is not.
    """
    if override:
        override = override.expanduser().resolve()
        if not override.is_file():
            raise TranscoderNotFoundError(f"Transcoder not found: {override}")
        return override

    stored = store.resolve()
    if stored:
        if stored.is_file():
            return stored
        logger.warning(f"Saved transcoder path {stored} no longer exists")

    found = shutil.which(DEFAULT_FFMPEG)
    if found:
        return Path(found)

    if prompt is None:
        raise TranscoderNotFoundError(
            f"{DEFAULT_FFMPEG} not found. Set its location with `oggify ffmpeg PATH` or pass --ffmpeg."
        )

    path = prompt()
    store.persist(path)
    return path
