class OggifyError(Exception):
    """Base class for all oggify errors."""


class ConfigurationError(OggifyError):
    """Invalid options, input directory or settings. Fatal before any file is processed."""


class TranscoderNotFoundError(ConfigurationError):
    """The transcoder executable could not be resolved or does not exist."""


class TranscodeError(OggifyError):
    """The transcoder could not be launched for a single file."""
