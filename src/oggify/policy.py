from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigurationError


@dataclass(frozen=True)
class ConversionOptions:
    force_overwrite: bool = False
    skip_if_exists: bool = False
    recursive: bool = False
    delete_source: bool = False

    def __post_init__(self) -> None:
        if self.force_overwrite and self.skip_if_exists:
            raise ConfigurationError("--overwrite and --skip-existing cannot be used together")


class Decision(Enum):
    PROCEED = "proceed"
    SKIP_EXISTING = "skip_existing"
    SKIP_DECLINED = "skip_declined"


def decide(
    output_exists: bool,
    options: ConversionOptions,
    confirm: Callable[[], bool],
) -> Decision:
    """Decide what to do with a source file given whether its output already exists.

    confirm is only called when the output exists and neither --overwrite nor
    --skip-existing was given. It may block waiting for the user.
    """
    if not output_exists:
        return Decision.PROCEED
    if options.skip_if_exists:
        return Decision.SKIP_EXISTING
    if options.force_overwrite:
        return Decision.PROCEED
    return Decision.PROCEED if confirm() else Decision.SKIP_DECLINED
