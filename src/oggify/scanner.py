from pathlib import Path

from .config import OUTPUT_EXTENSION


def discover(directory: Path, extension: str, recursive: bool = False) -> list[Path]:
    """Scan directory for files with the given extension, optionally descending into subdirectories.

    The caller is responsible for checking that directory exists.
    """
    extension = extension.lower()
    candidates = directory.rglob("*") if recursive else directory.iterdir()
    files = []
    for path in sorted(candidates):
        if path.is_file() and path.suffix.lower() == extension:
            files.append(path.resolve())
    return files


def compute_output_path(source: Path) -> Path:
    """Compute the .ogg path next to the source file."""
    return source.with_suffix(OUTPUT_EXTENSION)
