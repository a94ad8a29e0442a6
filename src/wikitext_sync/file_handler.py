"""Local document I/O for the file-based tools.

Path validation, encoding-detecting reads and plain writes.  Async
wrappers run the blocking parts through ``run_sync()``.
"""

from pathlib import Path

from charset_normalizer import from_bytes

from wikitext_sync.core.async_utils import run_sync

# =============================================================================
# Path Validation
# =============================================================================


def validate_file_path(path_str: str) -> Path:
    """Resolve an absolute path to an existing file.

    Raises:
        ValueError: If path is relative, doesn't exist, or is not a file.
    """
    path = Path(path_str)
    if not path.is_absolute():
        raise ValueError(f"Path must be absolute: {path_str}")
    resolved = path.resolve()
    if not resolved.is_file():
        if resolved.exists():
            raise ValueError(f"Path is not a file: {path_str}")
        raise ValueError(f"File not found: {path_str}")
    return resolved


def validate_output_path(
    path_str: str, base_dir: str | None = None
) -> Path:
    """Resolve an absolute output path whose parent directory exists.

    Args:
        path_str: Absolute path string for the output file.
        base_dir: If given, the output must lie under this directory.

    Raises:
        ValueError: If path is relative, its parent is missing, or it
            escapes *base_dir*.
    """
    path = Path(path_str)
    if not path.is_absolute():
        raise ValueError(f"Path must be absolute: {path_str}")
    resolved = path.resolve()
    if not resolved.parent.is_dir():
        raise ValueError(
            f"Output parent directory not found: {resolved.parent}"
        )
    if base_dir is not None:
        base = Path(base_dir).resolve()
        if not resolved.is_relative_to(base):
            raise ValueError(
                f"Output path is outside base directory: {resolved} not under {base}"
            )
    return resolved


# =============================================================================
# File Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a document, detecting its encoding with charset-normalizer.

    Empty files and undetectable content are treated as UTF-8; ``ascii``
    is reported as ``utf-8``.

    Returns:
        Tuple of (content, encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    best = from_bytes(raw).best()
    if best is None:
        return (raw.decode("utf-8", errors="replace"), "utf-8")

    encoding = "utf-8" if best.encoding == "ascii" else best.encoding
    return (str(best), encoding)


def write_file(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Write *content* to *path*; returns the number of bytes written."""
    encoded = content.encode(encoding)
    path.write_bytes(encoded)
    return len(encoded)


# =============================================================================
# Async Wrappers
# =============================================================================


async def read_file_async(path_str: str) -> tuple[str, str, Path]:
    """Validate *path_str* and read it.

    Returns:
        Tuple of (content, encoding, resolved_path).
    """
    resolved = await run_sync(validate_file_path, path_str)
    content, encoding = await run_sync(read_file_with_encoding, resolved)
    return (content, encoding, resolved)


async def write_file_async(
    path_str: str, content: str, encoding: str = "utf-8"
) -> tuple[Path, int]:
    """Validate *path_str* as an output path and write to it.

    Returns:
        Tuple of (resolved_path, bytes_written).
    """
    resolved = await run_sync(validate_output_path, path_str)
    count = await run_sync(write_file, resolved, content, encoding)
    return (resolved, count)
