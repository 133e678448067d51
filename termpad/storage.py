"""Backing store for buffers: plain UTF-8 text files.

Files are read whole and split into lines. Saving writes every line in a
single pass to a temporary file next to the target, then renames it over
the target so a failed save never leaves a half-written document behind.
"""

import errno
import logging
import os
import shutil
import tempfile

from .constants import EditorConstants

logger = logging.getLogger(__name__)


def split_lines(text: str) -> list[str]:
    """Split file text into logical lines.

    One trailing newline ends the last line instead of starting a new one,
    and empty text yields a single empty line.
    """
    if not text:
        return [""]
    lines = text.split('\n')
    if text.endswith('\n'):
        lines.pop()
    return lines


def read_lines(filename: str) -> list[str]:
    """Read a file as a list of lines.

    Args:
        filename: Path of the file to read.

    Returns:
        The file's lines without their newline characters.

    Raises:
        OSError: If the file cannot be read or is not valid UTF-8. Callers
            decide how to report it.
    """
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise OSError(errno.EILSEQ, f"{filename} is not valid UTF-8", filename) from e
    lines = split_lines(text)
    logger.debug("Read %d line(s) from %s", len(lines), filename)
    return lines


def _copy_mode(filename: str, temp_filename: str) -> None:
    """Give the temporary file the permissions the target will end up with.

    An existing target keeps its own mode. A new file gets the usual
    0666 minus the umask instead of the 0600 of a temporary file.
    """
    if os.path.exists(filename):
        shutil.copymode(filename, temp_filename)
    else:
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(temp_filename, 0o666 & ~umask)


def write_lines(filename: str, lines: list[str]) -> None:
    """Replace a file with the given lines, atomically.

    Args:
        filename: Path of the file to write.
        lines: Lines to join with newlines.

    Raises:
        OSError: If the temporary file cannot be written or renamed.
    """
    content = '\n'.join(lines)
    dir_name = os.path.dirname(filename) or '.'
    base_name = os.path.basename(filename)
    temp_filename = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            dir=dir_name,
            prefix=EditorConstants.ATOMIC_SAVE_PREFIX + base_name,
            suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
            delete=False,
        ) as temp_file:
            temp_filename = temp_file.name
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        _copy_mode(filename, temp_filename)
        # Atomic rename on POSIX; overwrites on Windows
        os.replace(temp_filename, filename)
    except OSError:
        if temp_filename is not None and os.path.exists(temp_filename):
            try:
                os.remove(temp_filename)
            except OSError:
                logger.warning("Could not remove temporary file %s", temp_filename)
        raise
    logger.debug("Wrote %d line(s) to %s", len(lines), filename)


def create_empty(filename: str) -> None:
    """Create an empty file, failing if anything already exists there.

    Raises:
        FileExistsError: If the path already exists.
        OSError: For any other failure.
    """
    with open(filename, 'x', encoding='utf-8'):
        pass
    logger.info("Created %s", filename)
