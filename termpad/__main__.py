"""termpad CLI entry point.

Allows running via `python -m termpad` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import importlib.metadata
import logging
import sys

from .settings import Settings, get_settings, log_file_path


def get_version_string() -> str:
    try:
        return importlib.metadata.version("termpad")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def configure_logging(settings: Settings) -> None:
    """Send log records to the log file; the screen belongs to the editor."""
    path = log_file_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding='utf-8')
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("termpad")
    root.addHandler(handler)
    root.setLevel(settings.log_level)


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    return s.encode('unicode_escape').decode('ascii')


def run_keyboard_test() -> None:
    """Print parsed key events until ESC is pressed."""
    from .terminal import TerminalInterface
    from .keyboard import KeyboardHandler

    with TerminalInterface() as term:
        print("Keyboard test mode: press keys to see parsed events.\r")
        print("Quit with ESC.\r")
        kb = KeyboardHandler(term)
        while True:
            ev = kb.get_key_event(timeout=None)
            if not ev:
                continue
            if ev.is_escape:
                break
            mods = '+'.join(sorted(m.value for m in ev.modifiers))
            parts = [f"type={ev.key_type.value}", f"value={ev.value!r}", f"raw='{_escape_bytes(ev.raw)}'"]
            if mods:
                parts.append(f"mods={mods}")
            print(' '.join(parts) + '\r')


def main() -> None:
    # Very small arg parsing: version, keyboard test, and an optional filename
    args = sys.argv[1:]
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return
    if args and args[0] in ('--keytest', '--keyboard-test'):
        run_keyboard_test()
        return

    settings = get_settings()
    configure_logging(settings)
    logger = logging.getLogger(__name__)
    logger.info("Starting termpad %s", get_version_string())

    # Lazy import to avoid importing UI deps for --version
    from .editor import Editor
    editor = Editor(settings)
    if args:
        editor.load_file(args[0])
    try:
        editor.run()
    except Exception:
        logger.exception("Editor crashed")
        raise


if __name__ == "__main__":  # pragma: no cover
    main()
