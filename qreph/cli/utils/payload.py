"""Reading the note content for the CLI."""

from typing import BinaryIO, List, Optional


def stdin_is_piped(stream) -> bool:
    """True when stdin is a pipe or file rather than a terminal."""
    isatty = getattr(stream, "isatty", None)
    return not (isatty and isatty())


def read_payload(text: Optional[List[str]], stdin: BinaryIO, piped: bool) -> Optional[bytes]:
    """
    Return the note content, or None when nothing was supplied at all.

    Piped stdin wins over arguments. Arguments are joined with single spaces.
    An empty result is returned as b"" so the store can reject it.
    """
    if piped:
        return stdin.read()
    if not text:
        return None
    return " ".join(text).encode("utf-8")
