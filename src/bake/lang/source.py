"""
Source buffers and position mapping.

Positions in the Bake AST are plain integers: the 1-based byte offset of
a node's first token in the trimmed source buffer. SourceMap turns them
back into filename:line:column for diagnostics, traces and errors.
"""

from bisect import bisect_right
from typing import Optional, Union

from bake.errors import SourceLocation
from bake.lang.errors import BakeSyntaxError

NO_POS = 0


def load_source(data: Union[bytes, str], filename: str = "<input>") -> bytes:
    """
    Normalize input to the buffer the scanner works on.

    The buffer is UTF-8 with surrounding whitespace trimmed, so offsets
    recorded by the parser refer to the trimmed text.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BakeSyntaxError(
            f"source is not valid UTF-8 (byte offset {e.start})",
            SourceLocation(filename, 1, 1),
        ) from e
    return data.strip()


class SourceMap:
    """
    Maps byte offsets of one source buffer to line/column locations.

    Attributes:
        filename: Name used in every SourceLocation produced
        data: The (trimmed) source bytes
    """

    def __init__(self, filename: str, data: bytes):
        self.filename = filename
        self.data = data
        self._line_starts = [0]
        for i, byte in enumerate(data):
            if byte == 0x0A:
                self._line_starts.append(i + 1)

    def location(self, pos: int) -> Optional[SourceLocation]:
        """Return the location of a 1-based position, None for NO_POS."""
        if pos == NO_POS:
            return None
        return self.offset_location(pos - 1)

    def offset_location(self, offset: int) -> SourceLocation:
        """Return the location of a 0-based byte offset."""
        offset = max(0, min(offset, len(self.data)))
        line_index = bisect_right(self._line_starts, offset) - 1
        column = offset - self._line_starts[line_index] + 1
        return SourceLocation(self.filename, line_index + 1, column)

    def line_text(self, line: int) -> Optional[str]:
        """Return the text of a 1-based line, without its terminator."""
        if not 0 < line <= len(self._line_starts):
            return None
        start = self._line_starts[line - 1]
        end = self.data.find(b"\n", start)
        if end == -1:
            end = len(self.data)
        return self.data[start:end].decode("utf-8", errors="replace").rstrip("\r")
