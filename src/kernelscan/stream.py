"""
Pushback Character Stream
=========================

A character reader with unbounded pushback, in the spirit of ungetc().

The lexer frequently needs one or two characters of lookahead before it
can decide what kind of token it is looking at (``0x`` vs ``0``, ``->``
vs ``-``, ``/*`` vs ``/``). Instead of peeking into the underlying
stream, it reads characters and pushes back the ones it did not want.

Pushed-back characters form a stack: the most recently pushed character
is read first, so pushing back ``b`` then ``a`` makes the stream read
``a``, ``b`` - exactly as if neither had been consumed.

End of input is reported as the empty string (``EOF``), never as an
exception. Pushback is honored even after end of input was observed.

Example Usage
-------------
>>> stream = PushbackStream.from_string("ab")
>>> stream.read()
'a'
>>> stream.unread("a")
>>> stream.read() + stream.read()
'ab'
>>> stream.read() == EOF
True
"""

import codecs
import io
from typing import BinaryIO, TextIO, Union


# End-of-input sentinel returned by read()
EOF = ""

# Undecodable bytes become lone surrogates, which encode back to the
# original bytes with the same handler
DECODE_ERRORS = "surrogateescape"

# Size of each chunk pulled from the underlying stream
CHUNK_SIZE = 65536


class PushbackStream:
    """
    Reads characters one at a time from a binary or text stream.

    Byte streams are decoded incrementally, so a multi-byte character
    that straddles a chunk boundary is still decoded correctly. Bytes
    that are not valid in the encoding are kept as lone surrogates
    (DECODE_ERRORS), so no input byte is lost. Text streams are consumed
    as they are.

    Attributes:
        line: Current physical line number (1-indexed), adjusted when
              newlines are pushed back
    """

    def __init__(
        self,
        source: Union[BinaryIO, TextIO],
        encoding: str = "utf-8",
    ):
        """
        Wrap a readable stream.

        Args:
            source: Any object with a read(size) method
            encoding: Encoding used when the source yields bytes
        """
        self._source = source
        self._decoder = codecs.getincrementaldecoder(encoding)(errors=DECODE_ERRORS)
        self._pending: list[str] = []
        self._buffer = ""
        self._pos = 0
        self._exhausted = False
        self.line = 1

    @classmethod
    def from_string(cls, text: str) -> "PushbackStream":
        """Create a stream over an in-memory string."""
        return cls(io.StringIO(text))

    def read(self) -> str:
        """
        Return the next character, or EOF at end of input.

        Pushed-back characters are returned first, most recent first.
        """
        if self._pending:
            ch = self._pending.pop()
        else:
            if self._pos >= len(self._buffer) and not self._fill():
                return EOF
            ch = self._buffer[self._pos]
            self._pos += 1

        if ch == "\n":
            self.line += 1
        return ch

    def unread(self, ch: str) -> None:
        """
        Push a character back so the next read() returns it.

        Pushing back EOF is allowed; the next read() then reports end
        of input even if more characters follow.
        """
        if ch == "\n":
            self.line -= 1
        self._pending.append(ch)

    def _fill(self) -> bool:
        """Refill the decode buffer. Returns False once input is exhausted."""
        while not self._exhausted:
            data = self._source.read(CHUNK_SIZE)
            if not data:
                self._exhausted = True

            if isinstance(data, bytes):
                text = self._decoder.decode(data, final=self._exhausted)
            else:
                text = data

            if text:
                self._buffer = text
                self._pos = 0
                return True
        return False
