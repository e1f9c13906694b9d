"""
C Source Lexer (Tokenizer)
==========================

This module implements a deliberately small lexer for C source code.
It recognizes just enough of the language to find logging calls of the
form ``identifier ( ... ) ;`` without ever losing its place in the file.

It is not a full C lexer: there are no keywords, no floating point
numbers, and most operators come back as generic tokens. What it must
get right is where comments, literals and statements begin and end.

Token Categories
----------------
- Identifiers: ASCII letter followed by letters, digits or underscores
- Numbers: decimal, octal (leading 0) and hexadecimal (0x) integers
- Strings: "double quoted", Characters: 'single quoted'
- Punctuation with dedicated kinds: ( ) [ ] < > , ; -> #
- Generic tokens: { } : ~ ? * % ! . / and + - = | & (single or doubled)

Comments
--------
- Single-line: // comment (the terminating newline is consumed with it)
- Multi-line: /* comment */
Both are discarded. Input ending inside a comment ends the token stream.

Escape Sequences
----------------
By default literals are kept verbatim. With ``escape_strip`` enabled,
``\\?`` becomes ``?``, the single-letter escapes ``\\a \\b \\f \\n \\r
\\t \\v`` become a space (unless they sit right before the closing
delimiter), and every other escape is kept as written.

Example Usage
-------------
>>> from kernelscan.stream import PushbackStream
>>> lexer = Lexer(PushbackStream.from_string('dev_err(dev, "oops\\n");'))
>>> for token in lexer.tokens():
...     print(token)
Token(IDENTIFIER, 'dev_err', 1)
Token(PAREN_OPEN, '(', 1)
Token(IDENTIFIER, 'dev', 1)
Token(COMMA, ',', 1)
Token(STRING, '"oops\\\\n"', 1)
Token(PAREN_CLOSE, ')', 1)
Token(TERMINAL, ';', 1)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from kernelscan.stream import EOF, PushbackStream


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    The closed set of token kinds the scanner distinguishes.

    Only the kinds the statement reconstructor cares about get their
    own entry; everything else is UNKNOWN.
    """

    UNKNOWN = auto()        # Generic single character or operator
    NUMBER = auto()         # Integer
    STRING = auto()         # "string"
    CHAR = auto()           # 'x'
    IDENTIFIER = auto()     # identifier
    PAREN_OPEN = auto()     # (
    PAREN_CLOSE = auto()    # )
    BRACKET_OPEN = auto()   # [
    BRACKET_CLOSE = auto()  # ]
    PREPROCESSOR = auto()   # #
    WHITESPACE = auto()     # ' ', '\t', '\r', '\n', '\\'
    LESS_THAN = auto()      # <
    GREATER_THAN = auto()   # >
    COMMA = auto()          # ,
    ARROW = auto()          # ->
    TERMINAL = auto()       # ;


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from C source code.

    Attributes:
        kind: The TokenKind classification
        text: The exact characters gathered for this token
        line: Physical line the token starts on (1-indexed)
        radix: 10, 8 or 16 for NUMBER tokens, None otherwise
    """
    kind: TokenKind
    text: str
    line: int = 0
    radix: Optional[int] = None

    def __repr__(self) -> str:
        """Format token for debugging output."""
        return f"Token({self.kind.name}, {self.text!r}, {self.line})"

    def unquoted(self) -> str:
        """
        Return a literal's text without its delimiting quotes.

        An unterminated literal (input ended before the closing quote)
        only loses its opening quote.
        """
        if len(self.text) >= 2 and self.text[-1] == self.text[0]:
            return self.text[1:-1]
        return self.text[1:]


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes C source read from a PushbackStream.

    Each call to next_token() returns a fresh Token, or None once the
    input is exhausted. Malformed input never raises: unknown characters
    are skipped and unterminated literals are returned as they are.

    Usage:
        lexer = Lexer(PushbackStream(open("foo.c", "rb")))
        for token in lexer.tokens():
            ...

    Attributes:
        stream: The character stream being tokenized
        escape_strip: Strip C escape sequences inside literals
        lines: Newline characters consumed as whitespace so far
    """

    WHITESPACE = frozenset(" \t\r\n\\")

    PUNCTUATION = {
        "(": TokenKind.PAREN_OPEN,
        ")": TokenKind.PAREN_CLOSE,
        "[": TokenKind.BRACKET_OPEN,
        "]": TokenKind.BRACKET_CLOSE,
        "<": TokenKind.LESS_THAN,
        ">": TokenKind.GREATER_THAN,
        ",": TokenKind.COMMA,
        ";": TokenKind.TERMINAL,
    }

    # Single characters returned as generic tokens
    GENERIC = frozenset("{}:~?*%!.")

    # Operators that may appear doubled: + ++, = ==, | ||, & &&
    DOUBLING_OPERATORS = frozenset("+=|&")

    IDENT_START = frozenset(string.ascii_letters)
    IDENT_CHARS = frozenset(string.ascii_letters + string.digits + "_")

    DECIMAL_DIGITS = frozenset(string.digits)
    # 8 is accepted in octal numbers, matching the historic behavior
    OCTAL_DIGITS = frozenset("012345678")
    HEX_DIGITS = frozenset(string.hexdigits)

    # Escapes replaced by a space in escape-strip mode
    STRIPPED_ESCAPES = frozenset("abfnrtv")

    def __init__(self, stream: PushbackStream, escape_strip: bool = False):
        """
        Initialize the lexer.

        Args:
            stream: Source of characters
            escape_strip: Select the escape-stripping literal policy
        """
        self.stream = stream
        self.escape_strip = escape_strip
        self.lines = 0

    def tokens(self, skip_whitespace: bool = True) -> Iterator[Token]:
        """Generate tokens until the input is exhausted."""
        while True:
            token = self.next_token(skip_whitespace)
            if token is None:
                return
            yield token

    def next_token(self, skip_whitespace: bool = True) -> Optional[Token]:
        """
        Scan and return the next token.

        Args:
            skip_whitespace: Discard whitespace instead of returning
                             WHITESPACE tokens

        Returns:
            The next Token, or None at end of input
        """
        stream = self.stream

        while True:
            line = stream.line
            ch = stream.read()

            if ch == EOF:
                return None

            if ch == "/":
                comment = self._skip_comment()
                if comment is None:
                    return None
                if comment:
                    continue
                return Token(TokenKind.UNKNOWN, ch, line)

            if ch == "#":
                return Token(TokenKind.PREPROCESSOR, ch, line)

            if ch in self.WHITESPACE:
                if ch == "\n":
                    self.lines += 1
                if skip_whitespace:
                    continue
                return self._scan_whitespace(ch, line)

            kind = self.PUNCTUATION.get(ch)
            if kind is not None:
                return Token(kind, ch, line)

            if ch in self.GENERIC:
                return Token(TokenKind.UNKNOWN, ch, line)

            if ch in self.DECIMAL_DIGITS:
                return self._scan_number(ch, line)

            if ch in self.IDENT_START:
                return self._scan_identifier(ch, line)

            if ch == '"':
                return self._scan_literal(ch, TokenKind.STRING, line)

            if ch == "'":
                return self._scan_literal(ch, TokenKind.CHAR, line)

            if ch in self.DOUBLING_OPERATORS:
                return self._scan_operator(ch, line)

            if ch == "-":
                return self._scan_minus(line)

            # Anything else (_, ^, @, $, non-ASCII...) is skipped

    # =========================================================================
    # Comments and Whitespace
    # =========================================================================

    def _skip_comment(self) -> Optional[bool]:
        """
        Skip a comment after a '/' has been read.

        Returns:
            True if a comment was skipped, False if the '/' does not start
            a comment (the lookahead is pushed back), None at end of input
        """
        stream = self.stream

        nextch = stream.read()
        if nextch == EOF:
            return None

        if nextch == "/":
            while True:
                ch = stream.read()
                if ch == EOF:
                    return None
                if ch == "\n":
                    return True

        if nextch == "*":
            while True:
                ch = stream.read()
                if ch == EOF:
                    return None
                if ch == "*":
                    ch = stream.read()
                    if ch == EOF:
                        return None
                    if ch == "/":
                        return True
                    stream.unread(ch)

        stream.unread(nextch)
        return False

    def _scan_whitespace(self, ch: str, line: int) -> Optional[Token]:
        """
        Build a visible whitespace token.

        In preserve mode a whitespace character is paired with the one
        after it, so a backslash line continuation stays in one token.
        """
        if self.escape_strip:
            return Token(TokenKind.WHITESPACE, ch, line)

        nextch = self.stream.read()
        if nextch == EOF:
            return None
        if nextch == "\n":
            self.lines += 1
        return Token(TokenKind.WHITESPACE, ch + nextch, line)

    # =========================================================================
    # Numbers and Identifiers
    # =========================================================================

    def _scan_number(self, first: str, line: int) -> Token:
        """
        Scan an integer literal: decimal, octal (0...) or hex (0x...).

        There are no floats in the kernel, so a '.' simply ends the number.
        """
        stream = self.stream
        text = [first]

        if first == "0":
            nextch = stream.read()
            if nextch in self.OCTAL_DIGITS:
                text.append(nextch)
                radix, digits = 8, self.OCTAL_DIGITS
            elif nextch in ("x", "X"):
                hexch = stream.read()
                if hexch not in self.HEX_DIGITS:
                    stream.unread(hexch)
                    stream.unread(nextch)
                    return Token(TokenKind.NUMBER, first, line, radix=10)
                text += [nextch, hexch]
                radix, digits = 16, self.HEX_DIGITS
            else:
                stream.unread(nextch)
                return Token(TokenKind.NUMBER, first, line, radix=10)
        else:
            radix, digits = 10, self.DECIMAL_DIGITS

        while True:
            ch = stream.read()
            if ch not in digits:
                stream.unread(ch)
                break
            text.append(ch)

        return Token(TokenKind.NUMBER, "".join(text), line, radix=radix)

    def _scan_identifier(self, first: str, line: int) -> Token:
        """Scan an identifier; a leading underscore never reaches here."""
        stream = self.stream
        text = [first]

        while True:
            ch = stream.read()
            if ch not in self.IDENT_CHARS:
                stream.unread(ch)
                break
            text.append(ch)

        return Token(TokenKind.IDENTIFIER, "".join(text), line)

    # =========================================================================
    # String and Character Literals
    # =========================================================================

    def _scan_literal(self, delimiter: str, kind: TokenKind, line: int) -> Token:
        """
        Scan a string or character literal, including both delimiters.

        End of input before the closing delimiter (or right after a
        backslash) ends the token early; the caller gets the partial text.
        """
        stream = self.stream
        text = [delimiter]

        while True:
            ch = stream.read()
            if ch == EOF:
                break

            if ch == "\\":
                escaped = stream.read()
                if escaped == EOF:
                    break
                if not self.escape_strip:
                    text += [ch, escaped]
                elif escaped == "?":
                    text.append(escaped)
                elif escaped in self.STRIPPED_ESCAPES:
                    # Peek so an escape at the very end does not
                    # leave a trailing space before the delimiter
                    following = stream.read()
                    stream.unread(following)
                    if following != delimiter:
                        text.append(" ")
                else:
                    text += [ch, escaped]
                continue

            text.append(ch)
            if ch == delimiter:
                break

        return Token(kind, "".join(text), line)

    # =========================================================================
    # Operators
    # =========================================================================

    def _scan_operator(self, op: str, line: int) -> Token:
        """Scan an operator that may be doubled, such as + or ++."""
        nextch = self.stream.read()
        if nextch == op:
            return Token(TokenKind.UNKNOWN, op + op, line)
        self.stream.unread(nextch)
        return Token(TokenKind.UNKNOWN, op, line)

    def _scan_minus(self, line: int) -> Token:
        """Scan -, -- or ->."""
        nextch = self.stream.read()
        if nextch == "-":
            return Token(TokenKind.UNKNOWN, "--", line)
        if nextch == ">":
            return Token(TokenKind.ARROW, "->", line)
        self.stream.unread(nextch)
        return Token(TokenKind.UNKNOWN, "-", line)
