"""
Statement Reconstructor
=======================

Turns a recognized logging call back into one readable line.

The scanner hands over control as soon as the lexer produces an
identifier that the FunctionNameTable recognizes. The reconstructor then
consumes tokens up to the terminating ';' and re-serializes the call:

    dev_err(&pdev->dev,
            "failed to map "
            "registers: %d\\n", ret);

becomes

    dev_err(&pdev->dev, "failed to map registers: %d\\n", ret)

Adjacent string literals are folded into one quoted run, whitespace and
comments disappear, and a single space follows every comma. Calls
without any string literal argument are not reported.

States
------
1. Expect-Open-Paren: the token after the name must be '('. Otherwise
   the name was not called here; skip to the next ';' and report nothing.
2. Accumulate-Arguments: append tokens to the line, opening a quote
   before the first literal of each run and closing it after the last.
3. Terminal: on ';' produce a Finding if any literal was seen.

Input that ends in any state raises UnexpectedEndOfInput.
"""

from dataclasses import dataclass
from typing import Optional

from kernelscan.errors import SourceLocation, UnexpectedEndOfInput
from kernelscan.funcnames import FunctionNameTable, default_table
from kernelscan.lexer import Lexer, Token, TokenKind


# =============================================================================
# Finding
# =============================================================================

@dataclass(frozen=True)
class Finding:
    """
    One reconstructed logging statement.

    Attributes:
        path: Source file the call was found in
        line: Line of the function name
        function: The recognized function name
        text: The reconstructed statement, as printed
        messages: Joined content of each contiguous string-literal run
    """
    path: str
    line: int
    function: str
    text: str
    messages: tuple[str, ...] = ()

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for reporting."""
        return SourceLocation(self.path, self.line)

    def __str__(self) -> str:
        return self.text


# =============================================================================
# Reconstructor
# =============================================================================

class StatementReconstructor:
    """
    Consumes one logging call from a Lexer and rebuilds its text.

    The lexer is shared with the scanner: on return, the lexer is
    positioned just after the statement's ';'.

    Usage:
        reconstructor = StatementReconstructor(lexer)
        finding = reconstructor.reconstruct(name_token, "foo.c")
    """

    def __init__(self, lexer: Lexer, table: Optional[FunctionNameTable] = None):
        self.lexer = lexer
        self.table = table if table is not None else default_table()

    def is_recognized(self, token: Token) -> bool:
        """Return True if token is a call candidate: a known function name."""
        return token.kind == TokenKind.IDENTIFIER and token.text in self.table

    def reconstruct(self, name: Token, path: str = "<input>") -> Optional[Finding]:
        """
        Rebuild the call that starts at the recognized name token.

        Args:
            name: The IDENTIFIER token holding the function name
            path: Source path recorded in the Finding

        Returns:
            A Finding, or None for a false match or a call with no
            string literal arguments

        Raises:
            UnexpectedEndOfInput: If input ends before the ';'
        """
        token = self._next(name, path)
        if token.kind != TokenKind.PAREN_OPEN:
            if token.kind != TokenKind.TERMINAL:
                self._skip_statement(name, path)
            return None

        line = [name.text, token.text]
        run: list[str] = []
        messages: list[str] = []
        in_string = False
        has_literal = False

        while True:
            token = self._next(name, path)

            if token.kind == TokenKind.TERMINAL:
                if run:
                    messages.append("".join(run))
                if not has_literal:
                    return None
                return Finding(
                    path=path,
                    line=name.line,
                    function=name.text,
                    text="".join(line),
                    messages=tuple(messages),
                )

            if token.kind == TokenKind.STRING:
                content = token.unquoted()
                run.append(content)
                if not in_string:
                    line.append('"')
                line.append(content)
                in_string = True
                has_literal = True
                continue

            if in_string:
                line.append('"')
            in_string = False
            if run:
                messages.append("".join(run))
                run = []

            line.append(token.text)
            if token.kind == TokenKind.COMMA:
                line.append(" ")

    def _next(self, name: Token, path: str) -> Token:
        """Read the next significant token; end of input is an error here."""
        token = self.lexer.next_token(skip_whitespace=True)
        if token is None:
            raise UnexpectedEndOfInput(SourceLocation(path, name.line))
        return token

    def _skip_statement(self, name: Token, path: str) -> None:
        """Resynchronize after a false match by consuming through ';'."""
        while self._next(name, path).kind != TokenKind.TERMINAL:
            pass
