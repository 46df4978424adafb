"""Tokenizer for letcalc expressions.

The `pure` directory contains the core of the language: tokenization, scopes and the fused parser/evaluator. Tokens
are defined as

```
<open_paren>  ::= "("
<close_paren> ::= ")"
<space>       ::= " "                        ; a token of its own: the grammar consumes it explicitly
<integer>     ::= ["-"] <digit>+             ; "-" only starts an integer when a digit follows it
<identifier>  ::= <letter> (<letter> | <digit>)*
<eof>                                        ; produced at (and after) the end of the input
```

Any other character (tabs and newlines included) is a syntax error. Tokens are produced on demand: the Lexer never
materializes the whole token list, and TokenStream keeps at most one token of lookahead in a buffer.
"""

from dataclasses import dataclass

from letcalc.lang.error import LetSyntaxError


class TokenKind:
    OPEN_PAREN = "OpenParen"
    CLOSE_PAREN = "CloseParen"
    IDENTIFIER = "Identifier"
    INTEGER = "Integer"
    SPACE = "Space"
    END_OF_FILE = "EndOfFile"


@dataclass(frozen=True)
class Token:
    """A single token. text is only meaningful for identifiers and integers; start is the offset of the token's first
    character in the input.
    """
    kind: str
    text: str = ""
    start: int = 0

    @property
    def end(self):
        return self.start + max(len(self.text), 1)

    def describe(self):
        """Returns readable form of this token for error messages."""
        return f"{self.kind} ('{self.text}')" if self.text else self.kind


class Lexer:
    """Converts a character cursor over expr into tokens, one next_token call at a time."""
    SINGLES = {
        " ": TokenKind.SPACE,
        "(": TokenKind.OPEN_PAREN,
        ")": TokenKind.CLOSE_PAREN,
    }

    def __init__(self, expr):
        self.expr = expr
        self.pos = 0

    def peek_char(self, offset=0):
        """Returns the character offset places past the cursor, or "" past the end of expr."""
        idx = self.pos + offset
        return self.expr[idx] if idx < len(self.expr) else ""

    def next_token(self):
        """Returns the next token and advances the cursor past it."""
        start = self.pos
        char = self.peek_char()

        if not char:
            return Token(TokenKind.END_OF_FILE, start=start)

        if char in Lexer.SINGLES:
            self.pos += 1
            return Token(Lexer.SINGLES[char], start=start)

        if char.isdecimal() or (char == "-" and self.peek_char(1).isdecimal()):
            self.pos += 1
            while self.peek_char().isdecimal():
                self.pos += 1
            return Token(TokenKind.INTEGER, self.expr[start:self.pos], start)

        if char.isalpha():
            self.pos += 1
            while self.peek_char().isalpha() or self.peek_char().isdecimal():
                self.pos += 1
            return Token(TokenKind.IDENTIFIER, self.expr[start:self.pos], start)

        raise LetSyntaxError("unexpected character '{}' at position {}", (char, start), source=self.expr, start=start,
                             end=start + 1, character=char, position=start)


class TokenStream:
    """Wraps a Lexer with a current token and a single held-back lookahead token. Peeking fills the buffer and
    advancing drains it first, so the lexer cursor never moves backwards.
    """

    def __init__(self, lexer):
        self.lexer = lexer
        self.current = None
        self._lookahead = None

    def advance(self):
        """Makes the next token current and returns it."""
        if self._lookahead is not None:
            self.current, self._lookahead = self._lookahead, None
        else:
            self.current = self.lexer.next_token()
        return self.current

    def peek(self):
        """Returns the token after current without consuming current."""
        if self._lookahead is None:
            self._lookahead = self.lexer.next_token()
        return self._lookahead

    def eat(self, kind):
        """Consumes and returns current if it is of kind, else raises a LetSyntaxError naming both kinds."""
        token = self.current
        if token.kind != kind:
            raise LetSyntaxError("expected {} but got {}", (kind, token.describe()), source=self.lexer.expr,
                                 start=token.start, end=token.end, expected=kind, actual=token.kind)
        self.advance()
        return token
