"""Fused recursive-descent parser and evaluator for letcalc. No syntax tree is built: every expression is evaluated
as soon as its tokens have been consumed, so errors surface strictly left to right (left operand before right
operand, bindings in the order they are written, `let` bodies last).

Grammar (every " " is exactly one mandatory Space token):

```
<program>  ::= [" "] <expr>                              ; nothing may follow <expr>
<expr>     ::= <integer>
             | <identifier>                              ; looked up in the enclosing scopes
             | "(add " <expr> " " <expr> ")"
             | "(mult " <expr> " " <expr> ")"
             | "(let " (<identifier> " " <expr> " ")* <expr> ")"
```

The last binding of a `let` may also be followed directly by ")" instead of " ". A `let` binding loop ends when the
current token is not an identifier, or when it is an identifier immediately followed by ")" (the body). Each binding
is evaluated in the scope that already holds the earlier ones (let* semantics), and a name bound twice in the same
`let` keeps its last value.
"""

import operator

from letcalc.lang.error import EvaluationError, LetSyntaxError, ResourceError
from letcalc.lang.numerical import WORD_BITS, check_bits, number, wrap
from letcalc.pure.environment import Environment
from letcalc.pure.lexical import Lexer, TokenKind, TokenStream


class Evaluator:
    """Evaluates a single expression. Holds the lexer cursor, current/lookahead tokens and nesting depth for that one
    expression only, so an Evaluator should not be reused.
    """
    MAX_DEPTH = 200
    OPERATORS = {"add": operator.add, "mult": operator.mul}

    def __init__(self, expr, bits=WORD_BITS, max_depth=MAX_DEPTH, warn=None):
        """warn, if given, is called with GenericException args whenever add/mult wraps around."""
        check_bits(bits)
        if max_depth < 1:
            raise ResourceError("maximum depth must be positive, got '{}'", str(max_depth), internal=True)

        self.expr = expr
        self.bits = bits
        self.max_depth = max_depth
        self.warn = warn

        self.tokens = TokenStream(Lexer(expr))
        self.depth = 0

    def run(self):
        """Evaluates self.expr and returns its int value."""
        tokens = self.tokens
        tokens.advance()
        if tokens.current.kind == TokenKind.SPACE:
            tokens.eat(TokenKind.SPACE)

        try:
            result = self.expression(Environment())
        except RecursionError:
            # max_depth above what the interpreter stack can hold
            raise ResourceError("maximum nesting depth exceeded", source=self.expr, start=tokens.current.start,
                                end=tokens.current.end) from None

        if tokens.current.kind != TokenKind.END_OF_FILE:
            raise LetSyntaxError("extra characters at end of input", source=self.expr, start=tokens.current.start,
                                 end=len(self.expr), actual=tokens.current.kind)

        if not isinstance(result, int) or isinstance(result, bool):
            raise EvaluationError("final expression did not evaluate to an integer, got '{}'", type(result).__name__,
                                  internal=True)
        return result

    def expression(self, env):
        """Parses and evaluates the expression starting at the current token in env."""
        self.depth += 1
        try:
            token = self.tokens.current
            if self.depth > self.max_depth:
                raise ResourceError("maximum nesting depth of {} exceeded", str(self.max_depth), source=self.expr,
                                    start=token.start, end=token.end, depth=self.depth)

            if token.kind == TokenKind.INTEGER:
                return self.integer(token)
            elif token.kind == TokenKind.IDENTIFIER:
                return self.variable(token, env)
            elif token.kind == TokenKind.OPEN_PAREN:
                return self.form(env)
            elif token.kind == TokenKind.END_OF_FILE:
                raise LetSyntaxError("unexpected end of input", source=self.expr, start=token.start,
                                     actual=token.kind)
            raise LetSyntaxError("unexpected token {}", token.describe(), source=self.expr, start=token.start,
                                 end=token.end, actual=token.kind)
        finally:
            self.depth -= 1

    def integer(self, token):
        try:
            value = number(token.text, self.bits)
        except ValueError:
            raise LetSyntaxError("integer literal '{}' does not fit in {} bits", (token.text, str(self.bits)),
                                 source=self.expr, start=token.start, end=token.end, literal=token.text) from None
        self.tokens.eat(TokenKind.INTEGER)
        return value

    def variable(self, token, env):
        try:
            value = env.lookup(token.text)
        except EvaluationError as error:
            error.locate(self.expr, token.start)
            raise
        self.tokens.eat(TokenKind.IDENTIFIER)
        return value

    def form(self, env):
        """Parenthesized form: dispatches on the operator or keyword following "("."""
        tokens = self.tokens
        tokens.eat(TokenKind.OPEN_PAREN)

        keyword = tokens.current
        if keyword.kind != TokenKind.IDENTIFIER:
            raise LetSyntaxError("expected an operator or keyword after '(' but got {}", keyword.describe(),
                                 source=self.expr, start=keyword.start, end=keyword.end,
                                 expected=TokenKind.IDENTIFIER, actual=keyword.kind)
        tokens.eat(TokenKind.IDENTIFIER)

        if keyword.text in Evaluator.OPERATORS:
            return self.arithmetic(keyword, env)
        elif keyword.text == "let":
            return self.let(env)
        raise EvaluationError("unknown operator or keyword '{}'", keyword.text, source=self.expr,
                              start=keyword.start, end=keyword.end, name=keyword.text)

    def arithmetic(self, keyword, env):
        """`add`/`mult`: exactly two operands, the result wrapped to self.bits."""
        tokens = self.tokens
        tokens.eat(TokenKind.SPACE)
        left = self.expression(env)
        tokens.eat(TokenKind.SPACE)
        right = self.expression(env)
        close = tokens.eat(TokenKind.CLOSE_PAREN)

        exact = Evaluator.OPERATORS[keyword.text](left, right)
        result = wrap(exact, self.bits)
        if result != exact and self.warn is not None:
            self.warn("integer overflow in '{}': {} wrapped to {}", (keyword.text, str(exact), str(result)),
                      source=self.expr, start=keyword.start - 1, end=close.end)
        return result

    def let(self, env):
        """`let`: collects bindings into a child scope, then evaluates the body in it."""
        tokens = self.tokens
        scope = env.child()
        tokens.eat(TokenKind.SPACE)

        while tokens.current.kind == TokenKind.IDENTIFIER:
            following = tokens.peek()
            if following.kind == TokenKind.CLOSE_PAREN:
                break  # current identifier is the body

            name = tokens.current
            if following.kind == TokenKind.END_OF_FILE:
                raise LetSyntaxError("malformed binding list in 'let': '{}' has no value", name.text,
                                     source=self.expr, start=name.start, end=name.end, name=name.text)
            tokens.eat(TokenKind.IDENTIFIER)
            tokens.eat(TokenKind.SPACE)
            scope.define(name.text, self.expression(scope))

            if tokens.current.kind != TokenKind.CLOSE_PAREN:
                tokens.eat(TokenKind.SPACE)

        result = self.expression(scope)
        tokens.eat(TokenKind.CLOSE_PAREN)
        return result
