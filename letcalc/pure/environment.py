"""Lexical scopes for letcalc. Every `let` form opens a child Environment of the scope it appears in; names resolve by
walking outward from the innermost scope to the root.
"""

from letcalc.lang.error import EvaluationError


class Environment:
    """One scope: a dict of name -> int plus the enclosing scope (None for the root)."""

    def __init__(self, parent=None):
        self.bindings = {}
        self.parent = parent

    def child(self):
        return Environment(self)

    def define(self, name, value):
        """Binds name in this scope only, overwriting any previous binding of name here."""
        self.bindings[name] = value

    def lookup(self, name):
        """Returns the innermost binding of name. Raises EvaluationError if no scope in the chain defines it."""
        env = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.parent
        raise EvaluationError("undefined variable '{}'", name, name=name)

