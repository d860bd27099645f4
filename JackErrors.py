class JackCompileError(Exception):
    """Base class for every error that aborts the compilation of a class."""

    def __init__(self, message, line=None):
        self.message = message
        self.line    = line
        super().__init__(f"line {line}: {message}" if line is not None else message)


class LexError(JackCompileError):
    """Malformed character stream, or reading past the end of the input."""


class JackSyntaxError(JackCompileError):
    """The lookahead token does not fit the current grammar rule."""

    def __init__(self, expected, actual, line=None):
        self.expected = expected
        self.actual   = actual
        super().__init__(f"expected {expected}, got {actual}", line)


class DuplicateSymbolError(JackCompileError):
    pass


class UnresolvedSymbolError(JackCompileError):
    pass


class InvalidKindError(JackCompileError):
    # only reachable through a compiler defect
    pass
