class TestTraverseError(Exception):
    """Base class for errors that abort extraction of a file."""

    __test__ = False


class ParseLimitationsError(TestTraverseError):
    """
    Raised when the code being parsed is technically valid, but breaks an
    assumption or restriction imposed by this library.
    """

    def __init__(self, message: str, at_char: int):
        super().__init__(message)
        self.message = message
        self.at_char = at_char


class SourceSyntaxError(TestTraverseError):
    """Raised when the parser cannot build a clean tree for the source text."""

    def __init__(self, message: str, offset: int):
        super().__init__(message)
        self.message = message
        self.offset = offset
