from typing import Any, Optional


class StringAnalyzerError(Exception):
    """Base class for every failure the service reports to its callers."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Analysis / query interpretation
# ---------------------------------------------------------------------------
class TypeMismatch(StringAnalyzerError, TypeError):
    kind = "type_mismatch"

    def __init__(self, received: Any, expected: str = "str"):
        self.received = type(received).__name__
        self.expected = expected
        super().__init__(f"expected {expected}, got {self.received}")


class Unparseable(StringAnalyzerError, ValueError):
    kind = "unparseable"

    def __init__(self, phrase: str):
        self.phrase = phrase
        super().__init__("Unable to parse natural language query")


class ParseConflict(StringAnalyzerError, ValueError):
    kind = "parse_conflict"

    def __init__(self, field: str, existing: Any, incoming: Any):
        self.field = field
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Query parsed but resulted in conflicting filters: "
            f"{field} is both {existing!r} and {incoming!r}"
        )


class InfeasibleRange(StringAnalyzerError, ValueError):
    kind = "infeasible_range"

    def __init__(self, min_length: Optional[int], max_length: Optional[int]):
        self.min_length = min_length
        self.max_length = max_length
        super().__init__(
            f"Query parsed but resulted in conflicting filters: "
            f"min_length={min_length} > max_length={max_length}"
        )


# ---------------------------------------------------------------------------
# Storage / request level
# ---------------------------------------------------------------------------
class InvalidStringValue(StringAnalyzerError, ValueError):
    kind = "invalid_value"


class StringAlreadyExists(StringAnalyzerError, ValueError):
    kind = "already_exists"

    def __init__(self, string_id: str):
        self.string_id = string_id
        super().__init__("String already exists")


class StringNotFound(StringAnalyzerError, LookupError):
    kind = "not_found"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"String '{value}' not found")
