from typing import List


class EngineError(Exception):
    """Base class for calculation failures the caller is expected to handle."""


class InsufficientDataError(EngineError):
    """Raised when a series or history is too short to compute a result."""


class UnknownPathwayError(EngineError):
    """Raised when an SBTi pathway key is not in the pathway table."""

    def __init__(self, pathway: str):
        self.pathway = pathway
        super().__init__(f"Invalid pathway: {pathway}")


class TargetValidationError(EngineError):
    """
    Raised when SBTi target parameters break one or more rules.
    `errors` holds every violated rule, not only the first one.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"SBTi validation failed: {', '.join(self.errors)}")
