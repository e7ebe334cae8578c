# errors.py
# Exception taxonomy for the instruction engine

from typing import List, Dict, Any


class EngineError(Exception):
    """Base class for engine errors."""
    pass


class InstructionValidationError(EngineError):
    """An instruction stream failed schema checks.

    `errors` holds one entry per offending step: {"step_id": ..., "errors": [...]}.
    """

    def __init__(self, message: str, errors: List[Dict[str, Any]] = None):
        super().__init__(message)
        self.errors = errors or []


class ResolutionError(EngineError):
    """Neither the deterministic nor the semantic tier could act on a target."""
    pass


class AssertionFailedError(ResolutionError):
    """The semantic resolver judged a verify assertion to be false."""
    pass


class ExternalServiceError(EngineError):
    """The planner or the semantic resolver service call failed."""
    pass
