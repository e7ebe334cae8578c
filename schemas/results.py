# schemas/results.py
# Pydantic models for execution outcomes

from pydantic import BaseModel
from typing import Any, List, Optional

from schemas.instructions import Instruction


class ExecutionResult(BaseModel):
    success: bool
    result: Any = None
    error: Optional[str] = None
    elapsed_ms: int = 0


class StepResult(ExecutionResult):
    step_id: int
    description: str


class StreamSummary(BaseModel):
    total: int
    success: int
    fail: int
    # total is the input length, so an early stop never counts as all passed
    all_passed: bool


class StreamReport(BaseModel):
    results: List[StepResult]
    summary: StreamSummary

    @property
    def failed_steps(self) -> List[StepResult]:
        return [r for r in self.results if not r.success]


class WorkflowResult(BaseModel):
    instructions: List[Instruction]
    results: List[StepResult]
    summary: StreamSummary
    total_elapsed_ms: int = 0
    from_cache: bool = False

    @property
    def failed_steps(self) -> List[StepResult]:
        return [r for r in self.results if not r.success]
