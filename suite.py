# suite.py
# Runs structured test cases through the workflow controller

import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from handlers.common import ExecutionContext
from schemas.results import StepResult, StreamSummary

logger = logging.getLogger(__name__)


class CaseStep(BaseModel):
    action: str
    target: Optional[str] = None
    value: Optional[str] = None
    expected: Optional[str] = None


class TestCase(BaseModel):
    __test__ = False  # not a pytest class

    id: str
    title: str
    steps: List[CaseStep] = Field(default_factory=list)
    expected_result: Optional[str] = None
    priority: Optional[str] = None  # e.g. "P0"
    perspective: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class CaseResult(BaseModel):
    case_id: str
    title: str
    priority: Optional[str] = None
    perspective: Optional[str] = None
    passed: bool
    elapsed_ms: int
    steps: List[StepResult] = Field(default_factory=list)
    summary: Optional[StreamSummary] = None
    error: Optional[str] = None


class SuiteSummary(BaseModel):
    total: int  # cases left after priority filtering
    executed: int
    passed: int
    failed: int
    all_passed: bool
    total_elapsed_ms: int


class SuiteResult(BaseModel):
    results: List[CaseResult]
    summary: SuiteSummary


def step_to_description(step: CaseStep) -> Optional[str]:
    """Describe one case step in plain English for the planner."""
    target, value = step.target, step.value
    if step.action == "navigate":
        return f"open {target or value}"
    elif step.action == "click":
        return f"click {target}"
    elif step.action == "input":
        return f"type {value} into {target}"
    elif step.action == "verify":
        return f"verify {step.expected or target}"
    elif step.action == "wait":
        return f"wait for {target or 'the page to load'}"
    elif step.action == "press":
        return f"press the {value or target} key"
    elif step.action == "hover":
        return f"hover over {target}"
    elif step.action == "scroll":
        return f"scroll to {target or 'the bottom of the page'}"
    elif step.action == "select":
        return f"select {value} in {target}"
    return f"{step.action}: {target}" if target else None


def case_to_prompt(case: TestCase, page_url: Optional[str] = None) -> str:
    parts = []
    if page_url:
        parts.append(f"open {page_url}")
    for step in case.steps:
        description = step_to_description(step)
        if description:
            parts.append(description)
    if case.expected_result:
        parts.append(f'verify "{case.expected_result}"')
    return ", ".join(parts)


def run_test_case(controller, case: TestCase, context: ExecutionContext,
                  page_url: Optional[str] = None, **workflow_options: Any) -> CaseResult:
    """Run one case; planning errors become a failed result instead of propagating."""
    prompt = case_to_prompt(case, page_url)
    logger.info("[%s] %s (priority %s): %s", case.id, case.title, case.priority, prompt)

    start = time.monotonic()
    options: Dict[str, Any] = {"stop_on_error": True, "step_delay": 0}
    options.update(workflow_options)
    try:
        result = controller.run(prompt, context, **options)
    except Exception as e:
        logger.error("[%s] could not run: %s", case.id, e)
        return CaseResult(
            case_id=case.id,
            title=case.title,
            priority=case.priority,
            perspective=case.perspective,
            passed=False,
            elapsed_ms=int((time.monotonic() - start) * 1000),
            error=str(e),
        )

    return CaseResult(
        case_id=case.id,
        title=case.title,
        priority=case.priority,
        perspective=case.perspective,
        passed=result.summary.all_passed,
        elapsed_ms=int((time.monotonic() - start) * 1000),
        steps=result.results,
        summary=result.summary,
    )


def run_test_suite(controller, cases: List[TestCase], context: ExecutionContext,
                   page_url: Optional[str] = None, stop_on_first_fail: bool = False,
                   filter_priorities: Optional[List[str]] = None) -> SuiteResult:
    selected = cases
    if filter_priorities:
        selected = [c for c in cases if c.priority in filter_priorities]

    logger.info("running %d test cases", len(selected))
    start = time.monotonic()
    results = []
    passed = failed = 0

    for case in selected:
        case_result = run_test_case(controller, case, context, page_url=page_url)
        results.append(case_result)
        if case_result.passed:
            passed += 1
            logger.info("PASS [%s] %s (%sms)", case.id, case.title, case_result.elapsed_ms)
        else:
            failed += 1
            logger.warning("FAIL [%s] %s: %s", case.id, case.title, case_result.error or "steps failed")
            if stop_on_first_fail:
                logger.warning("stopping after first failed case")
                break

    summary = SuiteSummary(
        total=len(selected),
        executed=len(results),
        passed=passed,
        failed=failed,
        all_passed=failed == 0 and passed == len(selected),
        total_elapsed_ms=int((time.monotonic() - start) * 1000),
    )
    logger.info("suite finished: %d/%d passed, %d failed", passed, len(results), failed)
    return SuiteResult(results=results, summary=summary)
