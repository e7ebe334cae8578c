# executor.py
# Runs single instructions and whole instruction streams against one page

import logging
import time
from typing import Any, List

from handlers.common import ExecutionContext
from handlers.interactive import handle_click, handle_input, handle_select, handle_hover
from handlers.page import handle_navigate, handle_wait, handle_press, handle_scroll
from handlers.verify import handle_verify
from schemas.instructions import (
    Instruction,
    NavigateInstruction,
    ClickInstruction,
    InputInstruction,
    VerifyInstruction,
    WaitInstruction,
    SelectInstruction,
    HoverInstruction,
    PressInstruction,
    ScrollInstruction,
)
from schemas.results import ExecutionResult, StepResult, StreamReport, StreamSummary

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def dispatch(instruction: Instruction, context: ExecutionContext) -> Any:
    """Hand one instruction to the handler for its action type."""
    if isinstance(instruction, NavigateInstruction):
        return handle_navigate(context, instruction.params)
    elif isinstance(instruction, ClickInstruction):
        return handle_click(context, instruction.params)
    elif isinstance(instruction, InputInstruction):
        return handle_input(context, instruction.params)
    elif isinstance(instruction, VerifyInstruction):
        return handle_verify(context, instruction.params)
    elif isinstance(instruction, WaitInstruction):
        return handle_wait(context, instruction.params)
    elif isinstance(instruction, SelectInstruction):
        return handle_select(context, instruction.params)
    elif isinstance(instruction, HoverInstruction):
        return handle_hover(context, instruction.params)
    elif isinstance(instruction, PressInstruction):
        return handle_press(context, instruction.params)
    elif isinstance(instruction, ScrollInstruction):
        return handle_scroll(context, instruction.params)
    else:
        raise ValueError(f"Unknown instruction type: {type(instruction)}")


def execute_instruction(instruction: Instruction, context: ExecutionContext) -> ExecutionResult:
    """Execute one instruction. Never raises: handler errors become a failed result."""
    logger.info("[step %s] %s (%s)", instruction.step_id, instruction.description, instruction.action_type)

    start = time.monotonic()
    if instruction.pre_resolved:
        logger.info("[step %s] already performed, skipping", instruction.step_id)
        return ExecutionResult(success=True, result="pre-resolved", elapsed_ms=_elapsed_ms(start))

    try:
        result = dispatch(instruction, context)
    except Exception as e:
        elapsed = _elapsed_ms(start)
        logger.error("[step %s] failed after %sms: %s", instruction.step_id, elapsed, e)
        return ExecutionResult(success=False, error=str(e) or type(e).__name__, elapsed_ms=elapsed)

    elapsed = _elapsed_ms(start)
    logger.info("[step %s] ok (%sms)", instruction.step_id, elapsed)
    return ExecutionResult(success=True, result=result, elapsed_ms=elapsed)


def execute_instruction_stream(
    instructions: List[Instruction],
    context: ExecutionContext,
    stop_on_error: bool = True,
    step_delay: int = 0,
) -> StreamReport:
    """
    Execute instructions strictly in order.

    Args:
        instructions: The validated stream
        context: Page driver and semantic resolver shared by every step
        stop_on_error: Stop at the first failed step; later steps are not reported
        step_delay: Pause in ms between executed steps, pass or fail
    """
    results = []
    success_count = 0
    fail_count = 0

    logger.info("executing %d instructions", len(instructions))
    last_index = len(instructions) - 1
    for index, instruction in enumerate(instructions):
        outcome = execute_instruction(instruction, context)
        results.append(StepResult(step_id=instruction.step_id, description=instruction.description, **outcome.model_dump()))

        if outcome.success:
            success_count += 1
        else:
            fail_count += 1
            if stop_on_error:
                logger.error("step %s failed, stopping", instruction.step_id)
                break

        if step_delay > 0 and index < last_index:
            context.browser.wait(step_delay)

    total = len(instructions)
    summary = StreamSummary(
        total=total,
        success=success_count,
        fail=fail_count,
        all_passed=fail_count == 0 and success_count == total,
    )
    logger.info("finished: %d/%d succeeded, %d failed", success_count, total, fail_count)
    return StreamReport(results=results, summary=summary)
