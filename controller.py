# controller.py
# Workflow orchestration: cached or freshly planned instructions, then execution

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from cache.store import InstructionStore, FileInstructionStore, prompt_hash
from config import EngineConfig
from executor import execute_instruction_stream
from guardrails import parse_instruction_stream
from handlers.common import ExecutionContext, NAVIGATION_TIMEOUT_MS
from schemas.instructions import Instruction, NavigateInstruction, mark_pre_resolved
from schemas.results import WorkflowResult

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"https?://[^\s),，）]+")


def extract_url(prompt: str) -> Optional[str]:
    """First http(s) URL in the prompt, if any."""
    match = _URL_RE.search(prompt)
    return match.group(0) if match else None


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class Controller:
    def __init__(self, planner, store: Optional[InstructionStore] = None, config: Optional[EngineConfig] = None):
        self.planner = planner
        self.config = config or EngineConfig()
        self.store = store if store is not None else FileInstructionStore(self.config.cache_dir)

    def run(
        self,
        prompt: str,
        context: ExecutionContext,
        stop_on_error: Optional[bool] = None,
        step_delay: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> WorkflowResult:
        """
        Run a natural-language goal end to end.

        Args:
            prompt: The goal, e.g. "open https://example.com and click Login"
            context: Page driver and semantic resolver
            stop_on_error: Stop at the first failed step (config default if None)
            step_delay: Pause between steps in ms (config default if None)
            use_cache: Read and write the instruction cache (config default if None)

        Raises:
            ExternalServiceError, InstructionValidationError: planning failed;
            no instruction was executed.
        """
        stop_on_error = self.config.stop_on_error if stop_on_error is None else stop_on_error
        step_delay = self.config.step_delay_ms if step_delay is None else step_delay
        use_cache = self.config.use_cache if use_cache is None else use_cache

        start = time.monotonic()
        logger.info("workflow: %s", prompt)

        try:
            key = prompt_hash(prompt)
            instructions = self.store.get(key) if use_cache else None
            from_cache = instructions is not None

            if from_cache:
                logger.info("loaded %d instructions from cache (%s)", len(instructions), key)
                instructions = self._pre_navigate_cached(instructions, context)
            else:
                instructions = self._plan(prompt, context)
                if use_cache:
                    self.store.put(key, instructions)
        except Exception as e:
            logger.error("workflow aborted after %sms: %s", _elapsed_ms(start), e)
            raise

        for inst in instructions:
            logger.info("  %s. [%s] %s", inst.step_id, inst.action_type, inst.description)

        report = execute_instruction_stream(instructions, context, stop_on_error=stop_on_error, step_delay=step_delay)
        total_elapsed = _elapsed_ms(start)

        summary = report.summary
        if summary.all_passed:
            logger.info("workflow passed: %d steps in %sms", summary.total, total_elapsed)
        else:
            logger.warning("workflow failed: %d/%d succeeded in %sms", summary.success, summary.total, total_elapsed)
            for failed in report.failed_steps:
                logger.warning("  step %s: %s -> %s", failed.step_id, failed.description, failed.error)

        return WorkflowResult(
            instructions=instructions,
            results=report.results,
            summary=summary,
            total_elapsed_ms=total_elapsed,
            from_cache=from_cache,
        )

    def _pre_navigate_cached(self, instructions: List[Instruction], context: ExecutionContext) -> List[Instruction]:
        first = instructions[0]
        if not isinstance(first, NavigateInstruction):
            return instructions

        logger.info("pre-navigating to %s", first.params.url)
        try:
            context.browser.navigate(first.params.url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)
        except Exception as e:
            # Unlike an aborting goto, the step is left unresolved so the executor retries and reports it
            logger.warning("pre-navigation to %s failed: %s", first.params.url, e)
            return instructions
        return [mark_pre_resolved(first)] + list(instructions[1:])

    def _plan(self, prompt: str, context: ExecutionContext) -> List[Instruction]:
        url = extract_url(prompt)
        if url is None:
            return parse_instruction_stream(self.planner.create_plan(prompt))

        # Planning runs on a worker thread; the page is driven from this one
        logger.info("planning while pre-navigating to %s", url)
        with ThreadPoolExecutor(max_workers=1) as pool:
            planned = pool.submit(self.planner.create_plan, prompt)
            try:
                context.browser.navigate(url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)
            except Exception as e:
                logger.warning("pre-navigation to %s failed, continuing: %s", url, e)
            raw = planned.result()

        instructions = parse_instruction_stream(raw)
        if isinstance(instructions[0], NavigateInstruction):
            instructions[0] = mark_pre_resolved(instructions[0])
        return instructions
