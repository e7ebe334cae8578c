# guardrails.py
# Validation of instructions and instruction streams before execution

from typing import Any, Dict, List

from pydantic import BaseModel, TypeAdapter, ValidationError

from errors import InstructionValidationError
from schemas.instructions import Instruction, SUPPORTED_ACTIONS

_instruction_list = TypeAdapter(List[Instruction])


class ValidationReport(BaseModel):
    valid: bool
    errors: List[str]


class StreamValidationReport(BaseModel):
    valid: bool
    errors: List[Dict[str, Any]]  # [{"step_id": ..., "errors": [...]}]


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _has_locator(params: dict) -> bool:
    return _is_non_empty_str(params.get("semantic_locator")) or _is_non_empty_str(params.get("fallback_selector"))


def _optional_str_errors(action_type: str, params: dict, *names: str) -> List[str]:
    return [
        f"{action_type} '{name}' must be a string"
        for name in names
        if params.get(name) is not None and not isinstance(params[name], str)
    ]


def validate_action_params(action_type: str, params: dict) -> List[str]:
    """Check the required fields of one action's params and their types; returns every violation."""
    errors = []

    if action_type == "navigate":
        if not _is_non_empty_str(params.get("url")):
            errors.append("navigate requires a non-empty 'url' param")
    elif action_type in ("click", "hover"):
        if not _has_locator(params):
            errors.append(f"{action_type} requires 'semantic_locator' or 'fallback_selector'")
        errors.extend(_optional_str_errors(action_type, params, "semantic_locator", "fallback_selector"))
    elif action_type == "input":
        if not _has_locator(params):
            errors.append("input requires 'semantic_locator' or 'fallback_selector'")
        errors.extend(_optional_str_errors(action_type, params, "semantic_locator", "fallback_selector"))
        value = params.get("value")
        if value is None:
            errors.append("input requires a 'value' param")
        elif isinstance(value, bool) or not isinstance(value, (str, int, float)):
            errors.append(f"input 'value' must be a string or a number, got {type(value).__name__}")
    elif action_type == "verify":
        if not _is_non_empty_str(params.get("assertion")):
            errors.append("verify requires a non-empty 'assertion' param")
    elif action_type == "wait":
        if not params.get("timeout") and not params.get("selector") and not params.get("condition"):
            errors.append("wait requires one of 'timeout', 'selector' or 'condition'")
        timeout = params.get("timeout")
        if timeout is not None and not (_is_int(timeout) and timeout >= 0):
            errors.append(f"wait 'timeout' must be a non-negative integer of ms, got {timeout!r}")
        errors.extend(_optional_str_errors(action_type, params, "selector", "condition"))
    elif action_type == "select":
        if not _has_locator(params):
            errors.append("select requires 'semantic_locator' or 'fallback_selector'")
        errors.extend(_optional_str_errors(action_type, params, "semantic_locator", "fallback_selector"))
        if params.get("value") is None or params.get("value") == "":
            errors.append("select requires a 'value' param")
        elif not _is_non_empty_str(params.get("value")):
            errors.append(f"select 'value' must be a non-empty string, got {params['value']!r}")
    elif action_type == "press":
        if not _is_non_empty_str(params.get("key")):
            errors.append("press requires a non-empty 'key' param")
    elif action_type == "scroll":
        if not _is_non_empty_str(params.get("direction")):
            errors.append("scroll requires a 'direction' param (up/down/top/bottom)")
        errors.extend(_optional_str_errors(action_type, params, "semantic_locator"))

    return errors



def validate_instruction(instruction: Any) -> ValidationReport:
    """Check one raw instruction dict against the wire contract."""
    if not isinstance(instruction, dict):
        return ValidationReport(valid=False, errors=[f"instruction must be an object, got {type(instruction).__name__}"])

    errors = []

    step_id = instruction.get("step_id")
    if not isinstance(step_id, int) or isinstance(step_id, bool):
        errors.append(f"step_id must be an integer, got: {step_id!r}")

    action_type = instruction.get("action_type")
    if not action_type:
        errors.append("action_type is required")
    elif action_type not in SUPPORTED_ACTIONS:
        errors.append(f"unsupported action_type: {action_type!r}, expected one of: {', '.join(SUPPORTED_ACTIONS)}")

    params = instruction.get("params")
    if not isinstance(params, dict):
        errors.append("params must be an object")

    if not _is_non_empty_str(instruction.get("description")):
        errors.append("description must be a non-empty string")

    if isinstance(params, dict) and action_type in SUPPORTED_ACTIONS:
        errors.extend(validate_action_params(action_type, params))

    return ValidationReport(valid=not errors, errors=errors)


def validate_instruction_stream(instructions: Any) -> StreamValidationReport:
    """Check a whole stream; collects the errors of every invalid step."""
    if not isinstance(instructions, list):
        return StreamValidationReport(valid=False, errors=[{"step_id": -1, "errors": ["instruction stream must be an array"]}])
    if not instructions:
        return StreamValidationReport(valid=False, errors=[{"step_id": -1, "errors": ["instruction stream must not be empty"]}])

    all_errors = []
    seen_ids = set()
    for instruction in instructions:
        report = validate_instruction(instruction)
        errors = list(report.errors)
        step_id = instruction.get("step_id") if isinstance(instruction, dict) else None
        if _is_int(step_id):
            if step_id in seen_ids:
                errors.append(f"duplicate step_id: {step_id}")
            seen_ids.add(step_id)
        if errors:
            all_errors.append({"step_id": step_id if step_id is not None else "unknown", "errors": errors})

    return StreamValidationReport(valid=not all_errors, errors=all_errors)


def _typed_errors(instructions: List[dict], error: ValidationError) -> List[Dict[str, Any]]:
    # loc starts with the list index; group messages under that step's id
    grouped: Dict[Any, List[str]] = {}
    for err in error.errors():
        index, *rest = err["loc"] or (-1,)
        step_id = instructions[index]["step_id"] if isinstance(index, int) and 0 <= index < len(instructions) else -1
        grouped.setdefault(step_id, []).append(f"{'.'.join(str(p) for p in rest)}: {err['msg']}")
    return [{"step_id": step_id, "errors": messages} for step_id, messages in grouped.items()]


def parse_instruction_stream(instructions: Any) -> List[Instruction]:
    """Validate a raw stream and build typed instructions; never repairs input."""
    report = validate_instruction_stream(instructions)
    if not report.valid:
        raise InstructionValidationError(f"Invalid instruction stream: {report.errors}", report.errors)
    try:
        return _instruction_list.validate_python(instructions)
    except ValidationError as e:
        errors = _typed_errors(instructions, e)
        raise InstructionValidationError(f"Invalid instruction stream: {errors}", errors)
