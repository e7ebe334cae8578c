# schemas/actions.py
# Pydantic models for the primitive actions the vision model may request

from pydantic import BaseModel
from typing import Optional, Union


class ClickByTextAction(BaseModel):
    text: str

class FillByLabelAction(BaseModel):
    label: str
    text: str

class SelectByLabelAction(BaseModel):
    label: str
    value: str

class HoverByTextAction(BaseModel):
    text: str

class PressKeyAction(BaseModel):
    key: str

class ScrollAction(BaseModel):
    delta: int

class WaitAction(BaseModel):
    ms: int

class VerdictAction(BaseModel):
    passed: bool
    reason: Optional[str] = None

class DoneAction(BaseModel):
    pass


# Union of all actions
Action = Union[
    ClickByTextAction,
    FillByLabelAction,
    SelectByLabelAction,
    HoverByTextAction,
    PressKeyAction,
    ScrollAction,
    WaitAction,
    VerdictAction,
    DoneAction,
]

ACTION_TYPES = {
    "click_by_text": ClickByTextAction,
    "fill_by_label": FillByLabelAction,
    "select_by_label": SelectByLabelAction,
    "hover_by_text": HoverByTextAction,
    "press_key": PressKeyAction,
    "scroll": ScrollAction,
    "wait": WaitAction,
    "verdict": VerdictAction,
    "done": DoneAction,
}


def parse_action(data: dict) -> Action:
    """Turn one {"name": ..., "arguments": {...}} dict from the model into an Action."""
    name = data.get("name")
    action_cls = ACTION_TYPES.get(name)
    if action_cls is None:
        raise ValueError(f"Unknown action: {name}")
    return action_cls(**(data.get("arguments") or {}))
