# schemas/instructions.py
# Pydantic models for the instruction stream

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from typing import Annotated, Optional, List, Union, Literal

SUPPORTED_ACTIONS = [
    "navigate",
    "click",
    "input",
    "verify",
    "wait",
    "select",
    "hover",
    "press",
    "scroll",
]

SCROLL_DIRECTIONS = ["up", "down", "top", "bottom"]


class Params(BaseModel):
    model_config = ConfigDict(frozen=True)


class NavigateParams(Params):
    url: str


class LocatorParams(Params):
    semantic_locator: Optional[str] = None  # natural-language target, e.g. "login button"
    fallback_selector: Optional[str] = None  # CSS selector tried first


class ClickParams(LocatorParams):
    pass


class HoverParams(LocatorParams):
    pass


class InputParams(LocatorParams):
    value: Union[str, int, float]


class SelectParams(LocatorParams):
    value: str


class VerifyParams(Params):
    assertion: str


class WaitParams(Params):
    timeout: Optional[int] = None  # ms
    selector: Optional[str] = None
    condition: Optional[str] = None  # e.g. "networkidle"


class PressParams(Params):
    key: str


class ScrollParams(Params):
    direction: str  # up, down, top, bottom
    semantic_locator: Optional[str] = None


class BaseInstruction(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_id: int
    description: str
    # Set only by mark_pre_resolved; never parsed or serialized
    _pre_resolved: bool = PrivateAttr(default=False)

    @property
    def pre_resolved(self) -> bool:
        """True when an earlier stage already produced this step's effect."""
        return self._pre_resolved


class NavigateInstruction(BaseInstruction):
    action_type: Literal["navigate"] = "navigate"
    params: NavigateParams


class ClickInstruction(BaseInstruction):
    action_type: Literal["click"] = "click"
    params: ClickParams


class InputInstruction(BaseInstruction):
    action_type: Literal["input"] = "input"
    params: InputParams


class VerifyInstruction(BaseInstruction):
    action_type: Literal["verify"] = "verify"
    params: VerifyParams


class WaitInstruction(BaseInstruction):
    action_type: Literal["wait"] = "wait"
    params: WaitParams


class SelectInstruction(BaseInstruction):
    action_type: Literal["select"] = "select"
    params: SelectParams


class HoverInstruction(BaseInstruction):
    action_type: Literal["hover"] = "hover"
    params: HoverParams


class PressInstruction(BaseInstruction):
    action_type: Literal["press"] = "press"
    params: PressParams


class ScrollInstruction(BaseInstruction):
    action_type: Literal["scroll"] = "scroll"
    params: ScrollParams


# Union of all instructions, tagged by action_type
Instruction = Annotated[
    Union[
        NavigateInstruction,
        ClickInstruction,
        InputInstruction,
        VerifyInstruction,
        WaitInstruction,
        SelectInstruction,
        HoverInstruction,
        PressInstruction,
        ScrollInstruction,
    ],
    Field(discriminator="action_type"),
]


def mark_pre_resolved(instruction: BaseInstruction) -> BaseInstruction:
    """Return a copy of the instruction flagged as already performed."""
    marked = instruction.model_copy()
    marked._pre_resolved = True
    return marked


def dump_instructions(instructions: List[BaseInstruction]) -> List[dict]:
    """Serialize instructions to their wire format."""
    return [inst.model_dump(mode="json", exclude_none=True) for inst in instructions]
