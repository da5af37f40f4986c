"""Browser actions built on the retry engine."""

from .base import ActionBuilder, ActionConfig, ActionType, ClickKind
from .executor import ActionExecutor, ExecutionResult, RetryBudget
from .interactions import Click, Input, MouseOver, Select, SendKey
from .queries import FindElement, GetAttribute, GetText
from .waits import Appearance, Disappearance

__all__ = [
    "ActionBuilder",
    "ActionConfig",
    "ActionType",
    "ClickKind",
    "ActionExecutor",
    "ExecutionResult",
    "RetryBudget",
    "Appearance",
    "Click",
    "Disappearance",
    "FindElement",
    "GetAttribute",
    "GetText",
    "Input",
    "MouseOver",
    "Select",
    "SendKey",
]
