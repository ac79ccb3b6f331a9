"""Core types and data models for the web agent."""

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from webagent.core.errors import InvalidActionError


class ActionType(str, Enum):
    """Types of actions the executor can perform."""

    NAVIGATE = "navigate"
    CLICK = "click"
    TYPE = "type"
    SCROLL = "scroll"
    WAIT = "wait"
    EXTRACT = "extract"
    COMPLETE = "complete"


class AgentState(str, Enum):
    """State of the agent loop."""

    IDLE = "idle"
    LAUNCHING = "launching"
    PLANNING = "planning"
    EXECUTING = "executing"
    OBSERVING = "observing"
    COMPLETED = "completed"
    STEP_BUDGET_EXHAUSTED = "step_budget_exhausted"
    NO_ACTIONS = "no_actions"
    CANCELLED = "cancelled"
    FATAL_ERROR = "fatal_error"


class WireModel(BaseModel):
    """Model exchanged with the language model in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class BaseAction(WireModel):
    """Fields shared by every action."""

    reasoning: str = Field(
        ..., min_length=1, description="Why the planner chose this action"
    )
    confidence: float = Field(..., ge=0.0, le=1.0)
    next_step: str | None = Field(
        None, description="Hint for what should follow"
    )


class NavigateAction(BaseAction):
    type: Literal["navigate"] = "navigate"
    url: str = Field(..., min_length=1)


class ClickAction(BaseAction):
    type: Literal["click"] = "click"
    selector: str = Field(..., min_length=1)


class TypeAction(BaseAction):
    type: Literal["type"] = "type"
    selector: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class ScrollAction(BaseAction):
    """Scroll an element into view, or the viewport when no selector is given."""

    type: Literal["scroll"] = "scroll"
    selector: str | None = None


class WaitAction(BaseAction):
    """Pause for ``text`` milliseconds."""

    type: Literal["wait"] = "wait"
    text: str | None = None


class ExtractAction(BaseAction):
    """Pull data out of the current page; ``text`` is the query."""

    type: Literal["extract"] = "extract"
    text: str = ""


class CompleteAction(BaseAction):
    type: Literal["complete"] = "complete"


Action = Annotated[
    Union[
        NavigateAction,
        ClickAction,
        TypeAction,
        ScrollAction,
        WaitAction,
        ExtractAction,
        CompleteAction,
    ],
    Field(discriminator="type"),
]

_ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(data: BaseAction | Mapping[str, Any]) -> Action:
    """Validate raw action data against the schema of its type.

    Args:
        data: An already-typed action or a mapping as sent by the model

    Returns:
        The typed action

    Raises:
        InvalidActionError: If the type is unknown or a required field is missing
    """
    if isinstance(data, BaseAction):
        return data

    if not isinstance(data, Mapping):
        raise InvalidActionError(
            f"Action must be an object, got {type(data).__name__}"
        )

    try:
        return _ACTION_ADAPTER.validate_python(dict(data))
    except ValidationError as e:
        raise InvalidActionError(_describe_action_error(data, e)) from e


def _describe_action_error(data: Mapping[str, Any], error: ValidationError) -> str:
    action_type = data.get("type")
    first = error.errors()[0]

    if first["type"] in ("union_tag_not_found", "union_tag_invalid"):
        return f"Unknown action type: {action_type!r}"

    field = str(first["loc"][-1]) if first["loc"] else "type"
    if first["type"] == "missing":
        return f"{field} is required for {action_type} action"
    if first["type"] == "string_too_short":
        return f"{field} must not be empty for {action_type} action"
    return f"Invalid {field} for {action_type} action: {first['msg']}"


class TaskProgress(WireModel):
    """The planner's view of where the task stands."""

    completed: bool = Field(..., strict=True, description="Terminal flag")
    # Only completed is required; short responses such as
    # {"completed": false, "nextActions": [...]} must validate.
    progress: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Advisory completion estimate"
    )
    current_step: str = Field(default="")
    next_actions: list[Action] = Field(
        default_factory=list, description="Only the first action is executed"
    )
    extracted_data: dict[str, Any] | None = Field(None)

    @classmethod
    def fallback(cls, reason: str) -> "TaskProgress":
        """Progress used when the model response is unusable.

        Keeps the loop alive with a single wait so the next cycle can retry.
        """
        return cls(
            completed=False,
            progress=0.0,
            current_step=reason,
            next_actions=[
                WaitAction(
                    text="2000",
                    reasoning="Waiting due to planning error",
                    confidence=0.1,
                )
            ],
        )


class HistoryEntry(WireModel):
    """One executed loop iteration."""

    step: int = Field(..., ge=0)
    action: Action
    result: str
    page_url: str


class TaskStatus(BaseModel):
    """Introspection snapshot of the running or last task."""

    task: str
    step_count: int
    max_steps: int
    state: AgentState


class Heading(BaseModel):
    level: int = Field(..., ge=1, le=6)
    text: str
    selector: str


class InteractiveElement(BaseModel):
    """A button, link or form control on the page."""

    type: str = Field(..., description="link, button, input, select or textarea")
    text: str = Field(default="", description="Visible text")
    description: str = Field(default="", description="Best human-readable label")
    selector: str
    href: str | None = None


class Form(BaseModel):
    selector: str
    fields: list[InteractiveElement] = Field(default_factory=list)
    submit_button: InteractiveElement | None = None


class PageStructure(BaseModel):
    """Bounded structural digest of a page."""

    url: str = ""
    title: str = ""
    headings: list[Heading] = Field(default_factory=list)
    interactive_elements: list[InteractiveElement] = Field(default_factory=list)
    forms: list[Form] = Field(default_factory=list)
    main_content: str = ""
