"""Data model for a persisted flow graph.

A flow is the state-machine definition of a task. The document holds only
what the task engine consumes; the display order of states belongs to the
editor and is never part of it.
"""

from pydantic import BaseModel, Field, field_validator

# reserved transition target meaning "end the flow here"
TERMINAL = "_final"

# StateDef.type value that marks a terminal state
FINAL_TYPE = "final"

DEFAULT_INITIAL = "start"

TRANSITION_FIELDS = ("on_done", "on_error")


class StateDef(BaseModel):
    """a named state with a success and an error transition."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "allow"}

    description: str = ""
    on_done: str = Field(default="", alias="onDone")  # "", a state id, or TERMINAL
    on_error: str = Field(default="", alias="onError")
    type: str | None = None  # FINAL_TYPE when terminal

    @field_validator("type", mode="before")
    @classmethod
    def _blank_type_is_unset(cls, value):
        if value == "":
            return None
        return value

    @property
    def is_final(self) -> bool:
        return self.type == FINAL_TYPE


class GraphDocument(BaseModel):
    """the full flow graph of one task."""

    model_config = {"frozen": True, "extra": "allow"}

    id: str  # task id, assigned by the store
    initial: str = DEFAULT_INITIAL
    states: dict[str, StateDef] = Field(default_factory=dict)

    def state_ids(self) -> list[str]:
        """State ids in mapping order."""
        return list(self.states)

    def get_state(self, state_id: str) -> StateDef | None:
        return self.states.get(state_id)

    def to_payload(self) -> dict:
        """Serialize to the wire format (camelCase keys, unset type omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_payload(cls, data: dict) -> "GraphDocument":
        return cls.model_validate(data)


def default_document(task_id: str) -> GraphDocument:
    """Build the document used when a task has no saved graph yet."""
    return GraphDocument(
        id=task_id,
        initial=DEFAULT_INITIAL,
        states={DEFAULT_INITIAL: StateDef()},
    )
