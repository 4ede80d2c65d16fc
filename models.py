from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Tuple

from agents.errors import StructuredResponseInvalid

COMMON_SYMPTOMS = [
    "Anxiety",
    "Depression",
    "Sleep Issues",
    "Stress",
    "Mood Swings",
    "Difficulty Concentrating",
    "Fatigue",
    "Irritability",
]

ROLES = {"system", "user", "assistant"}


class CheckInStep(Enum):
    SYMPTOMS = 1
    THOUGHTS_EMOTIONS = 2
    BEHAVIORS_ALTERNATIVES = 3
    ANALYSIS = 4


@dataclass(frozen=True)
class ConversationMessage:
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class CheckInRecord:
    """What the user entered across the first three check-in steps."""
    symptoms: List[str] = field(default_factory=list)  # set semantics, insertion order kept
    thoughts: str = ""
    emotions: str = ""
    behaviors: str = ""
    alternative_thoughts: str = ""

    def copy(self) -> "CheckInRecord":
        return replace(self, symptoms=list(self.symptoms))

    def is_empty(self) -> bool:
        return not (
            self.symptoms
            or self.thoughts
            or self.emotions
            or self.behaviors
            or self.alternative_thoughts
        )

    def summary_text(self) -> str:
        """Natural-language summary sent to the LLM."""
        lines = [
            "Check-in Data:",
            f"Symptoms: {', '.join(self.symptoms)}",
            f"Thoughts: {self.thoughts}",
            f"Emotions: {self.emotions}",
            f"Behaviors: {self.behaviors}",
            f"Alternative Thoughts: {self.alternative_thoughts}",
        ]
        return "\n".join(lines)


@dataclass
class StreamState:
    """Assembled text of one streamed response.

    partial_text only ever grows; is_complete flips to True once and
    freezes partial_text.
    """
    partial_text: str = ""
    is_complete: bool = False

    def append(self, delta: str) -> str:
        if self.is_complete:
            raise RuntimeError("Cannot append to a completed stream")
        self.partial_text += delta
        return self.partial_text

    def finish(self) -> str:
        if self.is_complete:
            raise RuntimeError("Stream already completed")
        self.is_complete = True
        return self.partial_text


RECOMMENDATION_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("mentalTools", "mental_tools"),
    ("exercises", "exercises"),
    ("resources", "resources"),
)


@dataclass(frozen=True)
class Recommendations:
    mental_tools: Tuple[str, ...] = ()
    exercises: Tuple[str, ...] = ()
    resources: Tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "Recommendations":
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> "Recommendations":
        """
        Validate a decoded recommendations object. All three lists must be
        present and hold only strings; otherwise nothing is built.
        """
        if not isinstance(payload, dict):
            raise StructuredResponseInvalid(
                f"Recommendations must be a JSON object, got {type(payload).__name__}"
            )

        values: Dict[str, Tuple[str, ...]] = {}
        for wire_key, attr in RECOMMENDATION_FIELDS:
            if wire_key not in payload:
                raise StructuredResponseInvalid(f"Missing field: {wire_key}")
            items = payload[wire_key]
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                raise StructuredResponseInvalid(
                    f"Field {wire_key} must be a list of strings"
                )
            values[attr] = tuple(items)
        return cls(**values)

    def is_empty(self) -> bool:
        return not (self.mental_tools or self.exercises or self.resources)
