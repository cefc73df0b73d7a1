from enum import Enum


class GenerationState(str, Enum):
    EVALUATING = "evaluating"
    ADVANCING = "advancing"


class Origin(str, Enum):
    """How an individual entered its generation."""

    BRED = "bred"
    CLONED = "cloned"
    RANDOM_INJECTION = "random_injection"


VALID_TRANSITIONS: dict[GenerationState, set[GenerationState]] = {
    GenerationState.EVALUATING: {GenerationState.ADVANCING},
    GenerationState.ADVANCING: {GenerationState.EVALUATING},
}


def is_valid_transition(current: GenerationState, new: GenerationState) -> bool:
    return new in VALID_TRANSITIONS.get(current, set())


def validate_transition(current: GenerationState, new: GenerationState) -> None:
    if not is_valid_transition(current, new):
        valid_next = VALID_TRANSITIONS.get(current, set())
        raise ValueError(
            f"Invalid state transition: {current.value} -> {new.value}. "
            f"Valid transitions from {current.value}: {[s.value for s in valid_next]}"
        )
