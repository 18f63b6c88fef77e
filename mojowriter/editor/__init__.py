"""Chapter editing coordination."""

from .coordinator import EditorCoordinator, OperationKind, OperationOutcome, OperationState, Phase

__all__ = [
    "EditorCoordinator",
    "OperationKind",
    "OperationOutcome",
    "OperationState",
    "Phase",
]
