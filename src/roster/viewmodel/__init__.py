"""View-models and the runtime they run on."""

from .scope import ViewModelScope
from .state import ObservableState
from .student import OperationResult, StudentUiState, StudentViewModel, SubscriptionMode
from .theme import ThemeViewModel

__all__ = [
    "ObservableState",
    "OperationResult",
    "StudentUiState",
    "StudentViewModel",
    "SubscriptionMode",
    "ThemeViewModel",
    "ViewModelScope",
]
