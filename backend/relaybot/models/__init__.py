from .enums import OnboardingState
from .user import User
from .message_mapping import MessageMapping

__all__ = [
    "OnboardingState",
    "User",
    "MessageMapping",
]
