import enum


class OnboardingState(str, enum.Enum):
    UNVERIFIED = "UNVERIFIED"
    VERIFIED_NO_LANGUAGE = "VERIFIED_NO_LANGUAGE"
    READY = "READY"
