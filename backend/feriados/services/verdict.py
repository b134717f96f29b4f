import enum
from dataclasses import dataclass


class VerdictSource(str, enum.Enum):
    """Which rule produced a verdict."""

    FIXED = "fixed"
    NATIONAL_MOVABLE = "national_movable"
    REGIONAL_MOVABLE = "regional_movable"
    MUNICIPAL_CUSTOM = "municipal_custom"
    STATE_CUSTOM = "state_custom"
    NONE = "none"
    UNKNOWN_REGION = "unknown_region"

    @property
    def depends_on_region_data(self) -> bool:
        """False for verdicts that no mutation can ever change."""
        return self not in (VerdictSource.FIXED, VerdictSource.NATIONAL_MOVABLE)


@dataclass(frozen=True)
class ResolutionVerdict:
    found: bool
    name: str = ""
    source: VerdictSource = VerdictSource.NONE

    @classmethod
    def holiday(cls, name: str, source: VerdictSource) -> "ResolutionVerdict":
        return cls(found=True, name=name, source=source)

    @classmethod
    def not_found(cls, source: VerdictSource = VerdictSource.NONE) -> "ResolutionVerdict":
        return cls(found=False, source=source)
