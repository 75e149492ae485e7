from dataclasses import asdict, dataclass
from typing import Any, Literal

Theme = Literal["light", "dark", "auto"]
Language = Literal["zh", "en"]


@dataclass
class UserSettings:
    """Per-user display preferences kept by the local store."""

    theme: Theme = "auto"
    language: Language = "zh"
    auto_sync: bool = False
    notifications: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserSettings":
        """Build settings from stored data, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
