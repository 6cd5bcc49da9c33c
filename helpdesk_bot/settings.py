from dataclasses import dataclass, fields
from typing import Dict, Optional


@dataclass
class GuildSettings:
    guild_id: int
    welcome_channel_id: Optional[int] = None
    ticket_category_id: Optional[int] = None
    support_role_id: Optional[int] = None

    @property
    def tickets_configured(self) -> bool:
        return self.ticket_category_id is not None and self.support_role_id is not None


SETTING_FIELDS = frozenset(field.name for field in fields(GuildSettings)) - {"guild_id"}


class SettingsStore:
    """Per-guild configuration kept for the lifetime of the process."""

    def __init__(self) -> None:
        self._settings: Dict[int, GuildSettings] = {}

    def __len__(self) -> int:
        return len(self._settings)

    def get(self, guild_id: int) -> Optional[GuildSettings]:
        return self._settings.get(guild_id)

    def upsert(self, guild_id: int, **values: Optional[int]) -> GuildSettings:
        unknown = set(values) - SETTING_FIELDS
        if unknown:
            raise TypeError(f"Unknown guild setting(s): {', '.join(sorted(unknown))}")

        settings = self._settings.get(guild_id)
        if settings is None:
            settings = GuildSettings(guild_id=guild_id)
            self._settings[guild_id] = settings
        for name, value in values.items():
            setattr(settings, name, value)
        return settings
