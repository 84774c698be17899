"""User-facing display settings."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

from ..domain.actions import Action, SetCustomModel, UpdateSettings
from .store import Store


class PathDisplayMode(str, Enum):
    DYNAMIC = "dynamic"
    STATIC = "static"


@dataclass(frozen=True, slots=True)
class Settings:
    show_distance_in_miles: bool = False
    draw_areas_enabled: bool = False
    show_animations: bool = True
    is_screenshot: bool = False
    path_display_mode: PathDisplayMode = PathDisplayMode.DYNAMIC


DEFAULT_SETTINGS = Settings()

_FIELDS = {f.name for f in dataclasses.fields(Settings)}


class SettingsStore(Store[Settings]):
    def __init__(self) -> None:
        super().__init__(DEFAULT_SETTINGS)

    def reduce(self, state: Settings, action: Action) -> Settings:
        if isinstance(action, SetCustomModel):
            if action.custom_model is None and state.draw_areas_enabled:
                return dataclasses.replace(state, draw_areas_enabled=False)
            return state

        if isinstance(action, UpdateSettings):
            unknown = set(action.updated) - _FIELDS
            if unknown:
                self._logger.warning(
                    "Ignoring unknown settings",
                    extra={"settings": sorted(unknown)},
                )
            changes = {k: v for k, v in action.updated.items() if k in _FIELDS}
            if "path_display_mode" in changes:
                changes["path_display_mode"] = PathDisplayMode(changes["path_display_mode"])
            if all(getattr(state, k) == v for k, v in changes.items()):
                return state
            return dataclasses.replace(state, **changes)

        return state
