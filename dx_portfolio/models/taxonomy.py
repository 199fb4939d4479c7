"""Status / priority / blocker taxonomies (data/config.json)."""

from typing import Any

from pydantic import Field

from .base import CamelModel


class TaxonomyEntry(CamelModel):
    """Display settings for one status, priority or blocker key."""

    label: str = ""
    badge: str = ""
    badge_class: str = ""
    color: str = ""
    icon: str = ""


class AppConfig(CamelModel):
    """
    Конфигурация таксономий.

    Задаётся внешне (data/config.json), ядро её не хардкодит:
    lookup по неизвестному ключу возвращает пустой dict, а не ошибку.
    """

    app_name: str = "DX Portfolio"
    version: str = "1.0.0"
    project_statuses: dict[str, TaxonomyEntry] = Field(default_factory=dict)
    priorities: dict[str, TaxonomyEntry] = Field(default_factory=dict)
    blocker_types: dict[str, TaxonomyEntry] = Field(default_factory=dict)

    def _lookup(self, table: dict[str, TaxonomyEntry], key: str) -> dict[str, Any]:
        entry = table.get(key)
        return entry.to_json_dict() if entry else {}

    def status_config(self, status: str) -> dict[str, Any]:
        return self._lookup(self.project_statuses, status)

    def priority_config(self, priority: str) -> dict[str, Any]:
        return self._lookup(self.priorities, priority)

    def blocker_config(self, blocker_type: str) -> dict[str, Any]:
        return self._lookup(self.blocker_types, blocker_type)

    def lookup(self, kind: str, key: str) -> dict[str, Any]:
        """Lookup by table name: ``statuses``, ``priorities`` or ``blockers``."""
        lookups = {
            "statuses": self.status_config,
            "priorities": self.priority_config,
            "blockers": self.blocker_config,
        }
        handler = lookups.get(kind)
        return handler(key) if handler else {}


def _entry(label: str, badge: str, badge_class: str, color: str, icon: str = "") -> dict[str, str]:
    return {"label": label, "badge": badge, "badgeClass": badge_class, "color": color, "icon": icon}


DEFAULT_CONFIG: dict[str, Any] = {
    "appName": "DX Portfolio",
    "version": "1.0.0",
    "projectStatuses": {
        "in-progress": _entry("In progress", "In progress", "badge-in-progress", "#00D9FF", "▶"),
        "hold": _entry("Hold", "Hold", "badge-hold", "#FF6B00", "⏸"),
        "discovery": _entry("Discovery", "Discovery", "badge-discovery", "#9D00FF", "🔍"),
        "paused": _entry("Paused", "Paused", "badge-paused", "#FFD600", "⏸"),
        "completed": _entry("Completed", "Completed", "badge-completed", "#00FF85", "✓"),
    },
    "priorities": {
        "high": _entry("High", "High priority", "badge-priority-high", "#FF0000"),
        "medium": _entry("Medium", "Medium priority", "badge-priority-medium", "#FFA500"),
        "low": _entry("Low", "Low priority", "badge-priority-low", "#00FF00"),
    },
    "blockerTypes": {
        "info": _entry("Info", "Info", "blocker-info", "#00D9FF", "ℹ️"),
        "warning": _entry("Warning", "Warning", "blocker-warning", "#FFA500", "⚠️"),
        "alert": _entry("Alert", "Alert", "blocker-alert", "#FF0000", "🚨"),
        "success": _entry("Success", "Success", "blocker-success", "#00FF85", "✅"),
    },
}
