import os
import yaml

from settings_schema import AnalyticsSettings, validate_settings

APP_VERSION = "1.0.0"
DEFAULT_SETTINGS_PATH = "analytics.yaml"


class YamlConfig:
    """Load and save analytics settings to a YAML file."""

    SECTION = "analytics"

    def __init__(self, path: str | None = None) -> None:
        self.path = path or os.environ.get("ANALYTICS_SETTINGS", DEFAULT_SETTINGS_PATH)

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def save(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False)

    def analytics_settings(self) -> AnalyticsSettings:
        """Return validated settings from the ``analytics`` section."""
        section = self.load().get(self.SECTION) or {}
        return validate_settings(section)

    def save_analytics_settings(self, settings: AnalyticsSettings) -> None:
        data = self.load()
        data[self.SECTION] = settings.model_dump(mode="json")
        self.save(data)


def load_analytics_settings(path: str | None = None) -> AnalyticsSettings:
    return YamlConfig(path).analytics_settings()
