import os
import sys
import unittest
import tempfile
import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig, load_analytics_settings
from settings_schema import AnalyticsSettings, validate_settings


class YamlConfigTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "analytics.yaml")

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_missing_file_gives_defaults(self) -> None:
        settings = load_analytics_settings(self.path)
        self.assertEqual(settings, AnalyticsSettings())
        self.assertEqual(settings.imbalance.deviation, 15.0)
        self.assertEqual(settings.score.rating_floor, "Getting Started")

    def test_overrides_from_yaml(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                {
                    "other": {"keep": True},
                    "analytics": {
                        "imbalance": {"deviation": 20},
                        "fetch_timeout_seconds": 2.5,
                        "muscle_group_aliases": {"Legs": ["Quads", "Hams"]},
                    },
                },
                f,
            )
        settings = load_analytics_settings(self.path)
        self.assertEqual(settings.imbalance.deviation, 20)
        self.assertEqual(settings.imbalance.high_severity, 25.0)
        self.assertEqual(settings.fetch_timeout_seconds, 2.5)
        self.assertEqual(settings.canonical_muscle_group("hams"), "Legs")
        self.assertEqual(settings.canonical_muscle_group("Pecs"), "Pecs")

    def test_save_round_trip_keeps_other_sections(self) -> None:
        config = YamlConfig(self.path)
        config.save({"other": {"keep": True}})
        settings = AnalyticsSettings(dashboard_records_limit=3)
        config.save_analytics_settings(settings)
        self.assertEqual(config.analytics_settings().dashboard_records_limit, 3)
        self.assertEqual(config.load()["other"], {"keep": True})

    def test_env_path(self) -> None:
        os.environ["ANALYTICS_SETTINGS"] = self.path
        try:
            self.assertEqual(YamlConfig().path, self.path)
        finally:
            del os.environ["ANALYTICS_SETTINGS"]

    def test_invalid_content(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("- just\n- a list\n")
        with self.assertRaises(ValueError):
            YamlConfig(self.path).load()
        with self.assertRaises(ValueError):
            validate_settings({"fetch_timeout_seconds": 0})
        with self.assertRaises(ValueError):
            validate_settings({"strength_ratios": [{"name": "x", "primary": "a", "secondary": [], "ideal": 1}]})


class AnalyticsSettingsTestCase(unittest.TestCase):
    def test_canonical_muscle_group(self) -> None:
        settings = AnalyticsSettings()
        self.assertEqual(settings.canonical_muscle_group("Pecs"), "Chest")
        self.assertEqual(settings.canonical_muscle_group(" lats "), "Back")
        self.assertEqual(settings.canonical_muscle_group("Quads"), "Legs")
        self.assertEqual(settings.canonical_muscle_group("Neck"), "Neck")
        self.assertEqual(settings.canonical_muscle_group(""), "Uncategorized")

    def test_ratio_lookup(self) -> None:
        settings = AnalyticsSettings()
        self.assertEqual(settings.ratio("Squat vs Deadlift").ideal, 0.85)
        with self.assertRaises(ValueError):
            settings.ratio("Nope")


if __name__ == "__main__":
    unittest.main()
