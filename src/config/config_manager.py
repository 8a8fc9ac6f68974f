"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between settings and JSON persistence.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")


@dataclass
class StorageSettings:
    """Where the key-value record store lives."""
    data_file: str = "attendance_data.json"  # Relative paths resolve against the config file


@dataclass
class CalendarSettings:
    """Ethiopian date picker settings."""
    year_picker_count: int = 20
    # Pagumen length for pickers: "fixed" (always 6) or "by_year" (days left before New Year)
    pagumen_rule: str = "fixed"


@dataclass
class ReportSettings:
    """Department report settings."""
    unknown_department: str = "Unknown"


@dataclass
class LoggingSettings:
    """Log output settings."""
    log_file: str = ""  # Empty = app.log in the project root


@dataclass
class AppConfig:
    """Main application configuration container."""
    storage: StorageSettings = field(default_factory=StorageSettings)
    calendar: CalendarSettings = field(default_factory=CalendarSettings)
    report: ReportSettings = field(default_factory=ReportSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, AttributeError) as e:
                logger.warning(f"Failed to load config, using defaults. Error: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update(self, **kwargs) -> None:
        """Update specific configuration sections."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self.save()

    def resolve_data_file(self) -> Path:
        """Absolute path of the record store file."""
        data_file = Path(self._config.storage.data_file)
        if data_file.is_absolute():
            return data_file
        return self.config_path.parent / data_file

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "storage": {
                "data_file": config.storage.data_file
            },
            "calendar": {
                "year_picker_count": config.calendar.year_picker_count,
                "pagumen_rule": config.calendar.pagumen_rule
            },
            "report": {
                "unknown_department": config.report.unknown_department
            },
            "logging": {
                "log_file": config.logging.log_file
            }
        }

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        storage_data = data.get("storage", {})
        calendar_data = data.get("calendar", {})
        report_data = data.get("report", {})
        logging_data = data.get("logging", {})

        return AppConfig(
            storage=StorageSettings(
                data_file=storage_data.get("data_file", "attendance_data.json")
            ),
            calendar=CalendarSettings(
                year_picker_count=calendar_data.get("year_picker_count", 20),
                pagumen_rule=calendar_data.get("pagumen_rule", "fixed")
            ),
            report=ReportSettings(
                unknown_department=report_data.get("unknown_department", "Unknown")
            ),
            logging=LoggingSettings(
                log_file=logging_data.get("log_file", "")
            )
        )
