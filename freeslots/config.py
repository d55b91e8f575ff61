"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Sequence

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import WorkWindow


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    duration_minutes: int = 30
    start_hour: int = 9
    end_hour: int = 19
    exclude_weekends: bool = True
    search_days: int = 14

    @field_validator("duration_minutes", "search_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations and ranges are positive."""
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self


class Participant(BaseModel):
    """Participant whose calendar can be queried."""
    name: str  # Used as alias
    email: str
    calendar_id: str = ""  # Optional: calendar to query, defaults to the email


class GeminiConfig(BaseModel):
    """Settings for the language-model responder."""
    model: str = "gemini-2.0-flash"
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    api_key_env: str = "GEMINI_API_KEY"


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Asia/Tokyo"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    participants: List[Participant] = Field(default_factory=list)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)

    @field_validator("participants")
    @classmethod
    def validate_participants(cls, value: List[Participant]) -> List[Participant]:
        """Ensure participant aliases and emails are unique."""
        seen_names: set[str] = set()
        seen_emails: set[str] = set()
        for participant in value:
            name_key = participant.name.lower()
            email_key = participant.email.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate participant name detected: {participant.name}")
            if email_key in seen_emails:
                raise ValueError(f"Duplicate participant email detected: {participant.email}")
            seen_names.add(name_key)
            seen_emails.add(email_key)
        return value

    def work_window(
        self,
        *,
        duration_minutes: int | None = None,
        exclude_weekends: bool | None = None,
    ) -> WorkWindow:
        """Build the working window, optionally overriding defaults."""
        return WorkWindow(
            start_hour=self.defaults.start_hour,
            end_hour=self.defaults.end_hour,
            min_duration_minutes=(
                duration_minutes if duration_minutes is not None else self.defaults.duration_minutes
            ),
            exclude_weekends=(
                exclude_weekends if exclude_weekends is not None else self.defaults.exclude_weekends
            ),
            timezone=self.timezone,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def resolve_participants(self, identifiers: Sequence[str]) -> List[str]:
        """
        Turn aliases or email addresses into unique lowercase emails.

        Email addresses pass through; anything else must be a configured
        name. Input order is kept and duplicates collapse to one entry.

        Raises:
            ValueError: If nothing is given or some identifiers are unknown
        """
        emails_by_name = {p.name.lower(): p.email.lower() for p in self.participants}
        resolved: List[str] = []
        unknown: List[str] = []

        for identifier in identifiers:
            if "@" in identifier:
                email = identifier.lower()
            else:
                email = emails_by_name.get(identifier.lower())
            if email is None:
                unknown.append(identifier)
            elif email not in resolved:
                resolved.append(email)

        if unknown:
            raise ValueError(
                f"Unknown participant(s): {', '.join(unknown)}. "
                "Use an email address or a configured name."
            )
        if not resolved:
            raise ValueError("No participants provided.")
        return resolved

    def calendar_id_for(self, email: str) -> str:
        """Map an email to the calendar to query; falls back to the email itself."""
        for participant in self.participants:
            if participant.email.lower() == email.lower() and participant.calendar_id:
                return participant.calendar_id
        return email


def get_default_config_path() -> Path:
    """config.yaml in the working directory."""
    return Path.cwd() / "config.yaml"
