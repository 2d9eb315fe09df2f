"""Feed configuration objects."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from dotenv import dotenv_values

from icalfeed.config.constants import (
    DEFAULT_MAX_OCCURRENCES,
    DEFAULT_TIMEZONE,
    DEFAULT_UID_DOMAIN,
    ENV_DEFAULT_TIMEZONE,
    ENV_INCLUDE_TIMEZONES,
    ENV_MAX_OCCURRENCES,
    ENV_PREFIX,
    ENV_PRODID,
    ENV_UID_DOMAIN,
    ICS_PRODID,
    TRUTHY_VALUES,
)
from icalfeed.exceptions.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldMapping:
    """Which record field plays which calendar role."""

    date_field: str
    summary_field: Optional[str] = None
    location_field: Optional[str] = None
    description_field: Optional[str] = None

    def __post_init__(self):
        if not self.date_field:
            raise ConfigurationError("A date field must be configured", "date_field")

    @classmethod
    def from_options(cls, options: Mapping[str, Optional[str]]) -> "FieldMapping":
        """Build a mapping from a host option dictionary.

        Blank optional entries are treated as not configured.

        Args:
            options: Dict with ``date_field`` and optional ``summary_field``,
                ``location_field`` and ``description_field`` keys.

        Returns:
            A validated FieldMapping.

        Raises:
            ConfigurationError: If ``date_field`` is missing or blank.
        """
        date_field = options.get("date_field")
        if not date_field:
            raise ConfigurationError("A date field must be configured", "date_field")
        return cls(
            date_field=date_field,
            summary_field=options.get("summary_field") or None,
            location_field=options.get("location_field") or None,
            description_field=options.get("description_field") or None,
        )

    def text_fields(self) -> Dict[str, str]:
        """Return configured descriptive roles mapped to field names."""
        roles = {
            "summary": self.summary_field,
            "location": self.location_field,
            "description": self.description_field,
        }
        return {role: name for role, name in roles.items() if name}

    def field_names(self):
        """All field names this mapping reads, date field first."""
        return [self.date_field] + list(self.text_fields().values())


@dataclass(frozen=True)
class FeedSettings:
    """Ambient settings shared by every render."""

    prodid: str = ICS_PRODID
    uid_domain: str = DEFAULT_UID_DOMAIN
    default_timezone: str = DEFAULT_TIMEZONE
    include_timezones: bool = False
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES
    # Fixed DTSTAMP for reproducible output; None stamps with the render time
    dtstamp: Optional[datetime] = None

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "FeedSettings":
        """Load settings from ``ICALFEED_*`` variables.

        Values from ``env_file`` are read first; the process environment
        (or ``environ``) wins over them.

        Args:
            env_file: Optional path to a .env file.
            environ: Mapping to use instead of ``os.environ``.

        Returns:
            FeedSettings populated from the environment.

        Raises:
            ConfigurationError: If a numeric setting is not a positive integer.
        """
        values: Dict[str, str] = {}
        if env_file is not None and Path(env_file).exists():
            loaded = dotenv_values(env_file)
            values.update({k: v for k, v in loaded.items() if v is not None})
            logger.debug("Loaded %d settings from %s", len(values), env_file)

        source = os.environ if environ is None else environ
        values.update({k: v for k, v in source.items() if k.startswith(ENV_PREFIX)})

        max_occurrences = DEFAULT_MAX_OCCURRENCES
        raw_max = values.get(ENV_MAX_OCCURRENCES)
        if raw_max:
            try:
                max_occurrences = int(raw_max)
            except ValueError as exc:
                raise ConfigurationError(
                    f"{ENV_MAX_OCCURRENCES} must be an integer, got {raw_max!r}"
                ) from exc
            if max_occurrences <= 0:
                raise ConfigurationError(f"{ENV_MAX_OCCURRENCES} must be positive")

        include_raw = values.get(ENV_INCLUDE_TIMEZONES, "")
        return cls(
            prodid=values.get(ENV_PRODID) or ICS_PRODID,
            uid_domain=values.get(ENV_UID_DOMAIN) or DEFAULT_UID_DOMAIN,
            default_timezone=values.get(ENV_DEFAULT_TIMEZONE) or DEFAULT_TIMEZONE,
            include_timezones=include_raw.strip().lower() in TRUTHY_VALUES,
            max_occurrences=max_occurrences,
        )


FEED_SETTINGS = FeedSettings()
