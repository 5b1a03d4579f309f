"""Settings loading with deterministic precedence.

The cascade is always:
1) CLI params
2) Environment variables
3) ``~/.config/listing/listing.yaml`` (or an explicit ``config_path``)
4) Built-in model defaults

Environment variable format:
- Prefix: ``LISTING_``
- Nested keys: ``__`` separator
- Example: ``LISTING_LOGGING__LEVEL=DEBUG`` -> ``logging.level = "DEBUG"``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import ListingSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> ListingSettings:
    """Build root settings, optionally reading YAML from ``config_path``."""
    settings_cls: type[ListingSettings] = ListingSettings
    if config_path is not None:
        yaml_file = Path(config_path)

        class _ScopedSettings(ListingSettings):
            model_config = SettingsConfigDict(yaml_file=yaml_file)

        settings_cls = _ScopedSettings

    return settings_cls(**dict(cli_params or {}))
