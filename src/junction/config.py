"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, max_content_length=1024 * 1024)
    """

    # Logs "Response <method> <path> - <status> (<ms>)" at DEBUG for every request
    debug: bool = False

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Output.write_json_body formatting; None = compact
    json_indent: int | None = None
