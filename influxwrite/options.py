"""Client configuration for writing and HTTP communication."""

from __future__ import annotations

import ssl
from dataclasses import dataclass, field

from influxwrite.logger import LogLevel
from influxwrite.useragent import format_user_agent

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND


@dataclass
class Options:
    """Configuration for communicating with the server.

    Intervals and times are in milliseconds, ``http_request_timeout`` in
    seconds and ``precision`` in nanoseconds (one of the unit constants).
    """

    batch_size: int = 5_000
    flush_interval: int = 1_000
    retry_interval: int = 5_000
    max_retries: int = 5
    retry_buffer_limit: int = 50_000
    max_retry_interval: int = 125_000
    max_retry_time: int = 180_000
    exponential_base: int = 2
    precision: int = NANOSECOND
    use_gzip: bool = False
    consistency: str = ""
    default_tags: dict[str, str] = field(default_factory=dict)
    log_level: LogLevel = LogLevel.ERROR
    tls_config: ssl.SSLContext | None = None
    http_request_timeout: int = 20
    application_name: str = ""

    def add_default_tag(self, key: str, value: str) -> Options:
        """Add a tag written with every point; an existing key is overwritten."""
        self.default_tags[key] = value
        return self

    def user_agent(self) -> str:
        """Return the User-Agent header value for these options."""
        return format_user_agent(self.application_name)