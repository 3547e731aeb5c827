"""Reliable writing of line-protocol batches, with retries and a retry buffer."""

from __future__ import annotations

import random
import threading
import time
from concurrent.futures import CancelledError
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Protocol
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from influxwrite import logger as log
from influxwrite.compression import compress_with_gzip
from influxwrite.logger import LogLevel
from influxwrite.options import MICROSECOND, MILLISECOND, SECOND, Options
from influxwrite.retry_queue import RetryQueue

TOO_MANY_REQUESTS = 429

_IGNORABLE_MESSAGES = (
    # Informational message about the state of the cluster.
    "hinted handoff queue not empty",
    # Points immediately discarded for being older than the retention policy.
    "points beyond retention policy",
    # Other partial writes, e.g. field type conflicts, cannot be corrected.
    "partial write",
    # Line protocol serialization errors; retrying would not help.
    "unable to parse",
)

_LOGGED_HEADERS = (
    "date",
    "trace-id",
    "trace-sampled",
    "X-Influxdb-Build",
    "X-Influxdb-Request-ID",
    "X-Influxdb-Version",
)


@dataclass(eq=False)
class Batch:
    """Lines to send, with retry bookkeeping.

    ``expires`` is a ``time.monotonic()`` timestamp.
    """

    batch: str
    retry_attempts: int = 0
    evicted: bool = False
    expires: float = field(default_factory=time.monotonic)


def new_batch(data: str, expire_delay_ms: int) -> Batch:
    """Create a batch that expires ``expire_delay_ms`` milliseconds from now."""
    return Batch(batch=data, expires=time.monotonic() + expire_delay_ms / 1000)


def _expired(batch: Batch) -> bool:
    return time.monotonic() > batch.expires


def _canonical_header_key(key: str) -> str:
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


class WriteError(Exception):
    """Failed write: an HTTP error response or a connection error.

    ``status_code`` is 0 when no response was received; ``err`` then holds
    the underlying exception. ``retry_after`` is in seconds.
    """

    def __init__(
        self,
        status_code: int = 0,
        code: str = "",
        message: str = "",
        retry_after: int = 0,
        headers: Mapping[str, str] | None = None,
        err: BaseException | None = None,
    ) -> None:
        super().__init__(status_code, code, message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.retry_after = retry_after
        self.headers = dict(headers or {})
        self.err = err

    def __str__(self) -> str:
        if self.err is not None:
            return str(self.err)
        if self.code and self.message:
            return f"{self.code}: {self.message}"
        if self.message:
            return self.message
        return f"Unexpected status code {self.status_code}"

    def _header(self, name: str) -> str:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""

    def header_to_string(self, selected_headers: Iterable[str]) -> str:
        """Format the selected headers (all if none given) as ``Key: value`` lines."""
        selected = list(selected_headers)
        if not selected:
            pairs = [(_canonical_header_key(k), v) for k, v in self.headers.items()]
        else:
            pairs = [
                (_canonical_header_key(k), self._header(k))
                for k in selected
                if self._header(k)
            ]
        return "".join(f"{key}: {value}\r\n" for key, value in pairs)


class HTTPService(Protocol):
    """Transport used by WriteService to post batches."""

    server_api_url: str

    def do_post_request(self, url: str, body: bytes, headers: dict[str, str]) -> None:
        """Post the body; raise WriteError on failure."""


BatchErrorCallback = Callable[[Batch, WriteError], bool]


def is_ignorable_error(error: WriteError) -> bool:
    """Return True for errors after which the batch is dropped without retrying."""
    return any(text in error.message for text in _IGNORABLE_MESSAGES)


def precision_to_string(precision: int) -> str:
    """Return the query-parameter name of a precision given in nanoseconds."""
    return {MICROSECOND: "us", MILLISECOND: "ms", SECOND: "s"}.get(precision, "ns")


def _build_write_url(base: str, org: str, bucket: str, options: Options) -> str:
    parts = urlsplit(urljoin(base, "write"))
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    params["org"] = org
    params["bucket"] = bucket
    params["precision"] = precision_to_string(options.precision)
    if options.consistency:
        params["consistency"] = str(options.consistency)
    return urlunsplit(parts._replace(query=urlencode(sorted(params.items()))))


class WriteService:
    """Writes batches and retries them after retryable failures.

    Retrying is driven by new writes; there is no scheduler. Batches waiting
    for retry are written before the incoming batch.
    """

    def __init__(
        self,
        org: str,
        bucket: str,
        http_service: HTTPService,
        options: Options | None = None,
    ) -> None:
        self._options = options if options is not None else Options()
        self.org = org
        self.bucket = bucket
        self._http = http_service
        limit = self._options.retry_buffer_limit // self._options.batch_size or 1
        self.retry_queue = RetryQueue(limit)
        self._url = _build_write_url(http_service.server_api_url, org, bucket, self._options)
        self._lock = threading.Lock()
        self.last_write_attempt: float | None = None
        self.retry_delay: int = self._options.retry_interval
        self.retry_attempts: int = 0
        self._error_callback: BatchErrorCallback | None = None

    def set_batch_error_callback(self, callback: BatchErrorCallback | None) -> None:
        """Set a callback deciding whether a failed batch is retried (True) or dropped."""
        self._error_callback = callback

    def write_url(self) -> str:
        """Return the URL batches are posted to."""
        return self._url

    def _store(self, batch: Batch) -> None:
        if self.retry_queue.push(batch):
            log.error("Retry buffer full, discarding oldest batch")

    def _may_write(self) -> bool:
        with self._lock:
            last = self.last_write_attempt
        return last is None or time.monotonic() > last + self.retry_delay / 1000

    def handle_write(
        self, batch: Batch | None, cancel: threading.Event | None = None
    ) -> None:
        """Write a batch, first sending any batches waiting for retry.

        Raises WriteError when a write fails, and CancelledError when
        ``cancel`` is set.
        """
        log.debug("Write proc: received write request")
        batch_to_write = batch
        retrying = False
        while True:
            if cancel is not None and cancel.is_set():
                log.debug("Write proc: ctx cancelled req")
                raise CancelledError("write cancelled")
            if not self.retry_queue.is_empty():
                log.debug("Write proc: taking batch from retry queue")
                if not retrying:
                    oldest = self.retry_queue.first()
                    if _expired(oldest):
                        log.error("Write proc: oldest batch in retry queue expired, discarding")
                        if not oldest.evicted:
                            self.retry_queue.pop()
                        continue
                    if self._may_write():
                        retrying = True
                    else:
                        log.warn("Write proc: cannot write yet, storing batch to queue")
                        if batch is not None:
                            self._store(batch)
                        batch_to_write = None
                if retrying:
                    batch_to_write = self.retry_queue.first()
                    if batch is not None:
                        self._store(batch)
                        batch = None
            if batch_to_write is None:
                return
            try:
                self.write_batch(batch_to_write)
            except WriteError as perror:
                if is_ignorable_error(perror):
                    log.warn("Write error: %s", perror)
                else:
                    self._handle_failure(batch_to_write, perror)
                    raise
            self.retry_delay = self._options.retry_interval
            self.retry_attempts = 0
            if retrying and not batch_to_write.evicted:
                self.retry_queue.pop()
            batch_to_write = None

    def _handle_failure(self, batch: Batch, perror: WriteError) -> None:
        opts = self._options
        retryable = perror.status_code == 0 or perror.status_code >= TOO_MANY_REQUESTS
        if opts.max_retries != 0 and retryable:
            log.error("Write error: %s, batch kept for retrying", perror)
            if perror.retry_after > 0:
                self.retry_delay = perror.retry_after * 1000
            else:
                self.retry_delay = self.compute_retry_delay(self.retry_attempts)
            if self._error_callback is not None and not self._error_callback(batch, perror):
                log.error("Callback rejected batch, discarding")
                if not batch.evicted:
                    self.retry_queue.pop()
                return
            if not batch.evicted and batch is not self.retry_queue.first():
                self._store(batch)
            elif batch.retry_attempts == opts.max_retries:
                log.error("Reached maximum number of retries, discarding batch")
                if not batch.evicted:
                    self.retry_queue.pop()
            batch.retry_attempts += 1
            self.retry_attempts += 1
            log.debug("Write proc: next wait for write is %dms", self.retry_delay)
        else:
            message = f"Write error: {perror}"
            headers = perror.header_to_string(_LOGGED_HEADERS)
            if headers:
                message += f"\nSelected Response Headers:\n{headers}"
            log.error(message)
        log.error(
            "Write failed (retry attempts %d): Status Code %d",
            batch.retry_attempts,
            perror.status_code,
        )

    def compute_retry_delay(self, attempts: int) -> int:
        """Return a random delay in ms within
        [interval * base**attempts, interval * base**(attempts + 1)),
        capped at the maximum retry interval.
        """
        opts = self._options
        min_delay = opts.retry_interval * opts.exponential_base**attempts
        max_delay = opts.retry_interval * opts.exponential_base ** (attempts + 1)
        diff = max_delay - min_delay
        if diff <= 0 or min_delay >= opts.max_retry_interval:
            return opts.max_retry_interval
        return min(random.randrange(diff) + min_delay, opts.max_retry_interval)

    def write_batch(self, batch: Batch) -> None:
        """Send one batch; raise WriteError on failure."""
        if log.level() >= LogLevel.DEBUG:
            log.debug("Writing batch: %s", batch.batch)
        body = batch.batch.encode("utf-8")
        headers: dict[str, str] = {}
        if self._options.use_gzip:
            body = compress_with_gzip(body)
            headers["Content-Encoding"] = "gzip"
        with self._lock:
            self.last_write_attempt = time.monotonic()
        try:
            self._http.do_post_request(self._url, body, headers)
        except WriteError:
            raise
        except OSError as exc:
            raise WriteError(err=exc) from exc

    def flush(self) -> None:
        """Send every queued batch once, without retrying; expired ones are dropped."""
        while not self.retry_queue.is_empty():
            batch = self.retry_queue.pop()
            if _expired(batch):
                log.error("Oldest batch in retry queue expired, discarding")
                continue
            try:
                self.write_batch(batch)
            except WriteError as exc:
                log.error("Error flushing batch from retry queue: %s", exc)