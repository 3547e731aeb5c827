# influxwrite

This package writes line-protocol batches to an InfluxDB 2 server. Batches
that fail are kept in a bounded retry queue and sent again with exponential
backoff.

## Modules

- `influxwrite.options`: the `Options` dataclass, which holds the write and
  HTTP settings. It also defines the precision constants `NANOSECOND`,
  `MICROSECOND`, `MILLISECOND` and `SECOND`.
- `influxwrite.write_service`: contains the following:
  - `WriteService`, which writes batches and retries them.
  - `Batch` and `new_batch`.
  - `WriteError`.
  - `is_ignorable_error` and `precision_to_string`.
- `influxwrite.retry_queue`: `RetryQueue`, a FIFO of batches with a fixed
  limit. When the queue is full, the oldest batch is evicted.
- `influxwrite.compression`: `compress_with_gzip`, which gzips bytes, text or
  a readable stream.
- `influxwrite.logger`: the library-wide logger. It provides `LogLevel`
  (`ERROR`, `WARNING`, `INFO` and `DEBUG`), `Logger`, `get_logger`,
  `set_logger`, `level`, and the module functions `debug`, `info`, `warn` and
  `error`.
- `influxwrite.useragent`: `user_agent_base` and `format_user_agent`. These
  build a value such as `influxwrite/2.14.0 (linux; amd64) MyApp/1.0`.

## Install

```
pip install .
```

## Options

```python
from influxwrite.options import Options, MILLISECOND

opts = Options(batch_size=1_000, retry_interval=1_000, precision=MILLISECOND)
opts.add_default_tag("host", "server-01")
print(opts.user_agent())
```

The defaults are as follows:

| Option | Default |
| --- | --- |
| batch size | 5000 |
| flush interval | 1000 ms |
| retry interval | 5000 ms |
| max retries | 5 |
| retry buffer limit | 50000 |
| max retry interval | 125000 ms |
| max retry time | 180000 ms |
| exponential base | 2 |
| precision | nanoseconds |
| gzip | off |
| HTTP request timeout | 20 s |
| log level | `ERROR` |

## Writing with retries

`WriteService` posts batches through an HTTP service that you supply. That
service needs two things:

- a `server_api_url` attribute, for example `"http://localhost:8086/api/v2/"`;
- a method `do_post_request(url, body, headers)`, which raises `WriteError` on
  failure. Any `OSError` it raises is wrapped in a `WriteError`.

```python
from influxwrite.write_service import WriteService, WriteError, new_batch

service = WriteService("my-org", "my-bucket", http_service, opts)
print(service.write_url())
# http://localhost:8086/api/v2/write?bucket=my-bucket&org=my-org&precision=ms

try:
    service.handle_write(new_batch("cpu,host=a usage=0.5\n", opts.max_retry_time))
except WriteError as exc:
    print("write failed:", exc)
```

`handle_write` behaves as follows:

- It sends any queued batches first. It then sends the new batch.
- A batch is kept for retrying after a connection error (status 0) or an HTTP
  status of 429 or higher.
- Setting `max_retries` to 0 turns retrying off.
- The retry delay comes from the server's `retry_after` value when there is
  one. Otherwise it is a random value between `retry_interval * base**n` and
  `retry_interval * base**(n+1)`, capped at `max_retry_interval`.
- Until that delay has passed, new batches are only queued.
- The queue holds `retry_buffer_limit // batch_size` batches, and at least 1.
- A batch is discarded in these cases:
  - it is evicted from a full queue;
  - it expires;
  - it has used up `max_retries`.
- An error message that contains any of the following is logged and the batch
  is dropped without raising:
  - "partial write"
  - "points beyond retention policy"
  - "hinted handoff queue not empty"
  - "unable to parse"
- If you pass a `threading.Event` as `cancel` and it is set, `handle_write`
  raises `concurrent.futures.CancelledError`.

To choose for each failed batch whether it is retried (`True`) or dropped, use
`set_batch_error_callback(callback)`. The callback receives the `Batch` and
the `WriteError`.

`flush()` sends every queued batch once and does not retry it. Expired batches
are dropped, and errors are only logged.

When `use_gzip` is set, the body is compressed and the service sends a
`Content-Encoding: gzip` header.

## Logging

```python
from influxwrite import logger

logger.get_logger().level = logger.LogLevel.DEBUG
```

The default logger writes lines such as `influxdb2client E! message` to
standard error.

- To send the output somewhere else, install your own logger with
  `logger.set_logger(logger.Logger(prefix="app", stream=my_stream))`.
- To turn logging off entirely, call `logger.set_logger(None)`.

## What the package does not do

- It has no HTTP client of its own. You provide the transport.
- It has no point model and no line-protocol encoder. Batches are line-protocol
  text that you prepare yourself.
- `Options` stores the following settings for your transport or batching code,
  but `WriteService` does not use them itself:
  - `default_tags`
  - `flush_interval`
  - `tls_config`
  - `http_request_timeout`
  - `log_level`
- It has no query, bucket, organisation or task APIs.
- It has no command-line tool.

## Tests

```
pip install .[test]
pytest
```