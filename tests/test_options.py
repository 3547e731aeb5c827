import ssl

from influxwrite.logger import LogLevel
from influxwrite.options import MILLISECOND, NANOSECOND, Options
from influxwrite.useragent import user_agent_base


def test_default_options():
    opts = Options()
    assert opts.batch_size == 5_000
    assert opts.use_gzip is False
    assert opts.flush_interval == 1_000
    assert opts.precision == NANOSECOND
    assert opts.retry_buffer_limit == 50_000
    assert opts.retry_interval == 5_000
    assert opts.max_retries == 5
    assert opts.max_retry_interval == 125_000
    assert opts.max_retry_time == 180_000
    assert opts.exponential_base == 2
    assert opts.tls_config is None
    assert opts.http_request_timeout == 20
    assert opts.log_level == 0
    assert opts.application_name == ""
    assert opts.default_tags == {}


def test_settings_options():
    tls_config = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    tls_config.check_hostname = False
    tls_config.verify_mode = ssl.CERT_NONE
    opts = Options(
        batch_size=5,
        use_gzip=True,
        flush_interval=5_000,
        precision=MILLISECOND,
        retry_buffer_limit=5,
        retry_interval=1_000,
        max_retry_interval=10_000,
        max_retries=7,
        max_retry_time=500_000,
        exponential_base=5,
        tls_config=tls_config,
        http_request_timeout=50,
        log_level=LogLevel.DEBUG,
        application_name="Monitor/1.1",
    ).add_default_tag("t", "a")
    assert opts.batch_size == 5
    assert opts.use_gzip is True
    assert opts.flush_interval == 5_000
    assert opts.precision == MILLISECOND
    assert opts.retry_buffer_limit == 5
    assert opts.retry_interval == 1_000
    assert opts.max_retry_interval == 10_000
    assert opts.max_retries == 7
    assert opts.max_retry_time == 500_000
    assert opts.exponential_base == 5
    assert opts.tls_config is tls_config
    assert opts.http_request_timeout == 50
    assert opts.application_name == "Monitor/1.1"
    assert opts.log_level == 3
    assert len(opts.default_tags) == 1


def test_add_default_tag_overwrites():
    opts = Options().add_default_tag("k", "1").add_default_tag("k", "2")
    assert opts.default_tags == {"k": "2"}


def test_default_tags_not_shared():
    a = Options().add_default_tag("x", "y")
    b = Options()
    assert b.default_tags == {}
    assert a.default_tags == {"x": "y"}


def test_user_agent():
    assert Options().user_agent() == user_agent_base()
    opts = Options(application_name="Monitor/1.1")
    assert opts.user_agent() == user_agent_base() + " Monitor/1.1"