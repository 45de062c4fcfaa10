import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.formatter",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Dropping point with an invalid timestamp",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_context_fields() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    message = formatter.format(_record(reason="invalid timestamp", timestamp="bad", dropped_count=None))

    assert message == "WARNING Dropping point with an invalid timestamp | timestamp=bad reason=invalid timestamp"


def test_formatter_without_context_is_plain() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["parameter_type"])

    assert formatter.format(_record(reason="ignored")) == "Dropping point with an invalid timestamp"
