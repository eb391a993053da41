"""Unit tests for femtologging integration helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from clusternotify.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("input_level", "expected_level", "expected_invalid"),
    [
        ("warning", "WARNING", False),
        (" debug ", "DEBUG", False),
        (None, "INFO", True),
        ("", "INFO", True),
        ("loud", "INFO", True),
    ],
)
def test_normalize_log_level(
    input_level: str | None,
    expected_level: str,
    expected_invalid: bool,  # noqa: FBT001
) -> None:
    """Normalize log levels and flag invalid inputs."""
    assert normalize_log_level(input_level) == (expected_level, expected_invalid)


def test_log_info_formats_and_passes_level() -> None:
    """log_info formats messages and emits INFO level."""
    logger = _FakeLogger()

    log_info(logger, "processed %s (%d)", "UpgradeEvent", 1)

    assert logger.calls == [("INFO", "processed UpgradeEvent (1)", None, False)]


def test_log_debug_without_args_keeps_template() -> None:
    """Templates without arguments are logged verbatim."""
    logger = _FakeLogger()

    log_debug(logger, "100% literal")

    assert logger.calls == [("DEBUG", "100% literal", None, False)]


def test_log_warning_forwards_exc_info() -> None:
    """log_warning forwards exc_info to the logger."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_warning(logger, "warning: %s", "oops", exc_info=exc)

    assert logger.calls == [("WARNING", "warning: oops", exc, False)]


def test_log_error_defaults_stack_info_false() -> None:
    """log_error defaults stack_info to False."""
    logger = _FakeLogger()

    log_error(logger, "error: %s", "oops")

    assert logger.calls == [("ERROR", "error: oops", None, False)]


def test_configure_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """configure_logging passes the normalized level to basicConfig."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("clusternotify.logging.basicConfig", fake_basic_config)

    assert configure_logging("nope") == ("INFO", True)
    assert captured == {"level": "INFO", "force": False}
