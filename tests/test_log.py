"""Tests for log output"""

import io

import pytest
from rich.console import Console

from sglang_edge.log import Logger


def make(level):
    buf = io.StringIO()
    return Logger(level, console=Console(file=buf, width=120)), buf


def test_tags():
    logger, buf = make("info")
    logger.info("hello")
    logger.warn("careful")
    logger.error("broken [x]")
    lines = buf.getvalue().splitlines()
    assert lines == ["[INFO] hello", "[WARN] careful", "[ERROR] broken [x]"]


def test_level_filtering():
    logger, buf = make("warning")
    logger.debug("d")
    logger.info("i")
    logger.warn("w")
    logger.error("e")
    assert buf.getvalue().splitlines() == ["[WARN] w", "[ERROR] e"]


def test_success_always_shown():
    logger, buf = make("error")
    logger.success("done")
    assert buf.getvalue().strip() == "[INFO] done ✓"


def test_colored_on_terminal():
    buf = io.StringIO()
    logger = Logger("info", console=Console(file=buf, force_terminal=True, color_system="standard"))
    logger.error("x")
    assert "\x1b[31m" in buf.getvalue()


def test_unknown_level():
    with pytest.raises(ValueError):
        Logger("loud")


def test_warn_is_an_alias():
    logger, buf = make("warn")
    logger.info("i")
    logger.warn("w")
    assert buf.getvalue().splitlines() == ["[WARN] w"]
