# conftest.py
from __future__ import annotations

import os
import uuid

import pytest

from docsink.codec.json_codec import JsonCodec
from docsink.convert.converter import DataConverter
from docsink.core.config import ConverterConfig
from docsink.core.log import (
    bind_context,
    configure_from_env,
    enable_stdout_logging,
    get_logger,
    log_context,
)

_CONFIG_ENV = (
    "DOCSINK_TYPE_NAME",
    "DOCSINK_KEY_IGNORE",
    "DOCSINK_SCHEMA_IGNORE",
    "DOCSINK_JSON_KEY",
    "DOCSINK_TOPIC_KEY_IGNORE",
    "DOCSINK_TOPIC_SCHEMA_IGNORE",
)


def pytest_addoption(parser):
    parser.addoption(
        "--log-json",
        action="store_true",
        default=False,
        help="Emit docsink logs in JSON format during tests",
    )


@pytest.fixture(scope="session", autouse=True)
def _configure_docsink_logging(request):
    configure_from_env()
    prefer_json = request.config.getoption("--log-json")
    # unless enabled via env, turn stdout logging on ourselves (human-readable by default)
    if os.getenv("DOCSINK_LOG_STDOUT", "").lower() not in ("1", "true", "yes", "on"):
        enable_stdout_logging(
            level="DEBUG",
            json_output=prefer_json,
            pretty=not prefer_json,
            route_errors_to_stderr=True,
        )
    bind_context(role="pytest")


@pytest.fixture(scope="session")
def session_run_id():
    return uuid.uuid4().hex[:8]


@pytest.fixture(autouse=True)
def _test_log_context(request, session_run_id):
    log = get_logger("test")
    with log_context(pytest_nodeid=request.node.nodeid, test=request.node.name, test_run=session_run_id):
        log.debug("pytest.test.start", event="pytest.test.start")
        yield


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    if rep.when == "call":
        log = get_logger("test")
        with log_context(pytest_nodeid=item.nodeid, test=item.name):
            log.debug(
                "pytest.test.finish",
                event="pytest.test.finish",
                outcome=rep.outcome,
                duration=getattr(rep, "duration", None),
            )


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch):
    """Keep host env from leaking into ConverterConfig.load()."""
    for name in _CONFIG_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def tlog():
    return get_logger("test")


@pytest.fixture
def codec():
    return JsonCodec(schemas_enable=False)


@pytest.fixture
def converter(codec):
    return DataConverter(codec)


@pytest.fixture
def cfg():
    return ConverterConfig()
