import logging
from collections.abc import Iterator

import pytest

from springsui.log import ROOT_LOGGER

_ENV_VARS = (
    "SUI_RPC_URL",
    "SUI_ADDRESS",
    "SPRINGSUI_PACKAGE_ID",
    "SPRINGSUI_POOL_ID",
    "SPRINGSUI_POOL_TYPE",
    "SPRINGSUI_WEIGHT_HOOK_ID",
    "SPRINGSUI_SIGNER",
    "SPRINGSUI_LOG_LEVEL",
    "SPRINGSUI_LOG_COLOR",
    "SPRINGSUI_RPC_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear springsui env vars and restore the package logger after each test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
