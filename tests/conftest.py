import sys

import pytest
import questionary
from loguru import logger as log


def pytest_configure() -> None:
    log.remove()
    log.add(sys.stderr, level="DEBUG")


@pytest.fixture(autouse=True)
def _plain_questionary_print(monkeypatch: pytest.MonkeyPatch):
    """Styled output needs a real terminal; print plain text under pytest."""
    monkeypatch.setattr(questionary, "print", lambda text, **_: print(text))
