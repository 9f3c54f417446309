from __future__ import annotations

import logging
from typing import Iterator

import pytest

from jamkit.utils.console import reconfigure_console


@pytest.fixture(autouse=True)
def reset_jamkit_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Undo logging and console setup done by a CLI invocation."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    yield

    root = logging.getLogger("jamkit")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
    reconfigure_console()
