import pytest

from catch_models import CatchEvent


@pytest.fixture
def hyperdash_events():
    # The second fruit is only reachable through the hyperdash of the first.
    return [
        CatchEvent(x=0.1, time=1000.0, hyperdash_target=0.9),
        CatchEvent(x=0.9, time=1010.0),
    ]


@pytest.fixture(autouse=True)
def isolated_config_environment(monkeypatch):
    for name in (
        "CATCH_AUTOPLAY_CONFIG_PATH",
        "CATCH_AUTOPLAY_DASH_SPEED",
        "CATCH_AUTOPLAY_CATCHER_HALF_WIDTH",
        "CATCH_AUTOPLAY_START_TIME",
        "CATCH_AUTOPLAY_OUTPUT_INDENT",
        "CATCH_AUTOPLAY_OUTPUT_INCLUDE_SCORES",
        "CATCH_AUTOPLAY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
