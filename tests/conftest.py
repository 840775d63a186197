import pytest

from stash.store import StashStore
from stash.util import log


@pytest.fixture
def store(tmp_path):
    return StashStore.open(tmp_path / "data")


@pytest.fixture
def isolated_env(tmp_path):
    # everything the config layer looks at, pointed into tmp_path so the real
    # user's stashes & config are never touched
    home = tmp_path / "home"
    home.mkdir()
    return {
        "HOME": str(home),
        "XDG_DATA_HOME": str(tmp_path / "xdg-data"),
        "XDG_CONFIG_HOME": str(tmp_path / "xdg-config"),
    }


@pytest.fixture(autouse=True)
def restore_logging():
    # the cli reconfigures the (module global) logger on every run
    yield
    log.set_colorize(True)
    log.set_default_level("INFO")
