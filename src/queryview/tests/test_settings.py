import pytest

from queryview.exceptions import ConfigurationError
from queryview.predicates import SortOrder, SortType, StateFilter
from queryview.settings import Settings, ViewSettings, get_settings, load_settings


def test_defaults():
    settings = get_settings()
    assert settings == Settings()
    assert settings.view.poll_interval == 1.0
    assert settings.view.search_debounce == 0.2
    assert settings.view.reorder_interval == 5.0
    assert settings.view.max_displayed == 100
    assert set(settings.view.state_filters) == {
        StateFilter.RUNNING,
        StateFilter.QUEUED,
    }


def test_load(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        """
server:
    url: http://coordinator:8080
    user: bob
view:
    poll_interval: 2.5
    state_filters: [FINISHED]
    sort: CPU
    sort_order: ASCENDING
"""
    )
    settings = load_settings(path)
    assert isinstance(settings, Settings)
    assert settings.server.url == "http://coordinator:8080"
    assert settings.server.user == "bob"
    assert settings.server.timeout == 10.0
    assert settings.view.poll_interval == 2.5
    assert settings.view.state_filters == [StateFilter.FINISHED]
    assert settings.view.sort == SortType.CPU
    assert settings.view.sort_order == SortOrder.ASCENDING
    assert settings.view.max_displayed == 100

    assert get_settings(path) == settings


@pytest.mark.parametrize(
    "content",
    ["view:\n    sort: NOPE\n", "view:\n    max_displayed: -1\n", "other: 1\n"],
)
def test_invalid(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_settings(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        get_settings(tmp_path / "missing.yaml")


def test_negative_interval():
    with pytest.raises(ConfigurationError):
        ViewSettings(reorder_interval=-1)
