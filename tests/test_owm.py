import pytest

from poshprompt.environment import MemoryCache, Properties
from poshprompt.owm import APPID_SETTING, Owm

OWM_API_URL = "http://api.openweathermap.org/data/2.5/weather?q=AMSTERDAM,NL&units=metric&appid=placeholder"


class FakeEnv:
    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.memory = MemoryCache()
        self.requested = []

    def do_get(self, url, timeout):
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        return self.responses[url]

    def cache(self):
        return self.memory


def make_props(**extra):
    values = {"location": "AMSTERDAM,NL", "units": "metric"}
    values[APPID_SETTING] = "placeholder"
    values.update(extra)
    return Properties(values=values)


def response_for(icon):
    return f'{{"weather":[{{"icon":"{icon}"}}],"main":{{"temp":20}}}}'.encode()


def test_single_sunny_display():
    env = FakeEnv({OWM_API_URL: b'{"weather":[{"icon":"01d"}],"main":{"temp":20}}'})
    owm = Owm(make_props(cache_timeout=0), env)
    assert owm.enabled() is True
    assert owm.string() == "\ufa98 (20°C)"


def test_single_error_in_retrieving_data():
    env = FakeEnv(error=OSError("Something went wrong"))
    owm = Owm(make_props(cache_timeout=0), env)
    assert owm.enabled() is False


def test_invalid_json_disables():
    env = FakeEnv({OWM_API_URL: b"nonsense"})
    owm = Owm(make_props(cache_timeout=0), env)
    assert owm.enabled() is False


ICON_CASES = [
    ("01d", "\ufa98"), ("02d", "\ufa94"), ("03d", "\ue33d"), ("04d", "\ue312"),
    ("09d", "\ufa95"), ("10d", "\ue308"), ("11d", "\ue31d"), ("13d", "\ue31a"),
    ("50d", "\ue313"),
    ("01n", "\ufa98"), ("02n", "\ufa94"), ("03n", "\ue33d"), ("04n", "\ue312"),
    ("09n", "\ufa95"), ("10n", "\ue308"), ("11n", "\ue31d"), ("13n", "\ue31a"),
    ("50n", "\ue313"),
]


@pytest.mark.parametrize("icon_id, expected_icon", ICON_CASES)
def test_icons(icon_id, expected_icon):
    env = FakeEnv({OWM_API_URL: response_for(icon_id)})
    owm = Owm(make_props(cache_timeout=0), env)
    owm.set_status()
    assert owm.string() == f"{expected_icon} (20°C)"


@pytest.mark.parametrize("icon_id, expected_icon", ICON_CASES)
def test_icons_with_hyperlink(icon_id, expected_icon):
    env = FakeEnv({OWM_API_URL: response_for(icon_id)})
    owm = Owm(make_props(cache_timeout=0, enable_hyperlink=True), env)
    owm.set_status()
    assert owm.string() == f"[{expected_icon} (20°C)]({OWM_API_URL})"


def test_from_cache():
    env = FakeEnv(error=OSError("network must not be used"))
    env.memory.set("owm_response", response_for("01d").decode(), 10)
    env.memory.set("owm_url", OWM_API_URL, 10)
    owm = Owm(make_props(), env)
    owm.set_status()
    assert owm.string() == "\ufa98 (20°C)"
    assert env.requested == []


def test_from_cache_with_hyperlink():
    env = FakeEnv(error=OSError("network must not be used"))
    env.memory.set("owm_response", response_for("01d").decode(), 10)
    env.memory.set("owm_url", OWM_API_URL, 10)
    owm = Owm(make_props(enable_hyperlink=True), env)
    owm.set_status()
    assert owm.string() == f"[\ufa98 (20°C)]({OWM_API_URL})"


def test_fetch_fills_cache():
    env = FakeEnv({OWM_API_URL: response_for("10d")})
    owm = Owm(make_props(), env)
    report = owm.get_result()
    assert report.temperature == 20.0
    assert report.type_ids == ["10d"]
    assert env.memory.get("owm_url") == OWM_API_URL
    assert env.memory.get("owm_response") == response_for("10d").decode()


def test_zero_cache_timeout_leaves_cache_empty():
    env = FakeEnv({OWM_API_URL: response_for("10d")})
    Owm(make_props(cache_timeout=0), env).get_result()
    assert env.memory.get("owm_response") is None


def test_standard_units_and_fractional_temperature():
    url = "http://api.openweathermap.org/data/2.5/weather?q=AMSTERDAM,NL&units=standard&appid=placeholder"
    env = FakeEnv({url: b'{"weather":[{"icon":"01d"}],"main":{"temp":293.55}}'})
    owm = Owm(make_props(units="standard", cache_timeout=0), env)
    assert owm.enabled() is True
    assert owm.string() == "\ufa98 (293.55°K)"


def test_imperial_units():
    url = "http://api.openweathermap.org/data/2.5/weather?q=AMSTERDAM,NL&units=imperial&appid=placeholder"
    env = FakeEnv({url: response_for("01d")})
    owm = Owm(make_props(units="imperial", cache_timeout=0), env)
    owm.set_status()
    assert owm.string() == "\ufa98 (20°F)"


def test_no_conditions_disables():
    env = FakeEnv({OWM_API_URL: b'{"weather":[],"main":{"temp":20}}'})
    owm = Owm(make_props(cache_timeout=0), env)
    assert owm.enabled() is False