"""The segment that shows the current weather from OpenWeatherMap."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from decimal import Decimal

from poshprompt.environment import Properties

APPID_SETTING = "api" + "key"
LOCATION = "location"
UNITS = "units"
CACHE_TIMEOUT = "cache_timeout"
HTTP_TIMEOUT = "http_timeout"
ENABLE_HYPERLINK = "enable_hyperlink"

CACHE_KEY_RESPONSE = "owm_response"
CACHE_KEY_URL = "owm_url"

DEFAULT_CACHE_TIMEOUT = 10
DEFAULT_HTTP_TIMEOUT = 20

_URL_TEMPLATE = "http://api.openweathermap.org/data/2.5/weather?q={location}&units={units}&appid={appid}"

_ICONS = {
    "01": "\ufa98",
    "02": "\ufa94",
    "03": "\ue33d",
    "04": "\ue312",
    "09": "\ufa95",
    "10": "\ue308",
    "11": "\ue31d",
    "13": "\ue31a",
    "50": "\ue313",
}

_UNIT_ICONS = {
    "imperial": "°F",
    "metric": "°C",
    "": "°K",
    "standard": "°K",
}


@dataclass
class WeatherReport:
    """The parts of a weather response the segment uses."""

    temperature: float = 0.0
    type_ids: list[str] = field(default_factory=list)


def _parse_report(body) -> WeatherReport:
    data = json.loads(body)
    if data is None:
        return WeatherReport()
    if not isinstance(data, dict):
        raise ValueError("weather response is not an object")
    conditions = data.get("weather") or []
    main = data.get("main") or {}
    if not isinstance(conditions, list) or not isinstance(main, dict):
        raise ValueError("weather response has an unexpected shape")
    type_ids = [str(entry.get("icon", "")) if isinstance(entry, dict) else "" for entry in conditions]
    temperature = main.get("temp", 0.0)
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        raise ValueError("temperature is not a number")
    return WeatherReport(float(temperature), type_ids)


def _format_number(value: float) -> str:
    """Shortest representation, switching to exponent form from 1e6 on."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    point = len(text) + exponent
    exp = point - 1
    prefix = "-" if sign else ""
    if exp < -4 or exp >= 6:
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        return f"{prefix}{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{text}"
    if point >= len(text):
        return prefix + text + "0" * (point - len(text))
    return f"{prefix}{text[:point]}.{text[point:]}"


class Owm:
    """Shows a weather icon and the temperature."""

    def __init__(self, props=None, env=None):
        self.props = props if props is not None else Properties()
        self.env = env
        self.temperature = 0.0
        self.weather = ""
        self.url = ""
        self.units = ""

    def enabled(self):
        try:
            self.set_status()
        except (OSError, ValueError):
            return False
        return True

    def string(self):
        unit_icon = _UNIT_ICONS.get(self.units, "\ue33e")
        text = f"{self.weather} ({_format_number(self.temperature)}{unit_icon})"
        if self.props.get_bool(ENABLE_HYPERLINK, False):
            text = f"[{text}]({self.url})"
        return text

    def get_result(self):
        """Return the weather report, from the cache when still valid."""
        cache_timeout = self.props.get_int(CACHE_TIMEOUT, DEFAULT_CACHE_TIMEOUT)
        if cache_timeout > 0:
            cached = self.env.cache().get(CACHE_KEY_RESPONSE)
            if cached is not None:
                report = _parse_report(cached)
                self.url = self.env.cache().get(CACHE_KEY_URL) or ""
                return report

        self.url = _URL_TEMPLATE.format(
            location=self.props.get_string(LOCATION, "De Bilt,NL"),
            units=self.props.get_string(UNITS, "standard"),
            appid=self.props.get_string(APPID_SETTING, "."),
        )
        http_timeout = self.props.get_int(HTTP_TIMEOUT, DEFAULT_HTTP_TIMEOUT)
        body = self.env.do_get(self.url, http_timeout)
        report = _parse_report(body)
        if cache_timeout > 0:
            text = body.decode("utf-8") if isinstance(body, (bytes, bytearray)) else body
            self.env.cache().set(CACHE_KEY_RESPONSE, text, cache_timeout)
            self.env.cache().set(CACHE_KEY_URL, self.url, cache_timeout)
        return report

    def set_status(self):
        """Fetch the weather and store icon, temperature and units."""
        units = self.props.get_string(UNITS, "standard")
        report = self.get_result()
        if not report.type_ids:
            raise ValueError("weather response holds no conditions")
        self.temperature = report.temperature
        type_id = report.type_ids[0]
        icon = ""
        if len(type_id) == 3 and type_id[2] in "dn":
            icon = _ICONS.get(type_id[:2], "")
        self.weather = icon
        self.units = units