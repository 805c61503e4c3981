"""Segments that show the track playing in a music player."""

from __future__ import annotations

import csv
import io
import json
from enum import Enum

from poshprompt.environment import (
    DARWIN_PLATFORM,
    WINDOWS_PLATFORM,
    CommandError,
    Properties,
)

PLAYING_ICON = "playing_icon"
PAUSED_ICON = "paused_icon"
STOPPED_ICON = "stopped_icon"
TRACK_SEPARATOR = "track_separator"
API_URL = "api_url"
HTTP_TIMEOUT = "http_timeout"
DEFAULT_HTTP_TIMEOUT = 20

_TASKLIST = ("tasklist.exe", "/V", "/FI", "Imagename eq Spotify.exe", "/FO", "CSV", "/NH")
_WINDOW_TITLE_REGEX = r"^(Spotify.*)|(.*\s-\s.*)$"


class PlayStatus(Enum):
    """State of a music player."""

    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


def _render(props, status, artist, track) -> str:
    if status is PlayStatus.STOPPED:
        return props.get_string(STOPPED_ICON, "\uF04D ")
    icon = ""
    if status is PlayStatus.PAUSED:
        icon = props.get_string(PAUSED_ICON, "\uF8E3 ")
    elif status is PlayStatus.PLAYING:
        icon = props.get_string(PLAYING_ICON, "\uE602 ")
    separator = props.get_string(TRACK_SEPARATOR, " - ")
    return f"{icon}{artist}{separator}{track}"


def _parse_status(text: str) -> PlayStatus | None:
    try:
        return PlayStatus(text)
    except ValueError:
        return None


class Spotify:
    """Shows the Spotify track, read in the way the platform allows."""

    def __init__(self, props=None, env=None, status=None, artist="", track=""):
        self.props = props if props is not None else Properties()
        self.env = env
        self.status = status
        self.artist = artist
        self.track = track

    def enabled(self):
        goos = self.env.get_runtime_goos()
        if goos == DARWIN_PLATFORM:
            return self._enabled_darwin()
        if goos == WINDOWS_PLATFORM:
            return self._enabled_windows()
        return self._enabled_wsl()

    def string(self):
        return _render(self.props, self.status, self.artist, self.track)

    def _set_playing(self, title: str) -> None:
        artist, _, track = title.partition(" - ")
        self.artist = artist
        self.track = track
        self.status = PlayStatus.PLAYING

    def _apple_script(self, command: str) -> str:
        try:
            return self.env.run_command("osascript", "-e", command)
        except CommandError:
            return ""

    def _enabled_darwin(self) -> bool:
        running = self._apple_script('application "Spotify" is running')
        if running in ("false", ""):
            return False
        state = self._apple_script('tell application "Spotify" to player state as string')
        self.status = _parse_status(state)
        if self.status is PlayStatus.STOPPED:
            return False
        self.artist = self._apple_script('tell application "Spotify" to artist of current track as string')
        self.track = self._apple_script('tell application "Spotify" to name of current track as string')
        return True

    def _enabled_windows(self) -> bool:
        try:
            title = self.env.get_window_title("spotify.exe", _WINDOW_TITLE_REGEX)
        except CommandError:
            return False
        if " - " not in title:
            self.status = PlayStatus.STOPPED
            return False
        self._set_playing(title)
        return True

    def _enabled_wsl(self) -> bool:
        if not self.env.is_wsl():
            return False
        try:
            output = self.env.run_command(*_TASKLIST)
        except CommandError:
            return False
        if output.startswith("INFO"):
            return False
        try:
            records = [row for row in csv.reader(io.StringIO(output)) if row]
        except csv.Error:
            return False
        if not records or any(len(row) != len(records[0]) for row in records):
            return False
        for record in records:
            title = record[-1]
            if " - " in title:
                self._set_playing(title)
                return True
        return False


class Ytm:
    """Shows the track playing in YouTube Music Desktop through its remote API."""

    def __init__(self, props=None, env=None, status=PlayStatus.PLAYING, artist="", track=""):
        self.props = props if props is not None else Properties()
        self.env = env
        self.status = status
        self.artist = artist
        self.track = track

    def string(self):
        return _render(self.props, self.status, self.artist, self.track)

    def enabled(self):
        # no answer means the player or its remote API is not running
        try:
            self.set_status()
        except (OSError, ValueError):
            return False
        return True

    def set_status(self):
        """Query the player and store its state, artist and track."""
        url = self.props.get_string(API_URL, "http://127.0.0.1:9863")
        http_timeout = self.props.get_int(HTTP_TIMEOUT, DEFAULT_HTTP_TIMEOUT)
        body = self.env.do_get(url + "/query", http_timeout)
        data = json.loads(body)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("player response is not an object")
        player = data.get("player") or {}
        track = data.get("track") or {}
        if not isinstance(player, dict) or not isinstance(track, dict):
            raise ValueError("player response has an unexpected shape")
        if not player.get("hasSong", False):
            self.status = PlayStatus.STOPPED
        elif player.get("isPaused", False):
            self.status = PlayStatus.PAUSED
        else:
            self.status = PlayStatus.PLAYING
        self.artist = str(track.get("author", ""))
        self.track = str(track.get("title", ""))