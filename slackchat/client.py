# slackchat/client.py
import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from slackchat.errors import (
    AuthError,
    ChannelNotFoundError,
    RateLimitedError,
    SenderLookupError,
    StartupError,
    TransportError,
)

API_BASE = "https://slack.com/api/"

AUTH_ERRORS = {
    "not_authed", "invalid_auth", "account_inactive", "token_revoked",
    "token_expired", "missing_scope", "not_allowed_token_type", "no_permission",
    "not_in_channel", "is_archived",
}
NOT_FOUND_ERRORS = {"channel_not_found", "user_not_found"}


class SlackClient:
    """Blocking Slack Web API client for one workspace.

    Every call either returns the decoded payload or raises one of the
    ChatServiceError subclasses. Callers in the event loop must run these
    methods in an executor.
    """

    def __init__(self, team: str, token: str, cookie: Optional[str] = None,
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        if not token:
            raise StartupError(f"no API token configured for workspace '{team}'")
        self.team = team
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {token}"
        if cookie:
            self.session.cookies.set("d", cookie, domain=".slack.com")
        self._names: Dict[str, str] = {}
        self._names_lock = threading.Lock()

    @classmethod
    def from_config(cls, team: str, cfg) -> "SlackClient":
        creds = cfg.credentials_for(team)
        if not creds:
            raise StartupError(f"no credentials for workspace '{team}' in config or SLACK_TOKEN")
        return cls(team, creds["token"], cookie=creds.get("cookie"), timeout=cfg.request_timeout)

    def _call(self, method: str, http: str = "GET", **params) -> Dict[str, Any]:
        params = {k: v for k, v in params.items() if v not in (None, "")}
        try:
            if http == "POST":
                resp = self.session.post(API_BASE + method, data=params, timeout=self.timeout)
            else:
                resp = self.session.get(API_BASE + method, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"{method}: {e}") from e

        if resp.status_code == 429:
            retry = resp.headers.get("Retry-After")
            hint = f", retry after {retry}s" if retry else ""
            raise RateLimitedError(f"{method}: rate limited{hint}")
        if resp.status_code in (401, 403):
            raise AuthError(f"{method}: HTTP {resp.status_code}")
        if resp.status_code >= 400:
            raise TransportError(f"{method}: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(f"{method}: malformed response") from e

        if not data.get("ok"):
            code = data.get("error", "unknown_error")
            logging.debug(f"[slack] {method} -> {code}")
            if code in AUTH_ERRORS:
                raise AuthError(f"{method}: {code}")
            if code in NOT_FOUND_ERRORS:
                raise ChannelNotFoundError(f"{method}: {code}")
            if code == "ratelimited":
                raise RateLimitedError(f"{method}: {code}")
            raise TransportError(f"{method}: {code}")
        return data

    def channel_info(self, channel_id: str) -> Dict[str, Any]:
        channel = self._call("conversations.info", channel=channel_id).get("channel")
        if not isinstance(channel, dict):
            raise TransportError("conversations.info: response has no channel")
        return channel

    def history(self, channel_id: str, oldest: str = "", latest: str = "", limit: int = 20) -> List[Dict[str, Any]]:
        """Messages newest first, strictly newer than ``oldest`` when given."""
        data = self._call("conversations.history", channel=channel_id, oldest=oldest, latest=latest, limit=limit)
        return list(data.get("messages") or [])

    def send_message(self, channel_id: str, text: str) -> str:
        data = self._call("chat.postMessage", http="POST", channel=channel_id, text=text)
        return str(data.get("ts", ""))

    def username_for_message(self, message: Dict[str, Any]) -> str:
        user_id = message.get("user")
        if user_id:
            return self._user_name(user_id)
        if message.get("username"):
            return message["username"]
        bot = message.get("bot_profile") or {}
        if bot.get("name"):
            return bot["name"]
        raise SenderLookupError(f"no sender on message {message.get('ts')}")

    def _user_name(self, user_id: str) -> str:
        with self._names_lock:
            if user_id in self._names:
                return self._names[user_id]
        try:
            user = self._call("users.info", user=user_id).get("user")
        except (TransportError, AuthError, ChannelNotFoundError) as e:
            raise SenderLookupError(f"{user_id}: {e}") from e
        if not isinstance(user, dict):
            raise SenderLookupError(f"{user_id}: response has no user")
        profile = user.get("profile") or {}
        name = profile.get("display_name") or profile.get("real_name") or user.get("name") or user_id
        with self._names_lock:
            self._names[user_id] = name
        return name
