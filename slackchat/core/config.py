# slackchat/core/config.py
import os, json
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

DEFAULT_PATH = os.path.join(os.path.expanduser("~"), ".slack-chat.json")
DEFAULT_HISTORY_DIR = os.path.join(os.path.expanduser("~"), ".slack-chat-history")

@dataclass
class Config:
    workspaces: Dict[str, Dict[str, str]] = field(default_factory=dict)   # team -> {"token", "cookie"}
    history_dir: str = DEFAULT_HISTORY_DIR
    log_level: str = "INFO"
    poll_interval: float = 2.0
    settle_delay: float = 0.5
    page_size: int = 20
    request_timeout: float = 30.0

    @staticmethod
    def load(path: str = DEFAULT_PATH) -> "Config":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            data = {}
        except (OSError, ValueError) as e:
            logging.warning(f"Ignoring unreadable config {path}: {e}")
            data = {}
        if not isinstance(data, dict):
            data = {}
        return Config(
            workspaces={str(k): dict(v) for k, v in (data.get("workspaces") or {}).items() if isinstance(v, dict)},
            history_dir=os.path.expanduser(str(data.get("history_dir", DEFAULT_HISTORY_DIR))),
            log_level=str(data.get("log_level", "INFO")).upper(),
            poll_interval=float(data.get("poll_interval", 2.0)),
            settle_delay=float(data.get("settle_delay", 0.5)),
            page_size=int(data.get("page_size", 20)),
            request_timeout=float(data.get("request_timeout", 30.0)),
        )

    def credentials_for(self, team: str) -> Optional[Dict[str, str]]:
        creds = self.workspaces.get(team)
        if creds and creds.get("token"):
            return creds
        token = os.environ.get("SLACK_TOKEN")
        if token:
            return {"token": token}
        return None

    def history_path(self, team: str, channel_id: str) -> str:
        return os.path.join(self.history_dir, f"{team}-{channel_id}.history")


def apply_to_state(cfg: "Config", state) -> None:
    state.poll_interval = cfg.poll_interval
    state.settle_delay = cfg.settle_delay


def setup_logging(cfg: "Config") -> None:
    """Configures application-wide logging. The terminal belongs to the UI."""
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format='%(asctime)s %(levelname)s [%(threadName)s] %(message)s',
        filename=os.path.join(cfg.history_dir, 'slack-chat.log'),
        filemode='w'
    )
