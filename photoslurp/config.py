import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from photoslurp.errors import ConfigError

logger = logging.getLogger(__name__)

# === COLUMN LAYOUT ===
HEADERS = [
    "provider",
    "tag",
    "datetime",
    "username",
    "usable_tag",
    "image_url",
    "url",
    "image_url_s",
    "image_url_m",
    "license",
    "title",
]

# === SCOPES ===
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]

# === NETWORK ===
DEFAULT_TIMEOUT = 30  # seconds, per HTTP call
MAX_AUTH_REFRESHES = 3
MAX_BACKOFF_ATTEMPTS = 5

CSV_PREFIX = "photoslurp"


def load_user_config(path: Optional[Path]) -> dict:
    """
    Load the user's JSON config (API keys, spreadsheet id, flags).
    Fallback to an empty config if not given or not found.
    """
    if path is None:
        return {}
    path = Path(path)
    if not path.exists():
        print(f"Config file '{path}' not found. Using command line options only.")
        return {}
    with open(path, "r") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"config file '{path}' is not valid JSON: {e}") from e


def normalize_tag(tag: str) -> str:
    return tag.replace("#", "").strip()


@dataclass
class Settings:
    tags: List[str] = field(default_factory=list)
    twitter_key: Optional[str] = None
    twitter_secret: Optional[str] = None
    flickr_key: Optional[str] = None
    instagram_key: Optional[str] = None
    google_application_credentials: Optional[str] = None
    google_spreadsheet_id: Optional[str] = None
    auto_approve: bool = False
    debug: bool = False
    update_batch_size: int = 1
    output_dir: str = "."

    @property
    def use_spreadsheet(self) -> bool:
        return bool(self.google_spreadsheet_id)

    @classmethod
    def resolve(cls, tags: List[str], options: dict, user_config: dict) -> "Settings":
        """
        Build settings from command line options and the user config.
        Options that were not given (None or False) fall through to the
        config file.
        """
        values = {}
        for name in cls.__dataclass_fields__:
            if name == "tags":
                continue
            value = options.get(name)
            if value is None or value is False:
                value = user_config.get(name, value)
            if value is not None:
                values[name] = value

        if values.get("google_spreadsheet_id") and not values.get("google_application_credentials"):
            env_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
            if env_path:
                logger.info("Using Google credentials from GOOGLE_APPLICATION_CREDENTIALS")
                values["google_application_credentials"] = env_path

        settings = cls(tags=[normalize_tag(t) for t in tags], **values)
        settings.validate()
        return settings

    def validate(self):
        if not self.tags:
            raise ConfigError("you must specify at least one tag")
        if not all(self.tags):
            raise ConfigError("tags must contain more than '#' and whitespace")
        if not any([self.twitter_key, self.flickr_key, self.instagram_key]):
            raise ConfigError("you must specify at least one API key")
        if self.twitter_key and not self.twitter_secret:
            raise ConfigError("a Twitter key needs a Twitter secret")
        if bool(self.google_application_credentials) != bool(self.google_spreadsheet_id):
            raise ConfigError(
                "you must specify a Google application credentials and spreadsheet ID "
                "if you specify any of those options"
            )
        try:
            self.update_batch_size = int(self.update_batch_size)
        except (TypeError, ValueError):
            raise ConfigError("update_batch_size must be an integer")
        if self.update_batch_size < 1:
            raise ConfigError("update_batch_size must be at least 1")
