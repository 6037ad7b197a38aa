# SPDX-License-Identifier: MIT

from typing import Literal, NotRequired, Optional, TypedDict

import platformdirs

APP_NAME = "teamline"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"

DEFAULT_API_URL = "https://api.linear.app/graphql"
DEFAULT_API_KEY_ENV_VAR = "LINEAR_API_KEY"


class Configuration(TypedDict):
    api_url: str
    api_key_env_var: str
    api_key: Optional[str]
    request_timeout: int
    member_batch_size: int
    history_batch_size: int
    issues_page_size: int
    history_page_size: int
    started_after_lookback_days: int
    default_range_size: Literal["1w", "2w", "1m", "3m"]
    default_team: NotRequired[Optional[str]]
    log_level: NotRequired[str]


def get_default_configuration() -> Configuration:
    return {
        "api_url": DEFAULT_API_URL,
        "api_key_env_var": DEFAULT_API_KEY_ENV_VAR,
        "api_key": None,
        "request_timeout": 30,
        # Linear rate limits: members fan out 3 at a time, histories 10 at a time
        "member_batch_size": 3,
        "history_batch_size": 10,
        "issues_page_size": 50,
        "history_page_size": 20,
        "started_after_lookback_days": 7,
        "default_range_size": "1w",
        "default_team": None,
        "log_level": "WARNING",
    }
