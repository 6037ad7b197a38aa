# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Optional

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from teamline import configuration
from teamline.model.timeline import RangeSize

logger = logging.getLogger(__name__)

POSITIVE_INT_KEYS = (
    "member_batch_size",
    "history_batch_size",
    "issues_page_size",
    "history_page_size",
    "request_timeout",
)


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        self._config = load(configuration.APP_CONFIG_PATH.read_text(), Loader=Loader)

        if self._config is None:
            raise ValueError()

        # Back-fill keys added after the file was first written
        for key, value in configuration.get_default_configuration().items():
            if key not in self._config:
                self._config[key] = value  # type: ignore[literal-required]

        # A hand-edited file may hold sizes that would stall the fetch pipeline
        defaults = configuration.get_default_configuration()
        for key in POSITIVE_INT_KEYS:
            value = self._config[key]  # type: ignore[literal-required]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                logger.warning(
                    "Invalid %s %r in %s, using %r",
                    key,
                    value,
                    configuration.APP_CONFIG_PATH,
                    defaults[key],  # type: ignore[literal-required]
                )
                self._config[key] = defaults[key]  # type: ignore[literal-required]

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.APP_CONFIG_PATH.write_text(dump(dict(config), Dumper=Dumper))

    def flush(self) -> bool:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False
            return True
        return False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        api_url: Optional[str] = None,
        api_key_env_var: Optional[str] = None,
        api_key: Optional[str] = None,
        remove_api_key: bool = False,
        request_timeout: Optional[int] = None,
        member_batch_size: Optional[int] = None,
        history_batch_size: Optional[int] = None,
        issues_page_size: Optional[int] = None,
        history_page_size: Optional[int] = None,
        started_after_lookback_days: Optional[int] = None,
        default_range_size: Optional[RangeSize] = None,
        default_team: Optional[str] = None,
        remove_default_team: bool = False,
        log_level: Optional[str] = None,
    ) -> None:
        for name, value in (
            ("member_batch_size", member_batch_size),
            ("history_batch_size", history_batch_size),
            ("issues_page_size", issues_page_size),
            ("history_page_size", history_page_size),
            ("request_timeout", request_timeout),
        ):
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be > 0")
        if started_after_lookback_days is not None and started_after_lookback_days < 0:
            raise ValueError("started_after_lookback_days must be >= 0")

        self.is_dirty = True

        if api_url is not None:
            self.config["api_url"] = api_url
        if api_key_env_var is not None:
            self.config["api_key_env_var"] = api_key_env_var
        if api_key is not None:
            self.config["api_key"] = api_key
        if remove_api_key:
            self.config["api_key"] = None
        if request_timeout is not None:
            self.config["request_timeout"] = request_timeout
        if member_batch_size is not None:
            self.config["member_batch_size"] = member_batch_size
        if history_batch_size is not None:
            self.config["history_batch_size"] = history_batch_size
        if issues_page_size is not None:
            self.config["issues_page_size"] = issues_page_size
        if history_page_size is not None:
            self.config["history_page_size"] = history_page_size
        if started_after_lookback_days is not None:
            self.config["started_after_lookback_days"] = started_after_lookback_days
        if default_range_size is not None:
            self.config["default_range_size"] = default_range_size
        if default_team is not None:
            self.config["default_team"] = default_team
        if remove_default_team:
            self.config["default_team"] = None
        if log_level is not None:
            self.config["log_level"] = log_level.upper()


CONFIGURATION_REPO = ConfigurationRepository()
