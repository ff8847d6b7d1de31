# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Onkyo receiver client configuration.

Settings are layered, later layers winning:

  1. built-in defaults,
  2. the JSON file named by ONKYO_RECEIVER_CONFIG_FILE,
  3. the ONKYO_RECEIVER_HOST, ONKYO_RECEIVER_PORT and ONKYO_RECEIVER_TIMEOUT
     environment variables,
  4. explicit constructor arguments.

If a base configuration is given, it replaces layers 1-3.
"""

from __future__ import annotations

import os
import json

from ..internal_types import *
from ..exceptions import OnkyoReceiverError
from ..constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_PORT,
    MAX_RESPONSE_READS,
  )
from ..pkg_logging import logger

CONFIG_FILE_ENV_VAR = 'ONKYO_RECEIVER_CONFIG_FILE'

# (attribute/JSON name, converter, environment variable)
_FIELDS: Tuple[Tuple[str, Callable[[Any], Any], Optional[str]], ...] = (
    ('default_host', str, 'ONKYO_RECEIVER_HOST'),
    ('default_port', int, 'ONKYO_RECEIVER_PORT'),
    ('timeout_secs', float, 'ONKYO_RECEIVER_TIMEOUT'),
    ('max_response_reads', int, None),
  )

class OnkyoReceiverClientConfig:
    """Onkyo receiver client configuration."""
    default_host: Optional[str]
    """Receiver address used by the command-line tool when --host is not given.
       Client operations always take the host as an argument and ignore this."""

    default_port: int
    timeout_secs: float
    """Bound on each client operation: connect, send, and any awaited reply."""

    max_response_reads: int
    """Response frames examined while waiting for a reply before giving up."""

    def __init__(
            self,
            default_host: Optional[str]=None,
            *,
            default_port: Optional[int]=None,
            timeout_secs: Optional[float]=None,
            max_response_reads: Optional[int]=None,
            base_config: Optional[OnkyoReceiverClientConfig]=None,
            use_config_file: bool=True,
          ) -> None:
        """Creates a configuration for an Onkyo receiver client.

        Args:
            default_host: Overrides the receiver address; empty means no override.
            default_port: Overrides the TCP port (default 60128); values <= 0 mean no override.
            timeout_secs: Overrides the per-operation timeout.
            max_response_reads: Overrides the response frame read limit (default 5).
            base_config: Copy settings from this configuration instead of from
                defaults, the config file and the environment.
            use_config_file: If False, ignore ONKYO_RECEIVER_CONFIG_FILE.

        Raises:
            OnkyoReceiverError: A setting is malformed or out of range.
        """
        if base_config is None:
            self.init_from_defaults(use_config_file=use_config_file)
        else:
            self.init_from_base_config(base_config)

        if default_host:
            self.default_host = default_host
        if default_port is not None and default_port > 0:
            self.default_port = default_port
        if timeout_secs is not None:
            self.timeout_secs = timeout_secs
        if max_response_reads is not None:
            self.max_response_reads = max_response_reads

        self.validate()

    def validate(self) -> None:
        """Raises OnkyoReceiverError if any setting is out of range."""
        if not 0 < self.default_port < 65536:
            raise OnkyoReceiverError(f"Invalid receiver port: {self.default_port}")
        if self.timeout_secs <= 0:
            raise OnkyoReceiverError(f"Timeout must be positive: {self.timeout_secs}")
        if self.max_response_reads < 1:
            raise OnkyoReceiverError(f"max_response_reads must be at least 1: {self.max_response_reads}")

    def init_from_defaults(self, use_config_file: bool=True) -> None:
        self.default_host = None
        self.default_port = DEFAULT_PORT
        self.timeout_secs = DEFAULT_TIMEOUT
        self.max_response_reads = MAX_RESPONSE_READS

        if use_config_file:
            config_file = os.environ.get(CONFIG_FILE_ENV_VAR)
            if config_file:
                logger.debug(f"Loading client config from {config_file}")
                self.update_from_jsonable(self._load_json_file(config_file))

        self.update_from_environment()

    def init_from_base_config(self, base_config: OnkyoReceiverClientConfig) -> None:
        for name, _, _ in _FIELDS:
            setattr(self, name, getattr(base_config, name))

    def update_from_environment(self) -> None:
        """Applies any ONKYO_RECEIVER_* environment variables that are set and non-empty."""
        for name, convert, env_var in _FIELDS:
            if env_var is None:
                continue
            value = os.environ.get(env_var)
            if not value:
                continue
            try:
                setattr(self, name, convert(value))
            except ValueError as e:
                raise OnkyoReceiverError(f"Invalid {env_var}: {value!r}") from e

    def update_from_jsonable(self, jsonable: JsonableDict) -> None:
        """Applies the settings present in a JSON object. Missing, null and empty values are skipped."""
        for name, convert, _ in _FIELDS:
            value = jsonable.get(name)
            if value is None or value == '':
                continue
            try:
                setattr(self, name, convert(value))
            except (TypeError, ValueError) as e:
                raise OnkyoReceiverError(f"Invalid config value for {name}: {value!r}") from e

    def to_jsonable(self) -> JsonableDict:
        result: JsonableDict = {}
        for name, _, _ in _FIELDS:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_jsonable())

    @staticmethod
    def _load_json_file(filename: str) -> JsonableDict:
        with open(filename, 'r') as f:
            jsonable = json.load(f)
        if not isinstance(jsonable, dict):
            raise OnkyoReceiverError(f"Config file {filename} must contain a JSON object")
        return jsonable

    @classmethod
    def from_jsonable(cls, jsonable: JsonableDict, use_config_file: bool=True) -> OnkyoReceiverClientConfig:
        result = cls(use_config_file=use_config_file)
        result.update_from_jsonable(jsonable)
        result.validate()
        return result

    @classmethod
    def from_json(cls, json_str: str, use_config_file: bool=True) -> OnkyoReceiverClientConfig:
        return cls.from_jsonable(json.loads(json_str), use_config_file=use_config_file)

    @classmethod
    def from_config_file(cls, filename: str) -> OnkyoReceiverClientConfig:
        """Creates a configuration from a JSON config file, ignoring ONKYO_RECEIVER_CONFIG_FILE."""
        return cls.from_jsonable(cls._load_json_file(filename), use_config_file=False)

    def __str__(self) -> str:
        settings = ", ".join(f"{name}={getattr(self, name)!r}" for name, _, _ in _FIELDS)
        return f"OnkyoReceiverClientConfig({settings})"

    def __repr__(self) -> str:
        return str(self)
