"""Core types: configuration, results, exit codes."""

from .config import (
    ConfigError,
    Credentials,
    HttpCredentials,
    Identity,
    ReleaseConfig,
    SshCredentials,
    load_config,
)
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "Credentials",
    "HttpCredentials",
    "Identity",
    "ReleaseConfig",
    "SshCredentials",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
