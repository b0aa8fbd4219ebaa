"""Core types shared by every pipeline step."""

from .config import ConfigError, RunnerConfig, load_config, load_config_or_default
from .errors import ErrorCode, PipelineError, exit_code_for, missing_option
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "RunnerConfig",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    "PipelineError",
    "exit_code_for",
    "missing_option",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
