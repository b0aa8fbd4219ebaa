"""Process and network adapters."""

from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .process import ProcessError, run, run_streaming

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "ProcessError",
    "run",
    "run_streaming",
]
