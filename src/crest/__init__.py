"""Crest: declare REST resources as a tree and call them with CRUD verbs."""

from __future__ import annotations

from .client import Crest
from .config import CrestConfig
from .errors import (
    CallbackRequired,
    CrestError,
    DuplicateResource,
    HttpClientError,
    InvalidContext,
    InvalidOptions,
    InvalidParameters,
    InvalidResource,
    MergeTypeError,
    RequestTimeoutError,
    RetryableHttpError,
)
from .merge import deep_merge
from .resource import Resource
from .store import InMemoryOptionStore, OptionStore
from .transport import HttpResponse, RequestsTransport, Transport

__all__ = [
    "CallbackRequired",
    "Crest",
    "CrestConfig",
    "CrestError",
    "DuplicateResource",
    "HttpClientError",
    "HttpResponse",
    "InMemoryOptionStore",
    "InvalidContext",
    "InvalidOptions",
    "InvalidParameters",
    "InvalidResource",
    "MergeTypeError",
    "OptionStore",
    "RequestTimeoutError",
    "RequestsTransport",
    "Resource",
    "RetryableHttpError",
    "Transport",
    "deep_merge",
]
