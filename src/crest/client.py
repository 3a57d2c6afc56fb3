"""Crest client: the root of a resource tree.

Example::

    crest = Crest({"base_url": "https://api.example.com/"})
    crest.header("X-Api-Token", "secret")
    crest.add_resource("support")
    crest.support.add_resource("tickets")
    response = crest.support.tickets.get(5)
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Mapping, Sequence

from .config import CrestConfig
from .errors import InvalidOptions
from .resource import Resource
from .store import OptionStore
from .transport import RequestsTransport, Transport

ROOT_NAME = "__root__"


class Crest:
    """Client owning the base URL and the top of the resource tree.

    Option and resource calls made on the client apply to the hidden root
    resource, so every resource added to the client inherits them.

    Args:
        options: A ``CrestConfig`` or a mapping with at least ``base_url``.
        defaults: Option tree applied to every resource.
        transport: Object performing HTTP calls; defaults to a
            ``RequestsTransport`` built from the config.
        store: Optional session option store. Requires
            ``config.session_id``.

    Raises:
        InvalidOptions: If the configuration is missing or invalid.
    """

    def __init__(
        self,
        options: CrestConfig | Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
        *,
        transport: Transport | None = None,
        store: OptionStore | None = None,
    ) -> None:
        if isinstance(options, CrestConfig):
            self._config = options
        else:
            self._config = CrestConfig.from_mapping(options)

        if store is not None and self._config.session_id is None:
            raise InvalidOptions(
                "session_id required when using an option store."
            )

        self._owns_transport = transport is None
        self._transport: Transport = (
            transport
            if transport is not None
            else RequestsTransport(self._config)
        )
        self._store = store
        self._executor: ThreadPoolExecutor | None = None
        self._root = Resource(self, ROOT_NAME, "", defaults)

    def __getattr__(self, name: str) -> Resource:
        root = self.__dict__.get("_root")
        if root is not None and name in root:
            return root.get_child(name)
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {name!r}"
        )

    def __contains__(self, name: object) -> bool:
        return name in self._root

    def __enter__(self) -> Crest:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Crest {self._config.base_url!r}>"

    @property
    def config(self) -> CrestConfig:
        return self._config

    @property
    def root(self) -> Resource:
        return self._root

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def store(self) -> OptionStore | None:
        return self._store

    @property
    def uses_store(self) -> bool:
        return self._store is not None

    @property
    def resource_path(self) -> str:
        return ""

    def url(self) -> str:
        return self._config.base_url

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future[Any]:
        """Run ``fn`` on the client's worker pool."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._config.max_workers,
                thread_name_prefix="crest",
            )
        return self._executor.submit(fn, *args)

    def close(self) -> None:
        """Wait for background requests and release the transport."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._owns_transport and isinstance(
            self._transport, RequestsTransport
        ):
            self._transport.close()

    # Proxies to the root resource

    def add_resource(
        self,
        name: str | Sequence[Mapping[str, Any]],
        path: str | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> Any:
        """Add a top level resource; see ``Resource.add_resource``."""
        return self._root.add_resource(name, path, defaults)

    def get_child(self, name: str) -> Resource | None:
        return self._root.get_child(name)

    def get_option(self, category: str) -> dict[str, Any]:
        return self._root.get_option(category)

    def set_option(self, category: str, key: str, value: Any) -> dict[str, Any]:
        return self._root.set_option(category, key, value)

    def header(self, key: str, *value: Any) -> Any:
        return self._root.header(key, *value)

    def param(self, key: str, *value: Any) -> Any:
        return self._root.param(key, *value)

    def query(self, key: str, *value: Any) -> Any:
        return self._root.query(key, *value)

    def resolve_options(
        self, overrides: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        return self._root.resolve_options(overrides)

    def resolve_processed_options(
        self, overrides: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        return self._root.resolve_processed_options(overrides)
