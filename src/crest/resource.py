"""Resource nodes of a Crest client.

Each resource owns a URL path segment and an option tree (headers, params,
query) layered over the options of its ancestors. Resources expose the CRUD
verbs, which build the URL, resolve the options and hand the request to the
client's transport.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence, Union

from .errors import (
    CallbackRequired,
    DuplicateResource,
    InvalidContext,
    InvalidOptions,
    InvalidParameters,
    InvalidResource,
)
from .merge import deep_merge
from .options import CATEGORIES, empty_options, process_options

if TYPE_CHECKING:
    from .client import Crest
    from .transport import HttpResponse, Transport

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

Callback = Callable[[Union[Exception, None], Union["HttpResponse", None]], None]

_UNSET: Any = object()


def _is_client(context: Any) -> bool:
    from .client import Crest

    return isinstance(context, Crest)


def _trim_path(path: str | None) -> str:
    """Strip one leading and one trailing slash."""
    if not path:
        return ""
    if path.startswith("/"):
        path = path[1:]
    if path.endswith("/"):
        path = path[:-1]
    return path


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def deliver(
    transport: Transport,
    method: str,
    url: str,
    options: Mapping[str, Any],
    callback: Callback,
) -> None:
    """Run a request and report its outcome to ``callback``.

    Exceptions raised by the callback are logged; nothing else observes
    the worker thread.
    """
    error: Exception | None = None
    response: HttpResponse | None = None
    try:
        result = transport.call(method, url, options)
    except Exception as exc:
        error = exc
    else:
        _log_result(method, url, result)
        if result.ok:
            response = result.value
        else:
            error = result.error

    try:
        callback(error, response)
    except Exception:
        logger.exception("Callback for %s %s raised", method, url)


def _log_result(method: str, url: str, result: Any) -> None:
    meta = getattr(result, "meta", None) or {}
    logger.debug(
        "%s %s -> status=%s elapsed_s=%s error=%s",
        method,
        meta.get("url", url),
        meta.get("status_code"),
        meta.get("elapsed_s"),
        meta.get("final_error"),
    )


class Resource:
    """A named node in the resource tree.

    Args:
        context: The enclosing ``Crest`` client or parent ``Resource``.
        name: Attribute name of the resource on its parent.
        path: URL path segment, already trimmed.
        defaults: Option tree applied to this resource and its children.

    Raises:
        InvalidContext: If ``context`` is neither a client nor a resource.
    """

    def __init__(
        self,
        context: Crest | Resource,
        name: str = "",
        path: str = "",
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        if not isinstance(context, Resource) and not _is_client(context):
            raise InvalidContext(
                "The context passed to the Resource is invalid."
            )
        self._context = context
        self._name = name
        self._path = path
        self._defaults = deep_merge(empty_options(), defaults)
        self._overrides: dict[str, dict[str, Any]] = empty_options()
        self._children: dict[str, Resource] = {}

    def __getattr__(self, name: str) -> Resource:
        children = self.__dict__.get("_children")
        if children is not None and name in children:
            return children[name]
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {name!r}"
        )

    def __contains__(self, name: object) -> bool:
        return name in self._children

    def __repr__(self) -> str:
        return f"<Resource {self.resource_path!r} {self.url()!r}>"

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent(self) -> Crest | Resource:
        return self._context

    @property
    def defaults(self) -> dict[str, Any]:
        return deep_merge(self._defaults)

    @property
    def children(self) -> dict[str, Resource]:
        return dict(self._children)

    @property
    def client(self) -> Crest:
        """The client at the top of this resource's ancestor chain."""
        node: Any = self
        while isinstance(node, Resource):
            node = node._context
        return node

    @property
    def resource_path(self) -> str:
        """Dotted name chain of this resource, e.g. ``__root__.posts``."""
        if isinstance(self._context, Resource):
            return f"{self._context.resource_path}.{self._name}"
        return self._name

    # Tree construction

    def add_resource(
        self,
        name: str | Sequence[Mapping[str, Any]],
        path: str | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> Any:
        """Add a child resource.

        Args:
            name: Identifier of the child; letters, digits and underscores,
                not starting with a digit. A list of mappings with ``name``
                and optional ``path``/``defaults`` adds several children.
            path: URL segment; defaults to ``name``. One leading and one
                trailing slash are removed.
            defaults: Option tree for the child.

        Returns:
            The new ``Resource``, or a list of them for the batch form.

        Raises:
            InvalidResource: If the name is not a valid identifier.
            DuplicateResource: If a sibling already uses the name.
        """
        if isinstance(name, (list, tuple)):
            return [self._add_from_mapping(entry) for entry in name]

        if not isinstance(name, str) or not NAME_PATTERN.fullmatch(name):
            raise InvalidResource(f"The resource name ({name}) is invalid.")
        if name in self._children:
            raise DuplicateResource(
                f"The resource name ({name}) is already in use."
            )

        resource = Resource(self, name, _trim_path(path) or name, defaults)
        self._children[name] = resource
        logger.debug(
            "Added resource %s at %s", resource.resource_path, resource.url()
        )
        return resource

    add_child = add_resource

    def _add_from_mapping(self, entry: Any) -> Resource:
        if not isinstance(entry, Mapping):
            raise InvalidResource(
                f"The resource definition ({entry}) is invalid."
            )
        return self.add_resource(
            entry.get("name"), entry.get("path"), entry.get("defaults")
        )

    def get_child(self, name: str) -> Resource | None:
        return self._children.get(name)

    # URLs

    def url(self, id: Any = None) -> str:
        """Build the URL of this resource, or of one item when ``id`` is set."""
        url = self._context.url()
        if self._path:
            url = f"{url}/{self._path}"
        if not _is_blank(id):
            url = f"{url}/{id}"
        return url

    build_url = url

    # Options

    def _local_overrides(self) -> Mapping[str, Any]:
        client = self.client
        if not client.uses_store:
            return self._overrides

        overrides = empty_options()
        for record in client.store.find(
            client.config.session_id, self.resource_path
        ):
            overrides.setdefault(record.category, {})[record.key] = record.value
        return overrides

    def _layers(self) -> list[Mapping[str, Any]]:
        """Option layers from the top of the tree down to this resource."""
        chain: list[Resource] = []
        node: Any = self
        while isinstance(node, Resource):
            chain.append(node)
            node = node._context

        layers: list[Mapping[str, Any]] = []
        for resource in reversed(chain):
            layers.append(resource._defaults)
            layers.append(resource._local_overrides())
        return layers

    def resolve_options(
        self, overrides: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Merge ancestor, local and call-site options, in that order."""
        return deep_merge(empty_options(), *self._layers(), overrides)

    def resolve_processed_options(
        self, overrides: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Resolve options, evaluate lazy values and serialize the query."""
        return process_options(self.resolve_options(overrides))

    @staticmethod
    def _check_category(category: str) -> None:
        if category not in CATEGORIES:
            raise InvalidOptions(
                f"Unknown option category ({category}); expected one of "
                f"{', '.join(CATEGORIES)}."
            )

    def get_option(self, category: str) -> dict[str, Any]:
        """Return the resolved mapping of one option category."""
        self._check_category(category)
        return self.resolve_options()[category]

    def set_option(self, category: str, key: str, value: Any) -> dict[str, Any]:
        """Set a local override and return the resolved category."""
        self._check_category(category)
        client = self.client
        if client.uses_store:
            client.store.set_option(
                client.config.session_id,
                self.resource_path,
                category,
                key,
                value,
            )
        else:
            self._overrides[category][key] = value
        return self.get_option(category)

    def _option(self, category: str, key: str, value: Any) -> Any:
        if value is _UNSET:
            return self.get_option(category).get(key)
        return self.set_option(category, key, value)

    def header(self, key: str, value: Any = _UNSET) -> Any:
        """Get a header, or set it when ``value`` is given.

        Setting ``None`` or ``False`` removes the header from requests made
        by this resource and its children.
        """
        return self._option("headers", key, value)

    def param(self, key: str, value: Any = _UNSET) -> Any:
        """Get a request param, or set it when ``value`` is given."""
        return self._option("params", key, value)

    def query(self, key: str, value: Any = _UNSET) -> Any:
        """Get a query parameter, or set it when ``value`` is given.

        Setting ``None`` or ``False`` removes the parameter from the query
        string.
        """
        return self._option("query", key, value)

    # Requests

    def request(
        self,
        method: str,
        id: Any = None,
        options: Mapping[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> HttpResponse | None:
        """Make an HTTP request against this resource.

        Without a callback the response is returned and transport errors are
        raised. With a callback the request runs on the client's worker pool,
        ``None`` is returned and ``callback(error, response)`` is invoked
        once the request finishes.

        Raises:
            CallbackRequired: If the client requires callbacks and none was
                given.
        """
        client = self.client
        if callback is None and client.config.require_callback:
            raise CallbackRequired(
                "Callback required to make restful requests on this client."
            )

        method = method.upper()
        url = self.url(id)
        processed = self.resolve_processed_options(options)
        logger.debug("Dispatching %s %s", method, url)

        if callback is None:
            result = client.transport.call(method, url, processed)
            _log_result(method, url, result)
            if not result.ok:
                raise result.error
            return result.value

        client.submit(
            deliver, client.transport, method, url, processed, callback
        )
        return None

    def get(
        self,
        id: Any = None,
        options: Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> HttpResponse | None:
        """Fetch one item when ``id`` is given, otherwise the collection."""
        if callable(id):
            id, options, callback = None, None, id
        if callable(options):
            options, callback = None, options
        return self.request("GET", id, options, callback)

    def list(
        self,
        options: Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> HttpResponse | None:
        return self.get(None, options, callback)

    def create(
        self,
        resource: Any,
        options: Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> HttpResponse | None:
        """POST ``resource`` as the request body."""
        if resource is None:
            raise InvalidParameters("'resource' required to create an object")
        if callable(options):
            options, callback = None, options
        options = {**(options or {}), "data": resource}
        return self.request("POST", None, options, callback)

    def update(
        self,
        id: Any,
        resource: Any,
        options: Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> HttpResponse | None:
        """PUT ``resource`` to the item identified by ``id``."""
        if _is_blank(id):
            raise InvalidParameters("'id' required to update an object")
        if resource is None:
            raise InvalidParameters("'resource' required to update an object")
        if callable(options):
            options, callback = None, options
        options = {**(options or {}), "data": resource}
        return self.request("PUT", id, options, callback)

    def remove(
        self,
        id: Any,
        options: Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> HttpResponse | None:
        """DELETE the item identified by ``id``."""
        if _is_blank(id):
            raise InvalidParameters("'id' required to remove an object")
        if callable(options):
            options, callback = None, options
        return self.request("DELETE", id, options, callback)
