# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Named operations and the commands that turn them into requests."""

import logging
import re
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ._http import HTTPRequest
from .canonical import percent_encode
from .exceptions import ConfigurationError
from .interfaces.http import QueryValue

if TYPE_CHECKING:
    from .aio import AIOHTTPClient, HTTPResponse
    from .transfer import TransferOptions

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"{([A-Za-z0-9_]+)}")
_QUERY_METHODS = ("GET", "HEAD", "DELETE")


@dataclass(kw_only=True, frozen=True)
class Operation:
    """A named request template within a service description."""

    name: str
    """The operation name commands are looked up by."""

    http_method: str = "GET"
    """HTTP method used to send the operation."""

    uri: str = "/"
    """Path relative to the service base URL. ``{name}`` placeholders are filled
    from command arguments."""

    metadata: Mapping[str, Any] = field(default_factory=dict)
    """Free-form metadata. ``class`` may name a :py:class:`Command` subclass."""


class ServiceDescription:
    """A set of operations served from a single base URL."""

    def __init__(self, *, base_url: str, operations: Iterable[Operation] = ()) -> None:
        self.base_url = base_url.rstrip("/")
        self._operations: dict[str, Operation] = {}
        for operation in operations:
            if operation.name in self._operations:
                raise ConfigurationError(
                    f"Operation {operation.name!r} is defined more than once."
                )
            self._operations[operation.name] = operation
        self._warn_on_case_collisions()

    @property
    def operations(self) -> Mapping[str, Operation]:
        return MappingProxyType(self._operations)

    def has_operation(self, name: str) -> bool:
        return name in self._operations

    def get_operation(self, name: str) -> Operation | None:
        return self._operations.get(name)

    def _warn_on_case_collisions(self) -> None:
        # Name resolution falls back to a capitalized lookup, so names that differ
        # only by case can shadow each other.
        by_folded_name: defaultdict[str, list[str]] = defaultdict(list)
        for name in self._operations:
            by_folded_name[name.lower()].append(name)
        for names in by_folded_name.values():
            if len(names) > 1:
                logger.warning(
                    "Operation names differ only by case and may resolve "
                    "ambiguously: %s",
                    ", ".join(sorted(names)),
                )


class Command:
    """An operation bound to a set of arguments."""

    def __init__(self, args: Mapping[str, QueryValue], operation: Operation) -> None:
        self.args = dict(args)
        self.operation = operation

    def prepare(self, base_url: str) -> HTTPRequest:
        """Build the request for this command.

        Arguments that fill a ``{placeholder}`` in the operation URI are removed from
        the set. The remainder are sent as query parameters for ``GET``, ``HEAD`` and
        ``DELETE``, and as a form body for every other method.

        :raises ConfigurationError: If a placeholder has no matching argument.
        """
        remaining = dict(self.args)

        def fill(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in remaining:
                raise ConfigurationError(
                    f"Missing argument {name!r} for operation {self.operation.name!r}."
                )
            return percent_encode(remaining.pop(name))

        path = _PLACEHOLDER_RE.sub(fill, self.operation.uri)
        url = f"{base_url}/{path.lstrip('/')}"
        method = self.operation.http_method.upper()

        if method in _QUERY_METHODS:
            request = HTTPRequest.create(method, url)
            for key, value in remaining.items():
                request.query.add(key, value)
            return request
        return HTTPRequest.create(method, url, form=remaining if remaining else None)

    async def execute(
        self,
        client: "AIOHTTPClient",
        base_url: str,
        *,
        transfer_options: "TransferOptions | None" = None,
    ) -> "HTTPResponse":
        """Prepare the request and send it with ``client``."""
        return await client.send(
            request=self.prepare(base_url), transfer_options=transfer_options
        )


class CommandFactory:
    """Creates commands from the operations of a :py:class:`ServiceDescription`."""

    def __init__(self, description: ServiceDescription) -> None:
        self._description = description

    def factory(
        self, name: str, args: Mapping[str, QueryValue] | None = None
    ) -> Command | None:
        """Create a command for operation ``name``.

        The name is looked up exactly first. If that fails, the name with its first
        letter upper-cased is tried. No other variants are attempted.

        :returns: The command, or ``None`` when neither lookup matches.
        """
        operation = self._description.get_operation(name)
        if operation is None:
            operation = self._description.get_operation(name[:1].upper() + name[1:])
            if operation is not None:
                logger.debug("Resolved operation %r as %r", name, operation.name)
        if operation is None:
            return None

        command_cls = operation.metadata.get("class") or Command
        if not (isinstance(command_cls, type) and issubclass(command_cls, Command)):
            raise ConfigurationError(
                f"Operation {operation.name!r} metadata class must be a Command "
                f"subclass, got {command_cls!r}."
            )
        return command_cls(args or {}, operation)
