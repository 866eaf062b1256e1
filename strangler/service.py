"""Operation discovery and invocation for wrapped services.

A service is either an object whose public methods are async, or a mapping
of operation name to async callable. Operations are collected once, when a
proxy is built; the proxy never looks names up dynamically afterwards.
"""

import inspect
from typing import Any, Mapping

from strangler.exceptions import NotAsyncOperationError
from strangler.types import AsyncOperation, CallArguments


def collect_operations(implementation: Any) -> dict[str, AsyncOperation]:
    """Return the callable operations an implementation exposes.

    Mappings contribute every callable value. Objects contribute public
    (non-underscore) callable attributes; nested classes are skipped.
    ``None`` yields no operations, which makes every call use the other
    implementation.
    """
    if implementation is None:
        return {}
    if isinstance(implementation, Mapping):
        return {
            str(name): operation
            for name, operation in implementation.items()
            if callable(operation)
        }

    operations: dict[str, AsyncOperation] = {}
    for name in dir(implementation):
        if name.startswith("_"):
            continue
        attribute = getattr(implementation, name, None)
        if callable(attribute) and not inspect.isclass(attribute):
            operations[name] = attribute
    return operations


async def invoke(method_name: str, operation: AsyncOperation, parameters: CallArguments) -> Any:
    """Call ``operation`` with the original arguments and await its result.

    Raises:
        NotAsyncOperationError: If the operation returned a non-awaitable.
    """
    pending = operation(*parameters.args, **parameters.kwargs)
    if not inspect.isawaitable(pending):
        raise NotAsyncOperationError(method_name, pending)
    return await pending
