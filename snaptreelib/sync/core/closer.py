"""Scoped release of store resources."""

from typing import Any, List, TypeVar

from ..._common.errors import ResourceReleaseError
from ..._common.log import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class Closer:
    """Registry of closeable resources released together.

    Resources close in reverse registration order. ``close()`` may be called
    any number of times; each call closes what was registered since the
    previous one. Every resource is attempted even if an earlier one fails.
    """

    def __init__(self):
        self._resources: List[Any] = []

    def register(self, resource: T) -> T:
        """Register ``resource`` (anything with a ``close()`` method) and return it."""
        self._resources.append(resource)
        return resource

    @property
    def pending(self) -> int:
        """Number of resources registered and not yet closed."""
        return len(self._resources)

    def close(self) -> None:
        """Close every registered resource.

        Raises:
            ResourceReleaseError: If any resource failed to close
        """
        errors = []
        while self._resources:
            resource = self._resources.pop()
            try:
                resource.close()
            except Exception as e:
                logger.warning("resource_close_failed", resource=repr(resource), error=str(e))
                errors.append(e)
        if errors:
            raise ResourceReleaseError(errors)

    def __enter__(self) -> 'Closer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return None
