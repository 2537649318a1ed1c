"""Base class for domain ports (interfaces implemented by infrastructure adapters)."""

from typing import Protocol


class Port(Protocol):
    """Marker base for ports.

    Ports are declared as ``Protocol`` subclasses in the domain layer and
    implemented by adapters in ``heimdall.infrastructure``.
    """


class UnitOfWork(Port, Protocol):
    """Transaction boundary for the current request.

    Pending writes are also committed when the request scope closes, which
    happens after the response is sent. Call ``commit`` before handing the
    caller anything that assumes those writes are durable.
    """

    async def commit(self) -> None:
        """Make pending writes durable.

        Raises:
            StorageUnavailableError: If the store rejects the commit
        """
        ...
