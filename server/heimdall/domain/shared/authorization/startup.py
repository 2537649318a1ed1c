"""Startup validation for handler authorization declarations."""

import logging

from heimdall.domain.shared.authorization.gate import Gate
from heimdall.domain.shared.command import CommandHandler
from heimdall.domain.shared.error import ConfigurationError
from heimdall.domain.shared.query import QueryHandler

logger = logging.getLogger(__name__)


def _check_handler_class(handler_cls: type) -> str | None:
    """Return a violation message if the handler has no gate, else None."""
    if isinstance(getattr(handler_cls, "__auth__", None), Gate):
        return None
    return f"{handler_cls.__name__} must declare __auth__ (use public() or at_least(role))"


def validate_handlers(handlers: list[type]) -> None:
    """Raise ConfigurationError listing every handler without an __auth__ gate."""
    violations = [v for v in map(_check_handler_class, handlers) if v is not None]
    if violations:
        raise ConfigurationError(
            f"Authorization validation failed for {len(violations)} handler(s):\n"
            + "\n".join(f"  - {v}" for v in violations)
        )


def validate_all_handlers() -> None:
    """Check every imported CommandHandler and QueryHandler declares a gate.

    Handlers are only seen once their module has been imported, so call this
    after the routes are registered.
    """
    handlers = [*CommandHandler.__subclasses__(), *QueryHandler.__subclasses__()]
    validate_handlers(handlers)
    logger.info("Authorization startup validation passed for %d handlers", len(handlers))
