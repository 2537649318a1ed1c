"""Validation of post-login return targets (open-redirect defense)."""

from urllib.parse import SplitResult, urlsplit

from heimdall.domain.shared.error import BadRequestError

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _origin(url: SplitResult) -> tuple[str, str | None, int | None]:
    scheme = url.scheme.lower()
    port = url.port
    if port == _DEFAULT_PORTS.get(scheme):
        port = None
    return scheme, url.hostname, port


def validate_return_to(return_to: str | None, allowed_returns: list[str]) -> str | None:
    """Check a caller-supplied return target against the allow-list.

    The target must be an absolute URL whose scheme, host and port (a default
    port counts as none) match one allow-listed origin. A disallowed target fails
    the whole login rather than being dropped.

    Returns:
        The target unchanged, or None if none was supplied

    Raises:
        BadRequestError: If the target is malformed or not allow-listed
    """
    if not return_to:
        return None

    try:
        target = urlsplit(return_to)
        origin = _origin(target)
    except ValueError as e:
        raise BadRequestError(
            f"Invalid return url: {e}", code="invalid_return_url"
        ) from e

    if not target.scheme:
        raise BadRequestError("Invalid return url: scheme is missing", code="invalid_return_url")
    if not target.hostname:
        raise BadRequestError("Invalid return url: host is missing", code="invalid_return_url")
    if target.username is not None or target.password is not None:
        raise BadRequestError(
            "Invalid return url: credentials are not allowed", code="invalid_return_url"
        )

    for allowed in allowed_returns:
        try:
            allowed_origin = _origin(urlsplit(allowed))
        except ValueError:
            continue
        if allowed_origin == origin:
            return return_to

    raise BadRequestError("Invalid return url: host is not allowed", code="return_url_not_allowed")


def cookie_domain_for(return_to: str) -> str | None:
    """Host a credential cookie should be scoped to, or None for a relative target."""
    return urlsplit(return_to).hostname
