"""Run the HTTP server in the foreground."""

import uvicorn

from heimdall.cli.console import get_console


def serve(host: str = "127.0.0.1", port: int = 8000, *, reload: bool = False) -> None:
    """Run the Heimdall server.

    Configuration is read from HEIMDALL_* environment variables, .env and
    the YAML file named by HEIMDALL_CONFIG_FILE.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
    """
    get_console().info(f"Serving on http://{host}:{port}")
    uvicorn.run(
        "heimdall.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,  # configure_logging owns the root logger
    )
