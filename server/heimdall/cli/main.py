"""Main CLI application using Cyclopts."""

import cyclopts

from heimdall.cli.commands import keys, serve, token

app = cyclopts.App(
    name="heimdall",
    help="Heimdall - federated login and session token service",
)

app.command(keys.app, name="keys")
app.command(token.app, name="token")
app.command(serve.serve, name="serve")


def main() -> None:
    app()
