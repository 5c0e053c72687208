"""Serve an engine with pounce.

Pounce's own ``run()`` expects an import string; ron hands it the live
``Engine`` object through ``pounce.Server`` instead.
"""


def run_server(app: object, host: str, port: int, *, workers: int = 1) -> None:
    """Block serving *app* on *host*:*port* until interrupted."""
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=workers)
    Server(config, app).run()
