"""CLI entry point for the apkpure-search server."""

from __future__ import annotations

import logging


def main() -> None:
    """Run the server over HTTP on the configured host and port.

    This is the entry point registered in pyproject.toml as the
    `apkpure-search` console script.
    """
    from apkpure_search.config import get_settings  # noqa: PLC0415
    from apkpure_search.server import mcp  # noqa: PLC0415 — lazy import keeps `import apkpure_search` fast

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    mcp.run(transport="http", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
