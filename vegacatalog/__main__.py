"""Module executed when running ``python -m vegacatalog``."""

from __future__ import annotations

import sys
from typing import Sequence


def serve() -> None:
    """Start the uvicorn server using the configured settings."""

    import uvicorn

    from app.config import settings

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Dispatch to ``serve`` (default) or ``generate``."""

    args = list(sys.argv[1:] if argv is None else argv)
    command = args.pop(0) if args else "serve"
    if command == "generate":
        from app.generate import main as generate_main

        return generate_main(args)
    if command == "serve":
        serve()
        return 0
    print(f"Unknown command: {command} (expected 'serve' or 'generate')", file=sys.stderr)
    return 2


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    sys.exit(main())
