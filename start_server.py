#!/usr/bin/env python3
"""Start the ledger API with uvicorn, honouring the PORT environment variable."""

import logging
import os
import sys

import uvicorn

SRC_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")


def resolve_port(default: int = 8000) -> int:
    port = os.environ.get("PORT", str(default))
    try:
        return int(port)
    except ValueError:
        print(f"Warning: Invalid PORT value '{port}', using default {default}", file=sys.stderr)
        return default


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("LOYALTY_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if os.path.isdir(SRC_PATH) and SRC_PATH not in sys.path:
        sys.path.insert(0, SRC_PATH)

    port = resolve_port()
    print(f"Starting server on port {port}...", file=sys.stderr)
    uvicorn.run(
        "loyalty.main:app",
        host="0.0.0.0",
        port=port,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
