"""
main.py - Server launcher and entry point.

Run this file to start the remote ledger server:

    python main.py

This file does NOT contain application logic. See app.py for the FastAPI
application, service wiring, and startup sequence.

Direct uvicorn usage:
    uvicorn app:app --reload
"""

from __future__ import annotations

import uvicorn

from roombook.utils.config import get_settings


def main() -> None:
    """Start the ledger server that user and admin apps synchronize with."""
    settings = get_settings()
    base_url = f"http://{settings.host}:{settings.port}"

    print("=" * 60)
    print(f"  {settings.app_name}")
    print("=" * 60)
    print(f"  Server   : {base_url}")
    print(f"  Ledger   : {base_url}/requests")
    print(f"  API docs : {base_url}/docs")
    print(f"  Data dir : {settings.data_dir}")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    uvicorn.run(
        "app:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
