"""API server entry point.

Usage:
    slopcollector-api

    # Or via uvicorn directly
    uvicorn slopcollector.api.main:create_app --factory --reload
"""

import os


def main() -> None:
    """Start the API server."""
    import uvicorn

    from slopcollector.core.config import get_settings

    settings = get_settings()
    reload = os.environ.get("SLOPCOLLECTOR_API_RELOAD", "false").lower() == "true"

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    print("Starting SlopCollector API server...")
    print(f"  Host: {settings.api_host}:{settings.api_port}")
    print(f"  Data dir: {settings.data_dir}")
    print()

    uvicorn.run(
        "slopcollector.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
