#!/usr/bin/env python
"""Run the FastAPI server."""

import uvicorn


def main():
    """Run the FastAPI application."""
    uvicorn.run(
        "autobackup.api.app:app",
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )


if __name__ == "__main__":
    main()
