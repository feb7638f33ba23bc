#!/usr/bin/env python3
"""Uvicorn entrypoint for the karaoke portal backend."""

import uvicorn
from karaoke.backend import config


def main():
    uvicorn.run(
        "karaoke.backend.app:create_app",
        factory=True,
        host=config.HOST,
        port=config.PORT,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
