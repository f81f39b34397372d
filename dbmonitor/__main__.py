"""Entry point for `python -m dbmonitor`.

Usage:
    python -m dbmonitor
    uv run python -m dbmonitor
"""

from __future__ import annotations

import asyncio

from dbmonitor.app import main

asyncio.run(main())
