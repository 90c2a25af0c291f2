"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details
"""

pytest_plugins = [
    "tests.plugins.asyncio_loop",
]
