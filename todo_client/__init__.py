"""
Client-side toolkit for testing the TODO service.

This package wraps the service's REST endpoints (``api``, ``service``,
``steps``) and its WebSocket push channel (``push``). Test suites drive the
service through ``TodoSteps`` and correlate push notifications with
``EventWaitCoordinator``.
"""

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
