#!/usr/bin/env python3
"""
Local debug runner: serves the API with Hypercorn in the current process so
breakpoints work in the sync controller, scheduler and routes.

Usage:
	python debug/run_local.py
	PYTHONDEBUG=1 python debug/run_local.py   (plain-text logs)
"""
import sys
import os
import logging
import asyncio

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
	sys.path.insert(0, project_root)

is_debug_mode = os.getenv("PYTHONDEBUG", "").lower() in ("1", "true") or "--debug" in sys.argv

if is_debug_mode:
	# Plain format for the IDE console; setup_logging() leaves it alone in this mode
	root_logger = logging.getLogger()
	root_logger.setLevel(logging.INFO)
	root_logger.handlers.clear()

	stdout_handler = logging.StreamHandler(sys.stdout)
	stdout_handler.setLevel(logging.INFO)
	stdout_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
	root_logger.addHandler(stdout_handler)

	firesync_logger = logging.getLogger("firesync")
	firesync_logger.setLevel(logging.INFO)
	firesync_logger.propagate = True

	logger = logging.getLogger(__name__)
else:
	from firesync.logging_config import setup_logging, get_logger
	setup_logging(level=os.getenv("LOG_LEVEL", "INFO"))
	logger = get_logger(__name__)


def run_hypercorn():
	"""Run Hypercorn server in the current process."""
	import hypercorn.asyncio
	from hypercorn.config import Config
	from main import app

	port = os.getenv("PORT", "8000")
	logger.info(f"Starting Hypercorn on port {port}...")

	config = Config()
	config.bind = [f"[::]:{port}"]
	config.use_reload = True

	asyncio.run(hypercorn.asyncio.serve(app, config))


if __name__ == "__main__":
	logger.info("Starting fire risk sync API (local debug mode)")
	try:
		run_hypercorn()
	except KeyboardInterrupt:
		logger.info("Received interrupt signal, shutting down")
