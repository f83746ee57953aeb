#!/usr/bin/env python3
"""
Main entry point for the Pitch Board web API.

This script launches the Flask-based server. Set PITCHBOARD_DATA_DIR to keep
the match in JSON files, or PITCHBOARD_STORE_URL to use a remote store.
"""
import logging
import os

from pitchboard.ui.web_app import run_web_app

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_web_app(
        port=int(os.environ.get("PITCHBOARD_PORT", "7122")),
        data_dir=os.environ.get("PITCHBOARD_DATA_DIR"),
        remote_url=os.environ.get("PITCHBOARD_STORE_URL"),
    )
