#!/usr/bin/env python3
"""
Run the pentomino web API server.
"""

import argparse
import os
import sys

# Add the project root to Python path
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

import uvicorn

from schemas.game_config import load_config
from utils.logging_setup import setup_logging
from webapi.app import create_app


def main():
    parser = argparse.ArgumentParser(description="Run the pentomino web API server")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--config", default=None, help="YAML/JSON config file")
    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(config.log_level)

    print("Starting pentomino Web API server...")
    print(f"Server will be available at: http://localhost:{args.port}")
    print(f"API documentation at:  http://localhost:{args.port}/docs")
    print("Press Ctrl+C to stop the server")

    uvicorn.run(create_app(config), host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
