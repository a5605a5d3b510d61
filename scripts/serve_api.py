"""Serve the analytics HTTP API with uvicorn.

Usage:
    python scripts/serve_api.py
    python scripts/serve_api.py --config configs/default.yaml configs/my_site.yaml --port 9000
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from energy_analytics.api.app import create_app
from energy_analytics.utils.config import load_engine_config


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the energy analytics API")
    parser.add_argument(
        "--config",
        nargs="+",
        type=Path,
        default=[PROJECT_ROOT / "configs" / "default.yaml"],
        help="YAML config files (later files override earlier ones)",
    )
    parser.add_argument("--host", type=str, default=None, help="Override api.host")
    parser.add_argument("--port", type=int, default=None, help="Override api.port")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    config = load_engine_config(args.config)
    api_cfg = config["api"]
    uvicorn.run(
        create_app(config),
        host=args.host or api_cfg["host"],
        port=args.port or api_cfg["port"],
        log_level=api_cfg["log_level"],
    )


if __name__ == "__main__":
    main()
