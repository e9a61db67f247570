# Copyright 2025 STA Client Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""STA Observations CLI.

Creates the Observations listed in a JSON file on a SensorThings server and
prints the location (and id) the server assigned to each of them.
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .config import STAConfig
from .exceptions import STAError
from .models import ALLOWED_COMPONENTS, Observation, ObservationBatch
from .service import SensorThingsService

logger = logging.getLogger(__name__)


def _to_observation(item: Any) -> Observation:
    if not isinstance(item, dict):
        raise ValueError(f"Observation entries must be objects, got {type(item).__name__}")
    data = dict(item)
    if "datastream_id" in data:
        data["datastream"] = data.pop("datastream_id")
    if "multi_datastream_id" in data:
        data["multi_datastream"] = data.pop("multi_datastream_id")
    if "feature_of_interest_id" in data:
        data["feature_of_interest"] = data.pop("feature_of_interest_id")
    return Observation.model_validate(data)


def load_observations(path: str) -> list[Observation]:
    """Read a JSON array of observation objects."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of observations")
    return [_to_observation(item) for item in data]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sta-observations",
        description="Create Observations on a SensorThings server in one CreateObservations request",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s observations.json --endpoint http://localhost:8080/FROST-Server/v1.1/
  %(prog)s observations.json --config sta.yaml --components phenomenonTime result resultTime
        """,
    )
    parser.add_argument("file", help="JSON file with an array of observations")
    parser.add_argument("--endpoint", help="Service endpoint (defaults to STA_ENDPOINT)")
    parser.add_argument("--config", help="JSON or YAML configuration file")
    parser.add_argument(
        "--components",
        nargs="+",
        choices=ALLOWED_COMPONENTS,
        help="DataArray components to send (default: phenomenonTime result)",
    )
    parser.add_argument("--log-level", help="Logging level (default from configuration)")
    return parser


def main(argv: Optional[list[str]] = None, transport: Optional[httpx.BaseTransport] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.config:
            config = STAConfig.from_file(args.config, endpoint=args.endpoint)
        else:
            config = STAConfig(endpoint=args.endpoint)

        # Command line flags win over the environment and the config file
        overrides = {"endpoint": args.endpoint, "log_level": args.log_level}
        config.update(**{k: v for k, v in overrides.items() if v is not None})
    except STAError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=config.log_level, format="[%(asctime)s] %(levelname)s in %(module)s: %(message)s")

    try:
        observations = load_observations(args.file)
        batch = ObservationBatch(observations, components=args.components)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    with SensorThingsService(config=config, transport=transport) as service:
        try:
            result = service.observations().create(batch)
        except STAError as e:
            logger.debug("CreateObservations failed", exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1

    created = sum(1 for o in batch.observations if o.id is not None)
    logger.info("Created %d of %d Observations", created, len(batch))

    output = [
        {"location": location, "id": observation.id}
        for observation, location in zip(batch.observations, result)
    ]
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
