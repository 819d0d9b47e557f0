import argparse
import json
import logging
import random
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config.config import ProofConfig, load_config
from handler import extract_inputs
from utils.utils import (
    PerformanceMonitor, create_performance_report, format_duration, save_results, setup_logging,
)
from zk.errors import MissingInputError, ZKError
from zk.zk_proofs import ProofGenerator

logger = logging.getLogger(__name__)


def build_event(args: argparse.Namespace) -> Dict[str, Any]:
    if args.event:
        try:
            with open(args.event, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise MissingInputError(f"Could not read event file {args.event}: {e}") from e
    return {"event": {"sha": args.sha, "input_data": args.input}}


def run(args: argparse.Namespace, config: ProofConfig) -> Optional[Dict[str, Any]]:
    monitor = PerformanceMonitor()
    generator_kwargs = {'monitor': monitor}
    if args.seed is not None:
        generator_kwargs['rng_factory'] = lambda: random.Random(args.seed)

    generator = ProofGenerator(config, **generator_kwargs)

    sha, input_data = extract_inputs(build_event(args))

    start_time = time.time()
    artifact = generator.prove(sha, input_data)
    logger.info(f"Proof ready in {format_duration(time.time() - start_time)}")

    response = {"proof": artifact.rendered}

    if args.output:
        output_path = Path(args.output)
        save_results({**response, 'artifact': artifact.to_dict()}, output_path)

        report_path = output_path.parent / f"{output_path.stem}_performance.txt"
        with open(report_path, 'w') as f:
            f.write(create_performance_report(monitor))
    else:
        print(json.dumps(response))

    return response


def main():
    parser = argparse.ArgumentParser(
        description='Zero-knowledge proof that two hashed inputs sum to a committed value')
    parser.add_argument('--sha', type=str, help='First input string')
    parser.add_argument('--input', type=str, help='Second input string')
    parser.add_argument('--event', type=str,
                        help='JSON event file with event.sha and event.input_data')
    parser.add_argument('--config', type=str,
                        default='config.yaml', help='Config file path')
    parser.add_argument('--output', type=str, help='Write results JSON here')
    parser.add_argument('--seed', type=int,
                        help='Seed the random source (reproducible, NOT secure)')
    parser.add_argument('--log-level', type=str, help='Override log level')

    args = parser.parse_args()

    config = load_config(Path(args.config))
    if args.log_level:
        config.log_level = args.log_level.upper()

    setup_logging(config.log_level,
                  config.log_dir / f"proof_service_{time.strftime('%Y%m%d_%H%M%S')}.log")

    try:
        run(args, config)
    except ZKError as e:
        logger.error(f"Error generating proof: {e}")
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
