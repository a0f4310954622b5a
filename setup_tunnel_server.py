#!/usr/bin/env python3

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lib.arg_parser import create_setup_argument_parser
from lib.logging_utils import get_service_logger
from lib.orchestrator import Orchestrator
from lib.request_resolver import input_from_args


def main() -> int:
    parser = create_setup_argument_parser(
        "Provision an nginx masquerade site, a Let's Encrypt certificate and a Hysteria server"
    )
    args = parser.parse_args()

    logger = get_service_logger("tunnel_setup", log_dir=args.log_dir)

    try:
        result = Orchestrator().run(input_from_args(args))
    except KeyboardInterrupt:
        print(file=sys.stderr)
        logger.error("Interrupted, the host is left as the last completed step produced it")
        return 130

    if not result.succeeded:
        return 1

    print()
    print("Enjoy!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
