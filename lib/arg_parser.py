#!/usr/bin/env python3

from __future__ import annotations

import argparse

from lib.logging_utils import DEFAULT_LOG_DIR


EPILOG = """Example:
  sudo python3 setup_tunnel_server.py -d example.com -e admin@example.com
"""


def create_setup_argument_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=description,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("-d", "--domain", help="Domain name (prompted for if omitted)")
    parser.add_argument("-e", "--email",
                       help="Email for Let's Encrypt registration (prompted for if omitted)")
    parser.add_argument("-p", "--password",
                       help="Tunnel password (auto-generated if omitted)")
    parser.add_argument("--no-ufw", dest="skip_firewall", action="store_true",
                       help="Do not enable/modify UFW (firewall)")
    parser.add_argument("--no-sysctl", dest="skip_sysctl", action="store_true",
                       help="Do not apply sysctl tuning (UDP buffers)")
    parser.add_argument("--log-dir", default=DEFAULT_LOG_DIR,
                       help=f"Directory for the run log (default: {DEFAULT_LOG_DIR})")

    return parser
