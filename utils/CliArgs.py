#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse

from utils.ConfigLoader import DEFAULT_CONFIG_PATH


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Account portal SRP6 credential tool")
    parser.add_argument("-c", "--config", type=str, default=DEFAULT_CONFIG_PATH, help="Path to config.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging output")
    parser.add_argument("-s", "--silent", action="store_true", help="Run silently (errors only)")

    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Create an account in the auth database")
    register.add_argument("username", type=str)
    register.add_argument("password", type=str)
    register.add_argument("-e", "--email", type=str, default="", help="Account email")
    register.add_argument("-l", "--language", type=str, default="en", help="Client language (en, fr, de, ...)")
    register.add_argument("-x", "--expansion", type=int, help="Expansion id (defaults to config)")

    verifier = sub.add_parser("verifier", help="Print a salt/verifier pair without touching the database")
    verifier.add_argument("username", type=str)
    verifier.add_argument("password", type=str)
    verifier.add_argument("--salt", type=str, help="Fixed salt as 64 hex characters")

    legacy = sub.add_parser("legacy-hash", help="Print the legacy sha_pass_hash value")
    legacy.add_argument("username", type=str)
    legacy.add_argument("password", type=str)

    login = sub.add_parser("login", help="Run a challenge/proof login against the auth database")
    login.add_argument("username", type=str)
    login.add_argument("password", type=str)

    return parser


def parse_args(argv=None):
    return build_parser().parse_args(argv)
