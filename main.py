#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sys

from modules.AccountService import AccountService
from modules.AuthConfig import AuthConfig, AuthMode, DatabaseConfig
from modules.crypto.ShaPassHash import ShaPassHash
from modules.crypto.SRP6Client import SRP6Client
from modules.crypto.VerifierGenerator import Credential, VerifierGenerator
from modules.database.AccountStore import AccountStore
from modules.AuthErrors import InvalidInputError
from utils.CliArgs import parse_args
from utils.ConfigLoader import ConfigLoader
from utils.Logger import Logger


def cmd_verifier(auth_cfg: AuthConfig, args) -> int:
    generator = VerifierGenerator(auth_cfg)
    try:
        if args.salt:
            generator.validate_username(args.username)
            salt = bytes.fromhex(args.salt)
            credential = Credential(salt, generator.compute_verifier(args.username, args.password, salt))
        else:
            credential = generator.generate_credential(args.username, args.password)
    except (InvalidInputError, ValueError) as exc:
        Logger.error(str(exc))
        return 1

    Logger.success(f"Salt:     {credential.salt.hex().upper()} ({credential.salt_b64})")
    Logger.success(f"Verifier: {credential.verifier.hex().upper()} ({credential.verifier_b64})")
    return 0


def cmd_legacy_hash(auth_cfg: AuthConfig, args) -> int:
    digest = ShaPassHash(auth_cfg).generate(args.username, args.password)
    Logger.success(f"sha_pass_hash ({auth_cfg.legacy_hash.value}): {digest}")
    return 0


def cmd_register(service: AccountService, args) -> int:
    result = service.register(args.username, args.email, args.password, args.language, args.expansion)
    if not result["success"]:
        Logger.error(result["message"])
        return 1
    Logger.success(f"{result['message']} (id={result['accountId']})")
    return 0


def cmd_login(service: AccountService, args) -> int:
    if service.config.mode is AuthMode.LEGACY:
        result = service.legacy_login(args.username, args.password)
        if not result["success"]:
            Logger.error(result["message"])
            return 1
        Logger.success("Legacy login OK")
        return 0

    challenge = service.issue_challenge(args.username)
    if not challenge["success"]:
        Logger.error(challenge["message"])
        return 1

    client = SRP6Client(
        args.username,
        args.password,
        k=service.config.srp6.k,
        normalization=service.config.normalization,
    )
    client.load_challenge(challenge)
    proof = client.build_proof()

    result = service.verify_proof(challenge["sessionId"], proof["A"], proof["M1"])
    if not result["success"]:
        Logger.error(result["message"])
        return 1
    if not client.verify_server(result["M2"]):
        Logger.error("Server proof M2 did not match")
        return 1

    Logger.success(f"SRP6 login OK, session key {result['sessionKey']}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = ConfigLoader.load_config(args.config)
        Logger.configure(config.get("Logging"))
        auth_cfg = AuthConfig.from_dict(config)
    except RuntimeError as exc:
        Logger.error(str(exc))
        return 1

    if args.verbose:
        Logger.set_level("All")
    if args.silent:
        Logger.set_level("Error")

    if args.command == "verifier":
        return cmd_verifier(auth_cfg, args)
    if args.command == "legacy-hash":
        return cmd_legacy_hash(auth_cfg, args)

    store = AccountStore.from_config(DatabaseConfig.from_dict(config))
    service = AccountService(auth_cfg, store)
    try:
        if args.command == "register":
            return cmd_register(service, args)
        return cmd_login(service, args)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
