#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Typed configuration for the credential engine.

The YAML sections read by utils.ConfigLoader are resolved here once, at
startup, into frozen dataclasses. Every value is checked against its allowed
set so that a typo in etc/config.yaml fails loudly instead of silently
switching hash modes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from modules.AuthErrors import ConfigError

# AzerothCore / TrinityCore 256-bit safe prime, big-endian hex.
AZEROTHCORE_N_HEX = "894B645E89E1535BBDAD5B8B290650530801B18EBFBF5E8FAB3C82872A3E9BB7"
AZEROTHCORE_G = 7
CLASSIC_K = 3

MAX_SESSION_TIMEOUT = 300


class AuthMode(str, Enum):
    SRP6 = "srp6"
    LEGACY = "legacy"


class LegacyHashType(str, Enum):
    TRINITYCORE = "trinitycore"
    SHA1 = "sha1"
    VBULLETIN = "vbulletin"


class BFormula(str, Enum):
    CLASSIC = "classic"
    SIMPLIFIED = "simplified"


class Normalization(str, Enum):
    ASCII = "ascii"
    UNICODE = "unicode"


def _enum_value(enum_cls, raw, key: str):
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ConfigError(f"auth.{key}: '{raw}' is not one of: {allowed}")


def _int_value(raw, key: str, minimum: int = 0) -> int:
    # bool is an int subclass; "yes" for a length is a config mistake
    if isinstance(raw, bool):
        raise ConfigError(f"{key}: expected an integer, got {raw!r}")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{key}: expected an integer, got {raw!r}")
    if value < minimum:
        raise ConfigError(f"{key}: must be >= {minimum}, got {value}")
    return value


def _bool_value(raw, key: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise ConfigError(f"{key}: expected true/false, got {raw!r}")


@dataclass(frozen=True)
class SRP6Parameters:
    """Group parameters shared by server and client."""

    N: int = int(AZEROTHCORE_N_HEX, 16)
    g: int = AZEROTHCORE_G
    k: int = CLASSIC_K
    key_length: int = 32

    @classmethod
    def from_dict(cls, crypto: dict | None, b_formula: BFormula = BFormula.CLASSIC) -> "SRP6Parameters":
        crypto = crypto or {}
        n_hex = str(crypto.get("N", AZEROTHCORE_N_HEX))
        try:
            n_int = int(n_hex, 16)
        except ValueError:
            raise ConfigError(f"crypto.N: not a hex number: {n_hex!r}")
        if n_int.bit_length() > 256 or n_int < 3:
            raise ConfigError("crypto.N: modulus must be a 256-bit prime")

        g = _int_value(crypto.get("g", AZEROTHCORE_G), "crypto.g", minimum=2)
        k = _int_value(crypto.get("k", CLASSIC_K), "crypto.k", minimum=0)
        if b_formula is BFormula.SIMPLIFIED:
            k = 0
        return cls(N=n_int, g=g, k=k)

    @property
    def N_hex(self) -> str:
        return f"{self.N:0{self.key_length * 2}X}"

    @property
    def g_hex(self) -> str:
        return f"{self.g:X}"


@dataclass(frozen=True)
class AuthConfig:
    """Feature flags and policy for registration and login."""

    mode: AuthMode = AuthMode.SRP6
    legacy_hash: LegacyHashType = LegacyHashType.TRINITYCORE
    legacy_salt: str = ""
    uppercase_digest: bool = True
    normalization: Normalization = Normalization.ASCII
    b_formula: BFormula = BFormula.CLASSIC
    session_timeout: int = MAX_SESSION_TIMEOUT
    min_username_length: int = 3
    max_username_length: int = 32
    min_password_length: int = 8
    max_password_length: int = 16
    account_creation: bool = True
    require_email: bool = True
    default_expansion: int = 2
    srp6: SRP6Parameters = field(default_factory=SRP6Parameters)

    @property
    def legacy_mode(self) -> bool:
        return self.mode is AuthMode.LEGACY

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> "AuthConfig":
        """
        Build from the full configuration dict (sections ``auth`` and
        ``crypto``). Missing keys fall back to the defaults above.
        """
        auth = cfg.get("auth") or {}
        if not isinstance(auth, dict):
            raise ConfigError("auth: section must be a mapping")

        mode = _enum_value(AuthMode, auth.get("mode", AuthMode.SRP6.value), "mode")
        b_formula = _enum_value(BFormula, auth.get("b_formula", BFormula.CLASSIC.value), "b_formula")

        # Legacy servers accept shorter passwords than the portal's own policy.
        default_min_password = 4 if mode is AuthMode.LEGACY else 8

        timeout = _int_value(auth.get("session_timeout", MAX_SESSION_TIMEOUT), "auth.session_timeout", minimum=1)
        if timeout > MAX_SESSION_TIMEOUT:
            raise ConfigError(f"auth.session_timeout: must be <= {MAX_SESSION_TIMEOUT} seconds, got {timeout}")

        min_user = _int_value(auth.get("min_username_length", 3), "auth.min_username_length", minimum=1)
        max_user = _int_value(auth.get("max_username_length", 32), "auth.max_username_length", minimum=1)
        min_pass = _int_value(auth.get("min_password_length", default_min_password), "auth.min_password_length", minimum=1)
        max_pass = _int_value(auth.get("max_password_length", 16), "auth.max_password_length", minimum=1)
        if min_user > max_user:
            raise ConfigError("auth: min_username_length exceeds max_username_length")
        if min_pass > max_pass:
            raise ConfigError("auth: min_password_length exceeds max_password_length")

        return cls(
            mode=mode,
            legacy_hash=_enum_value(LegacyHashType, auth.get("legacy_hash", LegacyHashType.TRINITYCORE.value), "legacy_hash"),
            legacy_salt=str(auth.get("legacy_salt") or ""),
            uppercase_digest=_bool_value(auth.get("uppercase_digest", True), "auth.uppercase_digest"),
            normalization=_enum_value(Normalization, auth.get("normalization", Normalization.ASCII.value), "normalization"),
            b_formula=b_formula,
            session_timeout=timeout,
            min_username_length=min_user,
            max_username_length=max_user,
            min_password_length=min_pass,
            max_password_length=max_pass,
            account_creation=_bool_value(auth.get("account_creation", True), "auth.account_creation"),
            require_email=_bool_value(auth.get("require_email", True), "auth.require_email"),
            default_expansion=_int_value(auth.get("default_expansion", 2), "auth.default_expansion"),
            srp6=SRP6Parameters.from_dict(cfg.get("crypto"), b_formula),
        )


@dataclass(frozen=True)
class DatabaseConfig:
    host: str = "localhost"
    port: int = 3306
    username: str = "acore"
    password: str = "acore"
    auth_db: str = "acore_auth"
    url: str | None = None

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> "DatabaseConfig":
        db = cfg.get("database") or {}
        return cls(
            host=str(db.get("host", "localhost")),
            port=_int_value(db.get("port", 3306), "database.port", minimum=1),
            username=str(db.get("username", "acore")),
            password=str(db.get("password", "acore")),
            auth_db=str(db.get("auth_db") or db.get("realmd") or "acore_auth"),
            url=db.get("url"),
        )

    def sqlalchemy_url(self) -> str:
        if self.url:
            return self.url
        return (
            f"mysql+pymysql://{self.username}:{self.password}@"
            f"{self.host}:{self.port}/{self.auth_db}?charset=utf8"
        )
