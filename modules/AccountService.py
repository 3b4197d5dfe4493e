#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Registration and login operations of the account portal.

Every public method returns a JSON-ready dict with at least ``success`` and,
on failure, ``message``. The transport layer returns it verbatim. Login
failures always carry GENERIC_FAILURE_MESSAGE so that a response never tells
an unknown account apart from a wrong password.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from modules.AuthConfig import AuthConfig, AuthMode
from modules.AuthErrors import (
    GENERIC_FAILURE_MESSAGE,
    AuthError,
    InvalidInputError,
)
from modules.crypto.SessionManager import SessionManager
from modules.crypto.ShaPassHash import ShaPassHash
from modules.crypto.SRP6Crypto import SALT_LENGTH, SRP6Crypto
from modules.crypto.SRP6Session import SRP6Session
from modules.crypto.VerifierGenerator import VerifierGenerator
from modules.database.AccountStore import AccountStore
from utils.Logger import Logger

LOCALE_IDS = {
    "en": 0,  # English
    "ko": 1,  # Korean
    "fr": 2,  # French
    "de": 3,  # German
    "zh": 4,  # Chinese
    "tw": 5,  # Taiwanese
    "es": 6,  # Spanish (Spain)
    "mx": 7,  # Spanish (Mexico)
    "ru": 8,  # Russian
}


def get_locale_id(language: str | None = "en") -> int:
    """Map a language code such as 'fr' or 'de-AT' to the client locale id."""
    if not isinstance(language, str):
        return 0
    return LOCALE_IDS.get(language.lower()[:2], 0)


def _failure(message: str = GENERIC_FAILURE_MESSAGE) -> dict:
    return {"success": False, "message": message}


class AccountService:
    def __init__(
        self,
        config: AuthConfig,
        store: AccountStore,
        sessions: SessionManager | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.sessions = sessions or SessionManager(timeout=config.session_timeout)

        self.crypto = SRP6Crypto(config.srp6, config.normalization)
        self.generator = VerifierGenerator(config, self.crypto)
        self.legacy = ShaPassHash(config, self.crypto)

        # keys decoy salts for unknown usernames; stable for the process lifetime
        self._decoy_key = secrets.token_bytes(32)

    # ==================================================================
    # Registration
    # ==================================================================

    def check_username(self, username: str) -> dict:
        if not username or not isinstance(username, str):
            return {"success": False, "message": "Username is required and must be a string"}
        exists = self.store.username_exists(self.crypto.normalize(username))
        return {"success": True, "exists": exists}

    def _validate_email(self, email: str | None) -> str:
        if email is not None and not isinstance(email, str):
            raise InvalidInputError("Valid email address is required")
        email = (email or "").strip().lower()
        if self.config.require_email and (not email or "@" not in email):
            raise InvalidInputError("Valid email address is required")
        return email

    def _validate_expansion(self, expansion) -> int:
        if expansion is None:
            return self.config.default_expansion
        if isinstance(expansion, bool):
            raise InvalidInputError("Invalid expansion")
        try:
            value = int(expansion)
        except (TypeError, ValueError):
            raise InvalidInputError("Invalid expansion")
        if value < 0:
            raise InvalidInputError("Invalid expansion")
        return value

    def register(
        self,
        username: str,
        email: str | None,
        password: str,
        language: str | None = "en",
        expansion: int | None = None,
    ) -> dict:
        if not self.config.account_creation:
            return _failure("Account creation is disabled in server configuration")

        try:
            username_u = self.generator.validate_username(username)
            self.generator.validate_password(password)
            email = self._validate_email(email)

            if self.store.username_exists(username_u):
                raise InvalidInputError("Username already exists")

            fields = {
                "expansion": self._validate_expansion(expansion),
                "locale": get_locale_id(language),
            }
            if self.config.mode is AuthMode.LEGACY:
                account_id = self.store.create_account(
                    username_u, email, sha_pass_hash=self.legacy.generate(username, password), **fields
                )
            else:
                credential = self.generator.generate_credential(username, password)
                account_id = self.store.create_account(username_u, email, credential=credential, **fields)
        except InvalidInputError as exc:
            Logger.warning(f"[REGISTER] Rejected '{username}': {exc.public_message}")
            return _failure(exc.public_message)

        Logger.success(f"[REGISTER] Account {username_u} created (id={account_id}, mode={self.config.mode.value})")
        return {
            "success": True,
            "message": "Account created successfully! You can now log in to the game using your credentials.",
            "accountId": account_id,
        }

    def change_password(self, username: str, current_password: str, new_password: str) -> dict:
        """Replace salt+verifier (or the legacy hash) after checking the current password."""
        username_u = self.crypto.normalize(username or "")

        if self.config.mode is AuthMode.LEGACY:
            stored = self.store.get_sha_pass_hash(username_u)
            ok = stored is not None and self.legacy.verify(username, current_password, stored)
        else:
            credential = self.store.get_credential(username_u)
            ok = credential is not None and self.generator.check_password(username, current_password, credential)

        if not ok:
            Logger.warning(f"[PASSWORD] Change refused for {username_u}")
            return _failure()

        try:
            self.generator.validate_password(new_password)
        except InvalidInputError as exc:
            return _failure(exc.public_message)

        if self.config.mode is AuthMode.LEGACY:
            self.store.set_sha_pass_hash(username_u, self.legacy.generate(username, new_password))
        else:
            credential = self.generator.generate_credential(username, new_password)
            self.store.put_credential(username_u, credential.salt, credential.verifier)

        Logger.success(f"[PASSWORD] Password changed for {username_u}")
        return {"success": True, "message": "Password changed"}

    # ==================================================================
    # SRP6 login
    # ==================================================================

    def _decoy_salt(self, username_u: str) -> bytes:
        digest = hmac.new(self._decoy_key, username_u.encode("utf-8"), hashlib.sha256).digest()
        return digest[:SALT_LENGTH]

    def _new_session(self, username: str) -> SRP6Session:
        username_u = self.crypto.normalize(username or "")
        credential = self.store.get_credential(username_u) if username_u else None

        if credential is None:
            Logger.debug("[AUTH_CHALLENGE] Unknown account, issuing decoy challenge")
            return SRP6Session(
                username_u,
                self._decoy_salt(username_u),
                secrets.token_bytes(self.crypto.key_length),
                self.crypto,
                known=False,
            )
        return SRP6Session(username_u, credential.salt, credential.verifier, self.crypto)

    def issue_challenge(self, username: str) -> dict:
        """
        Start an SRP6 login. Returns ``{success, sessionId, salt, B, N, g}``.

        Unknown usernames get a decoy challenge that looks the same.
        """
        if self.config.mode is not AuthMode.SRP6:
            Logger.warning("[AUTH_CHALLENGE] SRP6 login requested while in legacy mode")
            return _failure()

        session = self._new_session(username)
        challenge = session.build_challenge()
        session_id = self.sessions.add_session(session)

        Logger.debug(f"[AUTH_CHALLENGE] Challenge issued for {session.username}")
        return {"success": True, "sessionId": session_id, **challenge}

    def verify_proof(self, session_id: str, A: str, M1: str, ip: str | None = None) -> dict:
        """
        Finish an SRP6 login. Returns ``{success, M2, sessionKey}`` or the
        generic failure. The session is consumed whatever the outcome.
        """
        session = self.sessions.take_session(session_id) if session_id else None
        if session is None:
            Logger.warning("[AUTH_PROOF] Unknown, expired or consumed session")
            return _failure()

        try:
            result = session.verify_proof(A, M1)
        except AuthError as exc:
            Logger.warning(f"[AUTH_PROOF] {session.username}: {type(exc).__name__}: {exc}")
            if session.known:
                self.store.record_failed_login(session.username, ip)
            return _failure()

        self.store.record_login(session.username, result.session_key, ip)
        Logger.success(f"[AUTH_PROOF] {session.username} authenticated")
        return {"success": True, **result.to_dict()}

    # ==================================================================
    # Legacy login
    # ==================================================================

    def legacy_login(self, username: str, password: str, ip: str | None = None) -> dict:
        """Single-step login against ``sha_pass_hash``."""
        if self.config.mode is not AuthMode.LEGACY:
            Logger.warning("[LOGIN] Legacy login requested while in SRP6 mode")
            return _failure()

        username_u = self.crypto.normalize(username or "")
        stored = self.store.get_sha_pass_hash(username_u) if username_u else None

        # hash even when the account is missing so timing does not differ
        ok = self.legacy.verify(username or "", password or "", stored or "0" * 40)
        if stored is None or not ok:
            if stored is not None:
                self.store.record_failed_login(username_u, ip)
            Logger.warning(f"[LOGIN] Failed legacy login for {username_u}")
            return _failure()

        self.store.record_login(username_u, None, ip)
        Logger.success(f"[LOGIN] {username_u} authenticated (legacy)")
        return {"success": True}
