#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

from datetime import datetime

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import scoped_session, sessionmaker

from modules.AuthConfig import DatabaseConfig
from modules.AuthErrors import InvalidInputError
from modules.crypto.VerifierGenerator import Credential
from modules.database.AuthModel import Account
from modules.database.Base import Base
from utils.Logger import Logger


class AccountStore:
    """
    Reads and writes the credential columns of the auth ``account`` table.

    Usernames passed in must already be normalized (uppercase); the store
    never changes them.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session = scoped_session(sessionmaker(bind=engine, autoflush=False))

    @classmethod
    def from_config(cls, db: DatabaseConfig) -> "AccountStore":
        engine = create_engine(db.sqlalchemy_url(), pool_pre_ping=True)
        Logger.info(f"Database initialized ({db.host}:{db.port}/{db.auth_db})")
        return cls(engine)

    @classmethod
    def from_url(cls, url: str) -> "AccountStore":
        return cls(create_engine(url))

    def create_schema(self) -> None:
        """Create the account table if missing (dev databases and tests)."""
        Base.metadata.create_all(self.engine)

    def auth(self):
        return self._session

    def close(self) -> None:
        self._session.remove()
        self.engine.dispose()

    def _commit(self) -> None:
        session = self.auth()
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise

    # AUTH QUERIES
    def get_user_by_username(self, username: str) -> Account | None:
        """Fetch Account row by username."""
        return (
            self.auth()
            .query(Account)
            .filter(Account.username == username)
            .first()
        )

    def username_exists(self, username: str) -> bool:
        return self.get_user_by_username(username) is not None

    # CREDENTIALS
    def get_credential(self, username: str) -> Credential | None:
        """Return the stored salt/verifier, or None when the account has none."""
        account = self.get_user_by_username(username)
        if account is None:
            return None
        if not account.salt or not account.verifier:
            return None
        try:
            return Credential(salt=bytes(account.salt), verifier=bytes(account.verifier))
        except ValueError as exc:
            Logger.error(f"[DB] Account {username} has a malformed credential: {exc}")
            return None

    def put_credential(self, username: str, salt: bytes, verifier: bytes) -> int:
        """
        Create or update the account's salt and verifier.
        Returns the account id.
        """
        session = self.auth()
        acc = self.get_user_by_username(username)

        if acc is None:
            acc = Account(username=username, salt=salt, verifier=verifier)
            session.add(acc)
            self._commit()
            Logger.success(f"[DB] Created account {username}")
        else:
            acc.salt = salt
            acc.verifier = verifier
            self._commit()
            Logger.success(f"[DB] Updated credentials for {username}")

        return acc.id

    def get_sha_pass_hash(self, username: str) -> str | None:
        account = self.get_user_by_username(username)
        if account is None or not account.sha_pass_hash:
            return None
        return account.sha_pass_hash

    def set_sha_pass_hash(self, username: str, sha_pass_hash: str) -> None:
        account = self.get_user_by_username(username)
        if account is None:
            raise LookupError(f"account {username} not found")
        account.sha_pass_hash = sha_pass_hash
        self._commit()

    # REGISTRATION
    def create_account(
        self,
        username: str,
        email: str,
        *,
        credential: Credential | None = None,
        sha_pass_hash: str | None = None,
        expansion: int = 2,
        locale: int = 0,
        os: str = "Win",
    ) -> int:
        """
        Insert a new account row. Email is stored lowercased in both
        ``email`` and ``reg_mail``.

        Raises:
            InvalidInputError: the username is already taken.
        """
        email = (email or "").lower()
        acc = Account(
            username=username,
            email=email,
            reg_mail=email,
            expansion=expansion,
            locale=locale,
            os=os,
            joindate=datetime.now(),
        )
        if credential is not None:
            acc.salt = credential.salt
            acc.verifier = credential.verifier
        if sha_pass_hash is not None:
            acc.sha_pass_hash = sha_pass_hash

        session = self.auth()
        session.add(acc)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise InvalidInputError("Username already exists")

        Logger.success(f"[DB] Created account {username} (id={acc.id})")
        return acc.id

    # LOGIN BOOKKEEPING
    def record_login(self, username: str, session_key: bytes | None = None, ip: str | None = None) -> None:
        """
        Stamp a successful login. An SRP6 login passes its session key, which
        also resets ``failed_logins`` and marks the account online; a legacy
        login (``session_key=None``) only touches ``last_login``/``last_ip``.
        """
        account = self.get_user_by_username(username)
        if account is None:
            return
        account.last_login = datetime.now()
        if session_key is not None:
            account.session_key = session_key
            account.failed_logins = 0
            account.online = 1
        if ip:
            account.last_ip = ip
        self._commit()

    def record_failed_login(self, username: str, ip: str | None = None) -> None:
        account = self.get_user_by_username(username)
        if account is None:
            return
        account.failed_logins = (account.failed_logins or 0) + 1
        if ip:
            account.last_attempt_ip = ip
        self._commit()
