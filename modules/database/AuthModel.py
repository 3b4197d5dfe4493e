#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime,
    LargeBinary, SmallInteger
)
from sqlalchemy.dialects.mysql import TINYINT

from .Base import Base

# TINYINT on MySQL, SMALLINT elsewhere (SQLite in tests)
Tiny = SmallInteger().with_variant(TINYINT, "mysql")


# -------------------------------------------------------
# ACCOUNT TABLE (acore_auth.account)
# -------------------------------------------------------
class Account(Base):
    __tablename__ = "account"

    id = Column(Integer, primary_key=True, autoincrement=True)

    username = Column(String(32), unique=True, nullable=False)

    salt = Column(LargeBinary(32), nullable=False, default=b"")
    verifier = Column(LargeBinary(32), nullable=False, default=b"")

    # legacy cores only
    sha_pass_hash = Column(String(40), nullable=False, default="")

    session_key = Column(LargeBinary(40), nullable=False, default=b"")

    email = Column(String(255), nullable=False, default="")
    reg_mail = Column(String(255), nullable=False, default="")

    joindate = Column(DateTime, nullable=False, default=datetime.now)
    last_ip = Column(String(15), nullable=False, default="127.0.0.1")
    last_attempt_ip = Column(String(15), nullable=False, default="127.0.0.1")

    failed_logins = Column(Integer, nullable=False, default=0)

    locked = Column(Tiny, nullable=False, default=0)

    last_login = Column(DateTime, nullable=True)
    online = Column(Tiny, nullable=False, default=0)

    expansion = Column(Tiny, nullable=False, default=2)

    locale = Column(Tiny, nullable=False, default=0)
    os = Column(String(3), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Account id={self.id} username={self.username!r}>"
