#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Exceptions raised by the credential engine."""

GENERIC_FAILURE_MESSAGE = "Invalid username or password"


class AuthError(Exception):
    """Base class for credential engine errors."""

    public_message = GENERIC_FAILURE_MESSAGE


class InvalidInputError(AuthError, ValueError):
    """Registration input (username, password, email) violates the policy.

    The message is meant for the user and is returned as-is.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.public_message = message


class MalformedInputError(AuthError, ValueError):
    """A proof payload (A or M1) could not be parsed."""


class ProtocolStateError(AuthError):
    """Proof submitted for an unknown, expired or already consumed session."""


class AuthenticationFailure(AuthError):
    """Client proof did not match."""


class ConfigError(RuntimeError):
    """Configuration value missing or outside its allowed set."""
