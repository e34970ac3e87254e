"""
Canonical user-facing message templates.

These are the only strings the core formats for users. Route layers copy
them into ``session["message"]`` unchanged.
"""

from __future__ import annotations

from typing import Iterable

SIGN_IN_REQUIRED = "You must be signed in to do that."
NAME_REQUIRED = "A name is required."
WELCOME = "Welcome!"
INVALID_CREDENTIALS = "Invalid Credentials!"
SIGNED_OUT = "You have been signed out."
ALREADY_LOGGED_IN = "You're already logged in."
ACCOUNT_EXISTS = "That account name already exists."
ACCOUNT_REGISTERED = "Your account has been registered."
INVALID_USERNAME = (
    "Username must consist of only letters and numbers, "
    "and must be between 4-10 characters."
)
INVALID_PASSWORD = (
    "Password must be between 4-10 characters and cannot contain spaces."
)
IMAGE_REQUIRED = "Please select an image to upload."


def created(name: str) -> str:
    return f"{name} was created."


def updated(name: str) -> str:
    return f"{name} has been updated."


def deleted(name: str) -> str:
    return f"{name} was deleted."


def renamed(old_name: str, new_name: str) -> str:
    return f"{old_name} was renamed to {new_name}."


def restored(name: str, version: int) -> str:
    return f"{name} was restored to version {version}."


def uploaded(name: str) -> str:
    return f"{name} was uploaded."


def does_not_exist(name: str) -> str:
    return f"{name} does not exist."


def already_exists(name: str) -> str:
    return f"{name} already exists."


def invalid_extension(supported: Iterable[str]) -> str:
    listed = ", ".join(f".{ext}" for ext in sorted(supported))
    return f"Invalid file extension. Supported file extensions: {listed}"
