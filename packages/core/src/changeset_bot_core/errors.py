"""Errors raised while resolving changed packages and release plans."""

from __future__ import annotations


class ValidationError(Exception):
    """Changed files, package manifests or changeset files could not be used.

    The message is shown to maintainers inside the status comment, so it should
    name the offending file and say what is wrong with it.
    """
