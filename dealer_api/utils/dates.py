"""Datetime helpers."""

from __future__ import annotations

from datetime import datetime

import pendulum


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return pendulum.now("UTC").naive()
