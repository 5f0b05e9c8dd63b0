#!/usr/bin/env python3
"""Canned replies for conversational topics."""

import random
from datetime import datetime
from typing import Optional

from jarvis.commands import Topic
from jarvis.i18n import t, t_list


def format_clock(now: datetime) -> str:
    """'3:05 PM'"""
    hour = now.hour % 12 or 12
    suffix = "AM" if now.hour < 12 else "PM"
    return f"{hour}:{now.minute:02d} {suffix}"


def format_long_date(now: datetime) -> str:
    """'Sunday, October 18, 2026'"""
    return f"{now:%A}, {now:%B} {now.day}, {now.year}"


def reply_for(topic: Topic, now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """Reply text for a topic.

    Topics stored as lists in the locale file (wellbeing, thanks, farewell,
    joke) pick one phrasing at random.
    """
    if topic is Topic.TIME:
        now = now or datetime.now()
        return t("responses.time", time=format_clock(now), date=format_long_date(now))

    phrasings = t_list(f"responses.{topic.value}")
    if not phrasings:
        return t("responses.unrecognized")
    return (rng or random).choice(phrasings)
