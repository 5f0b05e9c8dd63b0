#!/usr/bin/env python3
"""
Command classification.

A lower-cased transcript is matched by plain substring against a
priority-ordered rule table of (predicate, Command) pairs; the first matching rule wins and anything
left over is an unrecognized conversational turn.

Priority:
  1. conversational intents
  2. crypto aliases (alias vocabulary order)
  3. "stop listening"
  4. bare wake word
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from jarvis.symbols import alias_vocabulary


class CommandKind(Enum):
    WAKE_WORD = "wake_word"
    CONVERSATIONAL = "conversational"
    CRYPTO_QUERY = "crypto_query"
    STOP_LISTENING = "stop_listening"


class Topic(str, Enum):
    IDENTITY = "identity"
    WELLBEING = "wellbeing"
    CAPABILITIES = "capabilities"
    TIME = "time"
    WEATHER = "weather"
    JOKE = "joke"
    THANKS = "thanks"
    FAREWELL = "farewell"
    GREETING = "greeting"
    HELP = "help"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    topic: Optional[Topic] = None
    alias: Optional[str] = None

    @classmethod
    def wake_word(cls) -> "Command":
        return cls(CommandKind.WAKE_WORD)

    @classmethod
    def conversational(cls, topic: Topic) -> "Command":
        return cls(CommandKind.CONVERSATIONAL, topic=topic)

    @classmethod
    def crypto_query(cls, alias: str) -> "Command":
        return cls(CommandKind.CRYPTO_QUERY, alias=alias)

    @classmethod
    def stop_listening(cls) -> "Command":
        return cls(CommandKind.STOP_LISTENING)

    def __str__(self) -> str:
        detail = self.topic.value if self.topic else self.alias
        return f"{self.kind.value}({detail})" if detail else self.kind.value


Predicate = Callable[[str], bool]
Rule = Tuple[Predicate, Command]

DEFAULT_WAKE_WORD = "jarvis"

# (topic, phrases) in the order they are tried
CONVERSATION_PHRASES: List[Tuple[Topic, Tuple[str, ...]]] = [
    (Topic.IDENTITY, ("who are you", "what are you", "your name")),
    (Topic.WELLBEING, ("how are you", "how do you feel", "how's it going")),
    (Topic.CAPABILITIES, ("what can you do", "your capabilities", "help me")),
    (Topic.TIME, ("what time", "what day", "what is the date")),
    (Topic.WEATHER, ("weather", "temperature")),
    (Topic.JOKE, ("joke", "funny")),
    (Topic.THANKS, ("thank you", "thanks")),
    (Topic.GREETING, ("hello", "hi")),
    (Topic.HELP, ("help",)),
    (Topic.FAREWELL, ("goodbye", "bye", "see you")),
]

STOP_PHRASE = "stop listening"


def contains_phrase(*phrases: str) -> Predicate:
    # Plain substrings: "jokes" counts as "joke", and "hi" also fires inside "this".
    needles = [p.lower() for p in phrases]
    return lambda text: any(n in text for n in needles)


def contains_all(*phrases: str) -> Predicate:
    needles = [p.lower() for p in phrases]
    return lambda text: all(n in text for n in needles)


def build_rules(wake_word: str = DEFAULT_WAKE_WORD, aliases: Optional[Sequence[str]] = None) -> List[Rule]:
    """Priority-ordered rule table for one wake word and alias vocabulary."""
    wake_word = (wake_word or DEFAULT_WAKE_WORD).lower().strip()
    rules: List[Rule] = []

    for topic, phrases in CONVERSATION_PHRASES:
        rules.append((contains_phrase(*phrases), Command.conversational(topic)))
        if topic is Topic.IDENTITY:
            # "who is jarvis" / "jarvis, who made you"
            rules.append((contains_all("who", wake_word), Command.conversational(topic)))

    for alias in (alias_vocabulary() if aliases is None else aliases):
        rules.append((contains_phrase(alias), Command.crypto_query(alias)))

    rules.append((contains_phrase(STOP_PHRASE), Command.stop_listening()))
    rules.append((contains_phrase(wake_word), Command.wake_word()))
    return rules


def classify(transcript: str, rules: Optional[List[Rule]] = None) -> Command:
    """Map a transcript to exactly one Command. Pure and total."""
    text = (transcript or "").lower()
    for predicate, command in (rules if rules is not None else build_rules()):
        if predicate(text):
            return command
    return Command.conversational(Topic.UNRECOGNIZED)


def contains_wake_word(transcript: str, wake_word: str = DEFAULT_WAKE_WORD) -> bool:
    return (wake_word or DEFAULT_WAKE_WORD).lower() in (transcript or "").lower()
