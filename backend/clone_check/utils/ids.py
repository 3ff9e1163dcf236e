"""ID and name helpers."""

from __future__ import annotations

import secrets

_ADJECTIVES = (
    "amber", "brisk", "calm", "dusty", "eager", "faint", "gentle", "hollow",
    "icy", "jolly", "keen", "lucky", "mellow", "nimble", "odd", "proud",
    "quiet", "rapid", "shy", "tidy", "urban", "vivid", "witty", "young",
)
_NOUNS = (
    "badger", "comet", "delta", "ember", "falcon", "grove", "harbor", "island",
    "jackal", "kettle", "lantern", "meadow", "nebula", "otter", "pebble", "quartz",
    "raven", "summit", "tundra", "umbra", "valley", "walrus", "yarrow", "zephyr",
)


def random_name() -> str:
    """Return an opaque, human-readable name used to mask identifiers."""
    return f"{secrets.choice(_ADJECTIVES)}_{secrets.choice(_NOUNS)}_{secrets.randbelow(10_000)}"


__all__ = ["random_name"]
