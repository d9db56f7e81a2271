from __future__ import annotations

import random
import uuid
from typing import Optional

SITE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SITE_CODE_LENGTH = 5

TOOLBOX_TALK_ID_PREFIX = "talk-"


# PUBLIC_INTERFACE
def generate_site_code(rng: random.Random) -> str:
    """Return a 5-character uppercase alphanumeric join code drawn from `rng`."""
    return "".join(rng.choice(SITE_CODE_ALPHABET) for _ in range(SITE_CODE_LENGTH))


class IdGenerator:
    """
    Source of record ids and site codes.

    Ids are random UUID4 strings. Pass a seeded `random.Random` to get a
    reproducible sequence in tests.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def new_id(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def toolbox_talk_id(self) -> str:
        return f"{TOOLBOX_TALK_ID_PREFIX}{self.new_id()}"

    def site_code(self) -> str:
        return generate_site_code(self._rng)
