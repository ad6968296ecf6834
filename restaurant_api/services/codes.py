"""
Code Generator

Human-shareable restaurant codes and numeric email verification codes.

Restaurant codes are 7 characters: 4 digits and 3 uppercase letters in
random order (10^4 * 26^3 ~ 175.76M combinations). Uniqueness is checked
against storage with a bounded number of attempts.
"""

import logging
import random
import string
from typing import Awaitable, Callable, Optional

from restaurant_api.core.errors import ExhaustionError

logger = logging.getLogger(__name__)

DIGIT_COUNT = 4
LETTER_COUNT = 3
MAX_ATTEMPTS = 100

# Async predicate: does a restaurant already use this code?
CodeExistsCheck = Callable[[str], Awaitable[bool]]


class CodeGenerator:
    """
    Generates restaurant and verification codes.

    Args:
        rng: Random source (defaults to the OS CSPRNG via SystemRandom)
        max_attempts: Existence checks allowed before giving up
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.rng = rng or random.SystemRandom()
        self.max_attempts = max_attempts

    def generate_restaurant_code(self) -> str:
        """Return 4 random digits and 3 random uppercase letters, shuffled."""
        digits = [self.rng.choice(string.digits) for _ in range(DIGIT_COUNT)]
        letters = [self.rng.choice(string.ascii_uppercase) for _ in range(LETTER_COUNT)]

        combined = digits + letters

        # Fisher-Yates
        for i in range(len(combined) - 1, 0, -1):
            j = self.rng.randint(0, i)
            combined[i], combined[j] = combined[j], combined[i]

        return "".join(combined)

    async def generate_unique_restaurant_code(self, exists: CodeExistsCheck) -> str:
        """
        Generate codes until one is not already in use.

        Performs exactly one ``exists`` call per attempt.

        Raises:
            ExhaustionError: every attempt collided with an existing code
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.generate_restaurant_code()
            if not await exists(code):
                if attempt > 1:
                    logger.info(f"Restaurant code found after {attempt} attempts")
                return code

        logger.error(f"Restaurant code space exhausted after {self.max_attempts} attempts")
        raise ExhaustionError(self.max_attempts)

    def generate_email_verification_code(self) -> str:
        """Return a 6-digit code in [100000, 999999]; never needs zero-padding."""
        return str(self.rng.randint(100000, 999999))
