"""
Code Generator Tests

Restaurant code shape, the bounded uniqueness loop and verification codes.
"""

import random
import string
from collections import Counter

import pytest

from restaurant_api.core.errors import ExhaustionError
from restaurant_api.services.codes import CodeGenerator


class CountingExists:
    """Existence check reporting a collision for the first ``collisions`` calls."""

    def __init__(self, collisions: int):
        self.collisions = collisions
        self.calls = []

    async def __call__(self, code: str) -> bool:
        self.calls.append(code)
        return len(self.calls) <= self.collisions


class TestRestaurantCode:

    def test_code_has_four_digits_and_three_letters(self, codes):
        for _ in range(500):
            code = codes.generate_restaurant_code()
            assert len(code) == 7
            assert sum(c in string.digits for c in code) == 4
            assert sum(c in string.ascii_uppercase for c in code) == 3

    def test_letters_are_not_pinned_to_positions(self):
        """Shuffling must let a letter land in every position."""
        generator = CodeGenerator(rng=random.Random(7))
        letter_positions = Counter()

        for _ in range(2000):
            code = generator.generate_restaurant_code()
            letter_positions.update(i for i, c in enumerate(code) if c.isalpha())

        assert set(letter_positions) == set(range(7))
        # 3/7 of 2000 codes expected per position (~857)
        for count in letter_positions.values():
            assert 600 < count < 1100

    def test_seeded_generator_is_reproducible(self):
        first = CodeGenerator(rng=random.Random(123))
        second = CodeGenerator(rng=random.Random(123))
        assert [first.generate_restaurant_code() for _ in range(5)] == [
            second.generate_restaurant_code() for _ in range(5)
        ]


class TestUniqueRestaurantCode:

    async def test_first_free_code_is_returned(self, codes):
        exists = CountingExists(collisions=0)
        code = await codes.generate_unique_restaurant_code(exists)
        assert exists.calls == [code]

    @pytest.mark.parametrize("collisions", [1, 5, 99])
    async def test_collisions_then_success(self, codes, collisions):
        """N collisions cost exactly N + 1 existence checks."""
        exists = CountingExists(collisions=collisions)
        code = await codes.generate_unique_restaurant_code(exists)

        assert len(exists.calls) == collisions + 1
        assert exists.calls[-1] == code

    async def test_exhaustion_after_max_attempts(self, codes):
        exists = CountingExists(collisions=10_000)

        with pytest.raises(ExhaustionError) as excinfo:
            await codes.generate_unique_restaurant_code(exists)

        assert len(exists.calls) == 100
        assert excinfo.value.attempts == 100
        assert "after 100 attempts" in excinfo.value.message

    async def test_custom_attempt_budget(self):
        generator = CodeGenerator(max_attempts=3)
        exists = CountingExists(collisions=3)

        with pytest.raises(ExhaustionError):
            await generator.generate_unique_restaurant_code(exists)
        assert len(exists.calls) == 3

    async def test_storage_backed_check(self, codes, store):
        restaurant = await store.create_restaurant(
            name="Taken", address="1 Main St", phone="5551234567", restaurant_code="1234ABC"
        )
        assert await store.restaurant_code_exists(restaurant.restaurant_code)
        assert not await store.restaurant_code_exists("9999ZZZ")

        code = await codes.generate_unique_restaurant_code(store.restaurant_code_exists)
        assert code != "1234ABC"


class TestVerificationCode:

    def test_six_digits_in_range(self, codes):
        for _ in range(1000):
            code = codes.generate_email_verification_code()
            assert len(code) == 6
            assert code.isdigit()
            assert 100000 <= int(code) <= 999999

    def test_bounds_are_reachable(self):
        class Edge:
            def __init__(self, value):
                self.value = value

            def randint(self, a, b):
                return a if self.value == "low" else b

        assert CodeGenerator(rng=Edge("low")).generate_email_verification_code() == "100000"
        assert CodeGenerator(rng=Edge("high")).generate_email_verification_code() == "999999"
