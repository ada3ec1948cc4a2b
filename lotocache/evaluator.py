"""
Combination evaluation against a single draw.

Everything here is pure: evaluate() only reads the draw's frozenset and the
combination, so it can be called from any number of threads against the
same snapshot.
"""
from dataclasses import dataclass
from numbers import Integral

from lotocache.config import (
    COMPLEMENTARY_MAX,
    COMPLEMENTARY_MIN,
    MAIN_COUNT,
    MAIN_MAX,
    MAIN_MIN,
)
from lotocache.errors import InvalidCombinationError


@dataclass(frozen=True)
class Combination:
    """A validated candidate: 5 distinct main numbers and a complementary."""

    numbers: tuple
    complementary: int

    @property
    def number_set(self):
        return frozenset(self.numbers)


@dataclass(frozen=True)
class Match:
    main_matches: int
    complementary_match: bool


def _is_int(value):
    return isinstance(value, Integral) and not isinstance(value, bool)


def validate_combination(numbers, complementary) -> Combination:
    """
    Check a candidate and return it as a Combination.

    Raises InvalidCombinationError on wrong length, duplicates, non-integer
    values, main numbers outside [1, 49] or a complementary outside [1, 10].
    A Combination is checked again; complementary may then be None or must
    equal its own.
    """
    if isinstance(numbers, Combination):
        if complementary is not None and complementary != numbers.complementary:
            raise InvalidCombinationError(
                f"complementary {complementary!r} conflicts with the combination's "
                f"{numbers.complementary!r}"
            )
        numbers, complementary = numbers.numbers, numbers.complementary
    if numbers is None or isinstance(numbers, (str, bytes)):
        raise InvalidCombinationError("combination must be a sequence of integers")
    try:
        nums = list(numbers)
    except TypeError:
        raise InvalidCombinationError("combination must be a sequence of integers")

    if len(nums) != MAIN_COUNT:
        raise InvalidCombinationError(
            f"combination needs exactly {MAIN_COUNT} numbers, got {len(nums)}"
        )
    if not all(_is_int(n) for n in nums):
        raise InvalidCombinationError(f"combination numbers must be integers: {nums}")
    nums = tuple(int(n) for n in nums)
    out_of_range = [n for n in nums if n < MAIN_MIN or n > MAIN_MAX]
    if out_of_range:
        raise InvalidCombinationError(
            f"numbers out of [{MAIN_MIN},{MAIN_MAX}]: {out_of_range}"
        )
    if len(set(nums)) != MAIN_COUNT:
        raise InvalidCombinationError(f"duplicate numbers in combination: {list(nums)}")

    if not _is_int(complementary):
        raise InvalidCombinationError(
            f"complementary number must be an integer, got {complementary!r}"
        )
    complementary = int(complementary)
    if complementary < COMPLEMENTARY_MIN or complementary > COMPLEMENTARY_MAX:
        raise InvalidCombinationError(
            f"complementary number out of [{COMPLEMENTARY_MIN},{COMPLEMENTARY_MAX}]: "
            f"{complementary}"
        )
    return Combination(numbers=nums, complementary=complementary)


def count_matches(numbers, draw_numbers):
    """Count how many of numbers appear in the draw's main-number set."""
    count = 0
    for n in numbers:
        if n in draw_numbers:
            count += 1
    return count


def evaluate(combination: Combination, draw) -> Match:
    """Match one combination against one draw."""
    return Match(
        main_matches=count_matches(combination.numbers, draw.main_numbers),
        complementary_match=combination.complementary == draw.complementary,
    )
