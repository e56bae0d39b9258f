"""RuleEngine — decides which cell values satisfy the active rule.

``is_correct`` is the single source of truth for "is this a target".
Grid flags are only ever a cache of it.  The pool generators produce
candidate values for GridGenerator: every member of a correct pool
passes ``is_correct`` and no member of an incorrect pool does.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from munchers.rules.values import CellValue, Expression, Numeric, Operator

if TYPE_CHECKING:
    from numpy.random import Generator

# -- Constants ---------------------------------------------------------------

_NUMBER_MIN = 2
_NUMBER_MAX = 50
_MULTIPLIER_MAX = 25
_ADDEND_MAX = 20
_MINUEND_MAX = 30
_SUBTRAHEND_MAX = 15
_INCORRECT_POOL_SIZE = 100
_INCORRECT_DRAWS = 1000
_NUMERIC_FALLBACK_DRAWS = 100
_INCORRECT_POOL_FLOOR = 20
_INCORRECT_POOL_FILL = 50


class Rule(Enum):
    """Mathematical rule a target cell must satisfy."""

    MULTIPLES = "multiples"
    FACTORS = "factors"
    PRIMES = "primes"
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MIXED = "mixed"

    @property
    def uses_expressions(self) -> bool:
        """Return True if cells under this rule hold expressions."""
        return self in (Rule.ADDITION, Rule.SUBTRACTION, Rule.MIXED)


def is_prime(n: int) -> bool:
    """Trial-division primality test; values below 2 are not prime."""
    if n < 2:
        return False
    i = 2
    while i * i <= n:
        if n % i == 0:
            return False
        i += 1
    return True


def is_correct(value: CellValue, rule: Rule, target_number: int) -> bool:
    """Return True if ``value`` satisfies ``rule`` for ``target_number``.

    Args:
        value: The cell value to check.
        rule: Active rule.
        target_number: Rule parameter (ignored for primes).

    Returns:
        Whether the value is a target under the rule.
    """
    match rule:
        case Rule.MULTIPLES:
            return (
                isinstance(value, Numeric)
                and target_number > 0
                and value.value % target_number == 0
            )
        case Rule.FACTORS:
            return (
                isinstance(value, Numeric)
                and target_number > 0
                and value.value > 0
                and target_number % value.value == 0
            )
        case Rule.PRIMES:
            return isinstance(value, Numeric) and is_prime(value.value)
        case Rule.ADDITION:
            return (
                isinstance(value, Expression)
                and value.op is Operator.PLUS
                and value.evaluate() == target_number
            )
        case Rule.SUBTRACTION:
            return (
                isinstance(value, Expression)
                and value.op is Operator.MINUS
                and value.evaluate() == target_number
            )
        case Rule.MIXED:
            return isinstance(value, Expression) and value.evaluate() == target_number
    return False


def generate_correct_pool(rule: Rule, target_number: int) -> list[CellValue]:
    """Enumerate every value in the playable range that satisfies the rule.

    Ranges: numbers 2..50 (multiples up to 25x the target), addends
    0..20, minuends up to 30.  Order is stable and duplicates are removed.

    Args:
        rule: Active rule.
        target_number: Rule parameter.

    Returns:
        Ordered list of correct values; may be empty for degenerate input.
    """
    values: list[CellValue] = []
    match rule:
        case Rule.MULTIPLES:
            if target_number > 0:
                for i in range(1, _MULTIPLIER_MAX + 1):
                    multiple = target_number * i
                    if _NUMBER_MIN <= multiple <= _NUMBER_MAX:
                        values.append(Numeric(multiple))
        case Rule.FACTORS:
            if target_number > 0:
                values = [
                    Numeric(i)
                    for i in range(1, target_number + 1)
                    if target_number % i == 0
                ]
        case Rule.PRIMES:
            values = [
                Numeric(i)
                for i in range(_NUMBER_MIN, _NUMBER_MAX + 1)
                if is_prime(i)
            ]
        case Rule.ADDITION:
            values = _addition_pool(target_number)
        case Rule.SUBTRACTION:
            values = _subtraction_pool(target_number)
        case Rule.MIXED:
            values = _addition_pool(target_number) + _subtraction_pool(
                target_number,
            )
    return list(dict.fromkeys(values))


def generate_incorrect_pool(
    rule: Rule,
    target_number: int,
    rng: Generator,
) -> list[CellValue]:
    """Draw up to 100 distinct values that do NOT satisfy the rule.

    Random draws come first (numbers for numeric rules, expressions for
    expression rules).  If that falls short, plain numbers 2..50 top it
    up, and as a last resort 51..100.  Every candidate is checked with
    ``is_correct`` so the pool never contains a target.

    Args:
        rule: Active rule.
        target_number: Rule parameter.
        rng: Seeded random generator.

    Returns:
        List of incorrect values; empty only when nothing in range can
        be incorrect (e.g. multiples of 1).
    """
    values: list[CellValue] = []
    seen: set[CellValue] = set()

    def offer(candidate: CellValue) -> None:
        if candidate not in seen and not is_correct(candidate, rule, target_number):
            seen.add(candidate)
            values.append(candidate)

    for _ in range(_INCORRECT_DRAWS):
        if len(values) >= _INCORRECT_POOL_SIZE:
            break
        offer(_random_candidate(rule, rng))

    for _ in range(_NUMERIC_FALLBACK_DRAWS):
        if len(values) >= _INCORRECT_POOL_SIZE:
            break
        offer(Numeric(int(rng.integers(_NUMBER_MIN, _NUMBER_MAX + 1))))

    if len(values) < _INCORRECT_POOL_FLOOR:
        for i in range(_NUMBER_MAX + 1, 2 * _NUMBER_MAX + 1):
            if len(values) >= _INCORRECT_POOL_FILL:
                break
            offer(Numeric(i))

    return values


def alternative_target(rule: Rule, rng: Generator) -> int:
    """Pick a retry target known to give the rule a healthy correct pool."""
    match rule:
        case Rule.MULTIPLES | Rule.FACTORS:
            return int(rng.integers(6, 13))
        case Rule.PRIMES:
            return 0
        case Rule.ADDITION | Rule.MIXED:
            return int(rng.integers(8, 16))
        case Rule.SUBTRACTION:
            return int(rng.integers(3, 11))
    return int(rng.integers(2, 13))


# -- Helpers -----------------------------------------------------------------


def _addition_pool(target_number: int) -> list[CellValue]:
    values: list[CellValue] = []
    for a in range(target_number + 1):
        b = target_number - a
        if 0 <= b <= _ADDEND_MAX:
            values.append(Expression(Operator.PLUS, a, b))
            if a != b:
                values.append(Expression(Operator.PLUS, b, a))
    return values


def _subtraction_pool(target_number: int) -> list[CellValue]:
    values: list[CellValue] = []
    for b in range(_ADDEND_MAX + 1):
        a = b + target_number
        if b <= a <= _MINUEND_MAX:
            values.append(Expression(Operator.MINUS, a, b))
    return values


def _random_candidate(rule: Rule, rng: Generator) -> CellValue:
    """Draw one value of the shape the rule's grid displays."""
    if rule in (Rule.ADDITION, Rule.MIXED) and (
        rule is Rule.ADDITION or rng.random() < 0.5
    ):
        a = int(rng.integers(0, _ADDEND_MAX + 1))
        b = int(rng.integers(0, _ADDEND_MAX + 1))
        return Expression(Operator.PLUS, a, b)
    if rule.uses_expressions:
        x = int(rng.integers(0, _MINUEND_MAX + 1))
        y = int(rng.integers(0, min(x, _SUBTRAHEND_MAX) + 1))
        return Expression(Operator.MINUS, x, y)
    return Numeric(int(rng.integers(_NUMBER_MIN, _NUMBER_MAX + 1)))
