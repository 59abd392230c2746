"""
Integer range generator - grammar for the decimal strings of an integer range.

Given an inclusive lower and/or upper bound, generate_int_range() emits a
grammar expression matching exactly the canonical decimal representations of
every integer in range: optional leading "-", no leading zeros except "0".

Strategy:
    - Negative parts of a range recurse on the negated range behind a "-"
      literal.
    - A non-negative bounded range is split into one band per digit count;
      each band is handled by _uniform_range(), which emits the common literal
      prefix of its low/high strings and recurses on the first diverging digit
      and the remaining suffix.
    - An unbounded side is covered by the band of the bound's own length plus
      one open band of longer numbers, capped at `max_digits` digits so the
      grammar stays finite.

Example:
    ```python
    generate_int_range(0, 150)
    # '[0-9] | ([1-8] [0-9] | [9] [0-9]) | "1" ([0-4] [0-9] | [5] "0")'
    ```
"""

from typing import List, Optional

DEFAULT_MAX_DIGITS = 16


def generate_int_range(
    min_value: Optional[int],
    max_value: Optional[int],
    max_digits: int = DEFAULT_MAX_DIGITS,
) -> str:
    """
    Build a grammar expression for the integers in [min_value, max_value].

    Args:
        min_value: Inclusive lower bound (None = unbounded)
        max_value: Inclusive upper bound (None = unbounded)
        max_digits: Digit ceiling applied to unbounded sides

    Returns:
        str: Grammar expression (not wrapped in parentheses)

    Raises:
        ValueError: If neither bound is given or min_value > max_value
    """
    if min_value is None and max_value is None:
        raise ValueError("At least one of min_value or max_value must be set")
    if min_value is not None and max_value is not None and min_value > max_value:
        raise ValueError(f"Empty integer range: {min_value} > {max_value}")

    writer = _RangeWriter(max(max_digits, 1))
    if max_value is None:
        writer.at_least(min_value)
    elif min_value is None:
        writer.at_most(max_value)
    else:
        writer.between(min_value, max_value)
    return "".join(writer.out)


class _RangeWriter:
    """Appends grammar fragments to an output buffer."""

    def __init__(self, max_digits: int):
        self.max_digits = max_digits
        self.out: List[str] = []

    def digit_range(self, from_char: str, to_char: str) -> None:
        if from_char == to_char:
            self.out.append(f"[{from_char}]")
        else:
            self.out.append(f"[{from_char}-{to_char}]")

    def more_digits(self, min_digits: int, max_digits: Optional[int]) -> None:
        self.out.append("[0-9]")
        if min_digits == max_digits == 1:
            return
        self.out.append(f"{{{min_digits}")
        if max_digits != min_digits:
            self.out.append(",")
            if max_digits is not None:
                self.out.append(str(max_digits))
        self.out.append("}")

    def uniform_range(self, from_str: str, to_str: str) -> None:
        """Range between two digit strings of equal length, from_str <= to_str."""
        i = 0
        while i < len(from_str) and from_str[i] == to_str[i]:
            i += 1
        if i > 0:
            self.out.append(f'"{from_str[:i]}"')
        if i >= len(from_str):
            return
        if i > 0:
            self.out.append(" ")

        sub_len = len(from_str) - i - 1
        if sub_len == 0:
            self.digit_range(from_str[i], to_str[i])
            return

        from_sub = from_str[i + 1:]
        to_sub = to_str[i + 1:]
        sub_zeros = "0" * sub_len
        sub_nines = "9" * sub_len

        to_reached = False
        self.out.append("(")
        if from_sub == sub_zeros:
            self.digit_range(from_str[i], chr(ord(to_str[i]) - 1))
            self.out.append(" ")
            self.more_digits(sub_len, sub_len)
        else:
            self.out.append(f"[{from_str[i]}] (")
            self.uniform_range(from_sub, sub_nines)
            self.out.append(")")
            if ord(from_str[i]) < ord(to_str[i]) - 1:
                self.out.append(" | ")
                if to_sub == sub_nines:
                    self.digit_range(chr(ord(from_str[i]) + 1), to_str[i])
                    to_reached = True
                else:
                    self.digit_range(chr(ord(from_str[i]) + 1), chr(ord(to_str[i]) - 1))
                self.out.append(" ")
                self.more_digits(sub_len, sub_len)
        if not to_reached:
            self.out.append(" | ")
            self.digit_range(to_str[i], to_str[i])
            self.out.append(" ")
            self.uniform_range(sub_zeros, to_sub)
        self.out.append(")")

    def between(self, min_value: int, max_value: int) -> None:
        if max_value < 0:
            self.out.append('"-" (')
            self.between(-max_value, -min_value)
            self.out.append(")")
            return

        if min_value < 0:
            self.out.append('"-" (')
            self.between(1, -min_value)
            self.out.append(") | ")
            min_value = 0

        min_s = str(min_value)
        max_s = str(max_value)
        for digits in range(len(min_s), len(max_s)):
            self.uniform_range(min_s, "9" * digits)
            min_s = "1" + "0" * digits
            self.out.append(" | ")
        self.uniform_range(min_s, max_s)

    def at_least(self, min_value: int) -> None:
        if min_value < 0:
            self.out.append('"-" (')
            self.between(1, -min_value)
            self.out.append(") | ")
            min_value = 0

        min_s = str(min_value)
        self.uniform_range(min_s, "9" * len(min_s))
        if len(min_s) < self.max_digits:
            self.out.append(" | [1-9] ")
            self.more_digits(len(min_s), self.max_digits - 1)

    def at_most(self, max_value: int) -> None:
        if max_value < 0:
            self.out.append('"-" (')
            self.at_least(-max_value)
            self.out.append(")")
            return

        self.out.append('"-" [1-9] ')
        self.more_digits(0, self.max_digits - 1)
        self.out.append(" | ")
        self.between(0, max_value)
