"""
Human quotable references.

Database ids are turned into short references that can be read out over the
phone, e.g. ``ab-cd-ef-gh`` for visits and applications or ``abc.def.ghi``
for session templates. Padding letters never appear in the encoded digits, so
a reference decodes back to its id.
"""

from __future__ import annotations

import random

SEPARATOR = ("c", "f", "h", "u", "i", "t")
SEED = ("z", "a", "l", "y", "x", "m", "q", "r", "b", "o", "d", "s", "n", "p", "e", "g", "j", "v", "w", "k")


class QuotableEncoder:
    def __init__(self, delimiter: str = "-", min_length: int = 1, chunk_size: int = 2) -> None:
        if len(delimiter) > 1:
            raise ValueError("delimiter length must be zero or one")
        if delimiter and delimiter.isalnum():
            raise ValueError("delimiter must not contain alphanumeric characters")
        if min_length <= 0:
            raise ValueError("minimum length must be greater than zero")
        if chunk_size <= 0:
            raise ValueError("minimum chunk size must be greater than zero")
        self.delimiter = delimiter
        self.min_length = min_length
        self.chunk_size = chunk_size

    def _needs_padding(self, value: str) -> bool:
        return len(value) < self.min_length or len(value) < self.chunk_size or len(value) % self.chunk_size > 0

    def encode(self, value: int) -> str:
        if value < 0:
            raise ValueError("only non-negative ids can be encoded")

        # least significant base-20 digit first
        digits = []
        while True:
            value, digit = divmod(value, len(SEED))
            digits.append(SEED[digit])
            if value == 0:
                break
        padded = "".join(digits)

        while self._needs_padding(padded):
            padded += random.choice(SEPARATOR[:-1])

        chunks = [padded[i : i + self.chunk_size] for i in range(0, len(padded), self.chunk_size)]
        return self.delimiter.join(chunks)

    def decode(self, encoded: str) -> int:
        hashed = encoded.replace(self.delimiter, "") if self.delimiter else encoded
        for separator in SEPARATOR:
            hashed = hashed.split(separator)[0]

        value = 0
        for letter in reversed(hashed):
            value = value * len(SEED) + SEED.index(letter)
        return value


def visit_reference_encoder() -> QuotableEncoder:
    """Encoder for visits, applications and session slots."""
    return QuotableEncoder(delimiter="-", min_length=8, chunk_size=2)


def session_template_reference_encoder() -> QuotableEncoder:
    return QuotableEncoder(delimiter=".", min_length=8, chunk_size=3)
