# machine/alphabet.py

import re
from dataclasses import dataclass, field

from machine.errors import InvalidAlphabet

HEAD_MARKER = "^"
BLANK = "_"
RESERVED_SYMBOLS = (HEAD_MARKER, BLANK)

ALPHABET_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


@dataclass
class Alphabets:
    input_alphabet: list = field(default_factory=list)
    tape_alphabet: list = field(default_factory=list)


def is_valid_alphabet(raw):
    return bool(ALPHABET_PATTERN.match(raw))


def dedupe(symbols):
    """Drop repeated symbols, keeping the first occurrence of each."""
    seen = set()
    unique = []
    for symbol in symbols:
        if symbol not in seen:
            seen.add(symbol)
            unique.append(symbol)
    return unique


def normalize(input_raw, auxiliary_raw=""):
    """Validate the raw alphabet fields and derive the tape alphabet.

    The tape alphabet is stored as input symbols, auxiliary symbols, then the
    head marker and blank. Display code reorders it with
    ``ordered_tape_alphabet``.
    """
    input_raw = (input_raw or "").strip()
    auxiliary_raw = (auxiliary_raw or "").strip()

    if not input_raw:
        raise InvalidAlphabet("Input alphabet must not be empty.")
    if not is_valid_alphabet(input_raw):
        raise InvalidAlphabet("Input alphabet may only contain letters and digits.")
    if auxiliary_raw and not is_valid_alphabet(auxiliary_raw):
        raise InvalidAlphabet("Auxiliary symbols may only contain letters and digits.")

    input_alphabet = dedupe(input_raw)
    auxiliary = dedupe(auxiliary_raw)
    tape_alphabet = dedupe(input_alphabet + auxiliary + [HEAD_MARKER, BLANK])

    return Alphabets(input_alphabet=input_alphabet, tape_alphabet=tape_alphabet)


def ordered_tape_alphabet(tape_alphabet):
    """Return the tape alphabet with the head marker moved to the front."""
    ordered = list(tape_alphabet)
    if HEAD_MARKER in ordered:
        ordered.remove(HEAD_MARKER)
        ordered.insert(0, HEAD_MARKER)
    return ordered


def auxiliary_symbols(input_alphabet, tape_alphabet):
    return [
        symbol for symbol in tape_alphabet
        if symbol not in input_alphabet and symbol not in RESERVED_SYMBOLS
    ]


def sanitize_tape_input(raw, input_alphabet):
    """Keep only characters of the input alphabet.

    Returns the cleaned string and the distinct removed characters in the
    order they first appeared.
    """
    allowed = set(input_alphabet)
    clean = "".join(char for char in raw if char in allowed)
    removed = dedupe(char for char in raw if char not in allowed)
    return clean, removed
