# machine/transitions.py

from dataclasses import dataclass
from typing import List, Tuple

from machine.alphabet import ordered_tape_alphabet
from machine.errors import UnknownCell

DIRECTIONS = ("L", "R", "S")
FIELDS = ("next_state", "write_symbol", "direction")


@dataclass
class Transition:
    next_state: str = ""
    write_symbol: str = ""
    direction: str = ""

    def is_complete(self) -> bool:
        return bool(self.next_state and self.write_symbol and self.direction)

    def is_empty(self) -> bool:
        return not (self.next_state or self.write_symbol or self.direction)

    def as_tuple(self):
        return (self.next_state, self.write_symbol, self.direction)


@dataclass
class ReconcileReport:
    added: List[Tuple[str, str]]
    removed: List[Tuple[str, str]]

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class TransitionStore:
    """Sparse (state, symbol) -> Transition mapping.

    Only keys inserted by reconciliation can be edited.
    """

    def __init__(self):
        self.transitions = {}

    def __contains__(self, key):
        return key in self.transitions

    def __len__(self):
        return len(self.transitions)

    def keys(self):
        return set(self.transitions)

    def get(self, state, symbol):
        return self.transitions.get((state, symbol))

    def items(self):
        return self.transitions.items()

    def insert_empty(self, state, symbol):
        self.transitions[(state, symbol)] = Transition()

    def remove(self, state, symbol):
        del self.transitions[(state, symbol)]

    def set_field(self, state, symbol, field, value):
        if field not in FIELDS:
            raise ValueError(f"Unknown transition field '{field}', expected one of {FIELDS}")
        transition = self.transitions.get((state, symbol))
        if transition is None:
            raise UnknownCell(state, symbol)
        setattr(transition, field, value)
        return transition

    def complete_transitions(self):
        return {key: t for key, t in self.transitions.items() if t.is_complete()}


class TableSynchronizer:
    """Keeps a TransitionStore aligned with the states x tape alphabet grid."""

    def __init__(self, store):
        self.store = store

    @staticmethod
    def target_keys(states, tape_alphabet, final_states=()):
        finals = set(final_states)
        return {
            (state, symbol)
            for state in states if state not in finals
            for symbol in tape_alphabet
        }

    def reconcile(self, states, tape_alphabet, final_states=()):
        target = self.target_keys(states, tape_alphabet, final_states)
        current = self.store.keys()

        added = sorted(target - current)
        removed = sorted(current - target)

        for state, symbol in removed:
            self.store.remove(state, symbol)
        for state, symbol in added:
            self.store.insert_empty(state, symbol)

        return ReconcileReport(added=added, removed=removed)

    def table_rows(self, states, tape_alphabet, final_states=()):
        """Editable rows in display order: (state, symbol, transition)."""
        finals = set(final_states)
        symbols = ordered_tape_alphabet(tape_alphabet)
        rows = []
        for state in states:
            if state in finals:
                continue
            for symbol in symbols:
                transition = self.store.get(state, symbol)
                if transition is None:
                    raise UnknownCell(state, symbol)
                rows.append((state, symbol, transition))
        return rows
