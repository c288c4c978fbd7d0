# machine/visualization.py

from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from machine.alphabet import ordered_tape_alphabet

PLACEHOLDER = "-"
DIRECTION_GLYPHS = {"L": "←", "R": "→", "S": "•"}


@dataclass(eq=False)
class Matrix:
    """Read-only state x symbol grid of formatted transitions."""
    states: list
    symbols: list
    row_labels: list
    cells: np.ndarray

    def cell(self, state, symbol):
        return self.cells[self.states.index(state), self.symbols.index(symbol)]

    def row(self, state):
        return list(self.cells[self.states.index(state)])

    def rows(self):
        for label, row in zip(self.row_labels, self.cells):
            yield label, list(row)

    @property
    def shape(self):
        return self.cells.shape


def state_label(state, initial_state=None, final_states=()):
    label = state
    if state == initial_state:
        label = "→ " + label
    if state in final_states:
        label += " *"
    return label


def format_transition(transition):
    if transition is None or not transition.is_complete():
        return PLACEHOLDER
    glyph = DIRECTION_GLYPHS.get(transition.direction, transition.direction)
    return f"({transition.next_state}, {transition.write_symbol}, {glyph})"


def project(states, tape_alphabet, transitions, initial_state=None, final_states=()):
    """Build the matrix view of ``transitions``.

    ``transitions`` is anything with ``get(state, symbol)`` (a TransitionStore)
    or a plain dict keyed by (state, symbol). Final states get full
    placeholder rows.
    """
    symbols = ordered_tape_alphabet(tape_alphabet)
    if isinstance(transitions, Mapping):
        def lookup(state, symbol):
            return transitions.get((state, symbol))
    else:
        lookup = transitions.get

    cells = np.full((len(states), len(symbols)), PLACEHOLDER, dtype=object)
    for i, state in enumerate(states):
        if state in final_states:
            continue
        for j, symbol in enumerate(symbols):
            cells[i, j] = format_transition(lookup(state, symbol))

    labels = [state_label(s, initial_state, final_states) for s in states]
    return Matrix(states=list(states), symbols=symbols, row_labels=labels, cells=cells)


LATEX_ESCAPES = {"^": r"\^{}", "_": r"\_", "←": r"\leftarrow", "→": r"\rightarrow", "•": r"\bullet"}


def latex_escape(text):
    return "".join(LATEX_ESCAPES.get(char, char) for char in str(text))


def to_latex(matrix):
    lines = [r"\begin{array}{c|" + "c" * len(matrix.symbols) + "}"]
    header = " & ".join(f"\\text{{{latex_escape(symbol)}}}" for symbol in matrix.symbols)
    lines.append(f"State/Symbol & {header} \\\\ \\hline")
    for state, row in zip(matrix.states, matrix.cells):
        lines.append(" & ".join([state] + [latex_escape(cell) for cell in row]) + r" \\")
    lines.append(r"\end{array}")
    return "\n".join(lines)
