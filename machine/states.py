# machine/states.py

import re

from machine.errors import CannotDeleteInitial

STATE_PREFIX = "q"
STATE_ID_PATTERN = re.compile(rf"^{STATE_PREFIX}(\d+)$")


class StateRegistry:
    """Ordered state ids with stack-discipline creation and deletion.

    ``states[0]`` is always the initial state. Ids come from a counter that
    only moves back when the most recent state is deleted.
    """

    def __init__(self):
        self.states = [f"{STATE_PREFIX}0"]
        self.final_states = []
        self.counter = 1

    @classmethod
    def from_states(cls, states, final_states=()):
        registry = cls()
        registry.states = list(states)
        registry.final_states = [s for s in dict.fromkeys(final_states) if s in registry.states]

        highest = -1
        for state in registry.states:
            match = STATE_ID_PATTERN.match(state)
            if match:
                highest = max(highest, int(match.group(1)))
        registry.counter = max(len(registry.states), highest + 1)
        return registry

    @property
    def initial_state(self):
        return self.states[0]

    def is_final(self, state):
        return state in self.final_states

    def editable_states(self):
        """States that own transition rows (every non-final state)."""
        return [s for s in self.states if s not in self.final_states]

    def create_state(self, is_final=False):
        state = f"{STATE_PREFIX}{self.counter}"
        self.counter += 1
        self.states.append(state)
        if is_final:
            self.final_states.append(state)
        return state

    def delete_last(self):
        if len(self.states) <= 1:
            raise CannotDeleteInitial(f"Initial state {self.initial_state} cannot be removed.")

        state = self.states.pop()
        self.final_states = [s for s in self.final_states if s != state]
        self.counter -= 1
        return state

    def __len__(self):
        return len(self.states)

    def __repr__(self):
        return f"StateRegistry(states={self.states}, final_states={self.final_states}, counter={self.counter})"
