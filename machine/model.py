# machine/model.py

from machine.alphabet import Alphabets, auxiliary_symbols, normalize, sanitize_tape_input
from machine.codec import Configuration, validate
from machine.errors import InvalidTapeInput, MachineNotReady, UnknownCell
from machine.states import StateRegistry
from machine.transitions import FIELDS, TableSynchronizer, Transition, TransitionStore
from machine.visualization import project


class MachineModel:
    """The machine being edited.

    Owns the alphabets, the state registry and the transition store, and
    reconciles the store after every structural change. Operations that fail
    leave the model as it was.
    """

    def __init__(self, name=None, description=None):
        self.name = name
        self.description = description
        self.alphabets = Alphabets()
        self.registry = StateRegistry()
        self.store = TransitionStore()
        self.synchronizer = TableSynchronizer(self.store)

    # === Structure ===
    @property
    def ready(self):
        """True once an input alphabet has been accepted."""
        return bool(self.alphabets.input_alphabet)

    @property
    def states(self):
        return self.registry.states

    @property
    def final_states(self):
        return self.registry.final_states

    @property
    def initial_state(self):
        return self.registry.initial_state

    @property
    def auxiliary_symbols(self):
        return auxiliary_symbols(self.alphabets.input_alphabet, self.alphabets.tape_alphabet)

    def reconcile(self):
        return self.synchronizer.reconcile(
            self.registry.states, self.alphabets.tape_alphabet, self.registry.final_states
        )

    def configure_alphabets(self, input_raw, auxiliary_raw="", name=None, description=None):
        alphabets = normalize(input_raw, auxiliary_raw)
        self.alphabets = alphabets
        if name is not None:
            self.name = name or None
        if description is not None:
            self.description = description or None
        return self.reconcile()

    def add_state(self, is_final=False):
        state = self.registry.create_state(is_final)
        self.reconcile()
        return state

    def delete_last_state(self):
        state = self.registry.delete_last()
        self.reconcile()
        return state

    def set_transition_field(self, state, symbol, field, value):
        return self.store.set_field(state, symbol, field, value)

    def set_transition(self, state, symbol, next_state, write_symbol, direction):
        if (state, symbol) not in self.store:
            raise UnknownCell(state, symbol)
        for field_name, value in zip(FIELDS, (next_state, write_symbol, direction)):
            self.store.set_field(state, symbol, field_name, value)
        return self.store.get(state, symbol)

    # === Views ===
    def table_rows(self):
        return self.synchronizer.table_rows(
            self.registry.states, self.alphabets.tape_alphabet, self.registry.final_states
        )

    def matrix(self):
        return project(
            self.registry.states,
            self.alphabets.tape_alphabet,
            self.store,
            initial_state=self.registry.initial_state,
            final_states=self.registry.final_states,
        )

    def prepare_input(self, raw):
        """Clean a tape input for execution; returns (input, removed symbols)."""
        if not self.ready:
            raise MachineNotReady("Define the alphabets before running the machine.")
        clean, removed = sanitize_tape_input(raw.strip(), self.alphabets.input_alphabet)
        if not clean:
            raise InvalidTapeInput("Tape input is empty after removing symbols outside the input alphabet.")
        return clean, removed

    # === Configuration ===
    def to_configuration(self):
        transitions = {}
        for (state, symbol), t in sorted(self.store.items()):
            transitions.setdefault(state, {})[symbol] = Transition(*t.as_tuple())
        return Configuration(
            input_alphabet=list(self.alphabets.input_alphabet),
            tape_alphabet=list(self.alphabets.tape_alphabet),
            states=list(self.registry.states),
            initial_state=self.registry.initial_state,
            final_states=list(self.registry.final_states),
            transitions=transitions,
            name=self.name,
            description=self.description,
        )

    @classmethod
    def from_configuration(cls, config):
        """Build a model from a configuration that passes ``validate``."""
        validate(config)
        model = cls(name=config.name, description=config.description)
        model.alphabets = Alphabets(
            input_alphabet=list(config.input_alphabet),
            tape_alphabet=list(config.tape_alphabet),
        )
        model.registry = StateRegistry.from_states(config.states, config.final_states)
        model.reconcile()
        for state, row in config.transitions.items():
            for symbol, t in row.items():
                for field_name, value in zip(FIELDS, t.as_tuple()):
                    model.store.set_field(state, symbol, field_name, value)
        return model
