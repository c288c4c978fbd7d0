# machine/codec.py

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from machine.alphabet import BLANK, HEAD_MARKER, RESERVED_SYMBOLS, is_valid_alphabet
from machine.errors import InconsistentConfiguration, MalformedConfiguration
from machine.transitions import DIRECTIONS, Transition

# Wire names of the transition triple, as the engine reads them
WIRE_FIELDS = {"next_state": "nextState", "write_symbol": "newSymbol", "direction": "direction"}

# Keys written by the original browser frontend
LEGACY_KEYS = {"alphabet": "inputAlphabet", "nome": "name", "descricao": "description"}

REQUIRED_LISTS = ("inputAlphabet", "tapeAlphabet", "states", "finalStates")


@dataclass
class Configuration:
    input_alphabet: List[str]
    tape_alphabet: List[str]
    states: List[str]
    initial_state: Optional[str]
    final_states: List[str] = field(default_factory=list)
    transitions: Dict[str, Dict[str, Transition]] = field(default_factory=dict)
    name: Optional[str] = None
    description: Optional[str] = None


def serialize(config):
    """Structural copy of ``config`` in the canonical JSON shape."""
    data = {}
    if config.name is not None:
        data["name"] = config.name
    if config.description is not None:
        data["description"] = config.description
    data.update({
        "inputAlphabet": list(config.input_alphabet),
        "tapeAlphabet": list(config.tape_alphabet),
        "states": list(config.states),
        "initialState": config.initial_state,
        "finalStates": list(config.final_states),
        "transitions": {
            state: {
                symbol: {WIRE_FIELDS[f]: getattr(t, f) for f in WIRE_FIELDS}
                for symbol, t in row.items()
            }
            for state, row in config.transitions.items()
        },
    })
    return data


def dumps(config, indent=2):
    validate(config)
    return json.dumps(serialize(config), indent=indent, ensure_ascii=False)


def _string_list(raw, key):
    value = raw[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MalformedConfiguration(f"'{key}' must be a list of strings")
    return list(value)


def _optional_string(raw, key):
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedConfiguration(f"'{key}' must be a string")
    return value


def _decode_transitions(raw_transitions):
    if not isinstance(raw_transitions, Mapping):
        raise MalformedConfiguration("'transitions' must be a mapping of state -> symbol -> triple")

    transitions = {}
    for state, row in raw_transitions.items():
        if not isinstance(row, Mapping):
            raise MalformedConfiguration(f"transitions for state '{state}' must be a mapping")
        decoded_row = {}
        for symbol, triple in row.items():
            if not isinstance(triple, Mapping):
                raise MalformedConfiguration(f"transition ({state}, {symbol}) must be a mapping")
            values = {}
            for attr, wire in WIRE_FIELDS.items():
                value = triple.get(wire, "")
                if value is None:
                    value = ""
                if not isinstance(value, str):
                    raise MalformedConfiguration(f"transition ({state}, {symbol}) field '{wire}' must be a string")
                values[attr] = value
            decoded_row[symbol] = Transition(**values)
        transitions[state] = decoded_row
    return transitions


def deserialize(raw):
    """Decode ``raw`` (a mapping or JSON text) into a Configuration.

    Only structure is checked here. Cross-field invariants, including the
    presence of ``initialState``, are left to ``validate``.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedConfiguration(f"Configuration is not valid JSON: {e}") from e

    if not isinstance(raw, Mapping):
        raise MalformedConfiguration("Configuration must be a JSON object")

    raw = dict(raw)
    for legacy, canonical in LEGACY_KEYS.items():
        if legacy in raw and canonical not in raw:
            raw[canonical] = raw.pop(legacy)

    missing = [key for key in REQUIRED_LISTS + ("transitions",) if key not in raw]
    if missing:
        raise MalformedConfiguration(f"Missing required configuration keys: {', '.join(missing)}")

    initial_state = raw.get("initialState")
    if initial_state is not None and not isinstance(initial_state, str):
        raise MalformedConfiguration("'initialState' must be a string")

    return Configuration(
        input_alphabet=_string_list(raw, "inputAlphabet"),
        tape_alphabet=_string_list(raw, "tapeAlphabet"),
        states=_string_list(raw, "states"),
        initial_state=initial_state,
        final_states=_string_list(raw, "finalStates"),
        transitions=_decode_transitions(raw["transitions"]),
        name=_optional_string(raw, "name"),
        description=_optional_string(raw, "description"),
    )


def validate(config):
    """Check every cross-field invariant, raising InconsistentConfiguration."""
    problems = []

    if not config.input_alphabet:
        problems.append("input alphabet is empty")
    elif not is_valid_alphabet("".join(config.input_alphabet)) or any(len(s) != 1 for s in config.input_alphabet):
        problems.append("input alphabet must be single letters or digits")
    if len(set(config.input_alphabet)) != len(config.input_alphabet):
        problems.append("input alphabet has duplicates")

    tape = set(config.tape_alphabet)
    if len(tape) != len(config.tape_alphabet):
        problems.append("tape alphabet has duplicates")
    bad_symbols = [
        s for s in config.tape_alphabet
        if len(s) != 1 or not (is_valid_alphabet(s) or s in RESERVED_SYMBOLS)
    ]
    if bad_symbols:
        problems.append(f"tape alphabet has invalid symbols: {bad_symbols}")
    for reserved in (HEAD_MARKER, BLANK):
        if reserved not in tape:
            problems.append(f"tape alphabet is missing '{reserved}'")
    if not set(config.input_alphabet) <= tape:
        problems.append("input alphabet is not contained in the tape alphabet")

    states = set(config.states)
    if len(states) != len(config.states):
        problems.append("states has duplicates")
    if config.initial_state is None:
        problems.append("initialState is missing")
    elif not config.states or config.states[0] != config.initial_state:
        problems.append(f"initialState '{config.initial_state}' must be the first listed state")

    if len(set(config.final_states)) != len(config.final_states):
        problems.append("final states has duplicates")
    stray_finals = [s for s in config.final_states if s not in states]
    if stray_finals:
        problems.append(f"final states not in states: {stray_finals}")
    if config.initial_state in config.final_states:
        problems.append("initial state cannot be final")

    for state, row in config.transitions.items():
        if state not in states:
            problems.append(f"transitions reference unknown state '{state}'")
            continue
        if state in config.final_states:
            problems.append(f"final state '{state}' has transitions")
        for symbol, t in row.items():
            if symbol not in tape:
                problems.append(f"transition ({state}, {symbol}) reads a symbol outside the tape alphabet")
            if t.next_state and t.next_state not in states:
                problems.append(f"transition ({state}, {symbol}) targets unknown state '{t.next_state}'")
            if t.write_symbol and t.write_symbol not in tape:
                problems.append(f"transition ({state}, {symbol}) writes unknown symbol '{t.write_symbol}'")
            if t.direction and t.direction not in DIRECTIONS:
                problems.append(f"transition ({state}, {symbol}) has invalid direction '{t.direction}'")

    if problems:
        raise InconsistentConfiguration("; ".join(problems))
    return config


def load_untrusted(raw):
    return validate(deserialize(raw))
