"""
Tests for configuration serialization, decoding and validation.
"""

import json

import pytest

from machine.codec import deserialize, dumps, load_untrusted, serialize, validate
from machine.errors import InconsistentConfiguration, MalformedConfiguration
from machine.model import MachineModel
from machine.transitions import Transition


class TestRoundTrip:
    """Tests for serialize/deserialize."""

    def test_round_trip_is_identity(self, binary_config):
        assert deserialize(serialize(binary_config)) == binary_config

    def test_round_trip_through_json_text(self, binary_config):
        assert deserialize(json.dumps(serialize(binary_config))) == binary_config

    def test_round_trip_keeps_partial_transitions(self, binary_model):
        binary_model.set_transition_field("q1", "^", "direction", "S")
        config = binary_model.to_configuration()
        restored = deserialize(serialize(config))
        assert restored.transitions["q1"]["^"] == Transition(direction="S")

    def test_model_round_trip(self, binary_model):
        binary_model.add_state(True)
        binary_model.set_transition("q1", "1", "q2", "0", "L")
        config = binary_model.to_configuration()

        rebuilt = MachineModel.from_configuration(deserialize(serialize(config)))

        assert rebuilt.to_configuration() == config
        assert rebuilt.registry.counter == binary_model.registry.counter

    def test_serialized_shape(self, binary_config):
        data = serialize(binary_config)
        assert data["name"] == "binary"
        assert data["initialState"] == "q0"
        assert data["transitions"]["q0"]["0"] == {"nextState": "q1", "newSymbol": "1", "direction": "R"}
        assert "description" not in data


class TestDeserialize:
    """Tests for structural decoding."""

    def test_legacy_keys_are_accepted(self):
        raw = {
            "nome": "inc",
            "descricao": "increment",
            "alphabet": ["0", "1"],
            "tapeAlphabet": ["0", "1", "^", "_"],
            "states": ["q0", "q1"],
            "initialState": "q0",
            "finalStates": ["q1"],
            "transitions": {"q0": {"0": {"nextState": "q1", "newSymbol": "1", "direction": "S"}}},
        }
        config = load_untrusted(raw)
        assert config.name == "inc"
        assert config.description == "increment"
        assert config.input_alphabet == ["0", "1"]

    def test_missing_required_field(self, binary_config):
        data = serialize(binary_config)
        del data["states"]
        with pytest.raises(MalformedConfiguration):
            deserialize(data)

    @pytest.mark.parametrize("key,value", [
        ("states", "q0"),
        ("transitions", ["q0"]),
        ("finalStates", [1]),
        ("name", 5),
        ("initialState", ["q0"]),
    ])
    def test_wrong_structure(self, binary_config, key, value):
        data = serialize(binary_config)
        data[key] = value
        with pytest.raises(MalformedConfiguration):
            deserialize(data)

    def test_non_string_triple_field(self, binary_config):
        data = serialize(binary_config)
        data["transitions"]["q0"]["0"]["direction"] = 1
        with pytest.raises(MalformedConfiguration):
            deserialize(data)

    def test_invalid_json_text(self):
        with pytest.raises(MalformedConfiguration):
            deserialize("{not json")

    def test_not_an_object(self):
        with pytest.raises(MalformedConfiguration):
            deserialize([1, 2, 3])

    def test_deserialize_skips_invariants(self, binary_config):
        """Cross-field problems pass decoding and are caught by validate()."""
        data = serialize(binary_config)
        data["finalStates"] = ["q9"]
        config = deserialize(data)
        with pytest.raises(InconsistentConfiguration):
            validate(config)


class TestValidate:
    """Tests for the invariant checks applied to untrusted files."""

    def test_valid_configuration_passes(self, binary_config):
        assert validate(binary_config) is binary_config

    def test_missing_initial_state_is_inconsistent(self, binary_config):
        """No silent default to the first listed state."""
        data = serialize(binary_config)
        del data["initialState"]
        with pytest.raises(InconsistentConfiguration, match="initialState"):
            load_untrusted(data)

    def test_initial_state_must_be_listed_first(self, binary_config):
        data = serialize(binary_config)
        data["initialState"] = "q1"
        with pytest.raises(InconsistentConfiguration):
            load_untrusted(data)

    def test_transitions_for_final_state(self, binary_config):
        data = serialize(binary_config)
        data["finalStates"] = ["q1"]
        with pytest.raises(InconsistentConfiguration, match="final state"):
            load_untrusted(data)

    def test_symbol_outside_tape_alphabet(self, binary_config):
        data = serialize(binary_config)
        data["transitions"]["q0"]["Z"] = {"nextState": "", "newSymbol": "", "direction": ""}
        with pytest.raises(InconsistentConfiguration):
            load_untrusted(data)

    @pytest.mark.parametrize("field,value", [
        ("nextState", "q9"),
        ("newSymbol", "Z"),
        ("direction", "U"),
    ])
    def test_illegal_triple_values(self, binary_config, field, value):
        data = serialize(binary_config)
        data["transitions"]["q0"]["1"][field] = value
        with pytest.raises(InconsistentConfiguration):
            load_untrusted(data)

    def test_tape_alphabet_without_blank(self, binary_config):
        data = serialize(binary_config)
        data["tapeAlphabet"] = ["0", "1", "^"]
        data["transitions"]["q0"].pop("_")
        data["transitions"]["q1"].pop("_")
        with pytest.raises(InconsistentConfiguration, match="'_'"):
            load_untrusted(data)

    def test_dumps_rejects_illegal_store_values(self, binary_model):
        """Unchecked cell edits are caught when the configuration is encoded."""
        binary_model.set_transition_field("q0", "0", "direction", "sideways")
        with pytest.raises(InconsistentConfiguration):
            dumps(binary_model.to_configuration())

    def test_dumps_is_json(self, binary_config):
        assert json.loads(dumps(binary_config))["states"] == ["q0", "q1"]

    def test_duplicate_final_states(self, binary_config):
        data = serialize(binary_config)
        data["states"].append("q2")
        data["finalStates"] = ["q2", "q2"]
        with pytest.raises(InconsistentConfiguration, match="final states has duplicates"):
            load_untrusted(data)

    @pytest.mark.parametrize("symbol", ["ab", "[/red]", "#", ""])
    def test_invalid_tape_symbols(self, binary_config, symbol):
        data = serialize(binary_config)
        data["tapeAlphabet"].append(symbol)
        with pytest.raises(InconsistentConfiguration, match="tape alphabet has invalid symbols"):
            load_untrusted(data)


class TestOptionalFields:
    """Empty names and descriptions are kept, absent ones are omitted."""

    def test_empty_name_round_trips(self, binary_config):
        binary_config.name = ""
        binary_config.description = ""
        data = serialize(binary_config)
        assert data["name"] == "" and data["description"] == ""
        assert deserialize(data) == binary_config

    def test_absent_description_is_omitted(self, binary_config):
        binary_config.description = None
        assert "description" not in serialize(binary_config)
