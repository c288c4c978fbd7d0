import argparse
from pathlib import Path

from machine.codec import load_untrusted
from machine.model import MachineModel
from machine.visualization import to_latex


def load_machine_file(path):
    """Load and validate a machine configuration from a local JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Machine file {path} not found.")
    with open(path, "r", encoding="utf-8") as f:
        return load_untrusted(f.read())


def pretty_print_machine(model, latex=False):
    """Print the machine as a state x symbol table, optionally as LaTeX too."""
    matrix = model.matrix()

    print("\n=== Transition Table ===")
    header = ["State \\ Symbol"] + matrix.symbols
    print("\t".join(header))
    for label, row in matrix.rows():
        print("\t".join([label] + row))

    complete = len(model.store.complete_transitions())
    print(f"\n[INFO] {complete} of {len(model.store)} transitions complete.")

    if latex:
        print("\n=== LaTeX Table ===")
        print(to_latex(matrix))


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Configuration Inspector")
    parser.add_argument("--file", required=True, help="Machine JSON file, e.g., downloads/binary_inc.json")
    parser.add_argument("--latex", action="store_true", help="Also print the table as LaTeX")
    args = parser.parse_args()

    config = load_machine_file(args.file)
    model = MachineModel.from_configuration(config)

    print(f"[INFO] Machine {config.name or Path(args.file).stem}")
    if config.description:
        print(f"  Description: {config.description}")
    print(f"  Input alphabet: {''.join(config.input_alphabet)}")
    print(f"  Tape alphabet: {''.join(config.tape_alphabet)}")
    print(f"  States: {', '.join(config.states)}")
    print(f"  Final states: {', '.join(config.final_states) or 'none'}")

    pretty_print_machine(model, latex=args.latex)


if __name__ == "__main__":
    main()
