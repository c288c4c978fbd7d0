# app.py

import argparse
import sys

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt, IntPrompt, Confirm
from rich.table import Table

from config.config_loader import DEFAULT_CONFIG_PATH, load_config, save_config
from logger.logger import JSONLogger
from machine.codec import dumps
from machine.errors import DisplayUnavailable, EngineError, MachineError
from machine.model import MachineModel
from machine.results import render
from machine.transitions import DIRECTIONS
from tools.engine_client import EngineClient, save_or_download, strip_extension
from tools.machine_inspect import load_machine_file

console = Console()

DIRECTION_LABELS = {"L": "← L", "R": "→ R", "S": "• S"}


# === Utilities ===
def load_runtime_config(path=DEFAULT_CONFIG_PATH):
    try:
        return load_config(path)
    except FileNotFoundError:
        console.print(f"[red]Error: {path} not found![/red]")
        sys.exit(1)


def build_session(config):
    logger = JSONLogger(config["output_directory"], config["log_file_prefix"]) if config["enable_request_log"] else None
    client = EngineClient(config["engine_url"], timeout=config["request_timeout"], logger=logger)
    return client, logger


def log_event(logger, event, **details):
    if logger is not None:
        logger.log_event(event, **details)


def show_main_menu(model, connected):
    status = "[green]connected[/green]" if connected else "[red]local mode[/red]"
    title = escape(model.name or "untitled machine")
    console.print(f"\n[bold cyan]Turing Machine Editor[/bold cyan] - {title} ({status})")
    console.print("[1] Define Alphabets")
    console.print("[2] Add State")
    console.print("[3] Add Final State")
    console.print("[4] Delete Last State")
    console.print("[5] Edit Transition")
    console.print("[6] Show Transition Table")
    console.print("[7] Show Matrix")
    console.print("[8] Show JSON")
    console.print("[9] Save Machine")
    console.print("[10] Load Machine")
    console.print("[11] Saved Files")
    console.print("[12] Run Machine")
    console.print("[13] Run on Display")
    console.print("[14] Start Step Mode")
    console.print("[15] Edit Config")
    console.print("[16] Exit")


def show_states(model):
    finals = ", ".join(model.final_states) or "none"
    console.print(f"Initial state: [bold]{model.initial_state}[/bold]   Final states: [bold]{finals}[/bold]")


def build_transition_table(model):
    table = Table(title="Transitions", show_header=True, header_style="bold magenta")
    table.add_column("State", justify="center")
    table.add_column("Read", justify="center")
    table.add_column("Next State", justify="center")
    table.add_column("Write", justify="center")
    table.add_column("Move", justify="center")

    for state, symbol, t in model.table_rows():
        label = f"→ {state}" if state == model.initial_state else state
        table.add_row(
            label,
            symbol,
            t.next_state or "-",
            t.write_symbol or "-",
            DIRECTION_LABELS.get(t.direction, t.direction or "-"),
        )
    return table


def build_matrix_table(model):
    matrix = model.matrix()
    table = Table(title="State \\ Symbol", show_header=True, header_style="bold magenta")
    table.add_column("State", justify="left", style="bold")
    for symbol in matrix.symbols:
        table.add_column(escape(symbol), justify="center")
    for label, row in matrix.rows():
        table.add_row(escape(label), *[escape(cell) if cell != "-" else "[grey50]-[/grey50]" for cell in row])
    return table


def require_ready(model):
    if not model.ready:
        console.print("[red]Define the alphabets first![/red]")
        return False
    return True


# === Handlers ===
def handle_alphabets(model, logger):
    console.print("\n[bold]Define Alphabets[/bold]")
    name = Prompt.ask("Machine name", default=model.name or "")
    description = Prompt.ask("Description", default=model.description or "")
    input_raw = Prompt.ask("Input alphabet (e.g., 01)", default="".join(model.alphabets.input_alphabet))
    auxiliary_raw = Prompt.ask("Auxiliary tape symbols (optional)", default="".join(model.auxiliary_symbols))

    report = model.configure_alphabets(input_raw, auxiliary_raw, name=name.strip(), description=description.strip())
    log_event(logger, "alphabets_set", input=model.alphabets.input_alphabet, tape=model.alphabets.tape_alphabet)
    console.print(f"[green]Tape alphabet: {', '.join(model.alphabets.tape_alphabet)} "
                  f"({len(report.added)} cells added, {len(report.removed)} removed).[/green]")


def handle_add_state(model, logger, is_final):
    state = model.add_state(is_final)
    log_event(logger, "state_added", state=state, final=is_final)
    console.print(f"[green]State {state} added{' (final)' if is_final else ''}.[/green]")
    show_states(model)


def handle_delete_state(model, logger):
    state = model.delete_last_state()
    log_event(logger, "state_removed", state=state)
    console.print(f"[green]State {state} removed.[/green]")
    show_states(model)


def handle_edit_transition(model):
    if not require_ready(model):
        return
    editable = model.registry.editable_states()
    state = Prompt.ask("State", choices=editable, default=editable[0])
    symbol = Prompt.ask("Read symbol", choices=model.alphabets.tape_alphabet)

    current = model.store.get(state, symbol)
    next_state = Prompt.ask("Next state (blank to clear)", choices=model.states + [""], default=current.next_state)
    write_symbol = Prompt.ask("Write symbol (blank to clear)", choices=model.alphabets.tape_alphabet + [""],
                              default=current.write_symbol)
    direction = Prompt.ask("Direction (blank to clear)", choices=list(DIRECTIONS) + [""], default=current.direction)

    t = model.set_transition(state, symbol, next_state, write_symbol, direction)
    status = "complete" if t.is_complete() else "partial"
    console.print(f"[green]Transition ({state}, {symbol}) updated ({status}).[/green]")


def handle_save(model, client, config, logger):
    if not require_ready(model):
        return
    name = Prompt.ask("File name", default=model.name or "machine").strip()
    if not name:
        console.print("[red]Please enter a file name![/red]")
        return

    location, remote = save_or_download(client, name, model.to_configuration(), config["download_directory"])
    log_event(logger, "machine_saved", name=name, location=location, remote=remote)
    if remote:
        console.print(f"[green]Saved as {location}.[/green]")
    else:
        console.print(f"[yellow]Engine unreachable. Saved locally to {location}.[/yellow]")


def adopt(model, logger, source):
    log_event(logger, "machine_loaded", source=source, states=len(model.states))
    console.print(f"[green]Loaded {escape(model.name or source)}.[/green]")
    show_states(model)
    return model


def handle_load(client, logger, name=None):
    name = name or Prompt.ask("File name (or path to a local .json)").strip()
    if name.endswith(".json"):
        config = load_machine_file(name)
    else:
        config = client.load(name)
    return adopt(MachineModel.from_configuration(config), logger, name)


def handle_files(model, client, logger):
    files = client.list_files()
    if not files:
        console.print("[yellow]No saved machines on the engine.[/yellow]")
        return model

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Index", justify="center")
    table.add_column("Name", justify="left")
    table.add_column("Size", justify="right")
    for idx, f in enumerate(files):
        table.add_row(str(idx), f.name, f"{f.size} bytes")
    console.print(table)

    action = Prompt.ask("Action", choices=["load", "delete", "back"], default="back")
    if action == "back":
        return model
    idx_choice = IntPrompt.ask("Choose a file by Index")
    if idx_choice < 0 or idx_choice >= len(files):
        console.print("[red]Invalid choice.[/red]")
        return model

    name = strip_extension(files[idx_choice].name)
    if action == "load":
        return handle_load(client, logger, name=name)
    elif Confirm.ask(f"Delete {name}.json?", default=False):
        client.delete(name)
        log_event(logger, "machine_deleted", name=name)
        console.print(f"[green]{name}.json deleted.[/green]")
    return model


def ask_input(model):
    raw = Prompt.ask("Tape input")
    clean, removed = model.prepare_input(raw)
    if removed:
        console.print(f"[yellow]Removed symbols outside the input alphabet: {escape(', '.join(removed))}[/yellow]")
    return clean


def handle_run(model, client, logger):
    if not require_ready(model):
        return
    input_tape = ask_input(model)
    console.print("[cyan]Running...[/cyan]")
    result = client.execute(input_tape, model.to_configuration())
    if logger is not None:
        logger.log_execution(input_tape, result.summary())
    console.print(render(result), style="green" if result.accepted else "red", markup=False, highlight=False)


def handle_run_display(model, client, config):
    if not require_ready(model):
        return
    input_tape = ask_input(model)
    delay = IntPrompt.ask("Delay between steps (ms)", default=config["display_delay_ms"])
    client.execute_on_display(input_tape, model.to_configuration(), delay=delay)
    console.print("[green]Running on the display.[/green]")


def handle_step_mode(model, client):
    if not require_ready(model):
        return
    input_tape = ask_input(model)
    message = client.start_step_mode(input_tape, model.to_configuration())
    console.print(message or "Step mode started.", style="green", markup=False)


def handle_edit_config(config):
    console.print("\n[bold]Edit Configuration[/bold]")

    engine_url = Prompt.ask("Engine URL", default=config["engine_url"])
    request_timeout = IntPrompt.ask("Request timeout (s)", default=int(config["request_timeout"]))
    display_delay_ms = IntPrompt.ask("Display delay (ms)", default=config["display_delay_ms"])
    download_directory = Prompt.ask("Local download directory", default=config["download_directory"])
    enable_request_log = Confirm.ask("Log engine requests?", default=config["enable_request_log"])

    config.update({
        "engine_url": engine_url,
        "request_timeout": request_timeout,
        "display_delay_ms": display_delay_ms,
        "download_directory": download_directory,
        "enable_request_log": enable_request_log
    })

    save_config(config)
    console.print("[green]Configuration updated successfully.[/green]")


def interactive_main(config_path=DEFAULT_CONFIG_PATH):
    config = load_runtime_config(config_path)
    client, logger = build_session(config)
    model = MachineModel()
    connected = client.status()

    while True:
        show_main_menu(model, connected)
        choice = Prompt.ask("\nChoose an option", choices=[str(i) for i in range(1, 17)], default="16")

        try:
            if choice == "1":
                handle_alphabets(model, logger)
            elif choice == "2":
                handle_add_state(model, logger, is_final=False)
            elif choice == "3":
                handle_add_state(model, logger, is_final=True)
            elif choice == "4":
                handle_delete_state(model, logger)
            elif choice == "5":
                handle_edit_transition(model)
            elif choice == "6":
                if require_ready(model):
                    console.print(build_transition_table(model))
            elif choice == "7":
                if require_ready(model):
                    console.print(build_matrix_table(model))
            elif choice == "8":
                if require_ready(model):
                    console.print_json(dumps(model.to_configuration()))
            elif choice == "9":
                handle_save(model, client, config, logger)
            elif choice == "10":
                model = handle_load(client, logger)
            elif choice == "11":
                model = handle_files(model, client, logger)
            elif choice == "12":
                handle_run(model, client, logger)
            elif choice == "13":
                handle_run_display(model, client, config)
            elif choice == "14":
                handle_step_mode(model, client)
            elif choice == "15":
                handle_edit_config(config)
                config = load_runtime_config(config_path)
                client, logger = build_session(config)
                connected = client.status()
            elif choice == "16":
                console.print("[bold green]Goodbye![/bold green]")
                break
        except DisplayUnavailable:
            console.print("[red]The display device is not active.[/red]")
        except EngineError as e:
            connected = False
            console.print(f"[red]Engine error: {escape(str(e))}[/red]")
        except (MachineError, FileNotFoundError, ValueError, TypeError) as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")


# === CLI Mode for Automation ===
def cli_main(args):
    config = load_runtime_config(args.config)
    client, logger = build_session(config)

    if args.status:
        connected = client.status()
        console.print(f"Engine at {config['engine_url']}: {'[green]connected' if connected else '[red]unreachable'}")
        if not connected:
            return 1

    if args.check or args.execute:
        path = args.check or args.execute
        try:
            model = MachineModel.from_configuration(load_machine_file(path))
        except (MachineError, FileNotFoundError) as e:
            console.print(f"[red]Invalid machine file {escape(path)}: {escape(str(e))}[/red]")
            return 1
        console.print(build_matrix_table(model))

        if args.execute:
            if not args.input:
                console.print("[red]--execute requires --input[/red]")
                return 2
            try:
                input_tape, removed = model.prepare_input(args.input)
                if removed:
                    console.print(f"[yellow]Removed symbols: {escape(', '.join(removed))}[/yellow]")
                result = client.execute(input_tape, model.to_configuration())
            except MachineError as e:
                console.print(f"[red]Execution failed: {escape(str(e))}[/red]")
                return 1
            if logger is not None:
                logger.log_execution(input_tape, result.summary())
            console.print(render(result), markup=False, highlight=False)
            return 0 if result.accepted else 3

    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Turing Machine Configuration Editor")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Runtime config file")
    parser.add_argument("--status", action="store_true", help="Probe the engine and exit")
    parser.add_argument("--check", metavar="FILE", help="Validate a machine JSON file and print its matrix")
    parser.add_argument("--execute", metavar="FILE", help="Run a machine JSON file on the engine")
    parser.add_argument("--input", help="Tape input for --execute")
    args = parser.parse_args(argv)

    if args.status or args.check or args.execute:
        return cli_main(args)
    interactive_main(args.config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
