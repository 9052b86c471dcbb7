import argparse
import os
import sys

from .exceptions import MethodicError
from .interpreter import InterpreterPipeline
from .utils import TerminalColors


def main(argv=None):
    # This provides a single source of truth for stage names and their order.
    STAGE_MAP = {
        "tokens": "Token Stream",
        "ast": "Abstract Syntax Tree",
    }

    stage_help_text = "Stop after a specific stage and save its artifact as JSON. "
    for name, desc in STAGE_MAP.items():
        stage_help_text += f"'{name}' for the {desc}. "
    stage_help_text += "Omitting this flag runs the program."

    parser = argparse.ArgumentParser(prog="mti", description="Run a Methodic program.")
    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="The path to the input source file. Omit to read from stdin.",
    )
    parser.add_argument("-s", "--stage", type=str, choices=STAGE_MAP.keys(), help=stage_help_text)
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Report a failing top-level statement and continue with the next one.",
    )

    args = parser.parse_args(argv)

    # --- Input Validation ---
    if not args.input_file and sys.stdin.isatty():
        parser.error("input_file is required when not reading from a pipe.")

    script_path_for_display = args.input_file or "stdin"

    try:
        # --- Read Input ---
        if not args.input_file:
            script_content = sys.stdin.read()
            input_file_path_abs = None
        else:
            input_file_path_abs = os.path.abspath(args.input_file)
            with open(input_file_path_abs, "r", encoding="utf-8") as f:
                script_content = f.read()

        stop_after_stage = args.stage
        dump_stages = [stop_after_stage] if stop_after_stage else []

        pipeline = InterpreterPipeline(
            script_content,
            file_path=input_file_path_abs,
            dump_stages=dump_stages,
            stop_after_stage=stop_after_stage,
            keep_going=args.keep_going,
        )
        pipeline.run()

        if stop_after_stage:
            # The pipeline already prints the "Saving artifact" message.
            print(f"\n{TerminalColors.GREEN}--- Stage '{stop_after_stage} ({STAGE_MAP[stop_after_stage]})' successful ---{TerminalColors.RESET}")

        for error in pipeline.errors:
            print(f"{TerminalColors.RED}--- RUNTIME ERROR ---\n{error}{TerminalColors.RESET}", file=sys.stderr)
        if pipeline.errors:
            sys.exit(1)

    # --- Error Handling ---
    except MethodicError as e:
        print(f"{TerminalColors.RED}--- ERROR ---\n{e}{TerminalColors.RESET}", file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError:
        print(
            f"{TerminalColors.RED}ERROR: Script file '{script_path_for_display}' not found.{TerminalColors.RESET}",
            file=sys.stderr,
        )
        sys.exit(1)
    except Exception as e:
        print(f"\n{TerminalColors.RED}--- UNEXPECTED INTERPRETER ERROR ---{TerminalColors.RESET}", file=sys.stderr)
        print("This may be a bug in the interpreter. Please report it.", file=sys.stderr)
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
