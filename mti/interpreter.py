import json
import os
from typing import Any, Dict, List, Optional, TextIO

from mti.lexer.lexer import tokenize
from mti.parser.core.classes import Program
from mti.parser.core.parser import parse_methodic
from mti.runtime.evaluator import Evaluator
from mti.runtime.values import Value

from .exceptions import InternalInterpreterError, MethodicError, MethodicRuntimeError
from .utils import InterpreterArtifactEncoder, token_to_dict, unlimited_int_digits

STAGES = ("tokens", "ast", "run")


class InterpreterPipeline:
    """
    Orchestrates the full run from source text to evaluated values.
    This class manages the flow of data between the lexing, parsing and
    evaluation stages, and can save the artifact of any stage as JSON.
    """

    def __init__(
        self,
        source_content: str,
        file_path: Optional[str],
        output: Optional[TextIO] = None,
        dump_stages: List[str] = [],
        stop_after_stage: Optional[str] = None,
        keep_going: bool = False,
    ):
        self.source_content = source_content
        self.file_path = os.path.abspath(file_path) if file_path else "<stdin>"
        self.output = output
        self.dump_stages = dump_stages
        self.stop_after_stage = stop_after_stage
        self.keep_going = keep_going
        self.artifacts: Dict[str, Any] = {}
        self.results: List[Any] = []
        self.errors: List[MethodicRuntimeError] = []

    def run(self) -> Any:
        """
        Executes the pipeline stage by stage.
        The artifact from each stage is passed as input to the next.
        """
        try:
            # --- Stage 1: Lexing ---
            # Parsing lexes on its own, so the token list is only built when asked for.
            if "tokens" in self.dump_stages or self.stop_after_stage == "tokens":
                self._run_simple_stage("tokens", tokenize, self.source_content, self.file_path)
                if self.stop_after_stage == "tokens":
                    return self.results[-1]

            # --- Stage 2: Parsing ---
            self._run_simple_stage("ast", parse_methodic, self.source_content, self.file_path)
            if self.stop_after_stage == "ast":
                return self.results[-1]

            # --- Stage 3: Evaluation ---
            # The input is the AST from the previous stage
            self._run_simple_stage("run", self._evaluate, self.results[-1])
            return self.results[-1]

        except MethodicError:
            raise
        except RecursionError as e:
            raise InternalInterpreterError(f"The source is nested too deeply to be processed: {e}") from e

    def _evaluate(self, program: Program) -> List[Value]:
        evaluator = Evaluator(program, output=self.output)
        if not self.keep_going:
            return evaluator.run()

        # Report a failing statement and carry on with the next one.
        evaluator.bind_globals()
        values = []
        for statement in program.statements:
            try:
                values.append(evaluator.evaluate_statement(statement))
            except MethodicRuntimeError as e:
                self.errors.append(e)
        return values

    def _run_simple_stage(self, name: str, func, *args, **kwargs) -> Any:
        """Runs a single function as a stage, storing and returning its result."""
        result = func(*args, **kwargs)
        self.artifacts[name] = result
        self.results.append(result)  # Append to the results chain
        if name in self.dump_stages:
            self.save_artifact(name, result)
        return result

    def save_artifact(self, name: str, data: Any):
        """Saves an intermediate artifact to a JSON file with a user-friendly name."""

        if self.file_path == "<stdin>":
            base_name = "stdin_output"
        else:
            base_name = os.path.splitext(self.file_path)[0]

        output_path = f"{base_name}.{name}.json"

        if name == "tokens":
            data = [token_to_dict(token) for token in data]

        print(f"--- Saving artifact '{name}' to {output_path} ---")

        with open(output_path, "w", encoding="utf-8") as f, unlimited_int_digits():
            json.dump(data, f, indent=2, sort_keys=False, cls=InterpreterArtifactEncoder)


def run_methodic(
    source_content: str,
    file_path: Optional[str] = None,
    output: Optional[TextIO] = None,
    dump_stages: List[str] = [],
    stop_after_stage: Optional[str] = None,
    keep_going: bool = False,
):
    """High-level entry point for the interpreter pipeline."""
    pipeline = InterpreterPipeline(source_content, file_path, output, dump_stages, stop_after_stage, keep_going)
    return pipeline.run()
