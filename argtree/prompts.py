"""
argtree default interactive prompting.

ask(schema, message) is the collaborator used by a command's config.asker when a
flag or argument marked with .ask() received no value. It keeps asking until the
answer satisfies the schema and returns the validated value.

- Primitives: a single answer; the schema default (if any) pre-fills the prompt.
  An empty boolean answer means False.
- Arrays: one item per answer, until an empty answer once min_length is satisfied
  or max_length items were collected. An empty first answer falls back to the default.
- Tuples: one answer per position.
"""
from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from .schemas import SchemaKind, validate
from .utils import Unset

console = Console()


def _prefill(value):
    if value is Unset or value is None:
        return ...
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _complain(error, console):
    console.print(Text.assemble(("  ✗ ", "bold red"), (error, "red")))


def _ask_primitive(schema, message, default, console):
    while True:
        answer = Prompt.ask(message, console=console, default=default, show_default=default is not ...)
        if schema.kind is SchemaKind.BOOLEAN and not answer.strip():
            return False
        if (outcome := validate(schema, answer)).valid:
            return outcome.value
        _complain(outcome.error, console)


def _ask_array(schema, message, console):
    inner = schema.config["schema"]
    minimum = schema.config["min_length"] or 0
    maximum = schema.config["max_length"]
    default = schema.config["default"]

    console.print(message)
    while True:
        answers = []
        while maximum is None or len(answers) < maximum:
            answer = Prompt.ask(f"  {inner.name} #{len(answers) + 1}", console=console, default="", show_default=False)
            if not answer.strip():
                if not answers and default is not Unset:
                    return list(default)
                if len(answers) >= minimum:
                    break
                _complain(f"minimum {minimum} items expected", console)
                continue
            if not (outcome := validate(inner, answer)).valid:
                _complain(outcome.error, console)
                continue
            answers.append(answer)

        if (outcome := validate(schema, answers)).valid:
            return outcome.value
        _complain(outcome.error, console)


def _ask_tuple(schema, message, console):
    console.print(message)
    return [
        _ask_primitive(inner, f"  {inner.name} #{position}", ..., console)
        for position, inner in enumerate(schema.config["schemas"], 1)
    ]


def ask(schema, message, /, console=console):
    """
    Prompt on the terminal until the answer is valid for schema; return the value.
    """
    match schema.kind:
        case SchemaKind.ARRAY:
            return _ask_array(schema, message, console)
        case SchemaKind.TUPLE:
            return _ask_tuple(schema, message, console)
        case _:
            return _ask_primitive(schema, message, _prefill(schema.config["default"]), console)


__all__ = (
    "ask",
)
