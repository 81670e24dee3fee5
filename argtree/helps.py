"""
argtree help and usage rendering.

- render_help(command, console): overview line, subcommands, arguments, flags,
  trailing-arguments note and tips.
- render_usage(command, console): the usage guide; explains the command-line structure,
  how option values are written, and which parsing policies are enabled for this command.

Palette keys
- program-name, description, usage-label, dollar
- section-label, programs, arguments, flags, type, placeholder, table
- valid, invalid, point

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- Colour is never global: it comes from command.config.colorful, or from the explicit
  colorful argument.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Group
from rich.table import Table
from rich.text import Text

from .utils import *


def _palette(colorful):
    styles = defaultdict(str, {
        "program-name": "bold #00E6FF",
        "description": "italic #A3A3A3",
        "usage-label": "bold #FFFFFF",
        "dollar": "#00E6FF",
        "section-label": "bold #FFFFFF",
        "programs": "bold #FFD600",
        "arguments": "bold #36C5F0",
        "flags": "bold #22C55E",
        "type": "#FF4D94",
        "placeholder": "dim",
        "table": "#4B5563",
        "valid": "#22C55E",
        "invalid": "#EF4444",
        "point": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    def styler(style):
        return styles[style] if colorful else ""

    return text, styler


def _table(styler, *columns):
    return Table(*columns, box=ROUNDED, style=styler("table"), header_style=styler("section-label"), show_header=False)


def _type_label(schema, text):
    if schema is None:
        return text("string", "type")
    return text(schema.name, "type")


def _overview(command, text):
    items = [text(name, "placeholder") for name in command.lineage]

    if command.programs:
        items.append(text("(program)", "programs"))
    for argument in command.arguments:
        items.append(text(f"<{argument.name}>", "arguments"))
    for argument in command.optional_arguments:
        items.append(Text.assemble(text(f"<{argument.name}>", "arguments"), "?"))
    if command.list_argument is not None:
        items.append(text(f"[...{command.list_argument.name}]", "arguments"))
    if command.flags or command.global_flags:
        items.append(text("--[flags]", "flags"))
    if command.config.enable_trailing_args:
        items.append(text(command.config.trailing_args_separator, "description"))
        items.append(text("[...trailing-args]", "description"))

    head = Text.assemble(text(command.name, "program-name"))
    if command.description:
        head.append(" ").append(text(command.description, "description"))

    return Group(
        head,
        Text(""),
        text("Usage:", "usage-label"),
        Text(" ").join([text("$", "dollar"), *items]),
    )


def _programs(command, text, styler):
    table = _table(styler, "name", "description")
    for name, program in command.programs.items():
        table.add_row(text(name, "programs"), text(program.description or "---", "description"))
    return Group(text("Programs:", "section-label"), table)


def _arguments(command, text, styler):
    table = _table(styler, "name", "type", "description")

    for argument in command.arguments:
        table.add_row(
            text(argument.name, "arguments"),
            _type_label(argument.schema, text),
            text(argument.description or "---", "description"),
        )

    for argument in command.optional_arguments:
        table.add_row(
            text(argument.name, "arguments"),
            Text.assemble(_type_label(argument.schema, text), "?"),
            text(argument.description or "---", "description"),
        )

    if (argument := command.list_argument) is not None:
        label = Text.assemble(_type_label(argument.schema, text), "[]", "" if argument.min_length else "?")
        if argument.min_length is not None:
            label.append("\nmin: ").append(text(argument.min_length, "programs"))
        if argument.max_length is not None:
            label.append("\nmax: ").append(text(argument.max_length, "programs"))
        table.add_row(text(argument.name, "arguments"), label, text(argument.description or "---", "description"))

    return Group(text("Arguments:", "section-label"), table)


def _flag_rank(item):
    _, schema = item
    fallback = schema.config["default"] is not Unset or schema.config["ask"] is not Unset
    if schema.config["required"]:
        return 1 if fallback else 0
    return 2


def _flags(title, flags, text, styler):
    table = _table(styler, "name", "type", "description")

    for name, schema in sorted(sorted(flags.items()), key=_flag_rank):
        label = Text.assemble("--", text(name, "flags"))
        for alias in schema.config["aliases"]:
            label.append("\n -").append(text(alias, "flags"))

        optional = _flag_rank((name, schema)) != 0
        table.add_row(
            label,
            Text.assemble(_type_label(schema, text), "?" if optional else ""),
            text(schema.config["description"] or "---", "description"),
        )

    return Group(text(title, "section-label"), table)


def render_help(command, console, /, colorful=Unset):
    """
    Print the help screen of a command.
    """
    text, styler = _palette(coalesce(colorful, command.config.colorful))
    renders = [_overview(command, text)]

    if command.programs:
        renders.append(_programs(command, text, styler))

    if command.arguments or command.optional_arguments or command.list_argument is not None:
        renders.append(_arguments(command, text, styler))

    if command.flags:
        renders.append(_flags("Flags:", command.flags, text, styler))

    if command.global_flags:
        renders.append(_flags("Global flags:", command.global_flags, text, styler))

    if command.config.enable_trailing_args:
        renders.append(Group(
            text("Trailing arguments:", "section-label"),
            Text.assemble(
                " Everything after ",
                text(command.config.trailing_args_separator, "flags"),
                " is ",
                text("ignored", "invalid"),
                " by the parser and passed as is.",
            ),
        ))

    if command.config.help:
        renders.append(Group(
            text("Tips:", "section-label"),
            Text.assemble(
                " Use ", text("--help-usage", "flags"), " or ", text("-hu", "flags"),
                " to see how to write the command line.",
            ),
        ))

    for index, render in enumerate(renders):
        if index:
            console.print()
        console.print(render)


def _example(text, valid, *fragments):
    mark = text("  ✔ " if valid else "  ✖ ", "valid" if valid else "invalid")
    return Text.assemble(mark, Text(" ").join(text(*fragment) if isinstance(fragment, tuple) else Text(fragment) for fragment in fragments))


def _policy(text, title, enabled, valid, invalid):
    lines = [text(f" ⚙ {title} is {'enabled' if enabled else 'disabled'}", "point"), _example(text, True, *valid)]
    lines.append(_example(text, enabled, *invalid))
    return Group(*lines)


def render_usage(command, console, /, colorful=Unset):
    """
    Print the usage guide of a command: structure, value syntax and active policies.
    """
    text, styler = _palette(coalesce(colorful, command.config.colorful))
    system, config = command.system, command.config
    ending = system.boolean_not_syntax_ending
    option = ("--option", "flags")

    structure = Group(
        text("How to use:", "section-label"),
        Text.assemble(
            " ",
            Text(" ").join([
                text("programs", "programs"),
                text("arguments", "arguments"),
                text("optional-arguments", "arguments"),
                text("list-argument", "arguments"),
                text("flags", "flags"),
                text("trailing-args", "description"),
            ]),
        ),
        Text(" The order is fixed: the program name comes first, every argument comes before the first flag."),
    )

    values = _table(styler, "type", "syntax", "result")
    values.add_row(text("string", "type"), Text("--string text\n--string=text"), Text("'text'"))
    values.add_row(text("number", "type"), Text("--number 100\n--number=100"), Text("100"))
    values.add_row(
        text("boolean", "type"),
        Text("--boolean\n--boolean true\n--boolean=yes\n* casing doesn't matter"),
        Text("True"),
    )
    values.add_row(
        text("boolean", "type"),
        Text("\n".join(filter(None, (f"--boolean{ending}" if ending else None, "--boolean false", "--boolean=no")))),
        Text("False"),
    )
    values.add_row(
        text("array\ntuple", "type"),
        Text("--option value1 value2\n--option=value1 value2"),
        Text("['value1', 'value2']"),
    )

    policies = [
        _policy(text, "Equal assignment", system.allow_equal_assign, (option, "value"), ("--option=value",)),
        _policy(
            text, "Boolean negation", bool(ending),
            (option,),
            ("--option" + (ending or "\\"),),
        ),
        _policy(
            text, "Duplicate flags for primitives", system.allow_duplicate_flag_for_primitive,
            (option, "value"),
            (option, "value1", option, "value2"),
        ),
        _policy(
            text, "Duplicate flags for lists", system.allow_duplicate_flag_for_list,
            (option, "a", "b"),
            (option, "a", option, "b"),
        ),
        _policy(
            text, "Multiple values for primitives", system.allow_multiple_values_for_primitive,
            (option, "value"),
            (option, "value1", "value2"),
        ),
        _policy(
            text, "Comma separated lists", system.split_list_by_comma,
            (option, "a", "b"),
            (option, "a,b"),
        ),
        _policy(
            text, "Trailing arguments", config.enable_trailing_args,
            (option, "value"),
            (option, "value", config.trailing_args_separator, "trailing-args"),
        ),
    ]

    console.print(structure)
    console.print()
    console.print(Group(text("Values:", "section-label"), values))
    console.print()
    console.print(text("Configuration:", "section-label"))
    for policy in policies:
        console.print(policy)


__all__ = (
    "render_help",
    "render_usage",
)
