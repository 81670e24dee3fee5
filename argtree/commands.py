"""
argtree command layer: build a command tree and run command lines through it.

What this module provides
- program(name, ...): the factory for a root command (the only public constructor).
- Command: one node of the tree.
  • create(name, ...): attach a child that inherits system, config and global flags.
  • on(action): register the callback run with the Bound result (once).
  • parse/run/start and their *_async twins.
- Bound: the result handed to actions (args, opt_args, list_args, flags,
  trailing_args, route).
- Registry: flat arena of nodes; a node knows its parent by index only.

Pipeline of one invocation
    tokens → routing (first token selects a child, recursively)
           → trailing split → help interception → divide
           → bind positionals → accumulate flags → prompts → action

Quick start
    from argtree import program, Argument, string, number, boolean

    app = program(
        "app",
        arguments=[Argument("count", number())],
        flags={"verbose": boolean().aliases("v"), "name": string().default("world")},
    )

    @app.on
    def main(bound):
        print(bound.args, bound.flags)

    if __name__ == "__main__":
        app.start()

Faults
- parse() and run() raise ParseError subclasses (see argtree.faults).
- start() renders the fault on stderr and exits with status 1, unless the system was
  built with do_not_exit_on_error=True (then it returns None).
"""
import inspect
import shlex
import sys
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from rich.console import Console

from .arguments import Argument, ListArgument
from .binder import bind
from .config import System, Config
from .faults import *
from .flags import accumulate, defined
from .helps import render_help, render_usage
from .schemas import Schema
from .tokens import divide, split_trailing, verify_name
from .utils import *

console = Console()

# Key handed by program() to Command; anything else is a direct instantiation.
_FACTORY = object()

_HELP = ("--help", "-h")
_USAGE = ("--help-usage", "-hu")


class Bound(NamedTuple):
    args: list
    opt_args: list
    list_args: list
    flags: dict
    trailing_args: list
    route: tuple


class _Draft(NamedTuple):
    bound: Bound
    arguments: list
    flags: list


class Registry:
    """
    Flat arena holding every node of one command tree.

    Nodes are appended once and never removed; the parent of a node is stored as an
    index into the arena, so nodes never hold references to their parents.
    """

    def __init__(self):
        self._nodes = []
        self._parents = []

    def __len__(self):
        return len(self._nodes)

    def add(self, node, parent=None, /):
        self._nodes.append(node)
        self._parents.append(parent)
        return len(self._nodes) - 1

    def node(self, index, /):
        return self._nodes[index]

    def parent(self, index, /):
        if (parent := self._parents[index]) is None:
            return None
        return self._nodes[parent]

    def lineage(self, index, /):
        """
        Indexes from the root down to the given node.
        """
        chain = [index]
        while (index := self._parents[index]) is not None:
            chain.append(index)
        return tuple(reversed(chain))


def _sanitize_identity(cls, metadata, /):
    verify_name(cls.__typename__, metadata["name"])

    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = coalesce(description)


def _sanitize_arguments(cls, metadata, /):
    for field in ("arguments", "optional_arguments"):
        if isinstance(metadata[field], str) or not isinstance(metadata[field], Iterable):
            raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of arguments")
        arguments = tuple(metadata[field])
        if not all(isinstance(argument, Argument) for argument in arguments):
            raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of arguments")
        metadata[field] = arguments

    if not isinstance(metadata["list_argument"], ListArgument | None):
        raise TypeError(f"{cls.__typename__} 'list_argument' must be a list argument")

    names = [argument.name for argument in (*metadata["arguments"], *metadata["optional_arguments"])]
    if metadata["list_argument"] is not None:
        names.append(metadata["list_argument"].name)
    if len(names) != len(set(names)):
        raise ValueError(f"{cls.__typename__} argument names cannot contain duplicates")


def _sanitize_flags(cls, metadata, ending, /):
    for field in ("flags", "global_flags"):
        if not isinstance(metadata[field], Mapping):
            raise TypeError(f"{cls.__typename__} {field!r} must be a mapping of names to schemas")
        for name, schema in metadata[field].items():
            verify_name("flag", name, ending)
            if not isinstance(schema, Schema):
                raise TypeError(f"{cls.__typename__} flag {name!r} must be a schema")
            for alias in schema.config["aliases"]:
                verify_name("alias", alias, ending)
        metadata[field] = dict(metadata[field])

    seen = {}
    for name, schema in defined(metadata["flags"], metadata["global_flags"]).items():
        for alias in schema.config["aliases"]:
            if alias in seen:
                raise ValueError(f"{cls.__typename__} alias {alias!r} is used by both '--{seen[alias]}' and '--{name}'")
            seen[alias] = name


def _tokenize(argv, /):
    """
    Normalize an argument vector: Unset reads sys.argv, a string is split like a shell.
    """
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("argument vector must be a string or an iterable of strings")
        return tokens
    raise TypeError("argument vector must be a string or an iterable of strings")


class Command(metaclass=ReflectiveType):
    """
    One node of a command tree.

    Read-only fields
    - name, description
    - system: System shared by the whole tree.
    - config: Config of this node (parent's config merged with the node's overrides).
    - arguments, optional_arguments, list_argument: positional declarations.
    - flags: own flags; global_flags: flags inherited by descendants (already merged
      with the parent's unless config.skip_global_flags).
    - programs: child commands by name.
    - action: registered callback or None.
    """
    __introspectable__ = (
        "name",
        "description",
        "system",
        "config",
        "arguments",
        "optional_arguments",
        "list_argument",
        "flags",
        "global_flags",
        "programs",
        "action",
    )

    __displayable__ = (
        "name",
        "description",
        "arguments",
        "optional_arguments",
        "list_argument",
        "flags",
        "global_flags",
        "programs",
    )

    def __new__(
            cls,
            key,
            name,
            /,
            *,
            description=Unset,
            arguments=(),
            optional_arguments=(),
            list_argument=None,
            flags={},
            global_flags={},
            system,
            config,
            registry,
            parent=None,
    ):
        if key is not _FACTORY:
            raise TypeError(f"type {cls.__name__!r} cannot be instantiated directly, use program() or create()")

        metadata = {
            "name": name,
            "description": description,
            "system": system,
            "config": config,
            "arguments": arguments,
            "optional_arguments": optional_arguments,
            "list_argument": list_argument,
            "flags": flags,
            "global_flags": global_flags,
            "programs": {},
            "action": None,
        }

        _sanitize_identity(cls, metadata)
        _sanitize_arguments(cls, metadata)
        _sanitize_flags(cls, metadata, system.boolean_not_syntax_ending)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._registry = registry
        self._index = registry.add(self, parent)
        return self

    # ── Tree ────────────────────────────────────────────────────────────────

    @property
    def parent(self):
        return self._registry.parent(self._index)

    @property
    def root(self):
        return self._registry.node(self._registry.lineage(self._index)[0])

    @property
    def lineage(self):
        """
        Command names from the root down to this node.
        """
        return tuple(self._registry.node(index).name for index in self._registry.lineage(self._index))

    def create(
            self,
            name,
            /,
            *,
            description=Unset,
            arguments=(),
            optional_arguments=(),
            list_argument=None,
            flags={},
            global_flags={},
            config={},
    ):
        """
        Create and attach a child command.

        The child shares this node's system, merges config overrides over this node's
        config, and inherits this node's global flags unless skip_global_flags is set.
        """
        if not isinstance(config, Mapping):
            raise TypeError(f"{type(self).__typename__} 'config' overrides must be a mapping")
        if name in self._programs:
            raise ValueError(f"{type(self).__typename__} program name {name!r} is already in use")

        config = replace(self._config, **config)
        if not config.skip_global_flags:
            if not isinstance(global_flags, Mapping):
                raise TypeError(f"{type(self).__typename__} 'global_flags' must be a mapping of names to schemas")
            global_flags = self._global_flags | global_flags

        child = Command(
            _FACTORY,
            name,
            description=description,
            arguments=arguments,
            optional_arguments=optional_arguments,
            list_argument=list_argument,
            flags=flags,
            global_flags=global_flags,
            system=self._system,
            config=config,
            registry=self._registry,
            parent=self._index,
        )
        self._programs[name] = child
        return child

    def on(self, action, /):
        """
        Register the action run with the Bound result; usable as a decorator.
        """
        if not callable(action):
            raise TypeError(f"{type(self).__typename__} action must be callable")
        if self._action is not None:
            raise TypeError(f"{type(self).__typename__} {self.name!r} already has an action")
        self._action = action
        return action

    # ── Parsing ─────────────────────────────────────────────────────────────

    def _route(self, tokens, offset=0):
        if tokens and tokens[0] in self._programs:
            return self._programs[tokens[0]]._route(tokens[1:], offset + 1)
        return self, tokens, offset

    def _draft(self, tokens, offset):
        """
        Parse everything that needs no interaction; None when help was rendered.
        """
        if self._config.enable_trailing_args:
            tokens, trailing = split_trailing(tokens, self._config.trailing_args_separator)
        else:
            trailing = []

        if self._config.help:
            for token in tokens:
                if token in _HELP:
                    render_help(self, console, colorful=self._config.colorful)
                    return None
                if token in _USAGE:
                    render_usage(self, console, colorful=self._config.colorful)
                    return None

        positionals, records = divide(tokens, self._system, offset)
        args, opt_args, list_args, arguments = bind(
            positionals,
            self._arguments,
            self._optional_arguments,
            self._list_argument,
            self._system,
            offset,
        )
        values, flags = accumulate(records, self._flags, self._global_flags, self._system)

        return _Draft(Bound(args, opt_args, list_args, values, trailing, self.lineage), arguments, flags)

    def _questions(self, draft):
        for position, argument in draft.arguments:
            yield draft.bound.args, position, argument.schema
        for key, schema in draft.flags:
            yield draft.bound.flags, key, schema

    def _settle(self, draft):
        for target, key, schema in self._questions(draft):
            value = self._config.asker(schema, schema.config["ask"])
            if inspect.isawaitable(value):
                if inspect.iscoroutine(value):
                    value.close()
                raise TypeError(
                    f"{type(self).__typename__} {self.name!r} has an asynchronous asker, "
                    "use parse_async(), run_async() or start_async()"
                )
            target[key] = value
        return draft.bound

    async def _settle_async(self, draft):
        for target, key, schema in self._questions(draft):
            value = self._config.asker(schema, schema.config["ask"])
            if inspect.isawaitable(value):
                value = await value
            target[key] = value
        return draft.bound

    def _fail(self, fault, shell):
        trigger(
            fault,
            tool=self,
            shell=shell,
            exit=not self._system.do_not_exit_on_error,
            colorful=self._config.colorful,
            fancy=self._config.fancy,
        )

    def _invoke(self, argv, /, *, shell=False, call=False):
        command, tokens, offset = self._route(_tokenize(argv))
        try:
            if (draft := command._draft(tokens, offset)) is None:
                return None
            bound = command._settle(draft)
        except ParseError as fault:
            return command._fail(fault, shell)

        if call and command._action is not None:
            command._action(bound)
        return bound

    async def _invoke_async(self, argv, /, *, shell=False, call=False):
        command, tokens, offset = self._route(_tokenize(argv))
        try:
            if (draft := command._draft(tokens, offset)) is None:
                return None
            bound = await command._settle_async(draft)
        except ParseError as fault:
            return command._fail(fault, shell)

        if call and command._action is not None:
            if inspect.isawaitable(result := command._action(bound)):
                await result
        return bound

    def parse(self, argv=Unset, /):
        """
        Parse without running any action; raise ParseError on bad input.
        """
        return self._invoke(argv)

    def run(self, argv=Unset, /):
        """
        Parse, then run the action of the selected command; raise ParseError on bad input.
        """
        return self._invoke(argv, call=True)

    def start(self, argv=Unset, /):
        """
        Like run(), but bad input is rendered on stderr and the process exits with status 1.
        """
        return self._invoke(argv, shell=True, call=True)

    async def parse_async(self, argv=Unset, /):
        return await self._invoke_async(argv)

    async def run_async(self, argv=Unset, /):
        return await self._invoke_async(argv, call=True)

    async def start_async(self, argv=Unset, /):
        return await self._invoke_async(argv, shell=True, call=True)

    # ── Rendering ───────────────────────────────────────────────────────────

    def render_help(self, console=console, /):
        render_help(self, console, colorful=self._config.colorful)

    def render_usage(self, console=console, /):
        render_usage(self, console, colorful=self._config.colorful)


def program(
        name,
        /,
        *,
        description=Unset,
        arguments=(),
        optional_arguments=(),
        list_argument=None,
        flags={},
        global_flags={},
        system=Unset,
        config=Unset,
):
    """
    Build the root command of a new tree.

    Parameters
    - system: System | Mapping | Unset (keyword arguments for System when a mapping).
    - config: Config | Mapping | Unset (keyword arguments for Config when a mapping).
    - the remaining parameters are those of Command.create().
    """
    if isinstance(system, Mapping):
        system = System(**system)
    elif not isinstance(system, System | Unset):
        raise TypeError("program() 'system' must be a system or a mapping")

    if isinstance(config, Mapping):
        config = Config(**config)
    elif not isinstance(config, Config | Unset):
        raise TypeError("program() 'config' must be a config or a mapping")

    return Command(
        _FACTORY,
        name,
        description=description,
        arguments=arguments,
        optional_arguments=optional_arguments,
        list_argument=list_argument,
        flags=flags,
        global_flags=global_flags,
        system=coalesce(system, System()),
        config=coalesce(config, Config()),
        registry=Registry(),
    )


__all__ = (
    "Bound",
    "Registry",
    "Command",
    "program",
)
