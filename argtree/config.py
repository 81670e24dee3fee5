"""
argtree parsing policies.

- System: process-wide parsing policy. Created once for a root command and shared by
  reference with every descendant (never mutated after creation).
- Config: per-command behavior. A child's config is its parent's config shallow-merged
  with the child's own overrides (see Config.__replace__).

Both objects are keyword-driven: every field defaults to Unset, is sanitized on
construction, and is exposed as a read-only property.
"""
from .prompts import ask
from .utils import *


def _sanitize_switches(cls, metadata, names, /):
    """
    Validate boolean policy fields in place, resolving Unset to the field default.
    """
    for name in names:
        if not isinstance(object := metadata[name], bool | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")
        metadata[name] = coalesce(object, cls.__defaults__[name])


class System(metaclass=ReflectiveType):
    """
    Process-wide parsing policy.

    Fields
    - allow_equal_assign: accept '--name=value' (otherwise it is an error).
    - boolean_not_syntax_ending: suffix that negates a boolean flag ('--debug\\'); None disables it.
    - allow_duplicate_flag_for_list: repeating a list flag keeps accumulating values.
    - overwrite_duplicate_flag_for_list: repeating a list flag restarts its values.
    - allow_duplicate_flag_for_primitive: repeating a primitive flag restarts its values.
    - allow_multiple_values_for_primitive: several values for a primitive flag keep the last one.
    - split_list_by_comma: list values are split on commas before validation.
    - skip_unknown_flag: unknown flags (and their values) are dropped instead of failing.
    - allow_extra_arguments: leftover positionals are ignored instead of failing.
    - do_not_exit_on_error: start() renders parse errors without exiting the process.
    """
    __introspectable__ = (
        "allow_equal_assign",
        "boolean_not_syntax_ending",
        "allow_duplicate_flag_for_list",
        "overwrite_duplicate_flag_for_list",
        "allow_duplicate_flag_for_primitive",
        "allow_multiple_values_for_primitive",
        "split_list_by_comma",
        "skip_unknown_flag",
        "allow_extra_arguments",
        "do_not_exit_on_error",
    )

    __defaults__ = {
        "allow_equal_assign": True,
        "boolean_not_syntax_ending": "\\",
        "allow_duplicate_flag_for_list": True,
        "overwrite_duplicate_flag_for_list": False,
        "allow_duplicate_flag_for_primitive": False,
        "allow_multiple_values_for_primitive": False,
        "split_list_by_comma": False,
        "skip_unknown_flag": False,
        "allow_extra_arguments": False,
        "do_not_exit_on_error": False,
    }

    def __new__(
            cls,
            *,
            allow_equal_assign=Unset,
            boolean_not_syntax_ending=Unset,
            allow_duplicate_flag_for_list=Unset,
            overwrite_duplicate_flag_for_list=Unset,
            allow_duplicate_flag_for_primitive=Unset,
            allow_multiple_values_for_primitive=Unset,
            split_list_by_comma=Unset,
            skip_unknown_flag=Unset,
            allow_extra_arguments=Unset,
            do_not_exit_on_error=Unset,
    ):
        metadata = {
            "allow_equal_assign": allow_equal_assign,
            "boolean_not_syntax_ending": boolean_not_syntax_ending,
            "allow_duplicate_flag_for_list": allow_duplicate_flag_for_list,
            "overwrite_duplicate_flag_for_list": overwrite_duplicate_flag_for_list,
            "allow_duplicate_flag_for_primitive": allow_duplicate_flag_for_primitive,
            "allow_multiple_values_for_primitive": allow_multiple_values_for_primitive,
            "split_list_by_comma": split_list_by_comma,
            "skip_unknown_flag": skip_unknown_flag,
            "allow_extra_arguments": allow_extra_arguments,
            "do_not_exit_on_error": do_not_exit_on_error,
        }

        _sanitize_switches(cls, metadata, (name for name in cls.__introspectable__ if name != "boolean_not_syntax_ending"))

        # None disables negation. An empty suffix would match every key.
        if not isinstance(ending := metadata["boolean_not_syntax_ending"], str | None | Unset):
            raise TypeError(f"{cls.__typename__} 'boolean_not_syntax_ending' must be a string or None")
        elif isinstance(ending, str) and (not ending or any(char.isspace() or char == "=" for char in ending)):
            raise ValueError(f"{cls.__typename__} 'boolean_not_syntax_ending' must be non-empty without spaces or '='")
        metadata["boolean_not_syntax_ending"] = coalesce(ending, cls.__defaults__["boolean_not_syntax_ending"])

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __replace__(self, **overrides):
        return type(self)(**{name: getattr(self, name) for name in type(self).__introspectable__} | overrides)


class Config(metaclass=ReflectiveType):
    """
    Per-command behavior, inherited (and overridable) by subcommands.

    Fields
    - help: intercept '--help'/'-h' and '--help-usage'/'-hu' before parsing.
    - enable_trailing_args: split the token stream at trailing_args_separator.
    - trailing_args_separator: token after which everything is passed through verbatim.
    - skip_global_flags: do not inherit the parent's global flags.
    - colorful: colored help and fault rendering.
    - fancy: panel chrome around rendered faults.
    - asker: interactive prompting collaborator, called as asker(schema, message).
    """
    __introspectable__ = (
        "help",
        "enable_trailing_args",
        "trailing_args_separator",
        "skip_global_flags",
        "colorful",
        "fancy",
        "asker",
    )

    __defaults__ = {
        "help": True,
        "enable_trailing_args": False,
        "trailing_args_separator": "--",
        "skip_global_flags": False,
        "colorful": True,
        "fancy": False,
    }

    def __new__(
            cls,
            *,
            help=Unset,
            enable_trailing_args=Unset,
            trailing_args_separator=Unset,
            skip_global_flags=Unset,
            colorful=Unset,
            fancy=Unset,
            asker=Unset,
    ):
        metadata = {
            "help": help,
            "enable_trailing_args": enable_trailing_args,
            "trailing_args_separator": trailing_args_separator,
            "skip_global_flags": skip_global_flags,
            "colorful": colorful,
            "fancy": fancy,
            "asker": asker,
        }

        _sanitize_switches(cls, metadata, ("help", "enable_trailing_args", "skip_global_flags", "colorful", "fancy"))

        if not isinstance(separator := metadata["trailing_args_separator"], str | Unset):
            raise TypeError(f"{cls.__typename__} 'trailing_args_separator' must be a string")
        elif isinstance(separator, str) and (not separator or separator != separator.strip()):
            raise ValueError(f"{cls.__typename__} 'trailing_args_separator' must be a non-empty token")
        metadata["trailing_args_separator"] = coalesce(separator, cls.__defaults__["trailing_args_separator"])

        if not callable(asker) and asker is not Unset:
            raise TypeError(f"{cls.__typename__} 'asker' must be callable")
        metadata["asker"] = coalesce(asker, ask)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __replace__(self, **overrides):
        """
        Shallow merge: fields given in overrides win, the rest is kept from self.
        """
        return type(self)(**{name: getattr(self, name) for name in type(self).__introspectable__} | overrides)


__all__ = (
    "System",
    "Config",
)
