"""
argtree flag resolution and value accumulation.

resolve() maps a flag/alias record to its (key, schema) entry; the Accumulator is the
state machine that walks the option zone record by record, collects raw values per
flag, and finally validates them and applies defaults.

States
- EXPECTING: nothing opened yet.
- CURRENT: a flag is open and already has at least one value.
- MUST_HAVE_VALUE: a flag was just opened without an embedded value.
- SKIPPING: an unknown flag is being ignored, together with its values.
"""
from enum import Enum, auto

from .faults import *
from .schemas import SchemaKind, validate
from .tokens import TokenKind
from .utils import *


class State(Enum):
    EXPECTING = auto()
    CURRENT = auto()
    MUST_HAVE_VALUE = auto()
    SKIPPING = auto()


def resolve(record, flags, global_flags, /):
    """
    Find the (key, schema) entry for a flag or alias record, or None when unknown.

    Own flags shadow global ones of the same name, together with their aliases.
    """
    table = defined(flags, global_flags)

    if record.kind is TokenKind.FLAG:
        if record.key in table:
            return record.key, table[record.key]
        return None

    for key, schema in table.items():
        if record.key in schema.config["aliases"]:
            return key, schema
    return None


def defined(flags, global_flags, /):
    """
    Combined flag table in declaration order, own flags first.
    """
    return flags | {key: schema for key, schema in global_flags.items() if key not in flags}


class Accumulator:
    """
    Collect raw values for the flags of one command invocation.

    Feed every record of the option zone, then call finish() to obtain the validated
    values and the flags whose value must still be asked for.
    """

    def __init__(self, flags, global_flags, system):
        self.flags = flags
        self.global_flags = global_flags
        self.system = system
        self.state = State.EXPECTING
        self.current = None
        self.values = {}
        self.schemas = {}
        self.sources = {}

    def feed(self, record):
        if record.kind is TokenKind.VALUE:
            return self._push(record)
        return self._open(record)

    def _settle(self):
        """
        Close a flag that was opened without any value.
        """
        if self.state is not State.MUST_HAVE_VALUE:
            return

        key, record = self.current
        if (schema := self.schemas[key]).kind is SchemaKind.BOOLEAN:
            self.values[key].append("true")
            self.state = State.CURRENT
            return

        raise MissingOptionValueError(
            f"Option {record.raw!r} at {ordinal(record.index)} position expects a value.",
            code=FaultCode.MISSING_OPTION_VALUE,
            title="missing value",
            hint=f"give it a {schema.name} value: '{record.raw} <value>'",
            input=record.raw,
            index=record.index,
        )

    def _open(self, record):
        self._settle()

        if (entry := resolve(record, self.flags, self.global_flags)) is None:
            if self.system.skip_unknown_flag:
                self.state = State.SKIPPING
                self.current = None
                return
            raise UnknownOptionError(
                f"Unknown option {record.raw!r} at {ordinal(record.index)} position.",
                code=FaultCode.UNKNOWN_OPTION,
                title="unknown option",
                hint="run with '--help' to list the available options",
                input=record.raw,
                index=record.index,
            )

        key, schema = entry

        if key in self.values:
            self._duplicate(record, key, schema)

        if record.negated:
            if schema.kind is not SchemaKind.BOOLEAN:
                raise NegationAssignmentError(
                    f"Option {record.raw!r} at {ordinal(record.index)} position cannot be negated, "
                    f"only boolean options accept {self.system.boolean_not_syntax_ending!r}.",
                    code=FaultCode.NEGATION_ASSIGNMENT,
                    title="negation assignment",
                    hint=f"remove the trailing {self.system.boolean_not_syntax_ending!r}",
                    input=record.raw,
                    index=record.index,
                )
            record = record._replace(value="false")

        self.values.setdefault(key, [])
        self.schemas[key] = schema
        self.sources[key] = record
        self.current = key, record

        if record.value is not None:
            self.values[key].append(record.value)
            self.state = State.CURRENT
        else:
            self.state = State.MUST_HAVE_VALUE

    def _duplicate(self, record, key, schema):
        if schema.islist:
            if self.system.allow_duplicate_flag_for_list:
                if self.system.overwrite_duplicate_flag_for_list:
                    self.values[key] = []
                return
        elif self.system.allow_duplicate_flag_for_primitive:
            self.values[key] = []
            return

        raise DuplicateOptionError(
            f"Option {record.raw!r} at {ordinal(record.index)} position was already given.",
            code=FaultCode.DUPLICATE_OPTION,
            title="duplicate option",
            hint=f"pass '--{key}' only once",
            input=record.raw,
            index=record.index,
        )

    def _push(self, record):
        match self.state:
            case State.SKIPPING:
                return
            case State.EXPECTING:
                if self.system.skip_unknown_flag:
                    return
                raise UnexpectedValueError(
                    f"Unexpected value {record.raw!r} at {ordinal(record.index)} position, expected an option.",
                    code=FaultCode.UNEXPECTED_VALUE,
                    title="unexpected value",
                    hint="positional arguments must come before every option",
                    input=record.raw,
                    index=record.index,
                )

        key, _ = self.current
        self.values[key].append(record.value)
        self.state = State.CURRENT

    def _collect(self, key):
        schema, record, raws = self.schemas[key], self.sources[key], self.values[key]

        if schema.islist:
            if self.system.split_list_by_comma:
                raws = [piece.strip() for raw in raws for piece in raw.split(",") if piece.strip()]
            outcome = validate(schema, raws)
        else:
            if len(raws) > 1 and not self.system.allow_multiple_values_for_primitive:
                raise MultipleValuesError(
                    f"Option {record.raw!r} at {ordinal(record.index)} position accepts a single value "
                    f"but received {len(raws)}.",
                    code=FaultCode.MULTIPLE_VALUES,
                    title="multiple values",
                    hint="quote the value if it contains spaces",
                    input=record.raw,
                    index=record.index,
                )
            outcome = validate(schema, raws[-1])

        if not outcome.valid:
            raise InvalidOptionValueError(
                f"Invalid value for option {record.raw!r} at {ordinal(record.index)} position: {outcome.error}.",
                code=FaultCode.INVALID_OPTION_VALUE,
                title="invalid value",
                hint=f"'--{key}' expects {schema.name}",
                input=record.raw,
                index=record.index,
            )
        return outcome.value

    def finish(self):
        """
        Validate everything collected and apply defaults.

        Returns (values, pending): values maps flag names to validated values, pending
        lists (key, schema) pairs whose value must be asked for interactively.
        """
        self._settle()

        values = {key: self._collect(key) for key in self.values}
        pending = []

        for key, schema in defined(self.flags, self.global_flags).items():
            if key in values:
                continue
            if schema.config["ask"] is not Unset:
                pending.append((key, schema))
            elif schema.config["default"] is not Unset:
                values[key] = schema.config["default"]
            elif schema.config["required"]:
                raise RequiredOptionError(
                    f"Option '--{key}' is required.",
                    code=FaultCode.REQUIRED_OPTION,
                    title="required option",
                    hint=f"pass '--{key} <{schema.name}>'",
                    input=f"--{key}",
                )

        return values, pending


def accumulate(records, flags, global_flags, system, /):
    """
    Run the accumulator over a full option zone.
    """
    accumulator = Accumulator(flags, global_flags, system)
    for record in records:
        accumulator.feed(record)
    return accumulator.finish()


__all__ = (
    "State",
    "resolve",
    "defined",
    "Accumulator",
    "accumulate",
)
