"""Compile the option table into the structures the scanner consumes."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence, Tuple, Union

from webget.options import OPTION_DATA, ArgRequirement, OptionDescriptor, OptionKind


@dataclass(frozen=True)
class Positive:
    """Identifier of an option used in its plain form."""

    index: int


@dataclass(frozen=True)
class Negated:
    """Identifier of the synthesized ``--no-FOO`` form of a boolean option."""

    index: int


OptionId = Union[Positive, Negated]


@dataclass(frozen=True)
class LongOption:
    """A long option as seen by the scanner."""

    name: str
    has_arg: ArgRequirement
    ident: OptionId


@dataclass(frozen=True)
class CompiledSwitches:
    """Runtime view of the option table.

    ``long_options`` keeps table order, with each ``no-`` variant directly
    after the boolean it negates. ``short_options`` is a getopt-style
    string and ``short_map`` resolves a short character to its long entry.
    """

    table: Tuple[OptionDescriptor, ...]
    long_options: Tuple[LongOption, ...]
    short_options: str
    short_map: Mapping[str, LongOption]

    def resolve(self, ident: OptionId) -> Tuple[OptionDescriptor, bool]:
        """Recover the descriptor behind an identifier and whether it was negated."""
        return self.table[ident.index], isinstance(ident, Negated)


def no_prefix(name: str) -> str:
    """Name of the negated variant of a boolean option."""
    return "no-" + name


def compile_switches(table: Sequence[OptionDescriptor] = OPTION_DATA) -> CompiledSwitches:
    """Build the long option list, short option string and short index."""
    long_options = []
    short_chars = []
    short_map = {}

    for index, opt in enumerate(table):
        if not opt.long_name:
            # The option is disabled.
            continue

        if opt.kind == OptionKind.VALUE:
            has_arg = ArgRequirement.REQUIRED
        elif opt.kind == OptionKind.BOOLEAN:
            # Optional arguments are only reachable through the long form;
            # on a short option they would prevent clustering.
            has_arg = ArgRequirement.OPTIONAL
        else:
            has_arg = opt.argtype

        entry = LongOption(opt.long_name, has_arg, Positive(index))
        long_options.append(entry)

        if opt.short_name:
            assert opt.short_name not in short_map, f"duplicate short option -{opt.short_name}"
            assert opt.short_name.isprintable() and opt.short_name not in ":-"
            short_map[opt.short_name] = entry
            short_chars.append(opt.short_name)
            if has_arg == ArgRequirement.REQUIRED:
                short_chars.append(":")

        if opt.kind == OptionKind.BOOLEAN:
            # "--no-FOO" is "--foo" with the opposite meaning, and it
            # never takes an argument.
            long_options.append(LongOption(no_prefix(opt.long_name), ArgRequirement.NONE, Negated(index)))

    names = [entry.name for entry in long_options]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    assert not duplicates, f"duplicate long options: {duplicates}"

    return CompiledSwitches(
        table=tuple(table),
        long_options=tuple(long_options),
        short_options="".join(short_chars),
        short_map=MappingProxyType(short_map),
    )
