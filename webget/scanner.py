"""GNU-style long and short option scanner driven by compiled switches."""

from getopt import GetoptError
from typing import Iterator, List, Optional, Sequence, Tuple

from webget.options import ArgRequirement
from webget.switches import CompiledSwitches, LongOption, OptionId


class OptionScanner:
    """Iterate over the options of an argument vector, one at a time.

    Behaves like ``getopt_long``: operands may be interleaved with options
    and are collected in ``operands``, ``--`` ends option processing, long
    options may be abbreviated to any unambiguous prefix, and short options
    that take no mandatory argument may be clustered (``-rNk``).

    Malformed input raises ``getopt.GetoptError``.
    """

    def __init__(self, switches: CompiledSwitches, argv: Sequence[str]):
        self.switches = switches
        self.argv = list(argv)
        self.operands: List[str] = []

    def __iter__(self) -> Iterator[Tuple[OptionId, Optional[str]]]:
        args = self.argv
        i = 0
        while i < len(args):
            arg = args[i]
            i += 1

            if arg == "--":
                self.operands.extend(args[i:])
                return

            if arg.startswith("--"):
                name, sep, value = arg[2:].partition("=")
                entry = self._match_long(name)
                if sep:
                    if entry.has_arg == ArgRequirement.NONE:
                        raise GetoptError(f"option '--{entry.name}' doesn't allow an argument", entry.name)
                    optarg = value
                elif entry.has_arg == ArgRequirement.REQUIRED:
                    if i >= len(args):
                        raise GetoptError(f"option '--{entry.name}' requires an argument", entry.name)
                    optarg = args[i]
                    i += 1
                else:
                    optarg = None
                yield entry.ident, optarg
                continue

            if arg.startswith("-") and arg != "-":
                pos = 1
                while pos < len(arg):
                    char = arg[pos]
                    pos += 1
                    entry = self.switches.short_map.get(char)
                    if entry is None:
                        raise GetoptError(f"invalid option -- '{char}'", char)
                    if entry.has_arg != ArgRequirement.REQUIRED:
                        yield entry.ident, None
                        continue
                    # The rest of the cluster, or the next word, is the argument.
                    if pos < len(arg):
                        optarg = arg[pos:]
                    elif i < len(args):
                        optarg = args[i]
                        i += 1
                    else:
                        raise GetoptError(f"option requires an argument -- '{char}'", char)
                    yield entry.ident, optarg
                    break
                continue

            self.operands.append(arg)

    def _match_long(self, name: str) -> LongOption:
        """Find the long option NAME, accepting unambiguous prefixes."""
        candidates = []
        for entry in self.switches.long_options:
            if entry.name == name:
                return entry
            if entry.name.startswith(name):
                candidates.append(entry)

        if not name or not candidates:
            raise GetoptError(f"unrecognized option '--{name}'", name)
        if len({(entry.ident, entry.has_arg) for entry in candidates}) > 1:
            choices = " ".join("--" + entry.name for entry in candidates)
            raise GetoptError(f"option '--{name}' is ambiguous; possibilities: {choices}", name)
        return candidates[0]
