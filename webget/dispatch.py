"""Apply recognized command-line options to the run configuration."""

import sys
from typing import Optional

from webget.config import Config
from webget.help import help_text, print_usage_error, version_text
from webget.options import OptionKind
from webget.settings import run_command, setoptval
from webget.switches import CompiledSwitches, OptionId

# Letters accepted by the legacy "-n" option and the commands they run.
LEGACY_NO_TOGGLES = {
    "v": ("verbose", "0"),
    "H": ("addhostdir", "0"),
    "d": ("dirstruct", "0"),
    "c": ("noclobber", "1"),
    "p": ("noparent", "1"),
}


def parse_flag(optarg: Optional[str]) -> bool:
    """Truth value of the optional argument to --parent and --clobber.

    No argument means true; otherwise "1", anything starting with "y" and
    anything starting with "on" are true, regardless of case.
    """
    if optarg is None:
        return True
    lowered = optarg.lower()
    return lowered.startswith(("1", "y", "on"))


def dispatch(config: Config, switches: CompiledSwitches, ident: OptionId,
             optarg: Optional[str], exec_name: str = "webget"):
    """Apply a single option to CONFIG.

    Help and version print their text and exit with status 0; an unknown
    letter given to ``-n`` exits with status 1.  Values the setter cannot
    use raise InvalidValue.
    """
    opt, negated = switches.resolve(ident)

    if opt.kind == OptionKind.VALUE:
        setoptval(config, opt.command, optarg)
    elif opt.kind == OptionKind.BOOLEAN:
        if optarg is not None:
            # The user has specified a value, use it.
            setoptval(config, opt.command, optarg)
        else:
            setoptval(config, opt.command, "0" if negated else "1")
    elif opt.kind == OptionKind.APPEND_OUTPUT:
        setoptval(config, "logfile", optarg)
        config.append_to_log = True
    elif opt.kind == OptionKind.EXECUTE:
        run_command(config, optarg)
    elif opt.kind == OptionKind.HELP:
        print(help_text(exec_name))
        sys.exit(0)
    elif opt.kind == OptionKind.VERSION:
        print(version_text())
        sys.exit(0)
    elif opt.kind == OptionKind.NO:
        for char in optarg:
            if char not in LEGACY_NO_TOGGLES:
                print_usage_error(exec_name, f"{exec_name}: illegal option -- `-n{char}'")
                sys.exit(1)
            setoptval(config, *LEGACY_NO_TOGGLES[char])
    elif opt.kind in (OptionKind.PARENT, OptionKind.CLOBBER):
        # The commands are named noparent and noclobber, so the meaning
        # of the flag is inverted on the way in.
        command = "noparent" if opt.kind == OptionKind.PARENT else "noclobber"
        setoptval(config, command, "0" if parse_flag(optarg) else "1")
    else:
        raise AssertionError(f"unhandled option kind {opt.kind}")
