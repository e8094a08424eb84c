"""Tests for applying command-line options to the configuration."""

import pytest
from webget import __version__
from webget.config import INFINITE_RECURSION, Config
from webget.dispatch import dispatch, parse_flag
from webget.options import OPTION_DATA, OptionKind
from webget.scanner import OptionScanner
from webget.settings import COMMANDS, InvalidValue
from webget.switches import compile_switches

BOOLEAN_OPTIONS = [opt for opt in OPTION_DATA if opt.kind == OptionKind.BOOLEAN]


def apply(*args):
    """Scan and dispatch ARGS against a fresh Config."""
    config = Config()
    switches = compile_switches()
    scanner = OptionScanner(switches, args)
    for ident, optarg in scanner:
        dispatch(config, switches, ident, optarg)
    return config


class TestBooleanOptions:
    """Test plain and negated boolean options."""

    @pytest.mark.parametrize("opt", BOOLEAN_OPTIONS, ids=lambda opt: opt.long_name)
    def test_negation_is_opposite(self, opt):
        """Test that --foo and --no-foo give opposite values."""
        attr = COMMANDS[opt.command][0] or opt.command
        assert getattr(apply(f"--{opt.long_name}"), attr) is True
        assert getattr(apply(f"--no-{opt.long_name}"), attr) is False

    def test_explicit_value(self):
        """Test that an inline value overrides the default of 1."""
        assert apply("--recursive=off").recursive is False
        assert apply("--cache=on").allow_cache is True

    def test_short_flag(self):
        """Test short boolean flags."""
        config = apply("-rq")
        assert config.recursive is True
        assert config.quiet is True

    def test_recursive_implies_directories(self):
        """Test that recursion turns on directory creation."""
        assert apply("-r").dirstruct is True
        assert apply("--no-directories", "-r").dirstruct is False


class TestValueOptions:
    """Test value options."""

    def test_level(self):
        """Test both forms of the level option."""
        assert apply("--level=3").reclevel == 3
        assert apply("-l", "7").reclevel == 7
        assert apply("-l", "inf").reclevel == 0

    def test_level_zero_becomes_infinite(self):
        """Test that a depth of 0 ends up as the unlimited sentinel."""
        for args in (("--level=0",), ("-l", "0")):
            config = apply(*args)
            config.validate(1)
            assert config.reclevel == INFINITE_RECURSION

    def test_invalid_value(self):
        """Test that an uncoercible value is rejected."""
        with pytest.raises(InvalidValue):
            apply("--tries=many")
        with pytest.raises(InvalidValue):
            apply("--quota=lots")
        with pytest.raises(InvalidValue):
            apply("--cache=maybe")

    def test_list_value(self):
        """Test comma-separated list options."""
        assert apply("-A", "jpg,png", "--accept=gif").accepts == ["jpg", "png", "gif"]


class TestSpecialOptions:
    """Test options with special handling."""

    def test_append_output(self):
        """Test that --append-output sets the log file in append mode."""
        config = apply("--append-output=run.log")
        assert config.lfilename == "run.log"
        assert config.append_to_log is True

    def test_output_file(self):
        """Test that --output-file does not append."""
        config = apply("-o", "run.log")
        assert config.lfilename == "run.log"
        assert config.append_to_log is False

    def test_execute(self):
        """Test running a startup-file command from the command line."""
        assert apply("-e", "tries = 3").tries == 3
        assert apply("--execute=dir_prefix = out/").dir_prefix == "out"

    def test_execute_unknown_command(self):
        """Test that an unknown command is rejected."""
        with pytest.raises(InvalidValue):
            apply("-e", "bogus = 1")

    def test_help(self, capsys):
        """Test that --help prints the help and exits with 0."""
        with pytest.raises(SystemExit) as exc_info:
            apply("--help")
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "Usage:" in out
        assert "--recursive" in out

    def test_version(self, capsys):
        """Test that -V prints the version and exits with 0."""
        with pytest.raises(SystemExit) as exc_info:
            apply("-V")
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_legacy_no(self):
        """Test that -n decomposes into the legacy toggles."""
        config = apply("--no", "vHdcp")
        assert config.verbose is False
        assert config.add_hostdir is False
        assert config.dirstruct is False
        assert config.no_dirstruct is True
        assert config.noclobber is True
        assert config.noparent is True

    def test_legacy_no_matches_long_forms(self):
        """Test that -nv -nH -nd -nc -np equal the --no- forms."""
        short = apply("-nv", "-nH", "-nd", "-nc", "-np")
        long = apply("--no-verbose", "--no-host-directories", "--no-directories",
                     "--no-clobber", "--no-parent")
        assert vars(short) == vars(long)

    def test_legacy_no_illegal_letter(self, capsys):
        """Test that an unknown -n letter exits with 1 naming it."""
        with pytest.raises(SystemExit) as exc_info:
            apply("--no", "vz")
        assert exc_info.value.code == 1
        assert "-nz" in capsys.readouterr().err

    def test_parent_inverted(self):
        """Test that --parent writes the inverse into noparent."""
        assert apply("--parent=yes").noparent is False
        assert apply("--parent").noparent is False
        assert apply("--parent=no").noparent is True
        assert apply("--no-parent", "--parent=ON").noparent is False

    def test_clobber_inverted(self):
        """Test that --clobber writes the inverse into noclobber."""
        assert apply("--clobber=1").noclobber is False
        assert apply("--clobber=0").noclobber is True
        assert apply("--clobber=off").noclobber is True


class TestParseFlag:
    """Test the tri-state flag parser used by --parent and --clobber."""

    def test_truthy(self):
        """Test values read as true."""
        for value in (None, "1", "y", "Yes", "YES", "on", "On"):
            assert parse_flag(value) is True, value

    def test_falsy(self):
        """Test values read as false."""
        for value in ("", "0", "no", "off", "true", "o"):
            assert parse_flag(value) is False, value
