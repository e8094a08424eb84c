"""Tests for the option table and the switch compiler."""

import pytest
from webget.options import OPTION_DATA, ArgRequirement, OptionDescriptor, OptionKind
from webget.settings import COMMANDS
from webget.switches import Negated, Positive, compile_switches


class TestOptionTable:
    """Test the declarative option table."""

    def test_standard_option_needs_command(self):
        """Test that value and boolean options must name a command."""
        with pytest.raises(ValueError):
            OptionDescriptor("foo", None, OptionKind.VALUE)

    def test_special_option_needs_argtype(self):
        """Test that special actions must declare their argument requirement."""
        with pytest.raises(ValueError):
            OptionDescriptor("foo", None, OptionKind.HELP)
        with pytest.raises(ValueError):
            OptionDescriptor("foo", None, OptionKind.HELP, "help", ArgRequirement.NONE)

    def test_commands_exist(self):
        """Test that every standard option feeds a known command."""
        for opt in OPTION_DATA:
            if opt.is_standard:
                assert opt.command.replace("-", "").replace("_", "").lower() in COMMANDS, opt.long_name


class TestCompileSwitches:
    """Test the compiled switches."""

    def setup_method(self):
        """Set up test fixtures."""
        self.switches = compile_switches()
        self.by_name = {entry.name: entry for entry in self.switches.long_options}

    def test_boolean_gets_negated_variant(self):
        """Test that each boolean option has a --no- form without argument."""
        for index, opt in enumerate(OPTION_DATA):
            if opt.kind != OptionKind.BOOLEAN:
                continue
            negated = self.by_name["no-" + opt.long_name]
            assert negated.has_arg == ArgRequirement.NONE
            assert negated.ident == Negated(index)
            assert self.by_name[opt.long_name].has_arg == ArgRequirement.OPTIONAL
            assert self.by_name[opt.long_name].ident == Positive(index)

    def test_non_boolean_has_no_negated_variant(self):
        """Test that value and special options are not negated."""
        assert "no-level" not in self.by_name
        assert "no-help" not in self.by_name

    def test_argument_requirements(self):
        """Test the argument requirement of each kind of long option."""
        assert self.by_name["level"].has_arg == ArgRequirement.REQUIRED
        assert self.by_name["execute"].has_arg == ArgRequirement.REQUIRED
        assert self.by_name["parent"].has_arg == ArgRequirement.OPTIONAL
        assert self.by_name["help"].has_arg == ArgRequirement.NONE

    def test_short_options_string(self):
        """Test that only mandatory arguments get a colon."""
        short = self.switches.short_options
        assert "l:" in short
        assert "e:" in short
        assert "n:" in short
        assert "r" in short
        assert "r:" not in short
        assert "q:" not in short
        assert "h:" not in short

    def test_short_map(self):
        """Test the short character index."""
        assert self.switches.short_map["l"].name == "level"
        assert self.switches.short_map["r"].name == "recursive"
        assert "z" not in self.switches.short_map

    def test_resolve(self):
        """Test recovering the descriptor and the negation."""
        index = next(i for i, opt in enumerate(OPTION_DATA) if opt.long_name == "quiet")
        assert self.switches.resolve(Positive(index)) == (OPTION_DATA[index], False)
        assert self.switches.resolve(Negated(index)) == (OPTION_DATA[index], True)

    def test_deterministic(self):
        """Test that compiling twice gives the same result."""
        again = compile_switches()
        assert again.long_options == self.switches.long_options
        assert again.short_options == self.switches.short_options

    def test_disabled_option_skipped(self):
        """Test that options without a long name are left out."""
        table = (
            OptionDescriptor(None, "z", OptionKind.VALUE, "tries"),
            OptionDescriptor("quiet", "q", OptionKind.BOOLEAN, "quiet"),
        )
        switches = compile_switches(table)
        assert switches.short_options == "q"
        assert [entry.name for entry in switches.long_options] == ["quiet", "no-quiet"]

    def test_duplicate_long_name(self):
        """Test that a clash with a synthesized name is a programming error."""
        table = (
            OptionDescriptor("foo", None, OptionKind.BOOLEAN, "quiet"),
            OptionDescriptor("no-foo", None, OptionKind.VALUE, "tries"),
        )
        with pytest.raises(AssertionError):
            compile_switches(table)

    def test_duplicate_short_name(self):
        """Test that two options cannot share a short name."""
        table = (
            OptionDescriptor("foo", "f", OptionKind.BOOLEAN, "quiet"),
            OptionDescriptor("bar", "f", OptionKind.VALUE, "tries"),
        )
        with pytest.raises(AssertionError):
            compile_switches(table)
