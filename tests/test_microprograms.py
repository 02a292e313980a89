# =============================================================================
# test_microprograms.py - Microprogram Table Tests
# =============================================================================
# Tests for << name ... >> definitions and the microprogram lookups.
#
# Test coverage includes:
#   - Packing micro-op constants into a word
#   - Numeric fallbacks inside definitions
#   - Case-insensitive names
#   - First-definition-wins lookups by name and by word
#   - Malformed definitions
# =============================================================================

import pytest

from j1asm.assembler.lexer import Lexer
from j1asm.assembler.microprograms import MicroprogramTable
from j1asm.cpu import MICRO_OPS, get_micro_op
from j1asm.errors import AssemblySyntaxError, MacroError


def define(table: MicroprogramTable, body: str):
    """Feed a definition body (the part after <<) to the table."""
    lexer = Lexer()
    lexer.add_source(body, "<test>")
    return table.define_microprogram(lexer)


# =============================================================================
# Micro-op Constant Tests
# =============================================================================

class TestMicroOps:
    """Test the named micro-op constants."""

    def test_alu_selects_cover_all_sixteen(self):
        selects = {MICRO_OPS[name] for name in [
            "T", "N", "T+N", "T&N", "T|N", "T^N", "~T", "N==T",
            "N<T", "N>>T", "T-1", "R", "[T]", "N<<T", "dsp", "Nu<T",
        ]}
        assert selects == {n << 8 for n in range(16)}

    def test_lookup_case_insensitive(self):
        assert get_micro_op("alu") == 0x6000
        assert get_micro_op("DSP") == 0x0E00
        assert get_micro_op("nu<t") == 0x0F00

    def test_unknown(self):
        assert get_micro_op("banana") is None


# =============================================================================
# Definition Tests
# =============================================================================

class TestDefinitions:
    """Test building microprogram words."""

    def test_simple_definition(self):
        table = MicroprogramTable()
        entry = define(table, "+ ALU T+N D- >>")
        assert entry.name == "+"
        assert entry.word == 0x6203
        assert table.lookup("+") == 0x6203

    def test_dup(self):
        table = MicroprogramTable()
        define(table, "dup ALU T T->N D+ >>")
        assert table.lookup("dup") == 0x6081

    def test_store_bits(self):
        table = MicroprogramTable()
        define(table, "! ALU N N->[T] D- >>")
        assert table.lookup("!") == 0x6123

    def test_numeric_fallback(self):
        """Tokens that are not micro-ops are parsed as numbers."""
        table = MicroprogramTable()
        define(table, "odd ALU 0x10 2 >>")
        assert table.lookup("odd") == 0x6012

    def test_case_insensitive_micro_ops(self):
        table = MicroprogramTable()
        define(table, "drop alu n d- >>")
        assert table.lookup("drop") == 0x6103

    def test_definition_spanning_lines(self):
        table = MicroprogramTable()
        define(table, "swap\n  ALU N\n  T->N\n>>")
        assert table.lookup("swap") == 0x6180

    def test_empty_body(self):
        table = MicroprogramTable()
        define(table, "nop >>")
        assert table.lookup("nop") == 0

    def test_stops_at_terminator(self):
        """Tokens after >> are left for the caller."""
        lexer = Lexer()
        lexer.add_source("a ALU T >> PUSH 1", "<test>")
        MicroprogramTable().define_microprogram(lexer)
        assert lexer.next_token().text == "PUSH"


# =============================================================================
# Lookup Tests
# =============================================================================

class TestLookups:
    """Test first-match lookups."""

    def test_lookup_case_insensitive(self):
        table = MicroprogramTable()
        define(table, "Drop ALU N D- >>")
        assert table.lookup("DROP") == 0x6103
        assert table.lookup("drop") == 0x6103
        assert "dRoP" in table

    def test_lookup_missing(self):
        assert MicroprogramTable().lookup("nothing") is None

    def test_first_name_wins(self):
        """A later definition with the same name is shadowed."""
        table = MicroprogramTable()
        define(table, "a ALU T >>")
        define(table, "A ALU N >>")
        assert table.lookup("a") == 0x6000
        assert len(table) == 2

    def test_reverse_lookup(self):
        table = MicroprogramTable()
        define(table, "drop ALU N D- >>")
        assert table.reverse_lookup(0x6103) == "drop"
        assert table.reverse_lookup(0x6104) is None

    def test_first_word_wins(self):
        """Two names for one word: the earlier name is used."""
        table = MicroprogramTable()
        define(table, "drop ALU N D- >>")
        define(table, "nip-ish ALU N D- >>")
        assert table.reverse_lookup(0x6103) == "drop"
        assert table.lookup("nip-ish") == 0x6103

    def test_iteration_in_definition_order(self):
        table = MicroprogramTable()
        table.add("b", 2)
        table.add("a", 1)
        assert [entry.name for entry in table] == ["b", "a"]


# =============================================================================
# Error Tests
# =============================================================================

class TestDefinitionErrors:
    """Test malformed definitions."""

    def test_eof_before_name(self):
        with pytest.raises(MacroError) as exc_info:
            define(MicroprogramTable(), "")
        assert "EOF while defining microprogram" in str(exc_info.value)

    def test_eof_before_terminator(self):
        with pytest.raises(MacroError):
            define(MicroprogramTable(), "dup ALU T T->N D+")

    def test_bad_token(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            define(MicroprogramTable(), "x ALU banana >>")
        assert "'banana' is not a number" in str(exc_info.value)
