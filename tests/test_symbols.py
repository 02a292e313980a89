# =============================================================================
# test_symbols.py - Symbol Table and Fixup Tests
# =============================================================================
# Tests for label definition, forward references and patching.
#
# Test coverage includes:
#   - Backward references patched immediately
#   - Forward references patched when the label is defined
#   - Forward and backward references producing identical words
#   - Redefinition errors
#   - Unresolved label detection
#   - Branch target range checking
#   - Program image capacity
# =============================================================================

import logging

import pytest

from j1asm.assembler.image import ProgramImage
from j1asm.assembler.symbols import SymbolTable
from j1asm.errors import (
    BranchRangeError,
    DuplicateSymbolError,
    ImageCapacityError,
    SourceLocation,
    UndefinedSymbolError,
)


@pytest.fixture
def image():
    return ProgramImage()


@pytest.fixture
def symbols(image):
    return SymbolTable(image)


# =============================================================================
# Program Image Tests
# =============================================================================

class TestProgramImage:
    """Test the word buffer the symbol table patches."""

    def test_emit_returns_index(self, image):
        assert image.emit(0x8001) == 0
        assert image.emit(0x8002) == 1
        assert image.pc == 2
        assert image.words() == [0x8001, 0x8002]

    def test_last(self, image):
        assert image.last is None
        image.emit(0x6000)
        assert image.last == 0x6000

    def test_patch_keeps_class_bits(self, image):
        """Only the low 13 bits are replaced."""
        image.emit(0x4000)
        image.emit(0x3FFF)
        image.patch(0, 0x123)
        image.patch(1, 0x001)
        assert image[0] == 0x4123
        assert image[1] == 0x2001

    def test_patch_highest_target(self, image):
        image.emit(0x0000)
        image.patch(0, 0x1FFF)
        assert image[0] == 0x1FFF

    def test_patch_out_of_range(self, image):
        image.emit(0x0000)
        with pytest.raises(BranchRangeError) as exc_info:
            image.patch(0, 0x2000)
        assert exc_info.value.target == 0x2000
        assert "branch target 0x2000 invalid" in str(exc_info.value)

    def test_capacity(self):
        """Emitting past the capacity is an error."""
        image = ProgramImage(capacity=2)
        image.emit(1)
        image.emit(2)
        with pytest.raises(ImageCapacityError):
            image.emit(3)
        assert len(image) == 2

    def test_default_capacity(self, image):
        assert image.capacity == 8192

    def test_to_bytes(self, image):
        image.emit(0x8005)
        image.emit(0x1234)
        assert image.to_bytes() == bytes([0x80, 0x05, 0x12, 0x34])
        assert image.to_bytes("little") == bytes([0x05, 0x80, 0x34, 0x12])


# =============================================================================
# Definition and Reference Tests
# =============================================================================

class TestReferences:
    """Test backward and forward references."""

    def test_backward_reference(self, image, symbols):
        """A reference to a defined label is patched immediately."""
        symbols.define("loop", 3)
        image.emit(0x0000)
        symbols.reference("loop", 0)
        assert image[0] == 0x0003
        assert symbols.get("loop").fixups == []

    def test_forward_reference(self, image, symbols):
        """A reference before the definition is patched by define()."""
        image.emit(0x2000)
        symbols.reference("done", 0)
        assert image[0] == 0x2000
        assert len(symbols.get("done").fixups) == 1

        symbols.define("done", 7)
        assert image[0] == 0x2007
        assert symbols.get("done").fixups == []

    def test_multiple_forward_references(self, image, symbols):
        """Every pending fixup is patched."""
        for pc in range(3):
            image.emit(0x4000)
            symbols.reference("sub", pc)
        symbols.define("sub", 0x100)
        assert image.words() == [0x4100, 0x4100, 0x4100]

    def test_forward_and_backward_equivalent(self, image, symbols):
        """Reference, define, reference again: both sites get the same word."""
        image.emit(0x4000)
        symbols.reference("f", 0)
        symbols.define("f", 1)
        image.emit(0x8000)
        image.emit(0x4000)
        symbols.reference("f", 2)
        assert image[0] == image[2] == 0x4001

    def test_case_insensitive(self, image, symbols):
        """Names differing only in case are the same label."""
        image.emit(0x0000)
        symbols.reference("Loop", 0)
        symbols.define("LOOP", 9)
        assert image[0] == 9
        assert "loop" in symbols
        assert len(symbols) == 1

    def test_first_spelling_kept(self, image, symbols):
        image.emit(0x0000)
        symbols.reference("MyLabel", 0)
        symbols.define("MYLABEL", 0)
        assert symbols.get_symbols() == {"MyLabel": 0}

    def test_fixup_range_checked_on_define(self, image, symbols):
        """A forward reference to an unencodable address fails."""
        image.emit(0x0000)
        symbols.reference("far", 0)
        with pytest.raises(BranchRangeError):
            symbols.define("far", 0x2000)

    def test_backward_range_checked(self, image, symbols):
        """A backward reference to an unencodable address fails."""
        symbols.define("far", 0x2000)
        image.emit(0x0000)
        with pytest.raises(BranchRangeError):
            symbols.reference("far", 0)


# =============================================================================
# Error Tests
# =============================================================================

class TestSymbolErrors:
    """Test redefinition and unresolved labels."""

    def test_redefine(self, symbols):
        symbols.define("start", 0)
        with pytest.raises(DuplicateSymbolError) as exc_info:
            symbols.define("start", 4)
        assert "cannot redefine 'start'" in str(exc_info.value)

    def test_redefine_same_address(self, symbols):
        """Even an identical redefinition is rejected."""
        symbols.define("start", 0)
        with pytest.raises(DuplicateSymbolError):
            symbols.define("START", 0)

    def test_redefine_after_forward_reference(self, image, symbols):
        image.emit(0x0000)
        symbols.reference("x", 0)
        symbols.define("x", 1)
        with pytest.raises(DuplicateSymbolError):
            symbols.define("x", 2)

    def test_redefine_reports_original(self, symbols):
        first = SourceLocation("a.fs", 3)
        symbols.define("start", 0, first)
        with pytest.raises(DuplicateSymbolError) as exc_info:
            symbols.define("start", 1, SourceLocation("a.fs", 9), ": start")
        assert exc_info.value.original_location == first
        assert "a.fs:9: error: cannot redefine 'start'" in str(exc_info.value)

    def test_all_resolved(self, image, symbols):
        image.emit(0x0000)
        symbols.reference("a", 0)
        symbols.define("a", 1)
        symbols.check_all_resolved()

    def test_unresolved(self, image, symbols):
        image.emit(0x0000)
        symbols.reference("nowhere", 0, SourceLocation("a.fs", 5), "B nowhere")
        with pytest.raises(UndefinedSymbolError) as exc_info:
            symbols.check_all_resolved()
        assert exc_info.value.symbol == "nowhere"
        assert exc_info.value.location == SourceLocation("a.fs", 5)

    def test_unresolved_among_resolved(self, image, symbols):
        """One missing label fails regardless of how many others resolved."""
        for pc, name in enumerate(["a", "b", "missing", "c"]):
            image.emit(0x0000)
            symbols.reference(name, pc)
        for name in ["a", "b", "c"]:
            symbols.define(name, 10)
        assert symbols.unresolved() == ["missing"]
        with pytest.raises(UndefinedSymbolError) as exc_info:
            symbols.check_all_resolved()
        assert exc_info.value.symbol == "missing"

    def test_first_unresolved_reported(self, image, symbols):
        image.emit(0x0000)
        symbols.reference("first", 0)
        image.emit(0x0000)
        symbols.reference("second", 1)
        with pytest.raises(UndefinedSymbolError) as exc_info:
            symbols.check_all_resolved()
        assert exc_info.value.symbol == "first"


# =============================================================================
# Query Tests
# =============================================================================

class TestQueries:
    """Test lookups used by the listing."""

    def test_label_at(self, symbols):
        symbols.define("start", 0)
        symbols.define("alias", 0)
        symbols.define("next", 2)
        assert symbols.label_at(0) == "start"
        assert symbols.label_at(2) == "next"
        assert symbols.label_at(1) is None

    def test_get_symbols_skips_unresolved(self, image, symbols):
        image.emit(0x0000)
        symbols.reference("pending", 0)
        symbols.define("done", 5)
        assert symbols.get_symbols() == {"done": 5}


# =============================================================================
# Logging Tests
# =============================================================================

class TestLogging:
    """Label activity is traced at DEBUG level."""

    def test_fixup_trace(self, image, symbols, caplog):
        caplog.set_level(logging.DEBUG, logger="j1asm.assembler.symbols")
        image.emit(0x0000)
        symbols.reference("later", 0)
        symbols.define("later", 1)
        messages = [record.getMessage() for record in caplog.records]
        assert "reference('later', 0x0)" in messages
        assert "addfixup('later', 0x0)" in messages
        assert "amend-def('later', 0x1)" in messages
