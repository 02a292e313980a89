"""
J1 Code Generator
=================

This module turns the token stream into instruction words. It is a
single pass over the input: every token is acted on as soon as it is
read, and forward label references are settled later through the fixup
lists kept by the symbol table.

Source Language
---------------
| Token(s)              | Effect                                           |
|-----------------------|--------------------------------------------------|
| ( ... )               | Comment, skipped. Does not nest.                 |
| << name ... >>        | Define a microprogram                            |
| : name                | Define a label at the current word               |
| CALL x / B x / BZ x   | Call, jump, jump-if-zero to label x              |
| CALL . / B . / BZ .   | Branch to the branch itself                      |
| PUSH n                | Push a 16-bit literal (one or two words)         |
| STORE                 | Two words: N->[T] then drop both                 |
| LOAD                  | Two words: fetch [T] in place                    |
| RETURN                | Return, folded into the previous word if possible|
| name                  | Emit a previously defined microprogram           |

Mnemonics and label names are case-insensitive.

All assembler state lives on the CodeGenerator instance; two generators
never share labels, microprograms or output.
"""

from pathlib import Path
import logging

from j1asm.assembler.image import ProgramImage
from j1asm.assembler.lexer import Lexer, Token, parse_number
from j1asm.assembler.microprograms import MicroprogramTable
from j1asm.assembler.optimizer import OptimizationStats, PeepholeOptimizer
from j1asm.assembler.symbols import SymbolTable
from j1asm.cpu import (
    BRANCH_OPCODES,
    IMAGE_CAPACITY,
    LOAD_SEQUENCE,
    STORE_SEQUENCE,
    encode_literal,
)
from j1asm.errors import AssemblySyntaxError

logger = logging.getLogger(__name__)

COMMENT_START = "("
COMMENT_END = ")"
MICROPROGRAM_START = "<<"
LABEL_MARKER = ":"
SELF_REFERENCE = "."


class CodeGenerator:
    """
    Token dispatch loop and the state it mutates.

    Usage:
        gen = CodeGenerator()
        gen.add_source(": start PUSH 5 PUSH 3 B start")
        gen.generate()
        gen.check_labels()
        words = gen.get_words()

    Attributes:
        lexer: Token source (sources may be queued at any time)
        image: Emitted instruction words
        symbols: Label table
        microprograms: Microprogram table
    """

    def __init__(self, capacity: int = IMAGE_CAPACITY):
        self.lexer = Lexer()
        self.image = ProgramImage(capacity)
        self.symbols = SymbolTable(self.image)
        self.microprograms = MicroprogramTable()
        self._optimizer = PeepholeOptimizer()

    # =========================================================================
    # Input
    # =========================================================================

    def add_source(self, text: str, filename: str = "<input>") -> None:
        """Queue source text for the next generate() call."""
        self.lexer.add_source(text, filename)

    def add_file(self, path: str | Path) -> None:
        """Queue a source file for the next generate() call."""
        self.lexer.add_file(path)

    # =========================================================================
    # Generation
    # =========================================================================

    def generate(self) -> None:
        """
        Consume every queued token.

        May be called again after queueing more sources; the program
        counter, labels and microprograms carry over.

        Raises:
            AssemblerError: On the first error in the source
        """
        while (token := self.lexer.next_token()) is not None:
            self._dispatch(token)
        logger.debug("generated %d words", self.image.pc)

    def _dispatch(self, token: Token) -> None:
        text = token.text

        if text == COMMENT_START:
            self._skip_comment()
        elif text == MICROPROGRAM_START:
            self.microprograms.define_microprogram(self.lexer)
        elif text == LABEL_MARKER:
            name = self._operand("label name")
            self.symbols.define(
                name.text, self.image.pc, name.location, self.lexer.current_line
            )
        elif text.upper() in BRANCH_OPCODES:
            self._assemble_branch(BRANCH_OPCODES[text.upper()])
        elif token.matches("PUSH"):
            self._assemble_push()
        elif token.matches("STORE"):
            for word in STORE_SEQUENCE:
                self._emit(word)
        elif token.matches("LOAD"):
            for word in LOAD_SEQUENCE:
                self._emit(word)
        elif token.matches("RETURN"):
            self._optimizer.emit_return(
                self.image, token.location, self.lexer.current_line
            )
        else:
            word = self.microprograms.lookup(text)
            if word is None:
                raise AssemblySyntaxError(
                    f"cannot process '{text}'", token.location, self.lexer.current_line
                )
            self._emit(word)

    def _emit(self, word: int) -> int:
        return self.image.emit(word, self.lexer.location, self.lexer.current_line)

    def _operand(self, what: str) -> Token:
        """Read the token a directive needs, failing at end of input."""
        token = self.lexer.next_token()
        if token is None:
            raise self.lexer.error(f"EOF while expecting {what}")
        return token

    def _skip_comment(self) -> None:
        while True:
            token = self.lexer.next_token()
            if token is None:
                raise self.lexer.error("unterminated comment")
            if token.text == COMMENT_END:
                return

    def _assemble_branch(self, opcode: int) -> None:
        target = self._operand("branch target")
        if target.text == SELF_REFERENCE:
            self._emit(opcode | self.image.pc)
            return
        pc = self._emit(opcode)
        self.symbols.reference(target.text, pc, target.location, self.lexer.current_line)

    def _assemble_push(self) -> None:
        operand = self._operand("PUSH operand")
        value = parse_number(operand.text, operand.location, self.lexer.current_line)
        for word in encode_literal(value):
            self._emit(word)

    # =========================================================================
    # Results
    # =========================================================================

    def check_labels(self) -> None:
        """
        Raises:
            UndefinedSymbolError: If any referenced label was never defined
        """
        self.symbols.check_all_resolved()

    def get_words(self) -> list[int]:
        """Return the emitted instruction words."""
        return self.image.words()

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of label names to word indices."""
        return self.symbols.get_symbols()

    def get_optimization_stats(self) -> OptimizationStats:
        return self._optimizer.stats
