from enum import Enum
from pathlib import Path

from JackErrors import InvalidKindError


class Segment(Enum):
    CONSTANT = 'constant'
    ARGUMENT = 'argument'
    LOCAL    = 'local'
    STATIC   = 'static'
    THIS     = 'this'
    THAT     = 'that'
    POINTER  = 'pointer'
    TEMP     = 'temp'


class Command(Enum):
    ADD = 'add'
    SUB = 'sub'
    NEG = 'neg'
    EQ  = 'eq'
    GT  = 'gt'
    LT  = 'lt'
    AND = 'and'
    OR  = 'or'
    NOT = 'not'


class VMWriter:
    """
    Collects VM commands in program order and writes them out on close().

    Nothing touches the output file until close(), so a class that fails to
    compile leaves no .vm file behind.
    """

    def __init__(self, output_file=None):
        self.output_file = Path(output_file) if output_file is not None else None
        self.lines  = []
        self.closed = False

    def writePush(self, segment, index): self._emit(f"push {Segment(segment).value} {index}")

    def writePop(self, segment, index):
        segment = Segment(segment)
        if segment is Segment.CONSTANT:
            raise InvalidKindError("cannot pop into the constant segment")
        self._emit(f"pop {segment.value} {index}")

    def writeArithmetic(self, command): self._emit(Command(command).value)
    def writeLabel(self, label): self._emit(f"label {label}")
    def writeGoto(self, label): self._emit(f"goto {label}")
    def writeIf(self, label): self._emit(f"if-goto {label}")
    def writeCall(self, name, nArgs): self._emit(f"call {name} {nArgs}")
    def writeFunction(self, name, nLocals): self._emit(f"function {name} {nLocals}")
    def writeReturn(self): self._emit("return")

    def close(self):
        if self.output_file is not None:
            self.output_file.write_text(self.getvalue())
        self.closed = True

    def getvalue(self):
        return ''.join(f"{line}\n" for line in self.lines)

    def _emit(self, line):
        if self.closed:
            raise ValueError("write to a closed VMWriter")
        self.lines.append(line)
