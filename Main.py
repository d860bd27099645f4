import CompilationEngineVM
import JackTokenizer
import VMWriter
import sys
from pathlib import Path

from JackErrors import JackCompileError


class UsageError(Exception):
    pass


def collect_sources(input_path: Path):
    """Returns the .jack files named by the command-line path, sorted."""
    if input_path.is_dir():
        jack_files = sorted(input_path.glob("*.jack"))
        if not jack_files:
            raise UsageError(f"No .jack files in {input_path}")
        return jack_files

    if input_path.is_file() and input_path.suffix.lower() == ".jack":
        return [input_path]

    raise UsageError("Error: must specify a .jack file or a directory containing .jack files")


def compile_file(jack_path: Path):
    # 1) Tokenizer reads the source as it is consumed
    with jack_path.open(encoding='utf-8') as source:
        tokenizer = JackTokenizer.JackTokenizer(source)

        # 2) VM output, written only once the class compiled
        vm_writer = VMWriter.VMWriter(jack_path.with_suffix('.vm'))

        # 3) Compile to VM; the engine owns its symbol table
        engine = CompilationEngineVM.CompilationEngineVM(tokenizer, vm_writer)
        engine.compileClass()

    print(f"Compiled {jack_path.name} → {jack_path.with_suffix('.vm').name}")


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python Main.py <source.jack> | <directory>")
        sys.exit(1)

    try:
        jack_files = collect_sources(Path(args[0]))
    except UsageError as e:
        print(e)
        sys.exit(1)

    failed = False
    for jf in jack_files:
        try:
            compile_file(jf)
        except JackCompileError as e:
            print(f"Error in {jf.name}: {e}", file=sys.stderr)
            failed = True

    if failed:
        sys.exit(1)

if __name__ == "__main__":
    main()
