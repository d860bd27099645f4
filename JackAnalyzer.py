"""Token analyzer: writes the token stream of each class as XML (XxxT.xml)."""
import sys
from pathlib import Path

import JackTokenizer
from JackErrors import JackCompileError
from Main import UsageError, collect_sources

TAGS = {
    'KEYWORD':      'keyword',
    'SYMBOL':       'symbol',
    'IDENTIFIER':   'identifier',
    'INT_CONST':    'integerConstant',
    'STRING_CONST': 'stringConstant',
}

# These characters are used by XML and thus cannot be directly written.
ESCAPES = {'<': '&lt;', '>': '&gt;', '&': '&amp;'}


def tokens_to_xml(tokenizer):
    lines = ["<tokens>"]
    while tokenizer.has_more_tokens():
        kind, value = tokenizer.advance()
        text = ''.join(ESCAPES.get(c, c) for c in value)
        lines.append(f"<{TAGS[kind]}> {text} </{TAGS[kind]}>")
    lines.append("</tokens>")
    return '\n'.join(lines) + '\n'


def analyze_file(jack_path: Path):
    out_path = jack_path.with_name(f"{jack_path.stem}T.xml")
    with jack_path.open(encoding='utf-8') as source:
        xml = tokens_to_xml(JackTokenizer.JackTokenizer(source))
    out_path.write_text(xml)
    print(f"Tokenized {jack_path.name} → {out_path.name}")


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python JackAnalyzer.py <source.jack> | <directory>")
        sys.exit(1)

    try:
        jack_files = collect_sources(Path(args[0]))
    except UsageError as e:
        print(e)
        sys.exit(1)

    failed = False
    for jf in jack_files:
        try:
            analyze_file(jf)
        except JackCompileError as e:
            print(f"Error in {jf.name}: {e}", file=sys.stderr)
            failed = True

    if failed:
        sys.exit(1)

if __name__ == "__main__":
    main()
