import io
import string
from collections import namedtuple

from JackErrors import LexError

Token = namedtuple('Token', ['kind', 'value'])


class JackTokenizer:
    """
    Pull-based lexer for Jack source text.

    Reads the input one character at a time (plus one character of lookahead
    to recognise comments) and produces exactly one token per advance().
    Only the current token is kept.
    """

    symbols = set('{}()[].,;+-*/&|<>=~')

    keywords = {
        'class','constructor','function','method','field','static','var',
        'int','char','boolean','void','true','false','null','this',
        'let','do','if','else','while','return'
    }

    ident_start = set(string.ascii_letters + '_')
    ident_chars = ident_start | set(string.digits)

    MAX_INT = 32767

    def __init__(self, source):
        self.stream = io.StringIO(source) if isinstance(source, str) else source
        self.line   = 1
        self.current_token = None
        self._ch   = self._getc()
        self._next = self._getc()

    def _read(self):
        if self._ch == '\n':
            self.line += 1
        self._ch   = self._next
        self._next = self._getc()

    def _getc(self):
        try:
            return self.stream.read(1)
        except UnicodeDecodeError:
            raise LexError('invalid character encoding', self.line) from None

    def _skip_whitespace_and_comments(self):
        while self._ch:
            if self._ch.isspace():
                self._read()
            elif self._ch == '/' and self._next == '/':
                while self._ch and self._ch != '\n':
                    self._read()
            elif self._ch == '/' and self._next == '*':
                start = self.line
                self._read()
                self._read()
                while not (self._ch == '*' and self._next == '/'):
                    if not self._ch:
                        raise LexError('unterminated comment', start)
                    self._read()
                self._read()
                self._read()
            else:
                break

    def has_more_tokens(self):
        self._skip_whitespace_and_comments()
        return self._ch != ''

    def advance(self):
        """Reads the next token from the input and makes it the current one."""
        if not self.has_more_tokens():
            raise LexError('unexpected end of input', self.line)

        ch = self._ch
        if ch in self.symbols:
            self._read()
            self.current_token = Token('SYMBOL', ch)
        elif ch == '"':
            self.current_token = Token('STRING_CONST', self._read_string())
        elif ch in string.digits:
            self.current_token = Token('INT_CONST', self._read_int())
        elif ch in self.ident_start:
            word = self._read_run(self.ident_chars)
            kind = 'KEYWORD' if word in self.keywords else 'IDENTIFIER'
            self.current_token = Token(kind, word)
        else:
            raise LexError(f'unexpected character {ch!r}', self.line)
        return self.current_token

    def token(self):
        return self.current_token

    def _read_run(self, allowed):
        chars = []
        while self._ch and self._ch in allowed:
            chars.append(self._ch)
            self._read()
        return ''.join(chars)

    def _read_int(self):
        digits = self._read_run(set(string.digits))
        if int(digits) > self.MAX_INT:
            raise LexError(f'integer constant {digits} out of range', self.line)
        return digits

    def _read_string(self):
        start = self.line
        self._read()  # opening quote
        chars = []
        while self._ch != '"':
            if not self._ch:
                raise LexError('unterminated string constant', start)
            if ord(self._ch) > self.MAX_INT:
                raise LexError(f'character {self._ch!r} out of range in string constant', self.line)
            chars.append(self._ch)
            self._read()
        self._read()  # closing quote
        return ''.join(chars)
