from JackErrors import InvalidKindError, JackSyntaxError, UnresolvedSymbolError
from JackTokenizer import Token
from SymbolTable import Kind, SymbolTable
from VMWriter import Command, Segment

END = Token('EOF', None)

TYPE_KEYWORDS = ('int', 'char', 'boolean')


class CompilationEngineVM:
    """
    Recursive-descent compiler for one Jack class.

    Each compileXxx method consumes exactly one grammar rule, resolving
    identifiers against its own SymbolTable and emitting VM code through the
    writer as soon as the construct is recognised. The parser never looks
    further than the current token.
    """

    ops = {
        '+': Command.ADD, '-': Command.SUB,
        '*': 'Math.multiply', '/': 'Math.divide',
        '&': Command.AND, '|': Command.OR,
        '<': Command.LT, '>': Command.GT, '=': Command.EQ
    }

    def __init__(self, tokenizer, writer, sym=None):
        self.tok        = tokenizer
        self.vm         = writer
        self.sym        = sym if sym is not None else SymbolTable()
        self.className  = ''
        self.labelCount = 0
        self.current    = END
        self._advance()

    def compileClass(self):
        # 'class' className '{' classVarDec* subroutineDec* '}'
        self._eat('KEYWORD', 'class')
        self.className = self._eat('IDENTIFIER')
        self._eat('SYMBOL', '{')

        while self._check('KEYWORD', ('static', 'field')):
            self.compileClassVarDec()

        while self._check('KEYWORD', ('constructor', 'function', 'method')):
            self.compileSubroutine()

        self._eat('SYMBOL', '}')
        if self.current != END:
            raise self._error('end of input after class body')
        self.vm.close()

    def compileClassVarDec(self):
        # ('static' | 'field') type varName (',' varName)* ';'
        kind = Kind(self._eat('KEYWORD'))                    # static|field
        typ  = self._eat_type()
        self._defineVar(typ, kind)

        while self._check('SYMBOL', ','):
            self._eat('SYMBOL', ',')
            self._defineVar(typ, kind)

        self._eat('SYMBOL', ';')

    def compileSubroutine(self):
        # ('constructor' | 'function' | 'method') ('void' | type) subName
        # '(' parameterList ')' subroutineBody
        funcType = self._eat('KEYWORD')                      # constructor, function, or method
        self._eat_type(allow_void=True)                      # return type
        subName = self._eat('IDENTIFIER')
        fullName = f"{self.className}.{subName}"

        # reset subroutine scope
        self.sym.startSubroutine()

        # the receiver is argument 0 of every method
        if funcType == 'method':
            self.sym.define('this', self.className, Kind.ARG)

        # parameter list
        self._eat('SYMBOL', '(')
        self.compileParameterList()
        self._eat('SYMBOL', ')')

        # subroutine body
        self._eat('SYMBOL', '{')

        # compile all var declarations first
        while self._check('KEYWORD', 'var'):
            self.compileVarDec()

        # write function declaration with exact local count
        nLocals = self.sym.varCount(Kind.VAR)
        self.vm.writeFunction(fullName, nLocals)

        # constructor: allocate object and set this
        if funcType == 'constructor':
            nFields = self.sym.varCount(Kind.FIELD)
            self.vm.writePush(Segment.CONSTANT, nFields)
            self.vm.writeCall('Memory.alloc', 1)
            self.vm.writePop(Segment.POINTER, 0)

        # method: bind 'this' to argument 0
        elif funcType == 'method':
            self.vm.writePush(Segment.ARGUMENT, 0)
            self.vm.writePop(Segment.POINTER, 0)

        # compile statements
        self.compileStatements()
        self._eat('SYMBOL', '}')

    def compileParameterList(self):
        # ((type varName) (',' type varName)*)?
        if not self._check('SYMBOL', ')'):
            typ  = self._eat_type()
            self._defineVar(typ, Kind.ARG)
            while self._check('SYMBOL', ','):
                self._eat('SYMBOL', ',')
                typ  = self._eat_type()
                self._defineVar(typ, Kind.ARG)

    def compileVarDec(self):
        # 'var' type varName (',' varName)* ';'
        self._eat('KEYWORD', 'var')
        typ  = self._eat_type()
        self._defineVar(typ, Kind.VAR)
        while self._check('SYMBOL', ','):
            self._eat('SYMBOL', ',')
            self._defineVar(typ, Kind.VAR)
        self._eat('SYMBOL', ';')

    def compileStatements(self):
        # (let | if | while | do | return)*
        while self._check('KEYWORD', ('let','if','while','do','return')):
            kw = self.current.value
            getattr(self, f'compile{kw.capitalize()}')()

    def compileLet(self):
        # 'let' varName ('[' expression ']')? '=' expression ';'
        self._eat('KEYWORD', 'let')
        line = self.tok.line
        var = self._eat('IDENTIFIER')
        seg, idx = self._lookupVar(var, line)
        isArr = False

        if self._check('SYMBOL', '['):
            isArr = True
            self._eat('SYMBOL', '[')
            self.compileExpression()
            self._eat('SYMBOL', ']')
            self.vm.writePush(seg, idx)
            self.vm.writeArithmetic(Command.ADD)

        self._eat('SYMBOL', '=')
        self.compileExpression()
        self._eat('SYMBOL', ';')

        if isArr:
            # the target address sits under the value; park the value in temp 0
            self.vm.writePop(Segment.TEMP, 0)
            self.vm.writePop(Segment.POINTER, 1)
            self.vm.writePush(Segment.TEMP, 0)
            self.vm.writePop(Segment.THAT, 0)
        else:
            self.vm.writePop(seg, idx)

    def compileIf(self):
        # 'if' '(' expression ')' '{' statements '}' ('else' '{' statements '}')?
        self._eat('KEYWORD', 'if')
        self._eat('SYMBOL', '(')
        self.compileExpression()
        self._eat('SYMBOL', ')')

        labelTrue, labelFalse, labelEnd = self._newLabels('IF_TRUE', 'IF_FALSE', 'IF_END')

        self.vm.writeIf(labelTrue)
        self.vm.writeGoto(labelFalse)
        self.vm.writeLabel(labelTrue)

        self._eat('SYMBOL', '{')
        self.compileStatements()
        self._eat('SYMBOL', '}')

        if self._check('KEYWORD', 'else'):
            self.vm.writeGoto(labelEnd)
            self.vm.writeLabel(labelFalse)
            self._eat('KEYWORD', 'else')
            self._eat('SYMBOL', '{')
            self.compileStatements()
            self._eat('SYMBOL', '}')
            self.vm.writeLabel(labelEnd)
        else:
            self.vm.writeLabel(labelFalse)

    def compileWhile(self):
        # 'while' '(' expression ')' '{' statements '}'
        self._eat('KEYWORD', 'while')
        self._eat('SYMBOL', '(')

        startLabel, endLabel = self._newLabels('WHILE_EXP', 'WHILE_END')

        self.vm.writeLabel(startLabel)
        self.compileExpression()
        self._eat('SYMBOL', ')')

        self.vm.writeArithmetic(Command.NOT)
        self.vm.writeIf(endLabel)

        self._eat('SYMBOL', '{')
        self.compileStatements()
        self._eat('SYMBOL', '}')

        self.vm.writeGoto(startLabel)
        self.vm.writeLabel(endLabel)

    def compileDo(self):
        # 'do' subroutineCall ';'
        self._eat('KEYWORD', 'do')
        self.compileSubroutineCall(self._eat('IDENTIFIER'))
        self.vm.writePop(Segment.TEMP, 0)
        self._eat('SYMBOL', ';')

    def compileReturn(self):
        # 'return' expression? ';'
        self._eat('KEYWORD', 'return')
        if not self._check('SYMBOL', ';'):
            self.compileExpression()
        else:
            self.vm.writePush(Segment.CONSTANT, 0)
        self.vm.writeReturn()
        self._eat('SYMBOL', ';')

    def compileExpression(self):
        # term (op term)*, evaluated strictly left to right
        self.compileTerm()
        while self._check('SYMBOL', tuple(self.ops)):
            op = self._eat('SYMBOL')
            self.compileTerm()
            cmd = self.ops[op]
            if isinstance(cmd, Command):
                self.vm.writeArithmetic(cmd)
            else:
                self.vm.writeCall(cmd, 2)

    def compileTerm(self):
        # INT_CONST | STRING_CONST | keywordConstant | varName | varName '[' expr ']' |
        # subroutineCall | '(' expr ')' | unaryOp term
        k, v = self.current

        if k == 'INT_CONST':
            val = int(self._eat('INT_CONST'))
            self.vm.writePush(Segment.CONSTANT, val)

        elif k == 'STRING_CONST':
            s = self._eat('STRING_CONST')
            self.vm.writePush(Segment.CONSTANT, len(s))
            self.vm.writeCall('String.new', 1)
            for c in s:
                self.vm.writePush(Segment.CONSTANT, ord(c))
                self.vm.writeCall('String.appendChar', 2)

        elif k == 'KEYWORD' and v in ('true', 'false', 'null', 'this'):
            word = self._eat('KEYWORD')
            if word == 'true':
                self.vm.writePush(Segment.CONSTANT, 0)
                self.vm.writeArithmetic(Command.NOT)
            elif word == 'this':
                self.vm.writePush(Segment.POINTER, 0)
            else:
                self.vm.writePush(Segment.CONSTANT, 0)

        elif k == 'IDENTIFIER':
            line = self.tok.line
            name = self._eat('IDENTIFIER')
            if self._check('SYMBOL', '['):
                self._eat('SYMBOL', '[')
                self.compileExpression()
                self._eat('SYMBOL', ']')
                self.vm.writePush(*self._lookupVar(name, line))
                self.vm.writeArithmetic(Command.ADD)
                self.vm.writePop(Segment.POINTER, 1)
                self.vm.writePush(Segment.THAT, 0)

            elif self._check('SYMBOL', ('.', '(')):
                self.compileSubroutineCall(name)

            else:
                self.vm.writePush(*self._lookupVar(name, line))

        elif k == 'SYMBOL' and v == '(':
            self._eat('SYMBOL', '(')
            self.compileExpression()
            self._eat('SYMBOL', ')')

        elif k == 'SYMBOL' and v in ('-', '~'):
            op = self._eat('SYMBOL')
            self.compileTerm()
            self.vm.writeArithmetic(Command.NEG if op == '-' else Command.NOT)

        else:
            raise self._error('term')

    def compileExpressionList(self):
        # (expression (',' expression)*)?
        n = 0
        if not self._check('SYMBOL', ')'):
            self.compileExpression()
            n += 1
            while self._check('SYMBOL', ','):
                self._eat('SYMBOL', ',')
                self.compileExpression()
                n += 1
        return n

    def compileSubroutineCall(self, name):
        # subroutineName '(' expressionList ')' |
        # (className | varName) '.' subName '(' expressionList ')'
        # `name` is the leading identifier, already consumed by the caller.
        extra = 0

        if self._check('SYMBOL', '.'):
            self._eat('SYMBOL', '.')
            cls    = name
            subName= self._eat('IDENTIFIER')
            kind   = self.sym.kindOf(cls)
            if kind is not None:
                # method call on an object
                self.vm.writePush(self._kindToSeg(kind), self.sym.indexOf(cls))
                name = f"{self.sym.typeOf(cls)}.{subName}"
                extra = 1
            else:
                # static call on a class
                name = f"{cls}.{subName}"
                extra = 0
        else:
            # implicit method call on this
            self.vm.writePush(Segment.POINTER, 0)
            name = f"{self.className}.{name}"
            extra = 1

        self._eat('SYMBOL', '(')
        nArgs = self.compileExpressionList() + extra
        self._eat('SYMBOL', ')')
        self.vm.writeCall(name, nArgs)

    # ──────────────────── Helpers ────────────────────

    def _kindToSeg(self, kind):
        try:
            return {
                Kind.STATIC: Segment.STATIC,
                Kind.FIELD:  Segment.THIS,
                Kind.ARG:    Segment.ARGUMENT,
                Kind.VAR:    Segment.LOCAL
            }[kind]
        except KeyError:
            raise InvalidKindError(f"no segment for kind {kind!r}") from None

    def _lookupVar(self, name, line):
        kind = self.sym.kindOf(name)
        if kind is None:
            raise UnresolvedSymbolError(f"undeclared variable '{name}'", line)
        return self._kindToSeg(kind), self.sym.indexOf(name)

    def _defineVar(self, typ, kind):
        line = self.tok.line
        name = self._eat('IDENTIFIER')
        self.sym.define(name, typ, kind, line)

    def _newLabels(self, *tags):
        n = self.labelCount
        self.labelCount += 1
        return [f'{self.className}${tag}{n}' for tag in tags]

    def _advance(self):
        self.current = self.tok.advance() if self.tok.has_more_tokens() else END

    def _check(self, kind, values=None):
        k, v = self.current
        return (
            k == kind and
            (
                (v in values) if isinstance(values, tuple)
                else (values is None or v == values)
            )
        )

    def _eat(self, kind, value=None):
        if not self._check(kind, value):
            raise self._error(f"{kind} '{value}'" if value is not None else kind)
        v = self.current.value
        self._advance()
        return v

    def _eat_type(self, allow_void=False):
        # int | char | boolean | className, plus 'void' for return types
        keywords = TYPE_KEYWORDS + ('void',) if allow_void else TYPE_KEYWORDS
        if self._check('KEYWORD', keywords):
            return self._eat('KEYWORD')
        if self._check('IDENTIFIER'):
            return self._eat('IDENTIFIER')
        raise self._error('type')

    def _error(self, expected):
        k, v = self.current
        actual = 'end of input' if self.current == END else f"{k} '{v}'"
        return JackSyntaxError(expected, actual, self.tok.line)
