from enum import Enum

from JackErrors import DuplicateSymbolError, InvalidKindError, UnresolvedSymbolError


class Kind(Enum):
    STATIC = 'static'
    FIELD  = 'field'
    ARG    = 'arg'
    VAR    = 'var'


CLASS_KINDS = (Kind.STATIC, Kind.FIELD)


class SymbolTable:
    """
    Manages a symbol table with two scopes:
      - class scope: for 'static' and 'field' declarations
      - subroutine scope: for 'arg' and 'var' declarations
    Provides indices, types, and kinds for named identifiers.
    Lookups try the subroutine scope first, so locals and arguments
    silently shadow fields and statics of the same name.
    """

    def __init__(self):
        # class-level symbols
        self.class_scope = {}
        # subroutine-level symbols
        self.subroutine_scope = {}
        # running counts for each kind
        self.counts = {kind: 0 for kind in Kind}

    def startSubroutine(self):
        """Resets the subroutine scope (for each new method/function/constructor)."""
        self.subroutine_scope.clear()
        self.counts[Kind.ARG] = 0
        self.counts[Kind.VAR] = 0

    def define(self, name, type_, kind, line=None):
        """
        Defines a new identifier of the given name, type, and kind,
        and assigns it a running index.
        kind is a Kind member or its value ('static', 'field', 'arg', 'var').
        line is the source line reported if the name is already taken.
        """
        kind  = self._kind(kind)
        scope = self.class_scope if kind in CLASS_KINDS else self.subroutine_scope
        if name in scope:
            raise DuplicateSymbolError(f"'{name}' is already defined in this scope", line)

        idx = self.counts[kind]
        scope[name] = {'type': type_, 'kind': kind, 'index': idx}
        self.counts[kind] += 1

    def varCount(self, kind):
        """Returns the number of variables of the given kind already defined."""
        return self.counts[self._kind(kind)]

    def kindOf(self, name):
        """Returns the kind of the named identifier, or None if unknown."""
        entry = self._lookup(name)
        return entry['kind'] if entry else None

    def typeOf(self, name):
        return self._resolve(name)['type']

    def indexOf(self, name):
        return self._resolve(name)['index']

    def _lookup(self, name):
        if name in self.subroutine_scope:
            return self.subroutine_scope[name]
        return self.class_scope.get(name)

    def _resolve(self, name):
        entry = self._lookup(name)
        if entry is None:
            raise UnresolvedSymbolError(f"undeclared identifier '{name}'")
        return entry

    @staticmethod
    def _kind(kind):
        try:
            return Kind(kind)
        except ValueError:
            raise InvalidKindError(f"Invalid kind: {kind}") from None
