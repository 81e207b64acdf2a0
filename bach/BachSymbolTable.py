"""
Bach Symbol Table - Symbols, scopes and the scope stack used by name analysis.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class SymbolTableError(Exception):
    """Raised when a symbol table operation fails."""

    pass


class ScopeUnderflowError(SymbolTableError):
    """Raised when the scope stack is used after its last scope was popped."""

    pass


class SymbolCategory(Enum):
    REGULAR = "regular"
    FUNCTION = "function"
    FORMAL = "formal"
    STRUCT_DECL = "struct-decl"
    STRUCT_VAR = "struct-var"
    UNDEFINED = "undefined"


@dataclass(eq=False)
class Symbol:
    """
    What an identifier was declared to be.

    Only the fields relevant to the category are set:
        REGULAR, FORMAL     type_t
        FUNCTION            return_type, param_types
        STRUCT_DECL         fields (the struct's own field table)
        STRUCT_VAR          struct_name (its field table is looked up by name)
        UNDEFINED           nothing
    """

    category: SymbolCategory
    type_t: Optional[str] = None
    # For functions
    return_type: Optional[str] = None
    param_types: list[str] = field(default_factory=list)
    # For struct declarations
    fields: Optional["Scope"] = None
    # For struct variables
    struct_name: Optional[str] = None

    @classmethod
    def regular(cls, type_t: str) -> "Symbol":
        return cls(SymbolCategory.REGULAR, type_t=type_t)

    @classmethod
    def formal(cls, type_t: str) -> "Symbol":
        return cls(SymbolCategory.FORMAL, type_t=type_t)

    @classmethod
    def function(cls, return_type: str, param_types: list[str]) -> "Symbol":
        return cls(
            SymbolCategory.FUNCTION,
            type_t="function",
            return_type=return_type,
            param_types=list(param_types),
        )

    @classmethod
    def struct_decl(cls, fields: Optional["Scope"] = None) -> "Symbol":
        return cls(
            SymbolCategory.STRUCT_DECL,
            type_t="struct-decl",
            fields=fields if fields is not None else Scope(),
        )

    @classmethod
    def struct_var(cls, struct_name: str) -> "Symbol":
        return cls(SymbolCategory.STRUCT_VAR, type_t=struct_name, struct_name=struct_name)

    @property
    def num_of_params(self) -> int:
        return len(self.param_types)

    @property
    def is_undefined(self) -> bool:
        return self.category is SymbolCategory.UNDEFINED

    @property
    def is_struct_decl(self) -> bool:
        return self.category is SymbolCategory.STRUCT_DECL

    @property
    def is_struct_var(self) -> bool:
        return self.category is SymbolCategory.STRUCT_VAR

    def __str__(self) -> str:
        if self.category is SymbolCategory.FUNCTION:
            params = ", ".join(self.param_types) or "void"
            return f"{params} -> {self.return_type}"
        if self.category is SymbolCategory.UNDEFINED:
            return "undefined"
        return self.type_t or ""


# Bound to every identifier use that failed to resolve.
UNDEFINED = Symbol(SymbolCategory.UNDEFINED)


class Scope:
    """One block's (or one struct's) mapping of names to symbols."""

    def __init__(self):
        self.symbols: dict[str, Symbol] = {}

    def declare(self, name: str, symbol: Symbol) -> bool:
        """
        Bind `name` to `symbol`.
        Returns False, leaving the existing binding alone, if `name` is taken.
        """
        if name in self.symbols:
            return False
        self.symbols[name] = symbol
        return True

    def lookup(self, name: str) -> Optional[Symbol]:
        return self.symbols.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.symbols

    def __len__(self) -> int:
        return len(self.symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols)

    def __repr__(self) -> str:
        entries = ", ".join(f"{name}={sym}" for name, sym in self.symbols.items())
        return f"Scope({entries})"


class SymbolTable:
    """
    A stack of scopes supporting nested lexical blocks.

    The table starts with a single (global) scope. push_scope() is called on
    entry to a function body or a block and pop_scope() on exit, in matched
    pairs.

    Symbol lookup searches from the innermost scope out to the global scope.
    """

    def __init__(self):
        # innermost scope last
        self.scopes: list[Scope] = [Scope()]

    @property
    def depth(self) -> int:
        return len(self.scopes)

    @property
    def current_scope(self) -> Scope:
        """The innermost scope. Raises ScopeUnderflowError if there is none."""
        if not self.scopes:
            raise ScopeUnderflowError("Symbol table has no scopes.")
        return self.scopes[-1]

    def push_scope(self) -> Scope:
        """Enter a new nested scope and return it."""
        scope = Scope()
        self.scopes.append(scope)
        return scope

    def pop_scope(self) -> Scope:
        """
        Leave the innermost scope and return it.
        Raises ScopeUnderflowError if the stack is already empty.
        """
        if not self.scopes:
            raise ScopeUnderflowError("Cannot pop a scope from an empty symbol table.")
        return self.scopes.pop()

    def declare(self, name: str, symbol: Symbol) -> bool:
        """
        Add a symbol to the innermost scope.
        Returns False if the name already exists in that scope.
        """
        return self.current_scope.declare(name, symbol)

    def lookup_local(self, name: str) -> Optional[Symbol]:
        """Look up a symbol in the innermost scope only."""
        if not self.scopes:
            return None
        return self.scopes[-1].lookup(name)

    def lookup_global(self, name: str) -> Optional[Symbol]:
        """
        Look up a symbol by name, searching from the innermost scope outwards.
        Returns None if not found in any scope.
        """
        for scope in reversed(self.scopes):
            sym = scope.lookup(name)
            if sym is not None:
                return sym
        return None

    def get_all_visible_symbols(self) -> dict[str, Symbol]:
        """
        Get all symbols visible from the innermost scope.
        Symbols in inner scopes shadow those in outer scopes.
        """
        visible_symbols = {}
        for scope in self.scopes:
            visible_symbols.update(scope.symbols)
        return visible_symbols

    def __str__(self) -> str:
        lines = ["*** SymbolTable ***"]
        for level, scope in enumerate(self.scopes):
            lines.append(f"  [{level}] {scope!r}")
        lines.append("*** DONE ***")
        return "\n".join(lines)
