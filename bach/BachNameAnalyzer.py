"""
Bach Name Analyzer - Resolves every identifier in a parsed bach program.

A single walk over the AST that:
- declares variables, formals, functions and structs in a stack of scopes
- builds one field table per struct declaration (never pushed on the stack)
- binds each identifier use to its Symbol, or to UNDEFINED
- reports every name error it finds and keeps going
"""

from typing import Any, Optional

from tatsu.walkers import NodeWalker

from bach.BachAst import (
    AssignExp,
    AssignStmt,
    BinaryExp,
    CallExp,
    CallStmt,
    FalseLit,
    FormalDecl,
    FuncBody,
    FuncDecl,
    IdNode,
    IfElseStmt,
    IfStmt,
    IntLit,
    PostDecStmt,
    PostIncStmt,
    Program,
    ReadStmt,
    ReturnStmt,
    StrLit,
    StructAccess,
    StructDecl,
    StructType,
    TrueLit,
    UnaryExp,
    VarDecl,
    VoidType,
    WhileStmt,
    WriteStmt,
    location_id,
)
from bach.BachDiagnostics import Diagnostic, DiagnosticCollector, DiagnosticKind
from bach.BachSymbolTable import (
    UNDEFINED,
    Scope,
    Symbol,
    SymbolCategory,
    SymbolTable,
)


class BachNameAnalyzer(NodeWalker):
    """
    Name analysis pass for bach.

    Expression walkers return the Symbol the expression's name resolves to
    (None for literals and operators), which is how colon-access chains are
    resolved link by link.
    """

    def __init__(self, reporter: Any = None):
        self.sym_table = SymbolTable()
        self.owns_reporter = reporter is None
        self.reporter = DiagnosticCollector() if self.owns_reporter else reporter
        self.errors: list[Diagnostic] = []

    def analyze(self, program: Program) -> list[Diagnostic]:
        """
        Annotate `program` in place and return the diagnostics this run raised.
        Every run starts from a fresh symbol table holding one global scope;
        the default collector is emptied too, a caller's reporter is not.
        """
        self.sym_table = SymbolTable()
        self.errors = []
        if self.owns_reporter:
            self.reporter = DiagnosticCollector()
        self.walk(program)
        return self.errors

    # --- Error Reporting ---

    def report_error(self, kind: DiagnosticKind, node: IdNode) -> None:
        """Record a diagnostic at the position of `node` and pass it to the sink."""
        self.errors.append(Diagnostic(kind, node.line, node.col))
        self.reporter.report(node.line, node.col, kind)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    # --- Symbol Management ---

    def declare_symbol(self, id_node: IdNode, symbol: Symbol, scope: Scope) -> bool:
        """
        Declare `symbol` under the identifier's name in `scope`.
        A duplicate is reported and dropped; the earlier binding stays.
        """
        if not scope.declare(id_node.name, symbol):
            self.report_error(DiagnosticKind.MULTIPLY_DECLARED, id_node)
            return False
        id_node.sym = symbol
        return True

    def require_symbol(self, id_node: IdNode) -> Symbol:
        """Resolve an identifier use, reporting it if nothing is visible."""
        sym = self.sym_table.lookup_global(id_node.name)
        if sym is None:
            self.report_error(DiagnosticKind.UNDECLARED_IDENTIFIER, id_node)
            sym = UNDEFINED
        id_node.sym = sym
        return sym

    def lookup_struct(self, name: str) -> Optional[Symbol]:
        """Find the struct declaration visible under `name`, if that is what it names."""
        sym = self.sym_table.lookup_global(name)
        if sym is None or not sym.is_struct_decl:
            return None
        return sym

    def declare_variable(self, decl: VarDecl, scope: Scope) -> Optional[Symbol]:
        """
        Analyze a variable (or struct field) declaration against `scope`.

        Returns the symbol bound to the declared name, or None when the
        declaration was rejected.
        """
        existing = scope.lookup(decl.id.name)
        if existing is not None and existing.category is SymbolCategory.FORMAL:
            # A local named like a formal keeps the formal, silently.
            decl.id.sym = existing
            return existing

        if isinstance(decl.type, VoidType):
            self.report_error(DiagnosticKind.NON_FUNCTION_DECLARED_VOID, decl.id)
            return None

        if isinstance(decl.type, StructType):
            struct_sym = self.lookup_struct(decl.type.name)
            if struct_sym is None:
                self.report_error(DiagnosticKind.INVALID_STRUCT_TYPE_NAME, decl.type.id)
                return None
            decl.type.id.sym = struct_sym
            symbol = Symbol.struct_var(decl.type.name)
        else:
            symbol = Symbol.regular(decl.type.name)

        if self.declare_symbol(decl.id, symbol, scope):
            return symbol
        return None

    def resolve_field(self, left: Optional[Symbol], access: StructAccess) -> Symbol:
        """Resolve the field name of `access` given the symbol its left side resolved to."""
        if left is None or left.is_undefined:
            # already reported where the chain broke
            return UNDEFINED

        if not left.is_struct_var:
            self.report_error(DiagnosticKind.NON_STRUCT_COLON_ACCESS, location_id(access.loc))
            return UNDEFINED

        struct_sym = self.lookup_struct(left.struct_name)
        if struct_sym is None:
            # the struct type is shadowed by a non-struct name here
            self.report_error(DiagnosticKind.INVALID_STRUCT_TYPE_NAME, location_id(access.loc))
            return UNDEFINED

        field_sym = struct_sym.fields.lookup(access.id.name)
        if field_sym is None:
            self.report_error(DiagnosticKind.INVALID_STRUCT_FIELD_NAME, access.id)
            return UNDEFINED
        return field_sym

    def _walk_block(self, decls: list, stmts: list) -> None:
        self.sym_table.push_scope()
        for decl in decls:
            self.walk(decl)
        for stmt in stmts:
            self.walk(stmt)
        self.sym_table.pop_scope()

    # --- Declarations ---

    def walk_Program(self, node: Program):
        for decl in node.decls:
            self.walk(decl)
        return node

    def walk_VarDecl(self, node: VarDecl):
        return self.declare_variable(node, self.sym_table.current_scope)

    def walk_FuncDecl(self, node: FuncDecl):
        func_sym = Symbol.function(node.return_type.name, node.formal_types)
        self.declare_symbol(node.id, func_sym, self.sym_table.current_scope)

        self.sym_table.push_scope()
        for formal in node.formals:
            self.walk(formal)
        self.walk(node.body)
        self.sym_table.pop_scope()
        return func_sym

    def walk_FormalDecl(self, node: FormalDecl):
        formal_sym = Symbol.formal(node.type.name)
        if self.declare_symbol(node.id, formal_sym, self.sym_table.current_scope):
            return formal_sym
        return None

    def walk_FuncBody(self, node: FuncBody):
        seen = set()
        for decl in node.decls:
            existing = self.sym_table.lookup_local(decl.id.name)
            repeats_formal = (
                existing is not None and existing.category is SymbolCategory.FORMAL
            )
            if decl.id.name in seen and repeats_formal:
                # only the first local named like a formal is let through
                self.report_error(DiagnosticKind.MULTIPLY_DECLARED, decl.id)
            else:
                self.walk(decl)
            seen.add(decl.id.name)
        for stmt in node.stmts:
            self.walk(stmt)

    def walk_StructDecl(self, node: StructDecl):
        struct_sym = Symbol.struct_decl(Scope())
        self.declare_symbol(node.id, struct_sym, self.sym_table.current_scope)

        for field_decl in node.fields:
            self.declare_variable(field_decl, struct_sym.fields)
        return struct_sym

    # --- Statements ---

    def walk_AssignStmt(self, node: AssignStmt):
        self.walk(node.assign)

    def walk_PostIncStmt(self, node: PostIncStmt):
        self.walk(node.exp)

    def walk_PostDecStmt(self, node: PostDecStmt):
        self.walk(node.exp)

    def walk_IfStmt(self, node: IfStmt):
        self.walk(node.cond)
        self._walk_block(node.decls, node.stmts)

    def walk_IfElseStmt(self, node: IfElseStmt):
        self.walk(node.cond)
        self._walk_block(node.then_decls, node.then_stmts)
        self._walk_block(node.else_decls, node.else_stmts)

    def walk_WhileStmt(self, node: WhileStmt):
        self.walk(node.cond)
        self._walk_block(node.decls, node.stmts)

    def walk_ReadStmt(self, node: ReadStmt):
        self.walk(node.exp)

    def walk_WriteStmt(self, node: WriteStmt):
        self.walk(node.exp)

    def walk_CallStmt(self, node: CallStmt):
        self.walk(node.call)

    def walk_ReturnStmt(self, node: ReturnStmt):
        if node.exp is not None:
            self.walk(node.exp)

    # --- Expressions ---

    def walk_IdNode(self, node: IdNode):
        return self.require_symbol(node)

    def walk_StructAccess(self, node: StructAccess):
        left = self.walk(node.loc)
        node.id.sym = self.resolve_field(left, node)
        return node.id.sym

    def walk_AssignExp(self, node: AssignExp):
        self.walk(node.lhs)
        self.walk(node.exp)

    def walk_CallExp(self, node: CallExp):
        self.require_symbol(node.id)
        for arg in node.args:
            self.walk(arg)

    def walk_UnaryExp(self, node: UnaryExp):
        self.walk(node.exp)

    def walk_BinaryExp(self, node: BinaryExp):
        self.walk(node.left)
        self.walk(node.right)

    def walk_TrueLit(self, node: TrueLit):
        return None

    def walk_FalseLit(self, node: FalseLit):
        return None

    def walk_IntLit(self, node: IntLit):
        return None

    def walk_StrLit(self, node: StrLit):
        return None


def analyze(program: Program, reporter: Any = None) -> list[Diagnostic]:
    """Run name analysis over `program` and return the diagnostics raised."""
    return BachNameAnalyzer(reporter).analyze(program)
