"""
Bach Parser - Turns bach source text into the AST of bach.BachAst.

The grammar (Bach.ebnf) is compiled with TatSu; BachAstBuilder is the
semantic actions class that replaces each rule's raw AST with a node.
Set BACH_GRAMMAR to load the grammar from another file.
"""

import os
from pathlib import Path
from typing import Any, Optional

import tatsu

from bach.BachAst import (
    AssignExp,
    AssignStmt,
    BinaryExp,
    BooleanType,
    CallExp,
    CallStmt,
    FalseLit,
    FormalDecl,
    FuncBody,
    FuncDecl,
    IdNode,
    IfElseStmt,
    IfStmt,
    IntegerType,
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
)

GRAMMAR_FILE = Path(__file__).parent / "Bach.ebnf"


def load_grammar(grammar_file: Optional[Path] = None) -> str:
    """Read the grammar text, honouring BACH_GRAMMAR when no file is given."""
    if grammar_file is None:
        grammar_file = Path(os.environ.get("BACH_GRAMMAR", GRAMMAR_FILE))
    with open(grammar_file, "r") as f:
        return f.read()


# --- Helper Functions ---


def get_node_position(ast: Any, text: str) -> tuple[int, int]:
    """
    1-based (line, col) of `text`, the last thing the rule behind `ast` matched.

    Parseinfo is taken from where the rule ended, because where it started
    may include skipped whitespace and comments.
    """
    info = getattr(ast, "parseinfo", None)
    if info is None:
        return (0, 0)
    # older TatSu releases call the tokenizer "buffer"
    tokenizer = getattr(info, "tokenizer", None) or getattr(info, "buffer", None)
    start = max(info.endpos - len(text), info.pos)
    line_info = tokenizer.line_info(start)
    return (line_info.line + 1, line_info.col + 1)


def get(ast: Any, key: str) -> Any:
    """Fetch a named element; rules whose names all went unmatched hand us raw CST."""
    if isinstance(ast, dict):
        return ast.get(key)
    return None


def flatten(items: Any) -> list:
    """Flatten the nested lists/tuples TatSu builds for closures and groups."""
    if items is None:
        return []
    if not isinstance(items, (list, tuple)):
        return [items]
    flat = []
    for item in items:
        flat.extend(flatten(item))
    return flat


def nodes(items: Any) -> list:
    """The nodes of a closure, without separator and operator tokens."""
    return [item for item in flatten(items) if not isinstance(item, str)]


def fold_binary(first: Any, rest: Any) -> Any:
    """Fold `first (op operand)*` into left-associative BinaryExp nodes."""
    result = first
    flat = flatten(rest)
    for op, operand in zip(flat[0::2], flat[1::2]):
        result = BinaryExp(op=op, left=result, right=operand)
    return result


# --- Semantic Actions ---


class BachAstBuilder:
    """
    TatSu semantic actions class for bach.

    Each method is named after a grammar rule and receives that rule's AST;
    rules without a method pass their AST through unchanged.
    """

    def _default(self, ast, *args, **kwargs):
        return ast

    # --- Program and Declarations ---

    def program(self, ast):
        return Program(decls=nodes(get(ast, "decls")))

    def var_decl(self, ast):
        return VarDecl(type=ast.type, id=ast.id)

    def struct_decl(self, ast):
        fields = nodes(ast.fields)
        for field_decl in fields:
            field_decl.is_struct_field = True
        return StructDecl(id=ast.id, fields=fields)

    def func_decl(self, ast):
        return FuncDecl(
            return_type=ast.type,
            id=ast.id,
            formals=nodes(get(ast, "formals")),
            body=ast.body if isinstance(ast.body, FuncBody) else FuncBody(),
        )

    def formal_decl(self, ast):
        return FormalDecl(type=ast.type, id=ast.id)

    def func_body(self, ast):
        return FuncBody(decls=nodes(get(ast, "decls")), stmts=nodes(get(ast, "stmts")))

    # --- Types ---

    def boolean_type(self, ast):
        return BooleanType()

    def integer_type(self, ast):
        return IntegerType()

    def void_type(self, ast):
        return VoidType()

    def struct_type(self, ast):
        return StructType(id=ast.id)

    # --- Statements ---

    def if_stmt(self, ast):
        if get(ast, "else_kw") is None:
            return IfStmt(
                cond=ast.cond,
                decls=nodes(get(ast, "then_decls")),
                stmts=nodes(get(ast, "then_stmts")),
            )
        return IfElseStmt(
            cond=ast.cond,
            then_decls=nodes(get(ast, "then_decls")),
            then_stmts=nodes(get(ast, "then_stmts")),
            else_decls=nodes(get(ast, "else_decls")),
            else_stmts=nodes(get(ast, "else_stmts")),
        )

    def while_stmt(self, ast):
        return WhileStmt(
            cond=ast.cond,
            decls=nodes(get(ast, "decls")),
            stmts=nodes(get(ast, "stmts")),
        )

    def read_stmt(self, ast):
        return ReadStmt(exp=ast.exp)

    def write_stmt(self, ast):
        return WriteStmt(exp=ast.exp)

    def return_stmt(self, ast):
        return ReturnStmt(exp=get(ast, "exp"))

    def call_stmt(self, ast):
        return CallStmt(call=ast.call)

    def post_inc_stmt(self, ast):
        return PostIncStmt(exp=ast.exp)

    def post_dec_stmt(self, ast):
        return PostDecStmt(exp=ast.exp)

    def assign_stmt(self, ast):
        return AssignStmt(assign=ast.assign)

    # --- Expressions ---

    def assign_exp(self, ast):
        return AssignExp(lhs=ast.lhs, exp=ast.exp)

    def or_exp(self, ast):
        return fold_binary(ast.first, get(ast, "rest"))

    def and_exp(self, ast):
        return fold_binary(ast.first, get(ast, "rest"))

    def rel_exp(self, ast):
        return fold_binary(ast.first, get(ast, "rest"))

    def add_exp(self, ast):
        return fold_binary(ast.first, get(ast, "rest"))

    def mul_exp(self, ast):
        return fold_binary(ast.first, get(ast, "rest"))

    def neg_exp(self, ast):
        return UnaryExp(op="-", exp=ast.exp)

    def not_exp(self, ast):
        return UnaryExp(op="^", exp=ast.exp)

    def call_exp(self, ast):
        return CallExp(id=ast.id, args=nodes(get(ast, "args")))

    def loc(self, ast):
        result = ast.first
        for field_id in nodes(get(ast, "rest")):
            result = StructAccess(loc=result, id=field_id)
        return result

    # --- Leaves ---

    def true_lit(self, ast):
        line, col = get_node_position(ast, ast.value)
        return TrueLit(line, col)

    def false_lit(self, ast):
        line, col = get_node_position(ast, ast.value)
        return FalseLit(line, col)

    def int_lit(self, ast):
        line, col = get_node_position(ast, ast.value)
        return IntLit(line, col, value=int(ast.value))

    def str_lit(self, ast):
        line, col = get_node_position(ast, ast.value)
        return StrLit(line, col, value=ast.value)

    def id(self, ast):
        line, col = get_node_position(ast, ast.name)
        return IdNode(line, col, ast.name)


class BachParser:
    """Compiled bach grammar; parse() returns a Program."""

    def __init__(self, grammar: Optional[str] = None):
        self.model = tatsu.compile(grammar if grammar is not None else load_grammar(), name="Bach")

    def parse(self, text: str, semantics: Any = None, **kwargs) -> Any:
        """
        Parse `text` into a Program.
        Raises tatsu.exceptions.FailedParse on a syntax error.
        """
        if semantics is None:
            semantics = BachAstBuilder()
        return self.model.parse(text, semantics=semantics, parseinfo=True, **kwargs)
