"""
Bach AST - Node classes for parsed bach programs.

The parser builds these once; the name analyzer only fills in the `sym`
field of identifier nodes. Every node kind is a plain dataclass, and passes
dispatch on the node class (see tatsu.walkers.NodeWalker).

    Program         decls
    VarDecl         type, id, is_struct_field
    FuncDecl        return_type, id, formals, body
    FormalDecl      type, id
    FuncBody        decls, stmts
    StructDecl      id, fields

    BooleanType | IntegerType | VoidType | StructType(id)

    AssignStmt, PostIncStmt, PostDecStmt, IfStmt, IfElseStmt, WhileStmt,
    ReadStmt, WriteStmt, CallStmt, ReturnStmt

    TrueLit, FalseLit, IntLit, StrLit, IdNode, StructAccess, AssignExp,
    CallExp, UnaryExp, BinaryExp
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from bach.BachSymbolTable import Symbol


# --- Types ---


@dataclass
class BooleanType:
    @property
    def name(self) -> str:
        return "boolean"


@dataclass
class IntegerType:
    @property
    def name(self) -> str:
        return "integer"


@dataclass
class VoidType:
    @property
    def name(self) -> str:
        return "void"


@dataclass
class StructType:
    """Reference to a struct type by name; re-resolved on every use."""

    id: IdNode

    @property
    def name(self) -> str:
        return self.id.name


TypeRef = Union[BooleanType, IntegerType, VoidType, StructType]


# --- Expressions ---


@dataclass
class Literal:
    line: int
    col: int


@dataclass
class TrueLit(Literal):
    pass


@dataclass
class FalseLit(Literal):
    pass


@dataclass
class IntLit(Literal):
    value: int = 0


@dataclass
class StrLit(Literal):
    value: str = '""'


@dataclass(eq=False)
class IdNode:
    """
    An identifier occurrence.

    `sym` is written by the name analyzer: the symbol a use resolves to (or
    UNDEFINED), or the symbol a declaration introduces.
    """

    line: int
    col: int
    name: str
    sym: Optional[Symbol] = None

    def __str__(self) -> str:
        return self.name


@dataclass
class StructAccess:
    """Colon access `loc:id`; `loc` is an IdNode or another StructAccess."""

    loc: Union[IdNode, StructAccess]
    id: IdNode

    @property
    def name_node(self) -> IdNode:
        """The rightmost identifier of the access chain."""
        return self.id


@dataclass
class AssignExp:
    lhs: Union[IdNode, StructAccess]
    exp: Expression


@dataclass
class CallExp:
    id: IdNode
    args: list[Expression] = field(default_factory=list)


@dataclass
class UnaryExp:
    op: str  # "-" or "^"
    exp: Expression


@dataclass
class BinaryExp:
    op: str
    left: Expression
    right: Expression


Expression = Union[
    TrueLit,
    FalseLit,
    IntLit,
    StrLit,
    IdNode,
    StructAccess,
    AssignExp,
    CallExp,
    UnaryExp,
    BinaryExp,
]

Location = Union[IdNode, StructAccess]


def location_id(loc: Location) -> IdNode:
    """Return the identifier a diagnostic about `loc` should point at."""
    if isinstance(loc, StructAccess):
        return loc.name_node
    return loc


# --- Statements ---


@dataclass
class AssignStmt:
    assign: AssignExp


@dataclass
class PostIncStmt:
    exp: Location


@dataclass
class PostDecStmt:
    exp: Location


@dataclass
class IfStmt:
    cond: Expression
    decls: list[VarDecl] = field(default_factory=list)
    stmts: list[Statement] = field(default_factory=list)


@dataclass
class IfElseStmt:
    cond: Expression
    then_decls: list[VarDecl] = field(default_factory=list)
    then_stmts: list[Statement] = field(default_factory=list)
    else_decls: list[VarDecl] = field(default_factory=list)
    else_stmts: list[Statement] = field(default_factory=list)


@dataclass
class WhileStmt:
    cond: Expression
    decls: list[VarDecl] = field(default_factory=list)
    stmts: list[Statement] = field(default_factory=list)


@dataclass
class ReadStmt:
    exp: Location


@dataclass
class WriteStmt:
    exp: Expression


@dataclass
class CallStmt:
    call: CallExp


@dataclass
class ReturnStmt:
    exp: Optional[Expression] = None


Statement = Union[
    AssignStmt,
    PostIncStmt,
    PostDecStmt,
    IfStmt,
    IfElseStmt,
    WhileStmt,
    ReadStmt,
    WriteStmt,
    CallStmt,
    ReturnStmt,
]


# --- Declarations ---


@dataclass
class VarDecl:
    type: TypeRef
    id: IdNode
    is_struct_field: bool = False


@dataclass
class FormalDecl:
    type: TypeRef
    id: IdNode


@dataclass
class FuncBody:
    decls: list[VarDecl] = field(default_factory=list)
    stmts: list[Statement] = field(default_factory=list)


@dataclass
class FuncDecl:
    return_type: TypeRef
    id: IdNode
    formals: list[FormalDecl] = field(default_factory=list)
    body: FuncBody = field(default_factory=FuncBody)

    @property
    def formal_types(self) -> list[str]:
        return [formal.type.name for formal in self.formals]


@dataclass
class StructDecl:
    id: IdNode
    fields: list[VarDecl] = field(default_factory=list)


Declaration = Union[VarDecl, FuncDecl, StructDecl]


@dataclass
class Program:
    decls: list[Declaration] = field(default_factory=list)
