"""
Bach Unparser - Pretty-prints a bach AST back to source.

After name analysis every resolved identifier use is followed by its symbol
in braces, e.g. `p{Point}`, `x{integer}`, `f{integer, boolean -> void}`.
"""

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
    TrueLit,
    UnaryExp,
    VarDecl,
    WhileStmt,
    WriteStmt,
)

INDENT = 4


class BachUnparser(NodeWalker):
    """Declarations and statements walk to lists of lines, expressions to strings."""

    def __init__(self, annotate: bool = True):
        self.annotate = annotate

    def unparse(self, program: Program) -> str:
        return "\n".join(self.walk(program, 0)) + "\n"

    def _block(self, decls, stmts, indent):
        lines = []
        for decl in decls:
            lines.extend(self.walk(decl, indent))
        for stmt in stmts:
            lines.extend(self.walk(stmt, indent))
        return lines

    @staticmethod
    def _pad(indent):
        return " " * indent

    # --- Declarations ---

    def walk_Program(self, node: Program, indent=0):
        lines = []
        for decl in node.decls:
            lines.extend(self.walk(decl, indent))
        return lines

    def walk_VarDecl(self, node: VarDecl, indent=0):
        return [f"{self._pad(indent)}{self._type(node.type)} {node.id.name}."]

    def walk_FormalDecl(self, node: FormalDecl, indent=0):
        return [f"{self._type(node.type)} {node.id.name}"]

    def walk_FuncDecl(self, node: FuncDecl, indent=0):
        formals = ", ".join(self.walk(formal)[0] for formal in node.formals)
        lines = [f"{self._pad(indent)}{self._type(node.return_type)} {node.id.name}[{formals}] ["]
        lines.extend(self.walk(node.body, indent + INDENT))
        lines.append(f"{self._pad(indent)}]")
        lines.append("")
        return lines

    def walk_FuncBody(self, node: FuncBody, indent=0):
        return self._block(node.decls, node.stmts, indent)

    def walk_StructDecl(self, node: StructDecl, indent=0):
        lines = [f"{self._pad(indent)}struct {node.id.name} ["]
        for field_decl in node.fields:
            lines.extend(self.walk(field_decl, indent + INDENT))
        lines.append(f"{self._pad(indent)}]")
        lines.append("")
        return lines

    def _type(self, type_ref):
        if type_ref.name in ("boolean", "integer", "void"):
            return type_ref.name
        return f"struct {type_ref.name}"

    # --- Statements ---

    def walk_AssignStmt(self, node: AssignStmt, indent=0):
        return [f"{self._pad(indent)}{self._assign(node.assign)}."]

    def walk_PostIncStmt(self, node: PostIncStmt, indent=0):
        return [f"{self._pad(indent)}{self.walk(node.exp)}++."]

    def walk_PostDecStmt(self, node: PostDecStmt, indent=0):
        return [f"{self._pad(indent)}{self.walk(node.exp)}--."]

    def walk_IfStmt(self, node: IfStmt, indent=0):
        pad = self._pad(indent)
        lines = [f"{pad}if ({self.walk(node.cond)}) {{"]
        lines.extend(self._block(node.decls, node.stmts, indent + INDENT))
        lines.append(f"{pad}}}")
        return lines

    def walk_IfElseStmt(self, node: IfElseStmt, indent=0):
        pad = self._pad(indent)
        lines = [f"{pad}if ({self.walk(node.cond)}) {{"]
        lines.extend(self._block(node.then_decls, node.then_stmts, indent + INDENT))
        lines.append(f"{pad}}}")
        lines.append(f"{pad}else {{")
        lines.extend(self._block(node.else_decls, node.else_stmts, indent + INDENT))
        lines.append(f"{pad}}}")
        return lines

    def walk_WhileStmt(self, node: WhileStmt, indent=0):
        pad = self._pad(indent)
        lines = [f"{pad}while ({self.walk(node.cond)}) {{"]
        lines.extend(self._block(node.decls, node.stmts, indent + INDENT))
        lines.append(f"{pad}}}")
        return lines

    def walk_ReadStmt(self, node: ReadStmt, indent=0):
        return [f"{self._pad(indent)}input -> {self.walk(node.exp)}."]

    def walk_WriteStmt(self, node: WriteStmt, indent=0):
        return [f"{self._pad(indent)}disp <- ({self.walk(node.exp)})."]

    def walk_CallStmt(self, node: CallStmt, indent=0):
        return [f"{self._pad(indent)}{self.walk(node.call)}."]

    def walk_ReturnStmt(self, node: ReturnStmt, indent=0):
        if node.exp is None:
            return [f"{self._pad(indent)}return."]
        return [f"{self._pad(indent)}return {self.walk(node.exp)}."]

    # --- Expressions ---

    def _assign(self, node: AssignExp):
        return f"{self.walk(node.lhs)} = {self.walk(node.exp)}"

    def walk_AssignExp(self, node: AssignExp, indent=0):
        return f"({self._assign(node)})"

    def walk_IdNode(self, node: IdNode, indent=0):
        if self.annotate and node.sym is not None and not node.sym.is_undefined:
            return f"{node.name}{{{node.sym}}}"
        return node.name

    def walk_StructAccess(self, node: StructAccess, indent=0):
        return f"({self.walk(node.loc)}):{self.walk(node.id)}"

    def walk_CallExp(self, node: CallExp, indent=0):
        args = ", ".join(self.walk(arg) for arg in node.args)
        return f"{self.walk(node.id)}({args})"

    def walk_UnaryExp(self, node: UnaryExp, indent=0):
        return f"({node.op}{self.walk(node.exp)})"

    def walk_BinaryExp(self, node: BinaryExp, indent=0):
        return f"({self.walk(node.left)} {node.op} {self.walk(node.right)})"

    def walk_TrueLit(self, node: TrueLit, indent=0):
        return "TRUE"

    def walk_FalseLit(self, node: FalseLit, indent=0):
        return "FALSE"

    def walk_IntLit(self, node: IntLit, indent=0):
        return str(node.value)

    def walk_StrLit(self, node: StrLit, indent=0):
        return node.value


def unparse(program: Program, annotate: bool = True) -> str:
    return BachUnparser(annotate).unparse(program)
