# test_symbol_table.py

import pytest

from bach.BachSymbolTable import (
    UNDEFINED,
    Scope,
    ScopeUnderflowError,
    Symbol,
    SymbolCategory,
    SymbolTable,
    SymbolTableError,
)


# ---------- SYMBOLS ----------


def test_symbol_defaults():
    s = Symbol.regular("integer")

    assert s.category is SymbolCategory.REGULAR
    assert s.type_t == "integer"
    assert s.return_type is None
    assert s.param_types == []
    assert s.fields is None
    assert s.struct_name is None


def test_function_symbol_records_signature():
    s = Symbol.function("void", ["integer", "boolean"])

    assert s.category is SymbolCategory.FUNCTION
    assert s.return_type == "void"
    assert s.param_types == ["integer", "boolean"]
    assert s.num_of_params == 2


def test_function_symbol_copies_param_list():
    params = ["integer"]
    s = Symbol.function("integer", params)
    params.append("boolean")

    assert s.param_types == ["integer"]


def test_struct_decl_symbol_owns_empty_field_table():
    s = Symbol.struct_decl()

    assert s.is_struct_decl
    assert isinstance(s.fields, Scope)
    assert len(s.fields) == 0


def test_struct_var_symbol_keeps_struct_name_only():
    s = Symbol.struct_var("Point")

    assert s.is_struct_var
    assert s.struct_name == "Point"
    assert s.fields is None


def test_undefined_sentinel():
    assert UNDEFINED.is_undefined
    assert not UNDEFINED.is_struct_var
    assert str(UNDEFINED) == "undefined"


def test_symbol_str():
    assert str(Symbol.regular("boolean")) == "boolean"
    assert str(Symbol.formal("integer")) == "integer"
    assert str(Symbol.struct_var("Point")) == "Point"
    assert str(Symbol.struct_decl()) == "struct-decl"
    assert str(Symbol.function("void", ["integer", "boolean"])) == "integer, boolean -> void"
    assert str(Symbol.function("integer", [])) == "void -> integer"


# ---------- SCOPE ----------


def test_scope_declare_and_lookup():
    scope = Scope()
    sym = Symbol.regular("integer")

    assert scope.declare("x", sym) is True
    assert scope.lookup("x") is sym
    assert "x" in scope
    assert list(scope) == ["x"]


def test_scope_declare_duplicate_keeps_first():
    scope = Scope()
    first = Symbol.regular("integer")
    second = Symbol.regular("boolean")

    scope.declare("x", first)

    assert scope.declare("x", second) is False
    assert scope.lookup("x") is first


def test_scope_lookup_missing_returns_none():
    assert Scope().lookup("nope") is None


# ---------- SYMBOL TABLE ----------


def test_symbol_table_initial_state():
    st = SymbolTable()

    assert st.depth == 1
    assert len(st.current_scope) == 0


def test_push_scope_creates_new_scope():
    st = SymbolTable()

    new_scope = st.push_scope()

    assert st.depth == 2
    assert st.current_scope is new_scope
    assert len(new_scope) == 0


def test_declare_success_and_retrieval():
    st = SymbolTable()
    sym = Symbol.regular("integer")

    assert st.declare("x", sym) is True
    assert st.lookup_global("x") is sym
    assert st.lookup_local("x") is sym


def test_declare_duplicate_returns_false():
    st = SymbolTable()
    sym1 = Symbol.regular("integer")
    sym2 = Symbol.regular("boolean")

    st.declare("x", sym1)

    assert st.declare("x", sym2) is False
    assert st.lookup_global("x") is sym1


def test_declare_same_name_in_nested_scope_is_allowed():
    st = SymbolTable()
    st.declare("x", Symbol.regular("integer"))
    st.push_scope()

    assert st.declare("x", Symbol.regular("boolean")) is True


def test_lookup_nonexistent_returns_none():
    st = SymbolTable()

    assert st.lookup_global("does_not_exist") is None
    assert st.lookup_local("does_not_exist") is None


def test_lookup_global_finds_outer_scope():
    st = SymbolTable()
    sym_global = Symbol.regular("integer")
    st.declare("x", sym_global)

    st.push_scope()

    assert st.lookup_global("x") is sym_global
    assert st.lookup_local("x") is None


def test_scope_shadowing():
    """
    A symbol in an inner scope shadows a symbol with the same name in an outer scope.
    """
    st = SymbolTable()
    sym_global = Symbol.regular("integer")
    st.declare("x", sym_global)

    st.push_scope()
    sym_local = Symbol.regular("boolean")
    st.declare("x", sym_local)

    assert st.lookup_global("x") is sym_local

    # After leaving the scope, the outer binding is visible again
    st.pop_scope()
    assert st.lookup_global("x") is sym_global


def test_pop_scope_discards_its_symbols():
    st = SymbolTable()
    st.push_scope()
    st.declare("y", Symbol.regular("integer"))

    st.pop_scope()

    assert st.lookup_global("y") is None


def test_pop_global_scope_leaves_empty_table():
    st = SymbolTable()

    st.pop_scope()

    assert st.depth == 0
    assert st.lookup_global("x") is None
    assert st.lookup_local("x") is None


def test_pop_empty_table_raises():
    st = SymbolTable()
    st.pop_scope()

    with pytest.raises(ScopeUnderflowError, match="empty symbol table"):
        st.pop_scope()


def test_declare_on_empty_table_raises():
    st = SymbolTable()
    st.pop_scope()

    with pytest.raises(SymbolTableError):
        st.declare("x", Symbol.regular("integer"))


def test_get_all_visible_symbols_prefers_inner():
    st = SymbolTable()
    outer_x = Symbol.regular("integer")
    y = Symbol.regular("integer")
    st.declare("x", outer_x)
    st.declare("y", y)

    st.push_scope()
    inner_x = Symbol.regular("boolean")
    st.declare("x", inner_x)

    visible = st.get_all_visible_symbols()

    assert visible == {"x": inner_x, "y": y}


def test_str_lists_every_scope():
    st = SymbolTable()
    st.declare("x", Symbol.regular("integer"))
    st.push_scope()

    text = str(st)

    assert "[0] Scope(x=integer)" in text
    assert "[1] Scope()" in text
