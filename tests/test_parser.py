"""Tests for the clause sequence parser.

Covers the clause model the parser builds, expression coercion, and one
rejection class per grammar error code.
"""

from __future__ import annotations

import pytest

from comprehend import (
    Call,
    ClauseKind,
    CompilerConfig,
    Const,
    ErrorCode,
    Filter,
    Generator,
    GrammarError,
    InvalidClauseError,
    KeyValueHead,
    MalformedPatternError,
    MisplacedHeadError,
    MissingLeadingGeneratorError,
    Name,
    NamePattern,
    NoHeadError,
    Parser,
    RawClause,
    StarPattern,
    TuplePattern,
    UnresolvedReferenceError,
    ValueHead,
    compile_eager,
    for_,
    if_,
    key_value,
    parse,
    value,
)


def _is_even(x):
    return x % 2 == 0


def _square(x):
    return x * x


class TestClauseModel:
    """The parser builds an immutable, ordered clause model."""

    def test_single_generator(self):
        model = parse([for_("x", [1, 2, 3]), value(_square)])
        assert model.depth == 1
        (generator,) = model.clauses
        assert generator == Generator(NamePattern("x"), Const([1, 2, 3]), 0)
        assert model.head == ValueHead(Call(_square, ("x",)))

    def test_clause_positions_follow_written_order(self):
        model = parse(
            [
                for_("x", range(4)),
                if_(_is_even),
                for_("y", range(2)),
                value(lambda x, y: (x, y)),
            ]
        )
        assert [type(c) for c in model.clauses] == [Generator, Filter, Generator]
        assert [c.position for c in model.clauses] == [0, 1, 2]
        assert model.depth == 2
        assert len(model.filters) == 1
        assert model.bound_names == ("x", "y")

    def test_key_value_head(self):
        model = parse([for_("k, v", [("a", 1)]), key_value(Name("k"), Name("v"))])
        assert model.head == KeyValueHead(Name("k"), Name("v"))

    def test_tagged_tuples_are_accepted(self):
        tagged = parse([("for", "x", [1, 2]), ("if", _is_even), ("value", _square)])
        raw = parse([for_("x", [1, 2]), if_(_is_even), value(_square)])
        assert tagged == raw

    def test_tagged_tuple_with_clause_kind(self):
        model = parse([(ClauseKind.FOR, "x", [1]), (ClauseKind.VALUE, Name("x"))])
        assert model.depth == 1

    def test_raw_clause_constructors(self):
        assert for_("x", [1]) == RawClause(ClauseKind.FOR, ("x", [1]))
        assert if_(_is_even).kind is ClauseKind.IF
        assert value(1).kind.is_head
        assert key_value(1, 2).kind.is_head
        assert not for_("x", [1]).kind.is_head

    def test_params_enter_scope(self):
        model = parse(
            [for_("x", Name("xs")), if_(lambda x, limit: x < limit), value(Name("x"))],
            params=("xs", "limit"),
        )
        assert model.params == ("xs", "limit")

    def test_parse_is_pure(self):
        clauses = [for_("x", [1, 2]), if_(_is_even), value(_square)]
        assert parse(clauses) == parse(clauses)

    def test_parser_class_matches_parse(self):
        clauses = [for_("x", [1, 2]), value(_square)]
        assert Parser(clauses).parse() == parse(clauses)

    def test_shadowing_is_allowed(self):
        model = parse(
            [for_("x", [1, 2]), for_("x", lambda x: range(x)), value(Name("x"))]
        )
        assert model.bound_names == ("x",)
        assert compile_eager(model)() == [0, 0, 1]


class TestExpressionCoercion:
    """Operands become Call, Const or stay as given."""

    def test_callable_params_are_inferred(self):
        model = parse([for_("x", [1]), for_("y", [2]), value(lambda x, y: x + y)])
        assert model.head.expr.params == ("x", "y")

    def test_parameters_with_defaults_are_not_bound(self):
        model = parse([for_("x", [1, 2]), value(lambda x, scale=10: x * scale)])
        assert model.head.expr.params == ("x",)
        assert compile_eager(model)() == [10, 20]

    def test_zero_argument_callable(self):
        model = parse([for_("_", range(3)), value(lambda: "tick")])
        assert model.head.expr.params == ()
        assert compile_eager(model)() == ["tick", "tick", "tick"]

    def test_non_callables_become_constants(self):
        model = parse([for_("x", (1, 2)), value("label")])
        assert model.generators[0].source == Const((1, 2))
        assert model.head == ValueHead(Const("label"))

    def test_explicit_call_params_become_tuple(self):
        model = parse([for_("x", [1]), value(Call(lambda *args: args, ["x"]))])
        assert model.head.expr.params == ("x",)

    def test_explicit_const_keeps_callables_opaque(self):
        model = parse([for_("x", [1, 2]), value(Const(len))])
        assert compile_eager(model)() == [len, len]

    def test_required_keyword_only_parameter_is_rejected(self):
        with pytest.raises(InvalidClauseError, match="keyword-only"):
            parse([for_("x", [1]), value(lambda *, x: x)])

    def test_variadic_callable_is_rejected(self):
        with pytest.raises(InvalidClauseError, match="variadic") as exc_info:
            parse([for_("x", [1, 2]), value(lambda *args: args)])
        assert "Call(func, params=" in exc_info.value.suggestion

    def test_variadic_callable_with_explicit_params(self):
        model = parse([for_("x", [1, 2]), value(Call(lambda *args: args, ("x",)))])
        assert compile_eager(model)() == [(1,), (2,)]

    def test_invalid_explicit_call_param(self):
        with pytest.raises(InvalidClauseError, match="not an identifier"):
            parse([for_("x", [1]), value(Call(lambda v: v, ("not valid",)))])


class TestParameters:
    """Program parameter names are validated up front."""

    @pytest.mark.parametrize(
        "params",
        [("1x",), ("for",), ("_cq_items",), ("a", "a"), ("_",)],
    )
    def test_invalid_params_raise_value_error(self, params):
        with pytest.raises(ValueError):
            parse([for_("x", [1]), value(Name("x"))], params=params)

    def test_params_checked_before_clauses(self):
        # A bad parameter wins over a bad clause list
        with pytest.raises(ValueError, match="duplicate"):
            parse([], params=("a", "a"))


class TestMissingLeadingGenerator:
    """C-GRM-001: the list must open with a generator."""

    def test_empty_clause_list(self):
        with pytest.raises(MissingLeadingGeneratorError) as exc_info:
            parse([])
        assert exc_info.value.code is ErrorCode.MISSING_LEADING_GENERATOR
        assert exc_info.value.position is None

    def test_leading_filter(self):
        with pytest.raises(MissingLeadingGeneratorError) as exc_info:
            parse([if_(lambda: True), for_("x", [1]), value(Name("x"))])
        assert exc_info.value.position == 0
        assert "filter" in exc_info.value.suggestion

    def test_leading_head(self):
        with pytest.raises(MissingLeadingGeneratorError) as exc_info:
            parse([value(1)])
        assert exc_info.value.position == 0


class TestMalformedPattern:
    """C-GRM-002: binding patterns must be valid destructuring targets."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "",
            "x +",
            "1",
            "x.attr",
            "x[0]",
            "class",
            "*rest",
            "a, *b, *c",
            "x, x",
            "a, (b, a)",
            "_cq_hidden",
            42,
        ],
    )
    def test_rejected_patterns(self, pattern):
        with pytest.raises(MalformedPatternError) as exc_info:
            parse([for_(pattern, [1]), value(1)])
        assert exc_info.value.code is ErrorCode.MALFORMED_PATTERN
        assert exc_info.value.position == 0

    def test_pattern_error_is_chained(self):
        with pytest.raises(MalformedPatternError) as exc_info:
            parse([for_("x, x", [(1, 2)]), value(1)])
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_static_arity_mismatch(self):
        with pytest.raises(MalformedPatternError, match="expects 2 items"):
            parse([for_("a, b", [(1, 2), (1, 2, 3)]), value(Name("a"))])

    def test_static_arity_with_star(self):
        model = parse([for_("first, *rest", [(1,), (1, 2, 3)]), value(Name("rest"))])
        assert compile_eager(model)() == [[], [2, 3]]
        with pytest.raises(MalformedPatternError, match="at least 1"):
            parse([for_("first, *rest", [()]), value(Name("first"))])

    def test_static_arity_nested(self):
        with pytest.raises(MalformedPatternError):
            parse([for_("k, (a, b)", [("x", (1, 2, 3))]), value(Name("k"))])

    def test_static_arity_check_can_be_disabled(self):
        config = CompilerConfig(check_static_arity=False)
        model = parse([for_("a, b", [(1, 2, 3)]), value(Name("a"))], config=config)
        with pytest.raises(ValueError, match="too many values"):
            compile_eager(model)()

    def test_non_sequence_elements_are_left_to_run_time(self):
        model = parse([for_("a, b", ["xy", "zw"]), value(Name("b"))])
        assert compile_eager(model)() == ["y", "w"]


class TestNoHead:
    """C-GRM-003: the list must end with a head."""

    def test_generators_without_head(self):
        with pytest.raises(NoHeadError) as exc_info:
            parse([for_("x", [1]), if_(_is_even)])
        assert exc_info.value.code is ErrorCode.NO_HEAD
        assert "value(...)" in exc_info.value.suggestion


class TestUnresolvedReference:
    """C-GRM-004: every read name must be bound by a preceding generator."""

    def test_unknown_name(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            parse([for_("x", [1]), value(lambda y: y)])
        error = exc_info.value
        assert error.code is ErrorCode.UNRESOLVED_REFERENCE
        assert error.name == "y"
        assert error.position == 1

    def test_name_bound_by_later_generator(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            parse([for_("x", lambda y: range(y)), for_("y", [1]), value(Name("x"))])
        assert exc_info.value.position == 0
        assert "later generator" in exc_info.value.suggestion

    def test_filter_before_its_generator(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            parse([for_("x", [1]), if_(lambda y: y), for_("y", [2]), value(Name("y"))])
        assert exc_info.value.position == 1

    def test_source_cannot_read_its_own_pattern(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            parse([for_("x", lambda x: [x]), value(Name("x"))])
        assert exc_info.value.name == "x"

    def test_close_match_suggestion(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            parse([for_("item", [1]), value(lambda itme: itme)])
        assert exc_info.value.suggestion == "did you mean 'item'?"

    def test_wildcard_binds_nothing(self):
        with pytest.raises(UnresolvedReferenceError):
            parse([for_("_", [1]), value(Name("_"))])

    def test_undeclared_parameter(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            parse([for_("x", Name("xs")), value(Name("x"))])
        assert exc_info.value.suggestion == "declare it as a program parameter"


class TestMisplacedHead:
    """C-GRM-005: exactly one head, in last position."""

    def test_second_head(self):
        with pytest.raises(MisplacedHeadError) as exc_info:
            parse([for_("x", [1]), value(Name("x")), value(Name("x"))])
        assert exc_info.value.code is ErrorCode.MISPLACED_HEAD
        assert exc_info.value.position == 2

    def test_clause_after_head(self):
        with pytest.raises(MisplacedHeadError) as exc_info:
            parse([for_("x", [1]), value(Name("x")), if_(_is_even)])
        assert exc_info.value.position == 2


class TestInvalidClause:
    """C-GRM-006: raw clauses must be well formed."""

    def test_unknown_kind(self):
        with pytest.raises(InvalidClauseError, match="unknown clause kind 'while'") as exc_info:
            parse([("while", _is_even)])
        assert exc_info.value.code is ErrorCode.INVALID_CLAUSE
        assert exc_info.value.position == 0

    def test_raw_clause_with_string_kind(self):
        model = parse([RawClause("for", ("x", [1, 2])), RawClause("value", (Name("x"),))])
        assert model.generators[0].pattern == NamePattern("x")

    def test_raw_clause_with_unknown_string_kind(self):
        with pytest.raises(InvalidClauseError, match="unknown clause kind 'while'"):
            parse([RawClause("while", ("x", [1]))])

    def test_wrong_operand_count(self):
        with pytest.raises(InvalidClauseError, match="takes 2 operand"):
            parse([("for", "x")])

    def test_not_a_clause(self):
        with pytest.raises(InvalidClauseError, match="not int"):
            parse([for_("x", [1]), 42])

    def test_all_grammar_errors_share_a_base(self):
        for error_cls in (
            MissingLeadingGeneratorError,
            MalformedPatternError,
            NoHeadError,
            UnresolvedReferenceError,
            MisplacedHeadError,
            InvalidClauseError,
        ):
            assert issubclass(error_cls, GrammarError)


class TestPatternShapes:
    """Patterns parse into the expected node shapes."""

    def test_tuple_pattern_from_string(self):
        model = parse([for_("k, v", [("a", 1)]), value(Name("v"))])
        assert model.generators[0].pattern == TuplePattern((NamePattern("k"), NamePattern("v")))

    def test_nested_tuple_from_python_tuple(self):
        model = parse([for_(("k", ("a", "*rest")), [("x", (1, 2))]), value(Name("rest"))])
        pattern = model.generators[0].pattern
        assert pattern == TuplePattern(
            (NamePattern("k"), TuplePattern((NamePattern("a"), StarPattern("rest"))))
        )
        assert compile_eager(model)() == [[2]]

    def test_pattern_node_passes_through(self):
        pattern = TuplePattern((NamePattern("a"), NamePattern("b")))
        model = parse([for_(pattern, [(1, 2)]), value(Name("b"))])
        assert model.generators[0].pattern is pattern
