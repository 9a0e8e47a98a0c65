from __future__ import annotations

from docstore import Literal, matches, ops

DOC = {
    "name": "John",
    "age": 20,
    "hobbies": ["chess", "go"],
    "address": {"city": "Berlin", "geo": {"lat": 52.5, "lng": 13.4}},
    "nickname": None,
}


def test_empty_query_matches_everything():
    assert matches(DOC, {})
    assert matches(DOC, None)
    assert matches({}, {})


def test_literal_fields_and_semantics():
    assert matches(DOC, {"name": "John"})
    assert matches(DOC, {"name": "John", "age": 20})
    assert not matches(DOC, {"name": "John", "age": 21})


def test_predicate_fields():
    assert matches(DOC, {"age": lambda v: v > 18})
    assert matches(DOC, {"age": ops.between(18, 21)})
    assert not matches(DOC, {"age": ops.lt(18)})


def test_nested_documents_recurse():
    assert matches(DOC, {"address": {"city": "Berlin"}})
    assert matches(DOC, {"address": {"geo": {"lat": ops.gt(50)}}})
    assert not matches(DOC, {"address": {"city": "Paris"}})


def test_nested_query_against_scalar_fails():
    assert not matches(DOC, {"name": {"first": "John"}})
    assert not matches(DOC, {"missing": {"x": 1}})


def test_arrays_are_opaque_leaves():
    assert matches(DOC, {"hobbies": ["chess", "go"]})
    assert not matches(DOC, {"hobbies": ["go", "chess"]})
    assert not matches(DOC, {"hobbies": "chess"})
    assert matches(DOC, {"hobbies": ops.contains("chess")})


def test_missing_fields():
    assert not matches(DOC, {"email": "john@example.com"})
    assert matches(DOC, {"email": None})
    assert matches(DOC, {"nickname": None})
    assert matches(DOC, {"email": lambda v: v is None})


def test_explicit_literal_forces_whole_subdocument_equality():
    assert not matches(DOC, {"address": Literal({"city": "Berlin"})})
    assert matches(DOC, {"address": Literal(DOC["address"])})


def test_whole_document_predicate():
    assert matches(DOC, lambda d: d["age"] + len(d["hobbies"]) == 22)
    assert not matches(DOC, lambda d: "email" in d)


def test_short_circuits_on_first_failure():
    calls = []

    def spy(v):
        calls.append(v)
        return True

    assert not matches(DOC, {"name": "Mary", "age": spy})
    assert calls == []
