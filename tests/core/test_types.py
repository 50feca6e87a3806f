"""
Tests for the Type Mapper.

Covers Python typing syntax, TypeScript-flavoured vocabulary, overrides,
literal coercion and malformed annotations.
"""

import pytest

from py2rs.core.types import ANY_TYPE, borrowed, is_optional_annotation, to_rust_literal, to_rust_type
from py2rs.errors import TypeMappingError


@pytest.mark.parametrize(
  "annotation, expected",
  [
    ("int", "i64"),
    ("float", "f64"),
    ("number", "f64"),
    ("str", "String"),
    ("string", "String"),
    ("bool", "bool"),
    ("bytes", "Vec<u8>"),
    ("None", "()"),
    ("void", "()"),
    ("Any", ANY_TYPE),
    ("List[int]", "Vec<i64>"),
    ("list[str]", "Vec<String>"),
    ("Optional[List[int]]", "Option<Vec<i64>>"),
    ("Dict[str, List[float]]", "HashMap<String, Vec<f64>>"),
    ("Set[str]", "HashSet<String>"),
    ("Tuple[int, str]", "(i64, String)"),
    ("Tuple[int, ...]", "Vec<i64>"),
    ("str | None", "Option<String>"),
    ("Union[int, None]", "Option<i64>"),
    ("Union[int, str]", ANY_TYPE),
    ("Callable[[int, str], bool]", "Box<dyn Fn(i64, String) -> bool>"),
    ("Callable[[], None]", "Box<dyn Fn()>"),
    ("typing.List[int]", "Vec<i64>"),
    ("'Node'", "Node"),
    ("Optional['Node']", "Option<Node>"),
    ("Literal['red', 'green']", "String"),
    ("Literal[1, 2]", "i64"),
    ("Point", "Point"),
    ("Wrapper[int]", "Wrapper<i64>"),
  ],
)
def test_python_annotations(annotation, expected):
  assert to_rust_type(annotation) == expected


@pytest.mark.parametrize(
  "annotation, expected",
  [
    ("number[]", "Vec<f64>"),
    ("string[][]", "Vec<Vec<String>>"),
    ("Array<string>", "Vec<String>"),
    ("Record<string, number>", "HashMap<String, f64>"),
    ("Map<string, boolean>", "HashMap<String, bool>"),
    ("string | undefined", "Option<String>"),
    ("number | null", "Option<f64>"),
    ("Promise<number>", "f64"),
  ],
)
def test_typescript_vocabulary(annotation, expected):
  assert to_rust_type(annotation) == expected


def test_untyped_is_any():
  assert to_rust_type(None) == ANY_TYPE
  assert to_rust_type("   ") == ANY_TYPE


def test_overrides_take_precedence():
  assert to_rust_type("List[int]", {"int": "i32"}) == "Vec<i32>"
  assert to_rust_type("Decimal", {"Decimal": "rust_decimal::Decimal"}) == "rust_decimal::Decimal"
  assert to_rust_type("float", {"int": "i32"}) == "f64"


@pytest.mark.parametrize("annotation", ["List[int", "int]", "List[int]]", "int @ str", "Dict[str,"])
def test_malformed_annotation_raises(annotation):
  with pytest.raises(TypeMappingError):
    to_rust_type(annotation)


def test_type_mapping_error_is_value_error():
  with pytest.raises(ValueError):
    to_rust_type("List[")


def test_is_optional_annotation():
  assert is_optional_annotation("Optional[int]")
  assert is_optional_annotation("int | None")
  assert not is_optional_annotation("int")
  assert not is_optional_annotation(None)
  assert not is_optional_annotation("List[")


def test_borrowed():
  assert borrowed("String") == "&str"
  assert borrowed("Vec<i64>") == "&[i64]"
  assert borrowed("HashMap<String, i64>") == "&HashMap<String, i64>"
  assert borrowed("i64") == "i64"
  assert borrowed("Option<String>") == "Option<String>"


@pytest.mark.parametrize(
  "value, rust_type, expected",
  [
    (None, "i64", "Default::default()"),
    ("None", "Option<i64>", "None"),
    ("0", "f64", "0.0"),
    ("1.5", "f64", "1.5"),
    ("3", "i64", "3"),
    ('"origin"', "String", '"origin".to_string()'),
    ("5", "Option<i64>", "Some(5)"),
    ("3", "Option<f64>", "Some(3.0)"),
    ("field(default_factory=list)", "Vec<i64>", "Default::default()"),
    ("[]", "Vec<i64>", "Default::default()"),
    ("True", "bool", "true"),
  ],
)
def test_to_rust_literal(value, rust_type, expected):
  assert to_rust_literal(value, rust_type) == expected
