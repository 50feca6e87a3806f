"""
Tests for comprehension -> iterator chain rules.
"""

import pytest


@pytest.mark.parametrize(
  "source, expected",
  [
    (
      "evens = [x * 2 for x in nums if x % 2 == 0]",
      "let evens = nums.iter().filter(|&x| x % 2 == 0).map(|x| x * 2).collect::<Vec<_>>();",
    ),
    (
      "squares = [n ** 2 for n in range(10)]",
      "let squares = (0..10).map(|n| n.pow(2)).collect::<Vec<_>>();",
    ),
    (
      "names = {p.name for p in people}",
      "let names = people.iter().map(|p| p.name).collect::<HashSet<_>>();",
    ),
    (
      "lookup = {k: v for k, v in pairs.items()}",
      "let lookup = pairs.iter().map(|(k, v)| (k, v)).collect::<HashMap<_, _>>();",
    ),
    (
      "big = {k: v for k, v in pairs.items() if v > 10}",
      "let big = pairs.iter().filter(|&(k, v)| v > 10).map(|(k, v)| (k, v)).collect::<HashMap<_, _>>();",
    ),
    ("(x for x in xs)", "xs.iter().map(|x| x);"),
    (
      "[len(w) for w in words if w and not w.startswith('#')]",
      "words.iter().filter(|&w| w && !w.starts_with(\"#\")).map(|w| w.len()).collect::<Vec<_>>();",
    ),
  ],
)
def test_comprehensions(rust, source, expected):
  assert rust(source) == expected


def test_filtered_rule_precedes_plain_rule(catalog):
  from py2rs.core.ingestion import ingest
  from py2rs.core.matcher import Matcher

  (node,) = ingest("[x for x in xs if x]")
  assert [r.name for r in Matcher(catalog).candidates(node)] == ["filtered_comprehension", "comprehension"]
