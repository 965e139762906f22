"""Unit tests for Corefile parsing and editing."""

import pytest

from cluster_bridge.corefile import Corefile, CorefileError, normalize_key
from cluster_bridge.models import ZoneForward
from tests.fakes import KIND_COREFILE

FORWARD = ZoneForward(zone="cluster2.example.com", upstream="10.220.0.10")


def test_parse_round_trips_kind_corefile():
    corefile = Corefile.parse(KIND_COREFILE)

    assert corefile.render() == KIND_COREFILE
    assert corefile.keys() == [".:53"]


def test_parse_keeps_comments_and_blank_lines():
    text = "# managed by kind\n\n.:53 {\n    errors # log errors\n}\n\nexample.org {\n    whoami\n}\n"

    corefile = Corefile.parse(text)

    assert corefile.render() == text
    assert corefile.keys() == [".:53", "example.org"]


def test_parse_ignores_braces_in_comments():
    text = ".:53 {\n    # stray } brace\n    errors\n}\n"

    corefile = Corefile.parse(text)

    assert len(corefile.blocks) == 1
    assert corefile.render() == text


def test_parse_multiple_keys_in_one_block():
    corefile = Corefile.parse("a.example.com b.example.com:5353 {\n    whoami\n}\n")

    assert corefile.blocks[0].keys == ["a.example.com", "b.example.com:5353"]


@pytest.mark.parametrize("text", [".:53 {\n    errors\n", ".:53 {\n}\n}\n"])
def test_parse_rejects_unbalanced_braces(text):
    with pytest.raises(CorefileError):
        Corefile.parse(text)


def test_append_adds_block_at_end():
    corefile = Corefile.parse(KIND_COREFILE)

    corefile.append(FORWARD)

    assert corefile.render() == KIND_COREFILE + FORWARD.render()
    assert corefile.keys() == [".:53", "cluster2.example.com:53"]


def test_append_adds_newline_when_missing():
    corefile = Corefile.parse(".:53 {\n    errors\n}")

    corefile.append(FORWARD)

    assert corefile.render() == ".:53 {\n    errors\n}\n" + FORWARD.render()


def test_append_twice_duplicates_block():
    corefile = Corefile.parse(KIND_COREFILE)

    corefile.append(FORWARD)
    corefile.append(FORWARD)

    assert corefile.keys().count("cluster2.example.com:53") == 2


def test_upsert_inserts_when_missing():
    corefile = Corefile.parse(KIND_COREFILE)

    corefile.upsert(FORWARD)

    assert corefile.render() == KIND_COREFILE + FORWARD.render()


def test_upsert_replaces_existing_block():
    corefile = Corefile.parse(KIND_COREFILE)
    corefile.append(ZoneForward(zone="cluster2.example.com", upstream="10.220.0.99"))

    corefile.upsert(FORWARD)

    assert corefile.render() == KIND_COREFILE + FORWARD.render()


def test_upsert_collapses_duplicates_from_earlier_appends():
    corefile = Corefile.parse(KIND_COREFILE)
    corefile.append(FORWARD)
    corefile.append(FORWARD)

    corefile.upsert(FORWARD)

    assert corefile.keys() == [".:53", "cluster2.example.com:53"]


def test_upsert_leaves_other_zones_alone():
    other = ZoneForward(zone="cluster3.example.com", upstream="10.230.0.10")
    corefile = Corefile.parse(KIND_COREFILE)
    corefile.append(other)

    corefile.upsert(FORWARD)

    assert corefile.keys() == [".:53", "cluster3.example.com:53", "cluster2.example.com:53"]


@pytest.mark.parametrize(
    "key,expected",
    [
        ("cluster2.example.com", "cluster2.example.com:53"),
        ("cluster2.example.com.:53", "cluster2.example.com:53"),
        ("dns://Cluster2.Example.com:53", "cluster2.example.com:53"),
        (".:53", ".:53"),
        (".", ".:53"),
        ("example.org:5353", "example.org:5353"),
    ],
)
def test_normalize_key(key, expected):
    assert normalize_key(key) == expected
