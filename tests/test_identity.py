"""
Tests for row key derivation
"""

import itertools

import pytest

from shopcart.cart.identity import generate_row_key, normalize_options, php_serialize


class TestGenerateRowKey:
    """Tests for the default md5 row key."""

    @pytest.mark.parametrize(
        "item_id, options, expected",
        [
            (1, {}, "027c91341fd5cf4d2579b49c4b6a90da"),
            (2, {}, "370d08585360f5c568b18d1f2e4ca1df"),
            (1, {"color": "red"}, "ea65e0bdcd1967c4b3149e9e780177c0"),
            (1, {"color": "blue"}, "7e70a1e9aaadd18c72921a07aae5d011"),
            (1, {"size": "XL", "color": "red"}, "07d5da5550494c62daf9993cf954303f"),
        ],
    )
    def test_known_keys(self, item_id, options, expected):
        """Keys match the ones carts were persisted with."""
        assert generate_row_key(item_id, options) == expected

    def test_none_options_same_as_empty(self):
        assert generate_row_key(1) == generate_row_key(1, {}) == "027c91341fd5cf4d2579b49c4b6a90da"

    def test_insensitive_to_option_order(self):
        """Every permutation of the options yields the same key."""
        entries = [("size", "XL"), ("color", "red"), ("material", "cotton"), ("fit", 2)]
        keys = {
            generate_row_key(7, dict(permutation))
            for permutation in itertools.permutations(entries)
        }
        assert len(keys) == 1

    def test_options_change_the_key(self):
        assert generate_row_key(1, {"color": "red"}) != generate_row_key(1, {"color": "Red"})

    def test_id_changes_the_key(self):
        assert generate_row_key(1, {"color": "red"}) != generate_row_key(2, {"color": "red"})

    def test_numeric_string_id_matches_int_id(self):
        """The id is hashed through its string form."""
        assert generate_row_key("1", {}) == generate_row_key(1, {})


class TestPhpSerialize:
    """Tests for the canonical option encoding."""

    def test_scalars(self):
        assert php_serialize(None) == "N;"
        assert php_serialize(True) == "b:1;"
        assert php_serialize(False) == "b:0;"
        assert php_serialize(42) == "i:42;"
        assert php_serialize(1.5) == "d:1.5;"
        assert php_serialize(2.0) == "d:2;"
        assert php_serialize("red") == 's:3:"red";'

    def test_string_length_is_in_bytes(self):
        assert php_serialize("é") == 's:2:"é";'

    def test_mapping(self):
        value = {"a": 1, "b": True, "c": None, "d": 1.5}
        assert php_serialize(value) == 'a:4:{s:1:"a";i:1;s:1:"b";b:1;s:1:"c";N;s:1:"d";d:1.5;}'

    def test_integer_like_keys_encode_as_ints(self):
        assert php_serialize({"10": "x"}) == 'a:1:{i:10;s:1:"x";}'
        assert php_serialize({"010": "x"}) == 'a:1:{s:3:"010";s:1:"x";}'

    def test_sequence(self):
        assert php_serialize(["a", "b"]) == 'a:2:{i:0;s:1:"a";i:1;s:1:"b";}'

    def test_empty_mapping(self):
        assert php_serialize({}) == "a:0:{}"

    def test_unsupported_value(self):
        with pytest.raises(TypeError):
            php_serialize(object())


def test_normalize_options_sorts_by_code_point():
    """Upper case sorts before lower case, as with a byte comparison."""
    assert list(normalize_options({"b": 1, "B": 2, "a": 3})) == ["B", "a", "b"]


def test_normalize_options_empty():
    assert normalize_options(None) == {}
