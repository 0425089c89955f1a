"""Tests for the version registry."""

from __future__ import annotations

import pytest

from verscope.errors import ConfigError, UnknownVersionError, VerscopeError
from verscope.versions import VersionIdentifier, register


class TestRegister:
    def test_ordinals_follow_declaration_order(self):
        reg = register(["1.0", "2.0", "3.0"])
        assert [v.ordinal for v in reg] == [0, 1, 2]
        assert reg.labels == ["1.0", "2.0", "3.0"]

    def test_empty_rejected(self):
        with pytest.raises(ConfigError):
            register([])

    def test_duplicate_rejected(self):
        with pytest.raises(ConfigError, match="Duplicate"):
            register(["1.0", "2.0", "1.0"])

    def test_empty_label_rejected(self):
        with pytest.raises(ConfigError):
            register(["1.0", ""])

    def test_single_string_rejected(self):
        with pytest.raises(ConfigError):
            register("1.0")

    def test_config_error_is_verscope_error(self):
        with pytest.raises(VerscopeError):
            register([])


class TestResolve:
    def test_resolve_label(self, registry):
        v = registry.resolve("2.0")
        assert v.label == "2.0"
        assert v.ordinal == 1

    def test_resolve_unknown(self, registry):
        with pytest.raises(UnknownVersionError) as exc:
            registry.resolve("3.0")
        assert exc.value.label == "3.0"
        assert "3.0" in str(exc.value)

    def test_resolve_identifier_roundtrip(self, registry):
        v = registry.resolve("1.0")
        assert registry.resolve(v) is v

    def test_resolve_foreign_identifier(self, registry):
        with pytest.raises(UnknownVersionError):
            registry.resolve(VersionIdentifier(ordinal=5, label="1.0"))

    def test_unknown_version_is_key_error(self, registry):
        with pytest.raises(KeyError):
            registry.resolve("nope")


class TestCompare:
    def test_ordinal_not_lexical(self, registry3):
        # "10.0" < "9.0" as strings, but it was declared last
        assert registry3.compare("10.0", "9.0") > 0
        assert registry3.compare("2.0", "10.0") == -2
        assert registry3.compare("9.0", "9.0") == 0

    def test_identifier_ordering(self, registry3):
        v2, v9, v10 = list(registry3)
        assert v2 < v9 < v10
        assert sorted([v10, v2, v9]) == [v2, v9, v10]

    def test_compare_unknown(self, registry):
        with pytest.raises(UnknownVersionError):
            registry.compare("1.0", "5.0")


class TestSequence:
    def test_previous(self, registry3):
        assert registry3.previous("2.0") is None
        assert registry3.previous("10.0").label == "9.0"

    def test_first_last(self, registry3):
        assert registry3.first.label == "2.0"
        assert registry3.last.label == "10.0"

    def test_contains(self, registry):
        assert "1.0" in registry
        assert "3.0" not in registry
        assert registry.resolve("2.0") in registry
        assert VersionIdentifier(ordinal=0, label="2.0") not in registry

    def test_len(self, registry3):
        assert len(registry3) == 3

    def test_identifier_str(self, registry):
        assert str(registry.resolve("1.0")) == "1.0"
