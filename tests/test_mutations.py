"""Tests for the add / remove / merge / delete operations."""

import pytest

from hostsfile import document
from hostsfile.classify import AddressFamily
from hostsfile.errors import (
    HostsError,
    InvalidAddressError,
    InvalidHostnameError,
    MissingArgumentError,
)

EXPECTED_BOTH_FAMILIES = 2


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    """Verify add is an upsert on (hostname, family)."""

    def test_append_new(self) -> None:
        """An unknown hostname is appended at the end."""
        doc = document.parse_text("# top\n127.0.0.1 localhost\n")
        mapping = document.add(doc, "10.0.0.1", "a.test")
        assert doc.lines[-1] is mapping
        assert mapping.family is AddressFamily.IPV4

    def test_idempotent(self) -> None:
        """Adding the same pair twice equals adding it once."""
        once = document.parse_text("127.0.0.1 localhost\n")
        document.add(once, "10.0.0.1", "a.test")
        twice = document.parse_text("127.0.0.1 localhost\n")
        document.add(twice, "10.0.0.1", "a.test")
        document.add(twice, "10.0.0.1", "a.test")
        assert len(twice.find("a.test", AddressFamily.IPV4)) == 1
        assert document.to_text(twice) == document.to_text(once)

    def test_overwrite_in_place(self) -> None:
        """Same hostname and family overwrites the address at the same position."""
        doc = document.parse_text(
            "# c\n10.0.0.1 example.com\n10.0.0.9 other.test\n"
        )
        document.add(doc, "10.0.0.2", "example.com")
        assert doc.lines[1].address == "10.0.0.2"
        assert len(doc.find("example.com")) == 1
        assert document.to_text(doc) == (
            "# c\n10.0.0.2\texample.com\n10.0.0.9 other.test\n"
        )

    def test_same_address_keeps_original_line(self) -> None:
        """Re-adding an unchanged mapping does not reformat it."""
        text = "10.0.0.1   example.com\n"
        doc = document.parse_text(text)
        document.add(doc, "10.0.0.1", "example.com")
        assert document.to_text(doc) == text

    def test_family_independence(self) -> None:
        """IPv4 and IPv6 mappings for one hostname coexist."""
        doc = document.parse_text("10.0.0.1 example.com\n")
        document.add(doc, "2001:db8::1", "example.com")
        assert len(doc.find("example.com")) == EXPECTED_BOTH_FAMILIES
        assert doc.lines[0].address == "10.0.0.1"

    def test_port_suffix_uses_family(self) -> None:
        """An address with a port overwrites by its resolved family."""
        doc = document.parse_text("10.0.0.1:8080 svc.test\n")
        document.add(doc, "10.0.0.2", "svc.test")
        assert [m.address for m in doc.mappings()] == ["10.0.0.2"]

    def test_hostname_match_is_exact(self) -> None:
        """Hostnames are compared exactly."""
        doc = document.parse_text("10.0.0.1 Example.com\n")
        document.add(doc, "10.0.0.2", "example.com")
        assert len(doc.mappings()) == EXPECTED_BOTH_FAMILIES

    def test_invalid_address_leaves_document(self) -> None:
        """A bad address raises and changes nothing."""
        text = "127.0.0.1 localhost\n"
        doc = document.parse_text(text)
        with pytest.raises(InvalidAddressError):
            document.add(doc, "not-an-ip", "h.com")
        assert document.to_text(doc) == text

    @pytest.mark.parametrize(
        ("address", "hostname", "missing"),
        [(None, "h.com", "address"), ("10.0.0.1", None, "hostname"), ("10.0.0.1", "", "hostname")],
    )
    def test_missing_argument(self, address, hostname, missing) -> None:
        """Absent arguments raise MissingArgumentError."""
        doc = document.parse_text("127.0.0.1 localhost\n")
        with pytest.raises(MissingArgumentError) as excinfo:
            document.add(doc, address, hostname)
        assert excinfo.value.name == missing
        assert len(doc) == 1

    @pytest.mark.parametrize(
        "hostname", ["a b", "a\nb", "a.test\n6.6.6.6 bank.test", "a\tb", "a.test\n"]
    )
    def test_hostname_with_whitespace(self, hostname: str) -> None:
        """A hostname that is not one token is rejected before any change."""
        text = "127.0.0.1 localhost\n"
        doc = document.parse_text(text)
        with pytest.raises(InvalidHostnameError) as excinfo:
            document.add(doc, "10.0.0.1", hostname)
        assert isinstance(excinfo.value, HostsError)
        assert excinfo.value.hostname == hostname
        assert document.to_text(doc) == text

    def test_written_line_reparses_as_one_mapping(self) -> None:
        """An added mapping survives a serialize/parse cycle unchanged."""
        doc = document.parse_text("127.0.0.1 localhost\n")
        document.add(doc, "10.0.0.1", "a.test")
        reparsed = document.parse_text(document.to_text(doc))
        assert [(m.address, m.hostname) for m in reparsed.mappings()] == [
            ("127.0.0.1", "localhost"),
            ("10.0.0.1", "a.test"),
        ]


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------


REMOVE_TEXT = (
    "# a\n"
    "10.0.0.1 x.com\n"
    "# b\n"
    "::1 x.com\n"
    "10.0.0.2 y.com\n"
)


class TestRemove:
    """Verify remove deletes every matching mapping."""

    def test_remove_all_families(self) -> None:
        """With no filter every mapping for the hostname goes."""
        doc = document.parse_text(REMOVE_TEXT)
        removed = document.remove(doc, "x.com")
        assert removed == EXPECTED_BOTH_FAMILIES
        assert document.to_text(doc) == "# a\n# b\n10.0.0.2 y.com\n"

    def test_none_family_means_any(self) -> None:
        """AddressFamily.NONE is the same as no filter."""
        doc = document.parse_text(REMOVE_TEXT)
        assert document.remove(doc, "x.com", AddressFamily.NONE) == EXPECTED_BOTH_FAMILIES

    def test_family_filter(self) -> None:
        """A specific family only removes that family."""
        doc = document.parse_text(REMOVE_TEXT)
        assert document.remove(doc, "x.com", AddressFamily.IPV6) == 1
        assert [m.address for m in doc.find("x.com")] == ["10.0.0.1"]

    def test_no_match(self) -> None:
        """Removing an unknown hostname is a no-op."""
        doc = document.parse_text(REMOVE_TEXT)
        assert document.remove(doc, "z.com") == 0
        assert document.to_text(doc) == REMOVE_TEXT

    def test_comments_untouched(self) -> None:
        """Comments keep their relative order."""
        doc = document.parse_text(REMOVE_TEXT)
        document.remove(doc, "y.com")
        assert [c.raw_text for c in doc.comments()] == ["# a\n", "# b\n"]

    @pytest.mark.parametrize("hostname", [None, ""])
    def test_missing_hostname(self, hostname) -> None:
        """A missing hostname raises before anything is removed."""
        doc = document.parse_text(REMOVE_TEXT)
        with pytest.raises(MissingArgumentError):
            document.remove(doc, hostname)
        assert document.to_text(doc) == REMOVE_TEXT


# ---------------------------------------------------------------------------
# merge / delete
# ---------------------------------------------------------------------------


class TestMerge:
    """Verify merge is a sequence of upserts."""

    def test_upsert_union(self) -> None:
        """Shared hostnames take the source address, new ones are appended."""
        target = document.parse_text("10.0.0.2 a.com\n10.0.0.3 b.com\n")
        source = document.parse_text("# src\n10.0.0.1 a.com\n10.0.0.4 c.com\n")
        assert document.merge(target, source) == EXPECTED_BOTH_FAMILIES
        assert document.to_text(target) == (
            "10.0.0.1\ta.com\n10.0.0.3 b.com\n10.0.0.4\tc.com\n"
        )

    def test_source_comments_ignored(self) -> None:
        """Comments in the source are not imported."""
        target = document.parse_text("# mine\n")
        source = document.parse_text("# theirs\n\n10.0.0.1 a.com\n")
        document.merge(target, source)
        assert [c.raw_text for c in target.comments()] == ["# mine\n"]

    def test_source_unchanged(self) -> None:
        """Merging does not alter the source document."""
        text = "10.0.0.1 a.com\n"
        source = document.parse_text(text)
        document.merge(document.parse_text("10.0.0.2 a.com\n"), source)
        assert document.to_text(source) == text

    def test_merge_keeps_families_apart(self) -> None:
        """An IPv6 source entry does not overwrite an IPv4 target entry."""
        target = document.parse_text("10.0.0.1 a.com\n")
        document.merge(target, document.parse_text("::1 a.com\n"))
        assert len(target.find("a.com")) == EXPECTED_BOTH_FAMILIES

    def test_bad_source_hostname_changes_nothing(self) -> None:
        """A source mapping with a multi-token hostname aborts the whole merge."""
        text = "10.0.0.1 a.com\n"
        target = document.parse_text(text)
        source = document.parse_text("10.0.0.2 b.com\n")
        source.mappings()[0].hostname = "b.com\n6.6.6.6 bank.test"
        with pytest.raises(InvalidHostnameError):
            document.merge(target, source)
        assert document.to_text(target) == text


class TestDelete:
    """Verify delete is a family-filtered difference."""

    def test_filtered_difference(self) -> None:
        """Only entries matching hostname and family are removed."""
        target = document.parse_text("10.0.0.1 a.com\n::1 a.com\n10.0.0.2 b.com\n")
        source = document.parse_text("192.0.2.1 a.com\n")
        assert document.delete(target, source) == 1
        assert document.to_text(target) == "::1 a.com\n10.0.0.2 b.com\n"

    def test_source_comments_ignored(self) -> None:
        """Comments in the source remove nothing."""
        text = "# a.com\n10.0.0.1 a.com\n"
        target = document.parse_text(text)
        document.delete(target, document.parse_text("# a.com\n"))
        assert document.to_text(target) == text

    def test_merge_then_delete(self) -> None:
        """Deleting what was merged restores the original entries."""
        text = "# keep\n10.0.0.3 b.com\n"
        target = document.parse_text(text)
        source = document.parse_text("10.0.0.1 a.com\n::1 c.com\n")
        document.merge(target, source)
        document.delete(target, source)
        assert document.to_text(target) == text
