"""Slugs - pure tests for normalization, item slug derivation and lookup keys."""

from uuid import uuid4

from marketplace.core.slugs import build_item_slug, normalize_slug, parse_id_or_slug


def test_normalize_lowercases_and_dashes_whitespace():
    assert normalize_slug("Vintage  Desk Lamp") == "vintage-desk-lamp"


def test_normalize_strips_disallowed_characters():
    assert normalize_slug("Café & Bar!") == "caf--bar"
    assert normalize_slug("already-ok-123") == "already-ok-123"


def test_normalize_can_return_empty():
    assert normalize_slug("!!!") == ""


def test_requested_slug_wins():
    assert build_item_slug("Desk Lamp", "My Lamp", "ab12cd34") == "my-lamp"


def test_name_and_suffix_when_no_slug_requested():
    assert build_item_slug("Desk Lamp", None, "ab12cd34") == "desk-lamp-ab12cd34"
    assert build_item_slug("Desk Lamp", "", "ab12cd34") == "desk-lamp-ab12cd34"


def test_unusable_requested_slug_falls_back_to_name():
    assert build_item_slug("Desk Lamp", "???", "ab12cd34") == "desk-lamp-ab12cd34"


def test_parse_uuid_key():
    uid = uuid4()
    assert parse_id_or_slug(str(uid)) == {"id": uid}


def test_parse_slug_key():
    assert parse_id_or_slug("desk-lamp") == {"slug": "desk-lamp"}
