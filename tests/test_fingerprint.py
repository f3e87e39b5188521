"""Tests for content fingerprints."""

from feedwatch.detection import fingerprint


def test_empty_string_digest():
    assert fingerprint("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_same_content_same_fingerprint():
    assert fingerprint("One\nTwo") == fingerprint("One\nTwo")


def test_order_matters():
    assert fingerprint("One\nTwo") != fingerprint("Two\nOne")


def test_unicode_content():
    digest = fingerprint("Überblick — 新しい記事")

    assert len(digest) == 64
    assert digest == digest.lower()
