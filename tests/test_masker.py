"""Tests for the masking engine: field and body masking."""

import logging
import re

from redis_masker import MaskingEngine, PatternConfig, PatternMatcher, ValueSynthesizer
from redis_masker.synthesizer import synthesize


# ── mask_field ───────────────────────────────────────────────────────

def test_mask_field(engine):
    masked = engine.mask_field("alice", "username")
    assert re.fullmatch(r"[a-zA-Z0-9_-]*-[0-9a-f]{12}", masked)
    assert masked == synthesize("alice", "attribute_username")


def test_mask_field_error_returns_original(engine, fake_redis, caplog):
    fake_redis.fail_get.add("*")
    with caplog.at_level(logging.ERROR, logger="redis_masker"):
        assert engine.mask_field("s3cr3t-value", "password") == "s3cr3t-value"
    assert "attribute_password" in caplog.text
    assert "s3cr3t-value" not in caplog.text


def test_mask_field_stable_across_engines(fake_redis, make_store, matcher):
    a = MaskingEngine(make_store(fake_redis), matcher)
    b = MaskingEngine(make_store(fake_redis), matcher)
    assert a.mask_field("alice", "username") == b.mask_field("alice", "username")


# ── mask_body ────────────────────────────────────────────────────────

def test_mask_body_pattern_order(engine, fake_redis):
    result = engine.mask_body("192.168.1.1 on host server01.example.com")

    assert "192.168.1.1" not in result
    assert "server01.example.com" not in result
    reads = [key for op, key in fake_redis.calls if op == "get"]
    assert reads == ["mask:ipv4:192.168.1.1", "mask:hostname:server01.example.com"]
    ip = synthesize("192.168.1.1", "ipv4")
    host = synthesize("server01.example.com", "hostname")
    assert result == f"{ip} on host {host}"


def test_later_pattern_rescans_substituted_text(fake_redis, make_store):
    word = PatternConfig("word", r"alpha", "W-")
    token = PatternConfig("token", r"W-[0-9a-f]{12}", "T-")

    forward = PatternMatcher([word, token])
    backward = PatternMatcher([token, word])
    a = MaskingEngine(make_store(fake_redis, synthesizer=_synth(forward)), forward)
    b = MaskingEngine(make_store(fake_redis, synthesizer=_synth(backward)), backward)

    assert re.fullmatch(r"T-[0-9a-f]{12}", a.mask_body("alpha"))
    assert re.fullmatch(r"W-[0-9a-f]{12}", b.mask_body("alpha"))


def test_mask_body_replaces_every_literal_occurrence(fake_redis, make_store):
    matcher = PatternMatcher([PatternConfig("word", r"\balpha\b", "W-")])
    engine = MaskingEngine(make_store(fake_redis, synthesizer=_synth(matcher)), matcher)
    masked = synthesize("alpha", "word", {"word": "W-"})
    # "alphabet" is not a match, but the literal replace still hits it
    assert engine.mask_body("alpha alphabet") == f"{masked} {masked}bet"


def test_mask_body_repeated_value_masks_consistently(engine):
    result = engine.mask_body("1.2.3.4 -> 5.6.7.8 -> 1.2.3.4")
    a = synthesize("1.2.3.4", "ipv4")
    b = synthesize("5.6.7.8", "ipv4")
    assert result == f"{a} -> {b} -> {a}"


def test_mask_body_per_match_error_isolated(engine, fake_redis, caplog):
    fake_redis.fail_get.add("mask:ipv4:")
    with caplog.at_level(logging.ERROR, logger="redis_masker"):
        result = engine.mask_body("from 1.2.3.4 to db01.example.com")
    assert "1.2.3.4" in result
    assert "db01.example.com" not in result
    assert "pattern=ipv4" in caplog.text


def test_mask_body_no_patterns(fake_redis, make_store):
    engine = MaskingEngine(make_store(fake_redis), PatternMatcher([]))
    assert engine.mask_body("1.2.3.4") == "1.2.3.4"
    assert fake_redis.calls == []


def test_mask_body_no_matches(engine, fake_redis):
    assert engine.mask_body("nothing to see") == "nothing to see"
    assert fake_redis.calls == []


def test_mask_body_with_write_failures_is_still_deterministic(engine, fake_redis):
    fake_redis.fail_set.add("*")
    first = engine.mask_body("ping 1.2.3.4")
    second = engine.mask_body("ping 1.2.3.4")
    assert first == second == f"ping {synthesize('1.2.3.4', 'ipv4')}"


def _synth(matcher):
    return ValueSynthesizer(matcher.prefixes)
