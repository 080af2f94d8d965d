"""Tests for Subject."""

from snowplow_tracker.subject import Subject


def test_empty_subject_has_no_pairs():
    assert Subject().to_pairs() == {}


def test_to_pairs():
    subject = Subject(
        user_id="user-1",
        screen_width=1920,
        screen_height=1080,
        viewport_width=800,
        viewport_height=600,
        color_depth=24,
        timezone="Europe/London",
        language="en",
        ip_address="10.0.0.1",
        useragent="test-agent",
        network_user_id="nuid",
        domain_user_id="duid",
        domain_session_id="sid",
    )

    assert subject.to_pairs() == {
        "uid": "user-1",
        "res": "1920x1080",
        "vp": "800x600",
        "cd": "24",
        "tz": "Europe/London",
        "lang": "en",
        "ip": "10.0.0.1",
        "ua": "test-agent",
        "tnuid": "nuid",
        "duid": "duid",
        "sid": "sid",
    }


def test_partial_resolution_is_skipped():
    assert "res" not in Subject(screen_width=1920).to_pairs()


def test_merged_overlays_set_fields():
    base = Subject(user_id="user-1", language="en", color_depth=24)

    merged = base.merged(Subject(language="fr"))

    assert merged.user_id == "user-1"
    assert merged.language == "fr"
    assert merged.color_depth == 24
    assert base.language == "en"


def test_merged_with_none():
    base = Subject(user_id="user-1")
    assert base.merged(None) is base
