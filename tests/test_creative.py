"""
Tests for ad creative resolution.
"""
from adpulse.services.meta.creative import (
    AssetFeedCreative,
    LinkDataCreative,
    PlainCreative,
    UnknownCreative,
    parse_creative_shapes,
    resolve_creative,
)


def test_empty_creative():
    resolved = resolve_creative(None)
    assert resolved.creative_url is None
    assert resolved.body is None
    assert resolved.dynamic_data is None
    assert resolved.shapes == []


def test_plain_body_wins_over_story_spec():
    resolved = resolve_creative({
        "body": "Plain body",
        "object_type": "SHARE",
        "image_url": "https://img/1.jpg",
        "object_story_spec": {"link_data": {"message": "Link message", "name": "Link headline"}},
    })

    assert resolved.body == "Plain body"
    # No plain title, so the link headline is next in line
    assert resolved.title == "Link headline"
    assert resolved.creative_type == "SHARE"
    assert resolved.creative_url == "https://img/1.jpg"
    assert resolved.dynamic_data is None


def test_video_creative():
    resolved = resolve_creative({
        "video_id": "987",
        "thumbnail_url": "https://thumb/987.jpg",
        "object_type": "VIDEO",
        "object_story_spec": {"video_data": {"message": "Watch this", "title": "Video title"}},
    })

    assert resolved.creative_type == "VIDEO"
    assert resolved.creative_url == "https://www.facebook.com/video.php?v=987"
    assert resolved.thumbnail_url == "https://thumb/987.jpg"
    assert resolved.body == "Watch this"
    assert resolved.title == "Video title"


def test_asset_feed_keeps_raw_payload():
    asset_feed = {
        "bodies": [{"text": "Variant A"}, {"text": "Variant B"}],
        "titles": [{"text": "Title A"}],
    }
    resolved = resolve_creative({"asset_feed_spec": asset_feed, "image_url": "https://img/2.jpg"})

    assert resolved.body == "Variant A"
    assert resolved.title == "Title A"
    assert resolved.dynamic_data == asset_feed


def test_unknown_shape_is_preserved():
    raw = {"id": "cr1", "template_data": {"foo": "bar"}}
    shapes = parse_creative_shapes(raw)

    assert len(shapes) == 1
    assert isinstance(shapes[0], UnknownCreative)
    assert resolve_creative(raw).dynamic_data == raw


def test_shape_order():
    shapes = parse_creative_shapes({
        "asset_feed_spec": {"bodies": []},
        "object_story_spec": {"link_data": {"message": "m"}},
        "title": "t",
    })
    assert [type(s) for s in shapes] == [PlainCreative, LinkDataCreative, AssetFeedCreative]
