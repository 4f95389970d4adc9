"""
Ad creative resolution.

Meta returns creatives in several nested shapes depending on the ad type.
Each known shape is modelled as one variant of a tagged union; payloads
matching none of them become an UnknownCreative that keeps the raw data.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

VIDEO_URL_TEMPLATE = "https://www.facebook.com/video.php?v={video_id}"


class PlainCreative(BaseModel):
    """Body/title set directly on the creative"""
    kind: Literal["plain"] = "plain"
    body: Optional[str] = None
    title: Optional[str] = None


class LinkDataCreative(BaseModel):
    """object_story_spec.link_data"""
    kind: Literal["link_data"] = "link_data"
    message: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    link: Optional[str] = None


class VideoDataCreative(BaseModel):
    """object_story_spec.video_data"""
    kind: Literal["video_data"] = "video_data"
    message: Optional[str] = None
    title: Optional[str] = None


class AssetFeedCreative(BaseModel):
    """asset_feed_spec: dynamic creative with several text variants"""
    kind: Literal["asset_feed"] = "asset_feed"
    bodies: List[str] = []
    titles: List[str] = []
    descriptions: List[str] = []
    raw: Dict[str, Any] = {}


class UnknownCreative(BaseModel):
    """Unrecognised shape; raw payload preserved"""
    kind: Literal["unknown"] = "unknown"
    raw: Dict[str, Any] = {}


CreativeShape = Annotated[
    Union[PlainCreative, LinkDataCreative, VideoDataCreative, AssetFeedCreative, UnknownCreative],
    Field(discriminator="kind"),
]


class ResolvedCreative(BaseModel):
    """Flat creative columns stored on the Ad row"""
    creative_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    creative_type: Optional[str] = None
    body: Optional[str] = None
    title: Optional[str] = None
    dynamic_data: Optional[Dict[str, Any]] = None
    shapes: List[CreativeShape] = []


def _texts(items: Any) -> List[str]:
    if not isinstance(items, list):
        return []
    return [i["text"] for i in items if isinstance(i, dict) and i.get("text")]


def parse_creative_shapes(raw: Optional[Dict[str, Any]]) -> List[CreativeShape]:
    """
    Recognise every known shape in the payload, in preference order:
    plain fields, story-spec link data, story-spec video data, asset feed.
    """
    if not raw:
        return []

    shapes: List[CreativeShape] = []

    if raw.get("body") or raw.get("title"):
        shapes.append(PlainCreative(body=raw.get("body"), title=raw.get("title")))

    story = raw.get("object_story_spec") or {}
    link_data = story.get("link_data") if isinstance(story, dict) else None
    if isinstance(link_data, dict):
        shapes.append(LinkDataCreative(
            message=link_data.get("message"),
            name=link_data.get("name"),
            picture=link_data.get("picture"),
            link=link_data.get("link"),
        ))

    video_data = story.get("video_data") if isinstance(story, dict) else None
    if isinstance(video_data, dict):
        shapes.append(VideoDataCreative(
            message=video_data.get("message"),
            title=video_data.get("title"),
        ))

    asset_feed = raw.get("asset_feed_spec")
    if isinstance(asset_feed, dict):
        shapes.append(AssetFeedCreative(
            bodies=_texts(asset_feed.get("bodies")),
            titles=_texts(asset_feed.get("titles")),
            descriptions=_texts(asset_feed.get("descriptions")),
            raw=asset_feed,
        ))

    if not shapes:
        shapes.append(UnknownCreative(raw=raw))

    return shapes


def _shape_body(shape: CreativeShape) -> Optional[str]:
    if isinstance(shape, PlainCreative):
        return shape.body
    if isinstance(shape, (LinkDataCreative, VideoDataCreative)):
        return shape.message
    if isinstance(shape, AssetFeedCreative):
        return shape.bodies[0] if shape.bodies else None
    return None


def _shape_title(shape: CreativeShape) -> Optional[str]:
    if isinstance(shape, (PlainCreative, VideoDataCreative)):
        return shape.title
    if isinstance(shape, LinkDataCreative):
        return shape.name
    if isinstance(shape, AssetFeedCreative):
        return shape.titles[0] if shape.titles else None
    return None


def resolve_creative(raw: Optional[Dict[str, Any]]) -> ResolvedCreative:
    """Flatten a Graph API creative into the columns stored on Ad"""
    if not raw:
        return ResolvedCreative()

    shapes = parse_creative_shapes(raw)

    creative_type = raw.get("object_type")
    creative_url = raw.get("image_url") or raw.get("thumbnail_url")
    thumbnail_url = None

    if raw.get("video_id"):
        creative_type = "VIDEO"
        thumbnail_url = raw.get("thumbnail_url")
        creative_url = VIDEO_URL_TEMPLATE.format(video_id=raw["video_id"])

    body = next((b for b in map(_shape_body, shapes) if b), None)
    title = next((t for t in map(_shape_title, shapes) if t), None)

    dynamic_data = None
    for shape in shapes:
        if isinstance(shape, (AssetFeedCreative, UnknownCreative)):
            dynamic_data = shape.raw
            break

    return ResolvedCreative(
        creative_url=creative_url,
        thumbnail_url=thumbnail_url,
        creative_type=creative_type,
        body=body,
        title=title,
        dynamic_data=dynamic_data,
        shapes=shapes,
    )
