"""
Document card projection

Maps one raw Elasticsearch hit into the flat card used by feed responses.
Every card carries the same keys; a field missing from the document is
rendered as an empty string.
"""

import re
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from reporting import settings
from reporting.constants import SOURCE_ICONS

logger = logging.getLogger(__name__)

REVIEW_TEXT_DELIMITER = "***|||###"
SPLIT_TEXT_SOURCES = ("GoogleMaps", "Tripadvisor")
HTML_TAG_PATTERN = re.compile(r"</?[^>]+(>|$)")

CARD_KEYS = (
    "profilePicture", "profilePicture2", "userFullname", "user_data_string", "followers",
    "following", "posts", "likes", "llm_emotion", "commentsUrl", "comments", "shares",
    "engagements", "content", "image_url", "predicted_sentiment", "predicted_category",
    "youtube_video_url", "source_icon", "message_text", "source", "rating", "comment",
    "businessResponse", "uSource", "googleName", "created_at",
)

LabelLookup = Callable[[str], Optional[str]]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def positive_number(value: Any) -> str:
    """Plain decimal string for a positive number, else the empty string"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return ""
    if number <= 0:
        return ""
    return str(int(number)) if number.is_integer() else str(number)


def _rating(source: Dict[str, Any]) -> Optional[float]:
    try:
        return float(source.get("rating")) if source.get("rating") not in (None, "") else None
    except (TypeError, ValueError):
        return None


def rating_emotion(rating: Optional[float]) -> str:
    if not rating:
        return ""
    if rating >= 4:
        return "Supportive"
    if rating <= 2:
        return "Frustrated"
    return "Neutral"


def rating_sentiment(rating: Optional[float]) -> str:
    if not rating:
        return ""
    if rating >= 4:
        return "Positive"
    if rating <= 2:
        return "Negative"
    return "Neutral"


def source_icon(source_name: Optional[str]) -> str:
    return SOURCE_ICONS.get(source_name, _text(source_name))


def clean_message(source_name: Optional[str], text: Optional[str]) -> str:
    """
    Display text of a document

    Map and travel reviews keep only the review part and turn newlines into
    ``<br>``; every other source has its HTML tags stripped.
    """
    if not text:
        return ""
    if source_name in SPLIT_TEXT_SOURCES:
        return text.split(REVIEW_TEXT_DELIMITER)[0].replace("\n", "<br>")
    return HTML_TAG_PATTERN.sub("", text)


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000)
    text = str(value).strip().replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(text[:19], fmt)
        except ValueError:
            continue
    logger.debug(f"Unparseable timestamp {value!r}")
    return None


def locale_datetime(value: Any) -> str:
    """en-US locale rendering, e.g. ``3/7/2023, 2:05:09 PM``"""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"


def to_card(hit: Dict[str, Any], label_lookup: LabelLookup = None) -> Dict[str, str]:
    """
    Format one search hit as a document card

    Parameters:
    -----------
    hit : dict
        Raw hit with ``_id`` and ``_source``
    label_lookup : callable, optional
        Document id -> latest manual sentiment label (or None)

    Returns:
    --------
    dict
        Card with every key of CARD_KEYS present
    """
    source = hit.get("_source") or {}
    source_name = source.get("source")
    rating = _rating(source)
    placeholder = f"{settings.PUBLIC_IMAGES_PATH}grey.png"

    llm_emotion = _text(source.get("llm_emotion"))
    if not llm_emotion and source_name == "GoogleMyBusiness":
        llm_emotion = rating_emotion(rating)

    override = label_lookup(hit.get("_id")) if label_lookup and hit.get("_id") else None
    if override:
        predicted_sentiment = override
    elif source.get("predicted_sentiment_value"):
        predicted_sentiment = _text(source.get("predicted_sentiment_value"))
    elif source_name == "GoogleMyBusiness":
        predicted_sentiment = rating_sentiment(rating)
    else:
        predicted_sentiment = ""

    youtube_video_url = ""
    profile_picture2 = ""
    if source_name == "Youtube":
        if source.get("video_embed_url"):
            youtube_video_url = source["video_embed_url"]
        elif source.get("p_id"):
            youtube_video_url = f"https://www.youtube.com/embed/{source['p_id']}"
    else:
        profile_picture2 = _text(source.get("p_picture"))

    comments_text = _text(source.get("p_comments_text")).strip()
    comments_url = ""
    if comments_text:
        comments_url = _text(source.get("p_url")).strip().replace("https: // ", "https://")

    content = _text(source.get("p_content"))
    picture_url = _text(source.get("p_picture_url")).strip()

    return {
        "profilePicture": source.get("u_profile_photo") or placeholder,
        "profilePicture2": profile_picture2,
        "userFullname": _text(source.get("u_fullname")),
        "user_data_string": "",
        "followers": positive_number(source.get("u_followers")),
        "following": positive_number(source.get("u_following")),
        "posts": positive_number(source.get("u_posts")),
        "likes": positive_number(source.get("p_likes")),
        "llm_emotion": llm_emotion,
        "commentsUrl": comments_url,
        "comments": _text(source.get("p_comments")),
        "shares": positive_number(source.get("p_shares")),
        "engagements": positive_number(source.get("p_engagement")),
        "content": content if content.strip() else "",
        "image_url": source.get("p_picture_url") if picture_url else placeholder,
        "predicted_sentiment": predicted_sentiment,
        "predicted_category": _text(source.get("predicted_category")),
        "youtube_video_url": youtube_video_url,
        "source_icon": f"{_text(source.get('p_url'))},{source_icon(source_name)}",
        "message_text": clean_message(source_name, source.get("p_message_text")),
        "source": _text(source_name),
        "rating": _text(source.get("rating")),
        "comment": _text(source.get("comment")),
        "businessResponse": _text(source.get("business_response")),
        "uSource": _text(source.get("u_source")),
        "googleName": _text(source.get("name")),
        "created_at": locale_datetime(source.get("p_created_time") or source.get("created_at")),
    }
