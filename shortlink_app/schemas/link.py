import re
import uuid
from datetime import datetime
from typing import Annotated

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, UrlConstraints, ValidationError
from shortlink_app.exceptions import InvalidURLError

# Same schemes/host rule as HttpUrl, without its 2083 character cap
_http_url = TypeAdapter(
    Annotated[AnyUrl, UrlConstraints(allowed_schemes=["http", "https"], host_required=True)]
)

# The URL is sent back verbatim in the Location header: printable ASCII only
_HEADER_SAFE = re.compile(r"[\x21-\x7e]+")


def validate_target_url(url: str) -> str:
    """
    Check that ``url`` is an absolute http/https URL.

    Validation goes through pydantic's URL parser, but the caller's string is
    returned untouched: the parser normalizes (e.g. appends a trailing slash)
    and redirects must hand back exactly what was submitted. Whitespace,
    control and non-ASCII characters are rejected because they cannot be
    placed in a Location header as-is.
    """
    if not url or not _HEADER_SAFE.fullmatch(url):
        raise InvalidURLError(url)
    try:
        _http_url.validate_python(url)
    except ValidationError as exc:
        raise InvalidURLError(url) from exc
    return url


class ShortenRequest(BaseModel):
    url: str = Field(..., description="The original URL to be shortened")


class ShortLinkResponse(BaseModel):
    """Serializes the ShortLink SQLAlchemy model (from_attributes)"""
    id: uuid.UUID
    code: str
    target_url: str
    short_url: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
