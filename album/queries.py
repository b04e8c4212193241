"""
Typed query parameters for each endpoint, validated before reaching the core.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import BadRequest
from .lister import ORDER_ASC, ORDER_DESC, SORT_MTIME, SORT_NAME

FIRST_PAGE = 1
DEFAULT_LIMIT = 20
DEFAULT_THUMB_WIDTH = 400


def _lenient_int(value: Optional[str], default: int) -> int:
    """Parse value; unparsable or zero falls back to default."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number or default


def _require_name(params: Mapping[str, str]) -> str:
    name = params.get('name')
    if not name:
        raise BadRequest("Missing ?name")
    return name


@dataclass(frozen=True)
class ListingQuery:
    page: int = FIRST_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = SORT_NAME
    order: str = ORDER_DESC

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> 'ListingQuery':
        return cls(
            page=max(1, _lenient_int(params.get('page'), FIRST_PAGE)),
            limit=max(1, _lenient_int(params.get('limit'), DEFAULT_LIMIT)),
            sort_by=SORT_MTIME if params.get('sortBy') == SORT_MTIME else SORT_NAME,
            order=ORDER_ASC if params.get('sort') == ORDER_ASC else ORDER_DESC,
        )


@dataclass(frozen=True)
class ThumbQuery:
    name: str
    width: int = DEFAULT_THUMB_WIDTH

    @classmethod
    def from_params(cls, params: Mapping[str, str], default_width: int = DEFAULT_THUMB_WIDTH) -> 'ThumbQuery':
        name = _require_name(params)
        raw_width = params.get('w')
        if not raw_width:
            return cls(name=name, width=default_width)
        try:
            width = int(raw_width)
        except ValueError:
            raise BadRequest(f"Invalid width: {raw_width!r}")
        return cls(name=name, width=width or default_width)


@dataclass(frozen=True)
class ImageQuery:
    name: str

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> 'ImageQuery':
        return cls(name=_require_name(params))
