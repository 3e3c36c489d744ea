"""Pagination module for cursor-based stream browsing."""

from .exceptions import AnchorNotFoundError
from .cursor import HEAD, Anchor, Direction, resolve_cursor
from .window import Window, fetch_window
from .links import (
    UrlBuilder,
    build_links,
    create_link_header,
    default_url_builder,
    stream_path
)
from .paginator import Page, paginate

__all__ = [
    "AnchorNotFoundError",
    "HEAD",
    "Anchor",
    "Direction",
    "resolve_cursor",
    "Window",
    "fetch_window",
    "UrlBuilder",
    "build_links",
    "create_link_header",
    "default_url_builder",
    "stream_path",
    "Page",
    "paginate"
]
