#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/constants.py
"""Constants and default tables for html2blocks.

This module holds the default attribute allow-list, the baseline policy used
when sanitizing published content, default option values and the names of
the environment variables read by the library and CLI.
"""

from __future__ import annotations

from typing import Literal

# Option defaults
DEFAULT_UPLOAD_MEDIA = False
DEFAULT_FORCE_HTTPS = True
DEFAULT_AUTO_PARAGRAPH = True
DEFAULT_HTML_PARSER = "html.parser"

HtmlParser = Literal["html.parser", "lxml", "html5lib"]
HTML_PARSERS: tuple[str, ...] = ("html.parser", "lxml", "html5lib")

# Media store defaults
DEFAULT_MEDIA_TIMEOUT = 30.0
DEFAULT_MEDIA_MAX_SIZE_BYTES = 20 * 1024 * 1024
DEFAULT_MEDIA_REQUIRE_HTTPS = False
DEFAULT_USER_AGENT = "html2blocks/0.1 (+https://pypi.org/project/html2blocks/)"

# Environment variables
ENV_MEDIA_PASSWORD = "HTML2BLOCKS_MEDIA_PASSWORD"
ENV_DISABLE_NETWORK = "HTML2BLOCKS_DISABLE_NETWORK"
ENV_USER_AGENT = "HTML2BLOCKS_USER_AGENT"

# Block comment wire format
BLOCK_NAMESPACE = "core/"
BLOCK_SEPARATOR = "\n\n"

# Attributes every tag may keep regardless of the allow-list.
ALWAYS_ALLOWED_ATTRIBUTES: tuple[str, ...] = ("class", "id")

# Readable allow-list of tags and their extra attributes.
# "class" and "id" are always allowed and are not listed here.
DEFAULT_ALLOWED_TAGS: dict[str, tuple[str, ...]] = {
    # Content sectioning
    "h1": (),
    "h2": (),
    "h3": (),
    "h4": (),
    "h5": (),
    "h6": (),
    # Text content
    "blockquote": (),
    "dd": (),
    "dt": (),
    "dl": (),
    "figcaption": (),
    "figure": (),
    "hr": (),
    "li": (),
    "ul": ("type",),
    "ol": ("reversed", "start", "type"),
    "p": (),
    # Inline text semantics
    "a": ("href", "target", "title", "rel"),
    "abbr": ("title",),
    "b": (),
    "br": (),
    "cite": (),
    "code": (),
    "em": (),
    "i": (),
    "s": (),
    "strike": (),
    "small": (),
    "span": (),
    "strong": (),
    "sub": (),
    "sup": (),
    # Image and multimedia
    "audio": ("src", "controls", "autoplay"),
    "img": ("src", "alt", "srcset", "height", "width", "sizes"),
    "video": ("src", "controls", "autoplay", "poster"),
    # Embedded content
    "embed": ("src", "height", "width", "type"),
    "iframe": ("src", "height", "width"),
    "object": (),
    "picture": (),
    "portal": ("src",),
    "pre": (),
    "source": ("type", "src", "alt", "srcset", "height", "width", "sizes", "media"),
    # Table content
    "caption": (),
    "col": ("span",),
    "colgroup": ("span",),
    "table": (),
    "tbody": (),
    "td": ("colspan", "headers", "rowspan"),
    "tfoot": (),
    "th": ("abbr", "colspan", "headers", "rowspan"),
    "thead": (),
    "tr": (),
}

# Global attributes permitted on every tag of the baseline post-content policy.
BASELINE_GLOBAL_ATTRIBUTES: tuple[str, ...] = (
    "aria-describedby",
    "aria-details",
    "aria-label",
    "aria-labelledby",
    "aria-hidden",
    "class",
    "id",
    "style",
    "title",
    "role",
    "dir",
    "lang",
)

# Baseline "safe HTML for published content" policy.
BASELINE_POST_TAGS: dict[str, tuple[str, ...]] = {
    "address": (),
    "a": ("href", "rel", "rev", "name", "target", "download", "hreflang", "media", "type"),
    "abbr": (),
    "acronym": (),
    "area": ("alt", "coords", "href", "nohref", "shape", "target"),
    "article": ("align",),
    "aside": ("align",),
    "audio": ("autoplay", "controls", "loop", "muted", "preload", "src"),
    "b": (),
    "bdo": (),
    "big": (),
    "blockquote": ("cite",),
    "br": (),
    "button": ("disabled", "name", "type", "value"),
    "caption": ("align",),
    "cite": (),
    "code": (),
    "col": ("align", "char", "charoff", "span", "valign", "width"),
    "colgroup": ("align", "char", "charoff", "span", "valign", "width"),
    "del": ("datetime",),
    "dd": (),
    "dfn": (),
    "details": ("align", "open"),
    "div": ("align",),
    "dl": (),
    "dt": (),
    "em": (),
    "fieldset": (),
    "figure": ("align",),
    "figcaption": ("align",),
    "font": ("color", "face", "size"),
    "footer": ("align",),
    "h1": ("align",),
    "h2": ("align",),
    "h3": ("align",),
    "h4": ("align",),
    "h5": ("align",),
    "h6": ("align",),
    "header": ("align",),
    "hgroup": ("align",),
    "hr": ("align", "noshade", "size", "width"),
    "i": (),
    "img": ("alt", "align", "border", "height", "hspace", "loading", "longdesc", "vspace", "src", "usemap", "width"),
    "ins": ("datetime", "cite"),
    "kbd": (),
    "label": ("for",),
    "legend": ("align",),
    "li": ("align", "value"),
    "main": ("align",),
    "map": ("name",),
    "mark": (),
    "menu": ("type",),
    "nav": ("align",),
    "object": ("data", "type"),
    "p": ("align",),
    "pre": ("width",),
    "q": ("cite",),
    "rb": (),
    "rp": (),
    "rt": (),
    "rtc": (),
    "ruby": (),
    "s": (),
    "samp": (),
    "span": ("align",),
    "section": ("align",),
    "small": (),
    "strike": (),
    "strong": (),
    "sub": (),
    "summary": ("align",),
    "sup": (),
    "table": ("align", "bgcolor", "border", "cellpadding", "cellspacing", "rules", "summary", "width"),
    "tbody": ("align", "char", "charoff", "valign"),
    "td": (
        "abbr",
        "align",
        "axis",
        "bgcolor",
        "char",
        "charoff",
        "colspan",
        "headers",
        "height",
        "nowrap",
        "rowspan",
        "scope",
        "valign",
        "width",
    ),
    "textarea": ("cols", "rows", "disabled", "name", "readonly"),
    "tfoot": ("align", "char", "charoff", "valign"),
    "th": (
        "abbr",
        "align",
        "axis",
        "bgcolor",
        "char",
        "charoff",
        "colspan",
        "headers",
        "height",
        "nowrap",
        "rowspan",
        "scope",
        "valign",
        "width",
    ),
    "thead": ("align", "char", "charoff", "valign"),
    "title": (),
    "tr": ("align", "bgcolor", "char", "charoff", "valign"),
    "track": ("default", "kind", "label", "src", "srclang"),
    "tt": (),
    "u": (),
    "ul": ("type",),
    "ol": ("start", "type", "reversed"),
    "var": (),
    "video": ("autoplay", "controls", "height", "loop", "muted", "playsinline", "poster", "preload", "src", "width"),
}

# URL protocols the sanitizer keeps on href/src attributes.
ALLOWED_PROTOCOLS: tuple[str, ...] = ("http", "https", "mailto", "ftp", "ftps", "tel", "sms")

# CSS properties kept inside style attributes.
ALLOWED_CSS_PROPERTIES: tuple[str, ...] = (
    "color",
    "background-color",
    "font-size",
    "font-family",
    "font-weight",
    "font-style",
    "text-align",
    "text-decoration",
    "margin",
    "padding",
    "border",
    "width",
    "height",
    "float",
    "line-height",
    "letter-spacing",
    "vertical-align",
)

DANGEROUS_SCHEMES = {
    "javascript:",
    "vbscript:",
    "data:text/html",
    "data:text/javascript",
    "data:application/javascript",
    "data:application/x-javascript",
}

# Image transform
IMAGE_SIZE_SLUG = "full"
IMAGE_LINK_DESTINATION = "none"
PLACEHOLDER_ATTACHMENT_ID = 1

HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")
