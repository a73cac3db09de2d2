"""URL resolver and inclusion policy tests."""

import pytest

from visualsense.audit.errors import NoCandidateAssets
from visualsense.audit.resolver import (
    is_icon_reference,
    is_supported_format,
    is_vector_reference,
    resolve,
)

BASE = "https://shop.example.com/products/chair"


# --- resolution ---


def test_root_relative_gains_origin():
    assert resolve(["/media/hero.jpg"], BASE) == ["https://shop.example.com/media/hero.jpg"]


def test_protocol_relative_gains_scheme():
    assert resolve(["//cdn.example.net/a.jpg"], BASE) == ["https://cdn.example.net/a.jpg"]


def test_protocol_relative_keeps_http_scheme():
    assert resolve(["//cdn.example.net/a.jpg"], "http://shop.example.com/") == [
        "http://cdn.example.net/a.jpg"
    ]


def test_path_relative_resolves_against_page():
    assert resolve(["hero.jpg"], BASE) == ["https://shop.example.com/products/hero.jpg"]


def test_absolute_url_unchanged():
    url = "https://cdn.example.net/img/p.webp?w=800"
    assert resolve([url], BASE) == [url]


def test_unparseable_reference_dropped():
    assert resolve(["http://[::1/broken.jpg", "/ok.jpg"], BASE) == [
        "https://shop.example.com/ok.jpg"
    ]


def test_non_web_schemes_dropped():
    refs = ["data:image/png;base64,AAAA", "javascript:void(0)", "ftp://x.com/a.jpg", "/ok.jpg"]
    assert resolve(refs, BASE) == ["https://shop.example.com/ok.jpg"]


# --- dedupe and ordering ---


def test_duplicates_removed_first_seen_order():
    refs = ["/b.jpg", "/a.jpg", "/b.jpg", "/c.jpg", "/a.jpg"]
    assert resolve(refs, BASE) == [
        "https://shop.example.com/b.jpg",
        "https://shop.example.com/a.jpg",
        "https://shop.example.com/c.jpg",
    ]


def test_duplicates_after_resolution_removed():
    refs = ["/a.jpg", "https://shop.example.com/a.jpg", "//shop.example.com/a.jpg"]
    assert resolve(refs, BASE) == ["https://shop.example.com/a.jpg"]


def test_truncates_to_max_preserving_order():
    refs = [f"/p{i}.jpg" for i in range(10)]
    result = resolve(refs, BASE, max_candidates=4)
    assert result == [f"https://shop.example.com/p{i}.jpg" for i in range(4)]


def test_truncation_counts_only_eligible_urls():
    refs = ["/logo.png", "/a.jpg", "/sprite.svg", "/b.jpg", "/c.jpg"]
    assert resolve(refs, BASE, max_candidates=2) == [
        "https://shop.example.com/a.jpg",
        "https://shop.example.com/b.jpg",
    ]


# --- inclusion policy ---


@pytest.mark.parametrize(
    "ref",
    [
        "/img/a.svg",
        "/img/A.SVG",
        "/img/a.svg?v=3",
        "/img/a.svg#frag",
        "/img/a.svgz",
        "data:image/svg+xml;utf8,<svg></svg>",
        "https://cdn.example.net/render?type=image/svg+xml",
    ],
)
def test_vector_references_detected(ref):
    assert is_vector_reference(ref)


def test_raster_is_not_vector():
    assert not is_vector_reference("/img/svgs-are-not-here.jpg")


def test_icon_and_logo_detected_case_insensitively():
    assert is_icon_reference("https://x.com/assets/Favicon-32.png")
    assert is_icon_reference("https://x.com/BrandLOGO.jpg")
    assert not is_icon_reference("https://x.com/products/chair.jpg")


def test_supported_format_allows_extensionless_and_raster():
    assert is_supported_format("https://cdn.example.net/image/upload/abc123")
    assert is_supported_format("https://x.com/a.webp")
    assert is_supported_format("https://x.com/a.JPEG")
    assert not is_supported_format("https://x.com/a.gif")
    assert not is_supported_format("https://x.com/favicon.ico")


def test_result_has_no_vectors_icons_or_duplicates():
    refs = [
        "/hero.jpg", "/hero.svg", "/icons/cart.png", "/hero.jpg",
        "//cdn.example.net/p.png", "/site-logo.webp", "/spinner.gif",
    ]
    result = resolve(refs, BASE, max_candidates=10)
    assert result == ["https://shop.example.com/hero.jpg", "https://cdn.example.net/p.png"]
    assert len(result) == len(set(result))
    assert not any(is_vector_reference(u) for u in result)


def test_only_svg_refs_raise_no_candidates():
    with pytest.raises(NoCandidateAssets):
        resolve(["/a.svg", "/b.svg?x=1"], BASE)


def test_empty_input_raises_no_candidates():
    with pytest.raises(NoCandidateAssets):
        resolve([], BASE)


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_limit_is_rejected(limit):
    with pytest.raises(ValueError):
        resolve(["/a.jpg", "/b.jpg"], BASE, max_candidates=limit)
