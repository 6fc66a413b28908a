from __future__ import annotations

import pytest
import responses
from cloudscraper.exceptions import CaptchaException, CloudflareException

from voron_mods.scrape.http import FetchError, fetch_bytes, fetch_text
from voron_mods.storage.image_store import maybe_materialize_image

URL = "https://example.test/printer_mods/README.md"
GIF = "https://example.test/a/demo.gif"


@responses.activate
def test_required_fetch_wraps_challenge_errors(session):
    responses.add(responses.GET, URL, body=CloudflareException("challenge not solved"))

    with pytest.raises(FetchError) as exc:
        fetch_text(URL, session=session, required=True)
    assert exc.value.url == URL
    assert "CloudflareException" in exc.value.reason


@responses.activate
def test_optional_fetch_returns_none_on_challenge_errors(session):
    responses.add(responses.GET, URL, body=CaptchaException("captcha"))
    assert fetch_text(URL, session=session) is None


@responses.activate
def test_fetch_bytes_returns_none_on_challenge_errors(session):
    responses.add(responses.GET, GIF, body=CloudflareException("challenge not solved"))
    assert fetch_bytes(GIF, session=session) is None


@responses.activate
def test_gif_download_challenge_falls_back_to_remote_url(session, tmp_path):
    responses.add(responses.GET, GIF, body=CloudflareException("challenge not solved"))
    assert maybe_materialize_image(GIF, image_dir=tmp_path, session=session) == GIF
    assert list(tmp_path.iterdir()) == []
