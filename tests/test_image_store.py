from __future__ import annotations

import io

import responses
from PIL import Image

from conftest import gif_bytes

from voron_mods.storage.image_store import (
    local_file_for,
    materialized_name,
    maybe_materialize_image,
    remove_orphan_images,
)

GIF_URL = "https://raw.example.test/mods/alice/anim.gif"


def test_non_gif_passes_through(tmp_path, session):
    url = "https://cdn.example.test/still.png"
    assert maybe_materialize_image(url, image_dir=tmp_path, session=session) == url
    assert list(tmp_path.iterdir()) == []


@responses.activate
def test_gif_becomes_local_jpeg(tmp_path, session):
    responses.add(responses.GET, GIF_URL, body=gif_bytes(), status=200, content_type="image/gif")

    image = maybe_materialize_image(GIF_URL, image_dir=tmp_path / "imgs", session=session)

    name = materialized_name(GIF_URL)
    assert image == f"/mod-images/{name}"
    assert name.endswith(".jpg")
    path = tmp_path / "imgs" / name
    with Image.open(io.BytesIO(path.read_bytes())) as img:
        assert img.format == "JPEG"
        assert img.size == (8, 8)


@responses.activate
def test_existing_file_is_not_downloaded_again(tmp_path, session):
    (tmp_path / materialized_name(GIF_URL)).write_bytes(b"already here")

    image = maybe_materialize_image(GIF_URL, image_dir=tmp_path, session=session)

    assert image == f"/mod-images/{materialized_name(GIF_URL)}"
    assert len(responses.calls) == 0


@responses.activate
def test_download_failure_falls_back_to_remote_url(tmp_path, session):
    responses.add(responses.GET, GIF_URL, status=503)
    assert maybe_materialize_image(GIF_URL, image_dir=tmp_path, session=session) == GIF_URL
    assert list(tmp_path.iterdir()) == []


@responses.activate
def test_transcode_failure_falls_back_to_remote_url(tmp_path, session):
    responses.add(responses.GET, GIF_URL, body=b"not a gif", status=200)
    assert maybe_materialize_image(GIF_URL, image_dir=tmp_path, session=session) == GIF_URL
    assert list(tmp_path.iterdir()) == []


def test_local_file_for(tmp_path):
    assert local_file_for("/mod-images/abc.jpg", tmp_path) == tmp_path / "abc.jpg"
    assert local_file_for("https://cdn.example.test/abc.jpg", tmp_path) is None
    assert local_file_for("/mod-images/../etc/passwd", tmp_path) is None


def test_remove_orphan_images(tmp_path):
    (tmp_path / "keep.jpg").write_bytes(b"k")
    (tmp_path / "orphan.jpg").write_bytes(b"o")
    (tmp_path / "notes.txt").write_text("x")

    removed = remove_orphan_images(
        tmp_path,
        ["/mod-images/keep.jpg", "https://cdn.example.test/keep2.png", None],
    )

    assert sorted(p.name for p in removed) == ["notes.txt", "orphan.jpg"]
    assert [p.name for p in tmp_path.iterdir()] == ["keep.jpg"]


def test_remove_orphan_images_missing_dir(tmp_path):
    assert remove_orphan_images(tmp_path / "nope", []) == []
