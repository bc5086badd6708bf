import pytest

from imagedrop.errors import StorageUnavailable
from imagedrop.storage import discard, ensure_directory, extension_of, generate_name


def test_generate_name_is_deterministic_with_pinned_sources():
    name = generate_name("photo.JPG", now=lambda: 1678889999.5, rand=lambda: 42)
    assert name == "1678889999500-42.JPG"


def test_generate_name_differs_on_random_component():
    now = lambda: 1700000000.0
    a = generate_name("a.png", now=now, rand=lambda: 1)
    b = generate_name("a.png", now=now, rand=lambda: 2)
    assert a != b


def test_generate_name_real_sources_do_not_collide():
    names = {generate_name("same.jpg") for _ in range(200)}
    assert len(names) == 200


def test_generate_name_does_not_touch_disk(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    generate_name("photo.jpg")
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize(
    "original,ext",
    [
        ("photo.JPG", ".JPG"),
        ("archive.tar.gz", ".gz"),
        ("noext", ""),
        (".bashrc", ""),
        ("dir.d/file", ""),
        ("", ""),
    ],
)
def test_extension_of(original, ext):
    assert extension_of(original) == ext


def test_ensure_directory_is_idempotent(tmp_path):
    d = tmp_path / "public" / "uploads"
    assert ensure_directory(d) == d
    (d / "keep.jpg").write_bytes(b"x")
    ensure_directory(d)
    assert (d / "keep.jpg").read_bytes() == b"x"


def test_ensure_directory_fails_when_parent_is_file(tmp_path):
    blocker = tmp_path / "public"
    blocker.write_text("not a dir", encoding="utf-8")
    with pytest.raises(StorageUnavailable):
        ensure_directory(blocker / "uploads")


def test_ensure_directory_fails_when_path_is_file(tmp_path):
    f = tmp_path / "uploads"
    f.write_text("not a dir", encoding="utf-8")
    with pytest.raises(StorageUnavailable):
        ensure_directory(f)


def test_discard_tolerates_missing_file(tmp_path):
    f = tmp_path / "x.jpg"
    f.write_bytes(b"x")
    assert discard(f) is True
    assert not f.exists()
    assert discard(f) is False
    assert discard(None) is False
