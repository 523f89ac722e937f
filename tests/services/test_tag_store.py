"""Tests for the TagStore service."""
import threading
from pathlib import Path

import pytest
from sqlalchemy import update

from filetags.core.exceptions import TagLabelConflictError, TagNotFoundError
from filetags.models.tag import Tag
from filetags.services.tag_store import TagStore


def test_store_requires_open() -> None:
    """Test that operations fail clearly before open()."""
    store = TagStore("sqlite://")

    with pytest.raises(RuntimeError):
        store.list_tags()


def test_open_close_lifecycle() -> None:
    """Test that open and close are idempotent and tracked by is_open."""
    store = TagStore("sqlite://")
    assert store.is_open is False

    assert store.open() is store.open()
    assert store.is_open is True

    store.close()
    store.close()
    assert store.is_open is False
    with pytest.raises(RuntimeError):
        store.engine


def test_stores_are_isolated() -> None:
    """Test that two in-memory stores do not share data."""
    with TagStore("sqlite://") as first, TagStore("sqlite://") as second:
        first.create_tag("image", "sunset")

        assert second.list_tags() == []


def test_create_tag_is_get_or_create(store: TagStore) -> None:
    """Test that creating an existing tag returns it."""
    first = store.create_tag("image", "sunset")
    second = store.create_tag("image", "sunset")

    assert first.id == second.id
    assert len(store.list_tags()) == 1


def test_register_file_twice_same_id(store: TagStore, make_file) -> None:
    """Test file identity is stable for unchanged content."""
    path = make_file("photos/a.jpg")

    assert store.register_file(path).id == store.register_file(path).id
    assert store.get_file(path).filename == "a.jpg"


def test_sunset_scenario(store: TagStore, make_file) -> None:
    """Test link, unlink and delete of a tag across two files."""
    a = make_file("photos/a.jpg")
    b = make_file("photos/b.jpg")
    sunset = store.create_tag("image", "sunset")

    assert store.link(a, sunset.id) is True
    assert store.link(b, sunset.id) is True
    assert [f.filename for f in store.files_for_tag(sunset.id)] == ["a.jpg", "b.jpg"]
    assert store.get_tag(sunset.id).usage_count == 2

    assert store.unlink(a, sunset.id) is True
    assert store.get_tag(sunset.id).usage_count == 1
    assert [f.filename for f in store.files_for_tag(sunset.id)] == ["b.jpg"]

    assert store.delete_tag(sunset.id) is True
    assert store.tags_for_file(a) == []
    assert store.tags_for_file(b) == []
    assert store.files_for_tag(sunset.id) == []


def test_count_matches_distinct_files(store: TagStore, make_file) -> None:
    """Test the counter after a mix of links, repeats and unlinks."""
    paths = [make_file(f"photos/{i}.jpg") for i in range(4)]
    tag = store.create_tag("image", "sunset")

    for path in paths + paths[:2]:
        store.link(path, tag.id)
    store.unlink(paths[3], tag.id)
    store.unlink(paths[3], tag.id)

    assert store.get_tag(tag.id).usage_count == 3
    assert store.get_tag(tag.id).usage_count == len(store.files_for_tag(tag.id))


def test_unlink_all_keeps_counts_exact(store: TagStore, make_file) -> None:
    """Test bulk unlink recounts the tags it touched."""
    a = make_file("photos/a.jpg")
    sunset = store.create_tag("image", "sunset")
    beach = store.create_tag("image", "beach")
    store.link(a, sunset.id)
    store.link(a, beach.id)

    assert store.unlink_all(a) == 2
    assert [t.usage_count for t in store.list_tags()] == [0, 0]


def test_delete_file_recounts_tags(store: TagStore, make_file) -> None:
    """Test that deleting a file row updates the counts of its tags."""
    a = make_file("photos/a.jpg")
    b = make_file("photos/b.jpg")
    sunset = store.create_tag("image", "sunset")
    store.link(a, sunset.id)
    store.link(b, sunset.id)

    assert store.delete_file(store.get_file(a).id) is True
    assert store.get_tag(sunset.id).usage_count == 1
    assert [f.filename for f in store.list_files()] == ["b.jpg"]


def test_link_unknown_tag_creates_nothing(store: TagStore, make_file) -> None:
    """Test that a rejected link registers no file."""
    with pytest.raises(TagNotFoundError):
        store.link(make_file("photos/a.jpg"), 12345)

    assert store.list_files() == []


def test_rename_conflict_leaves_tags_untouched(store: TagStore) -> None:
    """Test that a conflicting rename is reported and rolled back."""
    store.create_tag("image", "sunset")
    beach = store.create_tag("image", "beach")

    with pytest.raises(TagLabelConflictError):
        store.rename_tag(beach.id, "sunset")

    assert [t.label for t in store.list_tags("image")] == ["beach", "sunset"]


def test_rename_and_delete_are_distinct(store: TagStore) -> None:
    """Test rename and delete primitives."""
    tag = store.create_tag("image", "sunset")

    assert store.rename_tag(tag.id, "-") is True
    assert store.get_tag(tag.id).label == "-"
    assert store.delete_tag(tag.id) is True
    assert store.delete_tag(tag.id) is False
    assert store.rename_tag(tag.id, "dusk") is False


def test_files_for_tags_intersection(store: TagStore, make_file) -> None:
    """Test the intersection query through the service."""
    a = make_file("photos/a.jpg")
    b = make_file("photos/b.jpg")
    sunset = store.create_tag("image", "sunset")
    beach = store.create_tag("image", "beach")
    store.link(a, sunset.id)
    store.link(a, beach.id)
    store.link(b, sunset.id)

    assert store.files_for_tags([]) == []
    assert [f.filename for f in store.files_for_tags([sunset.id])] == ["a.jpg", "b.jpg"]
    assert [f.filename for f in store.files_for_tags([sunset.id, beach.id])] == ["a.jpg"]


def test_rating_is_replaced_not_accumulated(store: TagStore, make_file) -> None:
    """Test the one-rating-per-file convention built on exclusive tags.

    The tables allow several rating tags on a file; only set_exclusive_tag
    keeps it to one.
    """
    a = make_file("photos/a.jpg")

    three = store.set_exclusive_tag(a, "rating", "3")
    assert [(t.tag_type, t.label) for t in store.tags_for_file(a)] == [("rating", "3")]

    five = store.set_exclusive_tag(a, "rating", "5")
    ratings = [t for t in store.tags_for_file(a) if t.tag_type == "rating"]

    assert [t.label for t in ratings] == ["5"]
    assert five.usage_count == 1
    assert store.get_tag(three.id).usage_count == 0


def test_plain_links_do_not_enforce_rating_singularity(store: TagStore, make_file) -> None:
    """Test that the core itself stores ratings as ordinary tags."""
    a = make_file("photos/a.jpg")
    three = store.create_tag("rating", "3")
    five = store.create_tag("rating", "5")

    store.link(a, three.id)
    store.link(a, five.id)

    assert [t.label for t in store.tags_for_file(a)] == ["3", "5"]


def test_exclusive_tag_keeps_other_types(store: TagStore, make_file) -> None:
    """Test that replacing a rating leaves other tags alone."""
    a = make_file("photos/a.jpg")
    sunset = store.create_tag("image", "sunset")
    store.link(a, sunset.id)

    store.set_exclusive_tag(a, "rating", "4")
    assert store.clear_exclusive_tag(a, "rating") == 1

    assert [t.label for t in store.tags_for_file(a)] == ["sunset"]


def test_recount_tags_repairs_drift(store: TagStore, make_file) -> None:
    """Test rebuilding counts from the association table."""
    a = make_file("photos/a.jpg")
    tag = store.create_tag("image", "sunset")
    store.link(a, tag.id)

    with store.transaction() as repo:
        repo.session.execute(update(Tag).values(usage_count=99))

    store.recount_tags()

    assert store.get_tag(tag.id).usage_count == 1


def test_all_files_with_tags(store: TagStore, make_file) -> None:
    """Test the full file listing through the service."""
    a = make_file("photos/a.jpg")
    store.register_file(make_file("photos/b.jpg"))
    tag = store.create_tag("image", "sunset")
    store.link(a, tag.id)

    listing = store.all_files_with_tags()

    assert [(e.file.filename, [t.label for t in e.tags]) for e in listing] == [
        ("a.jpg", ["sunset"]),
        ("b.jpg", []),
    ]


def test_concurrent_get_or_create(tmp_path: Path) -> None:
    """Test racing callers on one new file and tag resolve to single rows."""
    path = tmp_path / "photos" / "a.jpg"
    path.parent.mkdir()
    path.write_bytes(b"shared content")
    workers = 8
    barrier = threading.Barrier(workers)
    results = []
    errors = []
    lock = threading.Lock()

    def worker(store: TagStore) -> None:
        try:
            barrier.wait()
            tag = store.create_tag("image", "sunset")
            linked = store.link(path, tag.id)
            with lock:
                results.append((tag.id, linked))
        except Exception as e:
            with lock:
                errors.append(e)

    with TagStore(f"sqlite:///{tmp_path / 'tags.db'}") as store:
        threads = [threading.Thread(target=worker, args=(store,)) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len({tag_id for tag_id, _ in results}) == 1
        assert [linked for _, linked in results].count(True) == 1
        assert len(store.list_files()) == 1
        assert len(store.list_tags()) == 1
        assert store.list_tags()[0].usage_count == 1
