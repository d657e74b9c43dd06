"""Tests for tag2dir.core.orchestrator module."""

import os
from unittest.mock import MagicMock, patch

from tag2dir.core.models import MoveRecord
from tag2dir.core.orchestrator import Tag2DirOrchestrator, group_by_person


class TestGroupByPerson:
    """Tests for group_by_person() function."""

    def test_groups_sorted_by_person(self):
        records = [
            MoveRecord("/in/1.jpg", "/out/Zed/1.jpg", "Zed"),
            MoveRecord("/in/2.jpg", "/out/Amy/2.jpg", "Amy"),
            MoveRecord("/in/3.jpg", "/out/Zed/3.jpg", "Zed"),
        ]

        groups = group_by_person(records, "/out")

        assert [g.person for g in groups] == ["Amy", "Zed"]
        assert groups[1].file_count == 2
        assert [r.from_path for r in groups[1].records] == ["/in/1.jpg", "/in/3.jpg"]

    def test_target_folder_is_sanitized(self):
        records = [MoveRecord("/in/1.jpg", "/out/AB/1.jpg", "A/B")]

        groups = group_by_person(records, "/out")

        assert groups[0].target_folder == os.path.join("/out", "AB")

    def test_empty(self):
        assert group_by_person([], "/out") == []


class TestTag2DirOrchestrator:
    """Tests for Tag2DirOrchestrator class."""

    def test_init(self, temp_dir):
        orchestrator = Tag2DirOrchestrator(temp_dir, os.path.join(temp_dir, "out"))

        assert orchestrator.images == []
        assert orchestrator.log_dir == os.path.join(temp_dir, "out", "_tag2dir")
        assert orchestrator.can_undo is False

    def test_scan_with_injected_extractor(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)

        result = orchestrator.scan()

        assert result.image_count == 4
        assert result.exiftool_available is True
        assert len(orchestrator.images) == 4

    def test_scan_uses_exiftool_by_default(self, sample_photos, temp_dir):
        extractor = MagicMock()
        extractor.__enter__.return_value = extractor
        extractor.available = False
        extractor.extract_many.return_value = {}
        extractor.extract.return_value = (set(), set())

        with patch("tag2dir.core.orchestrator.ExifToolExtractor", return_value=extractor):
            result = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out")).scan()

        assert result.exiftool_available is False
        assert result.image_count == 4
        extractor.__exit__.assert_called_once()

    def test_preview_groups(self, sample_photos, stub_extractor, temp_dir):
        dest = os.path.join(temp_dir, "out")
        orchestrator = Tag2DirOrchestrator(sample_photos, dest, extractor=stub_extractor)
        orchestrator.scan()

        groups = orchestrator.preview_groups()

        assert [(g.person, g.file_count) for g in groups] == [("Alice", 2), ("Charlie", 1)]
        assert not os.path.exists(dest)

    def test_select_changes_person(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()
        beach = os.path.join(sample_photos, "beach.jpg")

        assert orchestrator.select(beach, "Bob") is True
        people = {r.person for r in orchestrator.preview() if r.from_path == beach}
        assert people == {"Bob"}

    def test_select_exclude(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()
        beach = os.path.join(sample_photos, "beach.jpg")

        orchestrator.select(beach, "Alice", included=False)

        assert beach not in [r.from_path for r in orchestrator.preview()]

    def test_select_unknown_path(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()

        assert orchestrator.select("/nowhere.jpg", "Bob") is False

    def test_select_by_person(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()
        beach = os.path.join(sample_photos, "beach.jpg")

        assert orchestrator.select_by_person("Bob") == 1

        by_path = {r.from_path: r.person for r in orchestrator.preview()}
        assert by_path[beach] == "Bob"
        assert by_path[os.path.join(sample_photos, "2023", "hike.heic")] == "Alice"
        assert by_path[os.path.join(sample_photos, "party.JPG")] == "Charlie"

    def test_select_by_person_includes_excluded_images(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()
        beach = os.path.join(sample_photos, "beach.jpg")
        orchestrator.select(beach, "Alice", included=False)

        assert orchestrator.select_by_person("Alice") == 2
        assert beach in [r.from_path for r in orchestrator.preview()]

    def test_select_by_unknown_person(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()
        before = orchestrator.preview()

        assert orchestrator.select_by_person("Nobody") == 0
        assert orchestrator.preview() == before

    def test_toggle_select_all(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()

        # untagged.png starts excluded, so the first toggle includes everything
        assert orchestrator.toggle_select_all() is True
        assert all(image.is_selected for image in orchestrator.images)
        assert len(orchestrator.preview()) == 3

        assert orchestrator.toggle_select_all() is False
        assert not any(image.is_selected for image in orchestrator.images)
        assert orchestrator.preview() == []

    def test_toggle_then_select_by_person(self, sample_photos, stub_extractor, temp_dir):
        dest = os.path.join(temp_dir, "out")
        orchestrator = Tag2DirOrchestrator(sample_photos, dest, extractor=stub_extractor)
        orchestrator.scan()
        orchestrator.toggle_select_all()
        orchestrator.toggle_select_all()

        orchestrator.select_by_person("Bob")

        assert orchestrator.preview() == [
            MoveRecord(os.path.join(sample_photos, "beach.jpg"), os.path.join(dest, "Bob", "beach.jpg"), "Bob")
        ]

    def test_move_and_undo(self, sample_photos, stub_extractor, temp_dir):
        dest = os.path.join(temp_dir, "out")
        orchestrator = Tag2DirOrchestrator(sample_photos, dest, extractor=stub_extractor)
        orchestrator.scan()

        result = orchestrator.move()

        assert result.success_count == 3
        assert os.path.exists(os.path.join(dest, "Alice", "beach.jpg"))
        assert os.path.exists(os.path.join(dest, "Alice", "hike.heic"))
        assert os.path.exists(os.path.join(dest, "Charlie", "party.JPG"))
        assert [i.filename for i in orchestrator.images] == ["untagged.png"]
        assert orchestrator.can_undo is True

        undo = orchestrator.undo()

        assert undo.success_count == 3
        assert os.path.exists(os.path.join(sample_photos, "beach.jpg"))
        assert os.path.exists(os.path.join(sample_photos, "2023", "hike.heic"))
        assert orchestrator.can_undo is False

    def test_second_move_does_not_repeat(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(sample_photos, os.path.join(temp_dir, "out"), extractor=stub_extractor)
        orchestrator.scan()
        orchestrator.move()

        result = orchestrator.move()

        assert result.moved == []
        assert result.errors == []

    def test_verbose_writes_move_log(self, sample_photos, stub_extractor, temp_dir):
        dest = os.path.join(temp_dir, "out")
        with Tag2DirOrchestrator(sample_photos, dest, verbose=True, extractor=stub_extractor) as orchestrator:
            orchestrator.scan()
            orchestrator.move()

        assert os.path.exists(os.path.join(dest, "_tag2dir", "moves.txt"))

    def test_quiet_writes_no_move_log(self, sample_photos, stub_extractor, temp_dir):
        dest = os.path.join(temp_dir, "out")
        with Tag2DirOrchestrator(sample_photos, dest, extractor=stub_extractor) as orchestrator:
            orchestrator.scan()
            orchestrator.move()

        assert not os.path.exists(os.path.join(dest, "_tag2dir"))

    def test_parallel_move(self, sample_photos, stub_extractor, temp_dir):
        orchestrator = Tag2DirOrchestrator(
            sample_photos, os.path.join(temp_dir, "out"), copy_workers=3, extractor=stub_extractor
        )
        orchestrator.scan()

        assert orchestrator.move().success_count == 3
