# =============================================================================
# Unit Tests: Filename Evidence Tagger
# =============================================================================

from datetime import date

from crimeboard.services.tagger import EntityHint, extract_entity_hints, generate_tags

TODAY = date(2026, 1, 2)


class TestGenerateTags:
    def test_scene_and_weapon(self):
        result = generate_tags("crime_scene_knife.jpg", today=TODAY)

        assert result.tags == [
            "crime_scene", "evidence", "investigation",
            "weapon", "evidence", "dangerous",
            "analyzed_2026-01-02",
        ]
        assert "weapon" in result.objects
        # Later groups override the summary
        assert result.scene_summary == "Weapon evidence photograph"

    def test_unmatched_filename(self):
        result = generate_tags("IMG_0001.jpg", today=TODAY)

        assert result.tags == ["evidence", "photo", "unclassified", "analyzed_2026-01-02"]
        assert result.objects == ["unknown"]
        assert result.scene_summary == "Photographic evidence awaiting classification"
        assert result.text_in_image is None

    def test_case_insensitive(self):
        result = generate_tags("BLOOD_sample.JPG", today=TODAY)
        assert "biological_evidence" in result.tags

    def test_document_sets_text_hint(self):
        result = generate_tags("paper_note.png", today=TODAY)
        assert result.text_in_image == "Document detected - text extraction available"
        assert "document" in result.tags

    def test_vehicle(self):
        result = generate_tags("getaway_car.png", today=TODAY)
        assert result.objects == ["car", "license_plate"]

    def test_date_tag_defaults_to_today(self):
        result = generate_tags("x.jpg")
        assert result.tags[-1] == f"analyzed_{date.today().isoformat()}"


class TestExtractEntityHints:
    def test_dates_then_times(self):
        text = "Seen at 9:15 pm on 2024-03-14, again 3/15/24 at 10:02:30."

        assert extract_entity_hints(text) == [
            EntityHint("DATE", "2024-03-14"),
            EntityHint("DATE", "3/15/24"),
            EntityHint("TIME", "9:15 pm"),
            EntityHint("TIME", "10:02:30"),
        ]

    def test_time_without_meridiem_has_no_trailing_space(self):
        assert extract_entity_hints("at 10:30 the door") == [
            EntityHint("TIME", "10:30"),
        ]

    def test_no_text(self):
        assert extract_entity_hints(None) == []
        assert extract_entity_hints("nothing to see") == []
