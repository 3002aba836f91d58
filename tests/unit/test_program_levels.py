"""Unit tests for program level validation and timeframe arithmetic"""

import pytest

from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.program.program_levels import (
    normalize_levels, get_next_level, get_previous_level, convert_timeframe,
    total_time_to_complete, time_lapse_matrix, is_valid_progression
)


@pytest.fixture
def program():
    return {
        "totalLevels": 3,
        "levels": normalize_levels([
            {"levelNumber": 1, "title": " Sounds ", "timeframe": 2, "timeframeUnit": "weeks"},
            {"levelNumber": 2, "title": "Letters", "timeframe": 14, "timeframeUnit": "days", "prerequisites": [1]},
            {"levelNumber": 3, "title": "Words", "timeframe": 1, "timeframeUnit": "months"},
        ], 3),
    }


@pytest.mark.unit
class TestNormalizeLevels:

    def test_defaults_filled(self, program):
        first = program["levels"][0]
        assert first["title"] == "Sounds"
        assert first["prerequisites"] == []
        assert first["objectives"] == []

    def test_unit_defaults_to_weeks(self):
        levels = normalize_levels([{"levelNumber": 1, "title": "Only", "timeframe": 3}], 1)
        assert levels[0]["timeframeUnit"] == "weeks"

    def test_levels_sorted_by_number(self):
        levels = normalize_levels([
            {"levelNumber": 2, "title": "B", "timeframe": 1},
            {"levelNumber": 1, "title": "A", "timeframe": 1},
        ], 2)
        assert [level["levelNumber"] for level in levels] == [1, 2]

    @pytest.mark.parametrize("levels, total", [
        ([{"levelNumber": 1, "title": "A", "timeframe": 1}], 2),
        ([{"levelNumber": 1, "title": "A", "timeframe": 1}, {"levelNumber": 3, "title": "C", "timeframe": 1}], 2),
        ([{"levelNumber": 1, "title": "A", "timeframe": 0}], 1),
        ([{"levelNumber": 1, "title": "A", "timeframe": 1, "timeframeUnit": "years"}], 1),
        ([{"levelNumber": 1, "title": "A", "timeframe": 1, "prerequisites": [1]}], 1),
        ([{"levelNumber": 1, "timeframe": 1}], 1),
        ([], 0),
    ])
    def test_invalid_levels_rejected(self, levels, total):
        with pytest.raises(ValidationError):
            normalize_levels(levels, total)


@pytest.mark.unit
class TestTimeframes:

    def test_conversion_through_days(self):
        assert convert_timeframe(14, "days", "weeks") == 2
        assert convert_timeframe(1, "months", "weeks") == 5
        assert convert_timeframe(2, "weeks", "days") == 14
        assert convert_timeframe(3, "months", "months") == 3

    def test_total_time(self, program):
        assert total_time_to_complete(program, 1, 3, "weeks") == 9
        assert total_time_to_complete(program, 1, 3, "days") == 58
        assert total_time_to_complete(program, 2, 2, "weeks") == 2

    @pytest.mark.parametrize("from_level, to_level", [(0, 2), (2, 4), (3, 1)])
    def test_invalid_range(self, program, from_level, to_level):
        with pytest.raises(ValidationError):
            total_time_to_complete(program, from_level, to_level)

    def test_time_lapse_matrix(self, program):
        assert time_lapse_matrix(program, "weeks") == [
            [2, 4, 9],
            [0, 2, 7],
            [0, 0, 5],
        ]


@pytest.mark.unit
class TestNavigation:

    def test_next_and_previous(self, program):
        assert get_next_level(program, 1)["title"] == "Letters"
        assert get_next_level(program, 3) is None
        assert get_previous_level(program, 2)["title"] == "Sounds"
        assert get_previous_level(program, 1) is None

    def test_progression_one_level_at_a_time(self, program):
        assert is_valid_progression(program, 1, 2)
        assert not is_valid_progression(program, 1, 3)
        assert not is_valid_progression(program, 2, 1)
        assert not is_valid_progression(program, 3, 4)
