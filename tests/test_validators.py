import pytest

from services.assessment_management.validators import (
    check_subject_coverage,
    normalize_subject_comments,
    require_text,
    require_week_number,
)
from shared.exceptions import ValidationError


def test_normalize_subject_comments_coerces_form_keys():
    assert normalize_subject_comments({"1": "ok", 2: "good", "3": None}) == {1: "ok", 2: "good", 3: ""}


@pytest.mark.parametrize(
    "raw",
    [None, ["1", "ok"], {"math": "ok"}, {0: "ok"}, {1: 5}, {"1": "a", 1: "b"}],
)
def test_normalize_subject_comments_rejects_malformed_maps(raw):
    with pytest.raises(ValidationError):
        normalize_subject_comments(raw)


def test_subject_coverage_reports_missing_and_rejects_foreign():
    assert check_subject_coverage({1: "ok"}, [1, 2, 3]) == [2, 3]
    assert check_subject_coverage({1: "ok", 2: "ok"}, [1, 2]) == []
    with pytest.raises(ValidationError):
        check_subject_coverage({1: "ok", 9: "?"}, [1, 2])


def test_require_week_number():
    assert require_week_number(52) == 52
    for bad in (0, -1, 1.5, "1", False):
        with pytest.raises(ValidationError):
            require_week_number(bad)


def test_require_text():
    assert require_text("Summary", "summary") == "Summary"
    with pytest.raises(ValidationError):
        require_text("   ", "summary")
