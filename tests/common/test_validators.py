from __future__ import annotations

import pytest

from activity_reports.common.validators import (
    require_hhmm,
    require_non_empty,
    require_string,
    require_text,
    require_verbatim,
)
from activity_reports.core.exceptions import ValidationError


@pytest.mark.parametrize("value", [None, 5, 1.5, ["a"], {"a": 1}, True])
def test_non_strings_are_rejected(value):
    with pytest.raises(ValidationError, match="title must be a string"):
        require_string(value, "title")
    with pytest.raises(ValidationError, match="title must be a string"):
        require_non_empty(value, "title")


def test_hhmm_rejects_numbers():
    with pytest.raises(ValidationError, match="start_time must be a string"):
        require_hhmm(900, "start_time")
    assert require_hhmm(" 9:05 ", "start_time") == "09:05"


def test_text_is_trimmed_but_verbatim_is_not():
    assert require_text("  a b  ", "name") == "a b"
    assert require_verbatim("  a b  ", "name") == "  a b  "

    with pytest.raises(ValidationError):
        require_verbatim("   ", "name")
    with pytest.raises(ValidationError):
        require_verbatim("  abc  ", "name", max_len=5)
