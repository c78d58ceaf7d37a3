"""Tests for the Ok/Err result type."""

import pytest

from nursery.result import Err, Ok


class TestResult:
    def test_ok_unwrap(self) -> None:
        result = Ok(5)
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 5
        assert result.error is None

    def test_err_unwrap_raises(self) -> None:
        result = Err("boom")
        assert result.is_err()
        assert result.error == "boom"
        assert result.value is None
        with pytest.raises(ValueError):
            result.unwrap()

    def test_pattern_matching(self) -> None:
        match Err("no history"):
            case Ok(value):
                outcome = f"ok {value}"
            case Err(reason):
                outcome = f"err {reason}"
        assert outcome == "err no history"
