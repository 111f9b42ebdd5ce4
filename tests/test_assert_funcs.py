"""Tests for the function style assertions in tripline.assert_."""

import pytest

from tripline import AssertionFailure, AssertionFatal, assert_


def _divide_by_zero() -> float:
    return 1 / 0


class TestBasicAssertions:
    """Tests for truthiness and identity checks."""

    def test_passing(self) -> None:
        """Passing checks return silently."""
        assert_.ok(1)
        assert_.is_true(True)  # noqa: FBT003
        assert_.is_false(False)  # noqa: FBT003
        assert_.is_none(None)
        assert_.is_not_none(0)
        assert_.is_instance(1, int)

    def test_ok_failure(self) -> None:
        """ok() reports the falsy value."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.ok(0)

        assert exc_info.value.message == "expected 0 to be truthy"

    def test_is_not_none_failure(self) -> None:
        """is_not_none() uses the negated phrase."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.is_not_none(None)

        assert exc_info.value.message == "expected None to not be None"

    def test_message_prefix(self) -> None:
        """The msg argument prefixes the failure message."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.is_true(0, "flag")

        assert exc_info.value.message == "flag: expected 0 to be True"


class TestEqualityAssertions:
    """Tests for the equality family."""

    def test_equal(self) -> None:
        """equal / not_equal use ==."""
        assert_.equal(1, 1.0)
        assert_.not_equal(1, 2)

        with pytest.raises(AssertionFailure) as exc_info:
            assert_.equal(1, 2, "counting")
        assert exc_info.value.message == "counting: expected 1 to equal 2"

        with pytest.raises(AssertionFailure) as exc_info:
            assert_.not_equal(1, 1)
        assert exc_info.value.message == "expected 1 to not equal 1"

    def test_strict_equal(self) -> None:
        """strict_equal requires the same type."""
        assert_.strict_equal("a", "a")
        assert_.not_strict_equal(1, 1.0)

        with pytest.raises(AssertionFailure):
            assert_.strict_equal(1, True)  # noqa: FBT003

    def test_deep_equal(self) -> None:
        """deep_equal compares structurally, numeric strings included."""
        assert_.deep_equal({"tea": ["chai", 1]}, {"tea": ["chai", "1"]})
        assert_.not_deep_equal({"tea": "chai"}, {"tea": "black"})

        with pytest.raises(AssertionFailure) as exc_info:
            assert_.deep_equal({"tea": "chai"}, {"tea": "black"})
        assert exc_info.value.message == 'expected {tea:"chai"} to deeply equal {tea:"black"}'

    def test_deep_strict_equal(self) -> None:
        """deep_strict_equal also compares types."""
        assert_.deep_strict_equal({"a": [1]}, {"a": [1]})
        assert_.not_deep_strict_equal({"a": 1}, {"a": "1"})

        with pytest.raises(AssertionFailure):
            assert_.deep_strict_equal([1], (1,))


class TestContainerAssertions:
    """Tests for includes / not_includes."""

    def test_includes(self) -> None:
        """includes checks membership."""
        assert_.includes([1, 2], 2)
        assert_.includes("chai", "ha")
        assert_.not_includes({"a": 1}, "b")

        with pytest.raises(AssertionFailure) as exc_info:
            assert_.not_includes([1, 2], 2)
        assert exc_info.value.message == "expected [1,2] to not include 2"


class TestThrows:
    """Tests for throws / does_not_throw."""

    def test_throws_returns_exception(self) -> None:
        """throws() returns the raised exception."""
        error = assert_.throws(_divide_by_zero, ZeroDivisionError)

        assert isinstance(error, ZeroDivisionError)

    def test_throws_with_match(self) -> None:
        """A match pattern is searched in the error message."""
        assert_.throws(_divide_by_zero, ZeroDivisionError, match="division")

        with pytest.raises(AssertionFailure):
            assert_.throws(_divide_by_zero, ZeroDivisionError, match="^nothing")

    def test_throws_fails_when_nothing_raised(self) -> None:
        """throws() fails for functions that return."""
        with pytest.raises(AssertionFailure, match="to raise an error"):
            assert_.throws(lambda: None)

    def test_does_not_throw(self) -> None:
        """does_not_throw() reports the raised error."""
        assert_.does_not_throw(lambda: None)

        with pytest.raises(AssertionFailure) as exc_info:
            assert_.does_not_throw(_divide_by_zero)
        assert exc_info.value.message == (
            'expected [Function:_divide_by_zero] to not raise an error but it raised [ZeroDivisionError:"division by zero"]'
        )


class TestFailAndFatal:
    """Tests for unconditional failures."""

    def test_fail_with_message(self) -> None:
        """fail(msg) raises with the message."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.fail("boom")

        assert exc_info.value.message == "boom"
        assert not isinstance(exc_info.value, AssertionFatal)

    def test_fail_without_message(self) -> None:
        """fail() uses the default message."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.fail()

        assert exc_info.value.message == "assertion failure"

    def test_fail_with_details(self) -> None:
        """fail(msg, details) attaches the details."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.fail("boom", {"actual": 3})

        assert exc_info.value.props == {"actual": 3}

    def test_fail_with_actual_and_expected(self) -> None:
        """fail(actual, expected, msg, operator) records the operands."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.fail(1, 2, "{actual} vs {expected}", "<")

        error = exc_info.value
        assert error.message == "1 vs 2"
        assert (error.actual, error.expected, error.operator) == (1, 2, "<")

    def test_fail_with_two_operands(self) -> None:
        """fail(actual, expected) records the operands when the second is not a mapping."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.fail(1, 2)

        error = exc_info.value
        assert error.message == "assertion failure"
        assert (error.actual, error.expected) == (1, 2)

    def test_fail_with_message_and_no_details(self) -> None:
        """fail(msg, None) is the message form."""
        with pytest.raises(AssertionFailure) as exc_info:
            assert_.fail("boom", None)

        assert exc_info.value.message == "boom"
        assert exc_info.value.expected is None

    def test_fatal(self) -> None:
        """fatal() raises an AssertionFatal."""
        with pytest.raises(AssertionFatal) as exc_info:
            assert_.fatal("stop")

        assert exc_info.value.message == "stop"
