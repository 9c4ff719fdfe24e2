# tests/test_utils.py
"""Test utilities and helpers"""

import pytest

from snag.utils import (
    ensure_directory,
    format_count,
    format_date,
    format_duration,
    retry_async,
    safe_archive_name,
    sanitize_filename,
)


class TestFormatting:
    """Test display formatting helpers"""

    def test_format_duration(self):
        """Test m:ss duration formatting"""
        assert format_duration(225) == "3:45"
        assert format_duration(45) == "0:45"
        assert format_duration(3750) == "62:30"
        assert format_duration(0) == "0:00"
        assert format_duration(None) == "0:00"
        assert format_duration(-10) == "0:00"

    def test_format_count(self):
        """Test thousands separators and missing counters"""
        assert format_count(1234567) == "1,234,567"
        assert format_count(0) == "0"
        assert format_count(None) == "0"
        assert format_count("12") == "0"
        assert format_count(True) == "0"

    def test_format_date(self):
        """Test long-form date formatting"""
        assert format_date("2021-03-05T12:00:00Z") == "March 5, 2021"
        assert format_date("2021-03-05 12:00:00") == "March 5, 2021"
        assert format_date("2019-12-31") == "December 31, 2019"

    def test_format_date_unparsable(self):
        """Test that missing or garbage dates become N/A"""
        assert format_date(None) == "N/A"
        assert format_date("") == "N/A"
        assert format_date("someday") == "N/A"
        assert format_date(20210305) == "N/A"


class TestFilenames:
    """Test filename helpers"""

    def test_sanitize_filename_removes_separators(self):
        """Test that path separators never survive sanitization"""
        result = sanitize_filename("AC/DC")
        assert "/" not in result
        assert result

    def test_safe_archive_name_replaces_periods(self):
        """Test that periods become underscores"""
        assert safe_archive_name("dj.someone") == "dj_someone"
        assert "." not in safe_archive_name("a.b.c")

    def test_safe_archive_name_fallback(self):
        """Test empty names get a fallback"""
        assert safe_archive_name("") == "untitled"
        assert safe_archive_name("   ", fallback="x") == "x"

    def test_ensure_directory(self, temp_dir):
        """Test nested directory creation"""
        target = temp_dir / "a" / "b"
        assert ensure_directory(target) == target
        assert target.is_dir()
        ensure_directory(target)


class TestRetryAsync:
    """Test the async retry helper"""

    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        """Test no retry when the first attempt succeeds"""
        calls = []

        async def operation():
            calls.append(1)
            return "ok"

        assert await retry_async(operation, sleep=_no_sleep([])) == "ok"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_exponential_backoff_then_success(self):
        """Test delays double between attempts"""
        delays = []
        attempts = []

        async def operation():
            attempts.append(1)
            if len(attempts) < 3:
                raise ValueError("flaky")
            return 42

        result = await retry_async(
            operation,
            max_attempts=3,
            base_delay=1.0,
            retry_on=(ValueError,),
            sleep=_no_sleep(delays)
        )

        assert result == 42
        assert len(attempts) == 3
        assert delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        """Test the last error propagates after exactly max_attempts"""
        attempts = []

        async def operation():
            attempts.append(1)
            raise ValueError(f"failure {len(attempts)}")

        with pytest.raises(ValueError, match="failure 3"):
            await retry_async(
                operation,
                max_attempts=3,
                retry_on=(ValueError,),
                sleep=_no_sleep([])
            )

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self):
        """Test errors outside retry_on are not retried"""
        attempts = []

        async def operation():
            attempts.append(1)
            raise KeyError("boom")

        with pytest.raises(KeyError):
            await retry_async(operation, retry_on=(ValueError,), sleep=_no_sleep([]))

        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self):
        """Test max_attempts must be positive"""
        async def operation():
            return 1

        with pytest.raises(ValueError):
            await retry_async(operation, max_attempts=0)


def _no_sleep(record):
    async def sleep(delay):
        record.append(delay)
    return sleep
