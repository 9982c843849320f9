"""Tests for the process fingerprint model and codec."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import orjson
import psutil
import pytest

from single_app_instance.fingerprint import (
    DecodeStatus,
    ProcessFingerprint,
    decode_fingerprint,
    encode_fingerprint,
    parse_legacy_pid,
)
from tests.helpers.instance_fakes import APP_NAME, APP_PATH, OTHER_PID, make_fingerprint


def _mock_process(pid: int = OTHER_PID) -> MagicMock:
    process = MagicMock()
    process.pid = pid
    process.name.return_value = APP_NAME
    process.exe.return_value = APP_PATH
    process.create_time.return_value = 1_700_000_000.0
    return process


class TestCapture:
    """Tests for ProcessFingerprint.capture."""

    def test_captures_current_process(self) -> None:
        """Fingerprint of the running interpreter carries its pid and name."""
        current = psutil.Process()

        fingerprint = ProcessFingerprint.capture()

        assert fingerprint.process_id == current.pid
        assert fingerprint.process_name == current.name()
        assert fingerprint.start_time.tzinfo is not None

    def test_captures_given_process(self) -> None:
        """All four fields come from the supplied process."""
        fingerprint = ProcessFingerprint.capture(_mock_process())

        assert fingerprint.process_id == OTHER_PID
        assert fingerprint.process_name == APP_NAME
        assert fingerprint.main_module_path == APP_PATH
        assert fingerprint.start_time == datetime.fromtimestamp(1_700_000_000.0).astimezone()

    def test_exe_access_denied_leaves_path_empty(self) -> None:
        """Restricted executable lookups degrade to None."""
        process = _mock_process()
        process.exe.side_effect = psutil.AccessDenied(OTHER_PID)

        fingerprint = ProcessFingerprint.capture(process)

        assert fingerprint.main_module_path is None
        assert fingerprint.process_name == APP_NAME

    def test_name_and_start_time_access_denied(self) -> None:
        """Name degrades to None and start time to the capture time."""
        process = _mock_process()
        process.name.side_effect = psutil.AccessDenied(OTHER_PID)
        process.create_time.side_effect = psutil.AccessDenied(OTHER_PID)
        before = datetime.now().astimezone()

        fingerprint = ProcessFingerprint.capture(process)

        assert fingerprint.process_name is None
        assert fingerprint.start_time >= before

    def test_fingerprint_is_immutable(self) -> None:
        """Fingerprints cannot be mutated after creation."""
        fingerprint = make_fingerprint()

        with pytest.raises(AttributeError):
            fingerprint.process_id = 1  # type: ignore[misc]


class TestEncode:
    """Tests for encode_fingerprint."""

    def test_uses_stable_keys(self) -> None:
        """Persisted keys match the cross-version file contract."""
        payload = orjson.loads(encode_fingerprint(make_fingerprint()))

        assert payload == {
            "ProcessId": OTHER_PID,
            "ProcessName": APP_NAME,
            "StartTime": make_fingerprint().start_time.isoformat(),
            "MainModuleFileName": APP_PATH,
        }

    def test_missing_path_serialises_as_null(self) -> None:
        """An unavailable executable path is written as null."""
        payload = orjson.loads(encode_fingerprint(make_fingerprint(module_path=None)))

        assert payload["MainModuleFileName"] is None


class TestDecode:
    """Tests for decode_fingerprint."""

    def test_decodes_written_fingerprint(self) -> None:
        """A file written by this package decodes to an equal fingerprint."""
        original = make_fingerprint()

        result = decode_fingerprint(encode_fingerprint(original))

        assert result.status is DecodeStatus.FOUND
        assert result.fingerprint == original

    def test_decodes_file_from_earlier_release(self) -> None:
        """Seven-digit fractional seconds and extra keys are tolerated."""
        content = (
            '{"ProcessId":321,"ProcessName":"MyApp","StartTime":"2024-03-01T08:15:30.1234567+01:00",'
            '"MainModuleFileName":"C:\\\\Apps\\\\MyApp.exe","Extra":true}'
        )

        result = decode_fingerprint(content)

        assert result.status is DecodeStatus.FOUND
        assert result.fingerprint is not None
        assert result.fingerprint.process_id == 321
        assert result.fingerprint.process_name == "MyApp"
        assert result.fingerprint.main_module_path == "C:\\Apps\\MyApp.exe"

    def test_unparseable_start_time_is_kept_as_placeholder(self) -> None:
        """A bad StartTime does not invalidate the record."""
        result = decode_fingerprint('{"ProcessId": 12, "ProcessName": "x", "StartTime": "yesterday"}')

        assert result.status is DecodeStatus.FOUND
        assert result.fingerprint is not None
        assert result.fingerprint.start_time == datetime.min
        assert result.fingerprint.main_module_path is None

    def test_null_is_no_information(self) -> None:
        """JSON null decodes to NULL, not a fingerprint."""
        result = decode_fingerprint("null")

        assert result.status is DecodeStatus.NULL
        assert result.fingerprint is None

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            "",
            "   \n\t",
            "[]",
            "[1, 2, 3]",
            '"text"',
            "1234",
            "{}",
            '{"ProcessId": "12"}',
            '{"ProcessId": true}',
            '{"ProcessId": 99999999999}',
            '{"ProcessId": -99999999999}',
            '{"ProcessId": 12, "ProcessName": 7}',
            '{"ProcessId": 12, "MainModuleFileName": ["a"]}',
            '{"ProcessId": 12',
        ],
    )
    def test_malformed_content(self, content: str) -> None:
        """Anything other than an object with an integer ProcessId is malformed."""
        result = decode_fingerprint(content)

        assert result.status is DecodeStatus.MALFORMED
        assert result.fingerprint is None


class TestParseLegacyPid:
    """Tests for parse_legacy_pid."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ("1234", 1234),
            (" 1234\n", 1234),
            ("-1", -1),
            ("+17", 17),
            ("2147483647", 2147483647),
            ("-2147483648", -2147483648),
        ],
    )
    def test_parses_integers(self, content: str, expected: int) -> None:
        """Plain decimal integers with optional sign and whitespace parse."""
        assert parse_legacy_pid(content) == expected

    @pytest.mark.parametrize("content", ["", "  ", "abc", "12abc", "1_000", "1.5", "0x10", "١٢", "2147483648", "-2147483649", "99999999999999999999999"])
    def test_rejects_non_integers(self, content: str) -> None:
        """Anything else is not a legacy pid."""
        assert parse_legacy_pid(content) is None
