"""Helper utilities for testing file readers."""
from pathlib import Path

from record_stream import FileReader, ReaderError

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Guards against a reader that never reports exhaustion
MAX_READS = 10_000


def drain(reader: FileReader) -> list:
    """Call read_item until exhaustion, collecting records and errors in order."""
    results = []
    for _ in range(MAX_READS):
        try:
            results.append(reader.read_item())
        except StopIteration:
            return results
        except ReaderError as e:
            results.append(e)
    raise RuntimeError(f"Reader did not report exhaustion after {MAX_READS} reads")


def records_of(results: list) -> list:
    return [r for r in results if not isinstance(r, ReaderError)]


def errors_of(results: list) -> list[ReaderError]:
    return [r for r in results if isinstance(r, ReaderError)]


def assert_record_exact_match(actual, expected):
    for key, expected_value in expected.items():
        assert key in actual, f"Field '{key}' not found in record"
        actual_value = actual[key]
        assert actual_value == expected_value and type(actual_value) is type(expected_value), (
            f"Field '{key}' mismatch:\n"
            f"  Expected: {expected_value!r}\n"
            f"  Actual:   {actual_value!r}"
        )
