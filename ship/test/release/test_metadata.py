from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ship.release.metadata import format_release_date, render_enclosure, render_report
from ship.release.model import ReleaseReport, VersionInfo


def _report() -> ReleaseReport:
    return ReleaseReport(
        date="Sat, 17 Oct 2026 14:05:09 +0200",
        version=VersionInfo(marketing_version="1.2.3", build_number="45"),
        archive_name="phoenix-1.2.3.tar.gz",
        size=2048,
        sha256="ab" * 32,
        signature="c2ln+/==",
    )


class TestFormatReleaseDate:
    def test_rfc2822_shape(self) -> None:
        moment = datetime(2026, 10, 17, 14, 5, 9, tzinfo=timezone(timedelta(hours=2)))
        assert format_release_date(moment) == "Sat, 17 Oct 2026 14:05:09 +0200"

    def test_single_digit_day_is_padded(self) -> None:
        moment = datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone.utc)
        assert format_release_date(moment) == "Mon, 05 Jan 2026 09:00:00 +0000"

    def test_negative_offset(self) -> None:
        moment = datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone(timedelta(hours=-5)))
        assert format_release_date(moment) == "Wed, 31 Dec 2025 23:59:59 -0500"

    def test_naive_datetime_gets_local_offset(self) -> None:
        text = format_release_date(datetime(2026, 3, 2, 8, 30, 0))
        assert text.startswith("Mon, 02 Mar 2026 08:30:00 ")
        assert text[-5] in "+-"


def test_render_report_lines() -> None:
    assert render_report(_report()) == [
        "Date: Sat, 17 Oct 2026 14:05:09 +0200",
        "Version: 1.2.3 (45)",
        "Archive: phoenix-1.2.3.tar.gz",
        "Size: 2048",
        f"SHA-256: {'ab' * 32}",
        "EdDSA signature: c2ln+/==",
    ]


def test_render_enclosure() -> None:
    enclosure = render_enclosure(_report())

    assert enclosure.startswith('<enclosure url="phoenix-1.2.3.tar.gz"')
    assert 'sparkle:version="45"' in enclosure
    assert 'sparkle:shortVersionString="1.2.3"' in enclosure
    assert 'length="2048"' in enclosure
    assert 'sparkle:edSignature="c2ln+/=="' in enclosure
    assert enclosure.endswith("/>")
