"""Release metadata for the update feed.

The printed block is meant to be pasted into an appcast entry, so the
date uses RFC 2822 with English day and month names regardless of the
operator's locale.
"""

from __future__ import annotations

from datetime import datetime
from xml.sax.saxutils import quoteattr

from ship.release.model import ReleaseReport

__all__ = ["format_release_date", "render_enclosure", "render_report"]

_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_release_date(moment: datetime) -> str:
    """Format as `Ddd, DD Mon YYYY HH:MM:SS +ZZZZ`.

    Naive datetimes are taken as local time.
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return (
        f"{_DAYS[moment.weekday()]}, {moment.day:02d} {_MONTHS[moment.month - 1]} "
        f"{moment.year:04d} {moment:%H:%M:%S} {moment:%z}"
    )


def render_report(report: ReleaseReport) -> list[str]:
    return [
        f"Date: {report.date}",
        f"Version: {report.version.display}",
        f"Archive: {report.archive_name}",
        f"Size: {report.size}",
        f"SHA-256: {report.sha256}",
        f"EdDSA signature: {report.signature}",
    ]


def render_enclosure(report: ReleaseReport) -> str:
    """An appcast `<enclosure>` element for this release.

    The url is the bare archive name; the operator replaces it with the
    download location.
    """
    attrs = [
        f"url={quoteattr(report.archive_name)}",
        f"sparkle:version={quoteattr(report.version.build_number)}",
        f"sparkle:shortVersionString={quoteattr(report.version.marketing_version)}",
        f"length={quoteattr(str(report.size))}",
        'type="application/octet-stream"',
        f"sparkle:edSignature={quoteattr(report.signature)}",
    ]
    return f"<enclosure {' '.join(attrs)} />"
