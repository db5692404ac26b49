"""
Two-line element set (TLE) parsing.

Provides pure-Python functions that validate the fixed-column TLE format
and convert its fields into an :class:`~sgp4jax.elements.ElementRecord`.
Unit conversions and the split Julian date follow the reference ``sgp4``
library exactly, so parsed records initialize to the same coefficients.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sgp4jax.constants import DEG2RAD
from sgp4jax.elements import ElementRecord
from sgp4jax.errors import TLEFormatError

logger = logging.getLogger(__name__)

_LINE_LENGTH = 69
_YEAR_PIVOT = 57


def compute_checksum(line: str) -> int:
    """Compute the TLE checksum for a line.

    The checksum is the sum of all digit characters plus 1 for each
    minus sign, modulo 10, computed over the first 68 characters.

    Args:
        line: A TLE line string (at least 68 characters).

    Returns:
        The checksum digit (0-9).
    """
    return sum((int(c) if c.isdigit() else c == "-") for c in line[:68]) % 10


def validate_tle_line(line: str, line_number: int) -> None:
    """Validate a TLE line's format and checksum.

    Args:
        line: A TLE line string.
        line_number: Expected line number (1 or 2).

    Raises:
        TLEFormatError: If the line fails format or checksum validation.
    """
    line = line.rstrip()

    if len(line) < _LINE_LENGTH:
        raise TLEFormatError(
            f"TLE line {line_number} is too short ({len(line)} chars, expected {_LINE_LENGTH}): {line}"
        )

    if line[0] != str(line_number) or line[1] != " ":
        raise TLEFormatError(f"TLE line {line_number} does not start with '{line_number} ': {line}")

    checksum_char = line[68]
    if not checksum_char.isdigit():
        raise TLEFormatError(f"TLE line {line_number} has non-digit checksum: {line}")

    expected = compute_checksum(line)
    actual = int(checksum_char)
    if expected != actual:
        raise TLEFormatError(
            f"TLE line {line_number} checksum mismatch: computed {expected}, found {actual}: {line}"
        )


def _implied_decimal(mantissa: str, exponent: str) -> float:
    """Decode the ``-12345-6`` style fields (implied leading decimal point)."""
    mantissa = mantissa.strip() or "0"
    sign = "-" if mantissa[0] == "-" else ""
    digits = mantissa.lstrip("+-")
    return float(f"{sign}0.{digits}") * 10.0 ** int(exponent)


def epoch_to_jd(year: int, epochdays: float) -> tuple[float, float]:
    """Split Julian date of a TLE epoch.

    Args:
        year: Four-digit year.
        epochdays: Day of year with fraction (1.0 is January 1, 00:00 UT).

    Returns:
        Tuple ``(jd, fraction)`` whose sum is the Julian date of the epoch.
        The fraction is rounded to 8 decimals as the reference library does.
    """
    days_int, fraction = divmod(epochdays, 1.0)
    jd = year * 365 + (year - 1) // 4 + int(days_int) + 1721044.5
    return jd, round(fraction, 8)


def parse_tle(line1: str, line2: str, name: str = "") -> ElementRecord:
    """Parse a two-line element set into an element record.

    Angles are converted to radians. Mean motion stays in rev/day; the
    first and second derivative fields (published as ``n'/2`` and
    ``n''/6``) are scaled back to the derivatives themselves.

    Args:
        line1: First TLE line (69 characters including checksum).
        line2: Second TLE line (69 characters including checksum).
        name: Optional object name (title line of a three-line set).

    Returns:
        The parsed element record.

    Raises:
        TLEFormatError: If the lines fail format validation or checksum
            check, hold non-numeric fields, or name different objects.
        DegenerateOrbitError: If the parsed elements violate the element
            record invariants.
    """
    validate_tle_line(line1, 1)
    validate_tle_line(line2, 2)

    l1 = line1.rstrip()
    l2 = line2.rstrip()

    satnum = l1[2:7].strip()
    if satnum != l2[2:7].strip():
        raise TLEFormatError(f"Object numbers in lines 1 and 2 do not match: {l1[2:7]!r} != {l2[2:7]!r}")

    try:
        classification = l1[7].strip() or "U"
        intldesg = l1[9:17].rstrip()
        two_digit_year = int(l1[18:20])
        epochdays = float(l1[20:32])
        ndot_half = float(l1[33:43])
        nddot_sixth = _implied_decimal(l1[44:50], l1[50:52])
        bstar = _implied_decimal(l1[53:59], l1[59:61])
        elnum = int(l1[64:68].strip() or "0")

        inclination = float(l2[8:16])
        raan = float(l2[17:25])
        eccentricity = float("0." + l2[26:33].replace(" ", "0"))
        argp = float(l2[34:42])
        mean_anomaly = float(l2[43:51])
        mean_motion = float(l2[52:63])
        revnum = int(l2[63:68].strip() or "0")
    except ValueError as exc:
        raise TLEFormatError(f"TLE for object {satnum} has a malformed field: {exc}") from exc

    if two_digit_year < _YEAR_PIVOT:
        year = two_digit_year + 2000
    else:
        year = two_digit_year + 1900
    epoch_jd, epoch_jd_fraction = epoch_to_jd(year, epochdays)

    logger.debug("Parsed TLE for %s (epoch %d day %.8f)", satnum, year, epochdays)

    return ElementRecord(
        satnum=satnum,
        epoch_jd=epoch_jd,
        epoch_jd_fraction=epoch_jd_fraction,
        mean_motion=mean_motion,
        eccentricity=eccentricity,
        inclination=inclination * DEG2RAD,
        raan=raan * DEG2RAD,
        argp=argp * DEG2RAD,
        mean_anomaly=mean_anomaly * DEG2RAD,
        mean_motion_dot=2.0 * ndot_half,
        mean_motion_ddot=6.0 * nddot_sixth,
        bstar=bstar,
        name=name.strip(),
        classification=classification,
        international_designator=intldesg,
        element_number=elnum,
        revolution_number=revnum,
    )


def parse_tle_lines(lines: str | Sequence[str]) -> ElementRecord:
    """Parse a two- or three-line element set.

    Args:
        lines: Either the TLE text or its lines. With three lines the first
            is the object name; a leading ``'0 '`` on it is dropped. Blank
            lines are ignored.

    Returns:
        The parsed element record.

    Raises:
        TLEFormatError: If there are not two or three non-blank lines, or
            the element lines are malformed.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    lines = [line for line in lines if line.strip()]

    if len(lines) == 2:
        return parse_tle(lines[0], lines[1])
    if len(lines) == 3:
        name = lines[0].strip()
        if name.startswith("0 "):
            name = name[2:]
        return parse_tle(lines[1], lines[2], name=name)
    raise TLEFormatError(f"Expected 2 or 3 TLE lines, got {len(lines)}")
