import numpy as np

import config

# ===== Calibration Table =====
# Non-linear correction for the SG90: the raw value the servo actually needs
# to reach each angle. Values between points are linearly interpolated.

CALIBRATION_POINTS = config.CALIBRATION_POINTS


class CalibrationError(ValueError):
    """Raised when a calibration table breaks its invariants."""


def trunc_div(numerator, denominator):
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def validate_points(points):
    """Check an (angle, raw) table and return it as a tuple of int pairs.

    The table needs at least two points, must start at ANGLE_MIN and end at
    ANGLE_MAX, with strictly increasing angles and non-decreasing,
    non-negative raw values.
    """
    try:
        pairs = tuple((int(angle), int(raw)) for angle, raw in points)
    except (TypeError, ValueError) as e:
        raise CalibrationError(f"Calibration points must be (angle, raw) integer pairs: {e}")

    if len(pairs) < 2:
        raise CalibrationError("Calibration needs at least two points.")

    table = np.array(pairs, dtype=np.int64)
    angles, raws = table[:, 0], table[:, 1]

    if angles[0] != config.ANGLE_MIN or angles[-1] != config.ANGLE_MAX:
        raise CalibrationError(
            f"Calibration must start at {config.ANGLE_MIN} and end at {config.ANGLE_MAX} degrees."
        )
    if not np.all(np.diff(angles) > 0):
        raise CalibrationError("Calibration angles must be strictly increasing.")
    if not np.all(np.diff(raws) >= 0):
        raise CalibrationError("Calibration raw values must not decrease.")
    if raws[0] < 0:
        raise CalibrationError("Calibration raw values must not be negative.")

    return pairs


def parse_points(text):
    """Parse "angle:raw,angle:raw,..." into a validated table."""
    points = []
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        angle, sep, raw = item.partition(":")
        if not sep:
            raise CalibrationError(f"Bad calibration point {item!r}, expected angle:raw")
        try:
            points.append((int(angle), int(raw)))
        except ValueError:
            raise CalibrationError(f"Bad calibration point {item!r}, expected integers")
    return validate_points(points)


class CalibrationTable:
    def __init__(self, points=CALIBRATION_POINTS):
        self.points = validate_points(points)

    @property
    def max_raw(self):
        return self.points[-1][1]

    def interpolate(self, angle):
        """Return the calibrated raw value for an angle in [0, 180].

        A boundary angle resolves to the earlier segment, giving that point's
        raw value exactly. Angles outside the table come back unchanged.
        """
        for (x1, y1), (x2, y2) in zip(self.points, self.points[1:]):
            if x1 <= angle <= x2:
                return y1 + trunc_div((angle - x1) * (y2 - y1), x2 - x1)
        return angle
