import config
from calibration import CalibrationTable, trunc_div

# ===== Angle -> PWM =====


def calibrated_to_duty(calibrated):
    """Scale a calibrated raw value into duty ticks.

    Divides by ANGLE_MAX (180), not MAX_ANGLE (168), so the top of the
    default table lands on 236 ticks rather than MAX_PWM.
    """
    return config.MIN_PWM + trunc_div(calibrated * (config.MAX_PWM - config.MIN_PWM), config.ANGLE_MAX)


def angle_to_duty(angle, table):
    """Return (calibrated, duty) for an angle already known to be in range."""
    calibrated = table.interpolate(angle)
    return calibrated, calibrated_to_duty(calibrated)


def in_range(angle):
    return config.ANGLE_MIN <= angle <= config.ANGLE_MAX


class ServoController:
    """Turns operator angles into PWM writes and log rows."""

    def __init__(self, driver, recorder=None, table=None):
        self.driver = driver
        self.recorder = recorder
        self.table = table or CalibrationTable()

    def apply(self, angle):
        """Move the servo to `angle` and return the duty written.

        Out-of-range angles are rejected with a message and return None
        without touching the driver or the recorder. The PWM write happens
        before the log row, and a failed log row does not undo it.
        """
        if not in_range(angle):
            print(f"Invalid angle! Please enter a value between {config.ANGLE_MIN} and {config.ANGLE_MAX}.")
            return None

        calibrated, duty = angle_to_duty(angle, self.table)
        self.driver.write(duty)
        print(f"Servo angle set to {angle} degrees (Calibrated: {calibrated}, PWM: {duty})")

        if self.recorder is not None:
            self.recorder.append(angle)
        return duty
