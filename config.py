import os

# ===== Servo Pin =====
# BCM 18 is wiringPi pin 1, the hardware PWM0 output on the Pi header
SERVO_PIN = 18

# "pigpio" (hardware PWM), "rpigpio" (RPi.GPIO) or "console" (dry run)
PWM_BACKEND = "pigpio"

# ===== PWM Frame =====
PWM_BASE_CLOCK_HZ = 19_200_000
PWM_RANGE = 2000          # ticks per frame (20 ms)
PWM_CLOCK_DIVISOR = 192   # 19.2 MHz / 192 = 100 kHz tick

MIN_PWM = 50    # duty ticks at 0 degrees
MAX_PWM = 250   # duty ticks at full scale

# ===== Angles =====
ANGLE_MIN = 0
ANGLE_MAX = 180
MAX_ANGLE = 168  # calibrated maximum, duty scaling still divides by ANGLE_MAX

# (angle, raw) measured on the SG90
CALIBRATION_POINTS = (
    (0, 0),
    (45, 30),
    (90, 80),
    (135, 120),
    (180, 168),
)

# Optional override, e.g. "0:0,45:30,90:80,135:120,180:168"
CALIBRATION = ""

# ===== Control Loop =====
COMMAND_DELAY_S = 0.5

# ===== Angle Log =====
DB_PATH = "motor.db"
RECORD_ANGLES = True

# ===== Environment Overrides =====


class ConfigError(ValueError):
    """Raised when an environment override cannot be used."""


def _pin(text):
    pin = int(text)
    if pin < 0:
        raise ValueError("pin must not be negative")
    return pin


def _delay(text):
    delay = float(text)
    if not delay >= 0:
        raise ValueError("delay must be zero or more seconds")
    return delay


def _switch(text):
    return text.strip().lower() not in ("0", "false", "no", "off")


def _word(text):
    return text.strip().lower()


OVERRIDES = {
    "MOTOR_SERVO_PIN": ("SERVO_PIN", _pin),
    "MOTOR_PWM_BACKEND": ("PWM_BACKEND", _word),
    "MOTOR_CALIBRATION": ("CALIBRATION", str),
    "MOTOR_DELAY": ("COMMAND_DELAY_S", _delay),
    "MOTOR_DB": ("DB_PATH", str),
    "MOTOR_RECORD": ("RECORD_ANGLES", _switch),
}


def read_overrides(environ=None):
    """Return {constant: value} for the MOTOR_* variables that are set."""
    environ = os.environ if environ is None else environ
    values = {}
    for var, (name, convert) in OVERRIDES.items():
        if var not in environ:
            continue
        try:
            values[name] = convert(environ[var])
        except ValueError as e:
            raise ConfigError(f"{var}={environ[var]!r} is not valid: {e}")
    return values


def load_overrides(environ=None):
    """Apply environment overrides to this module. Nothing changes on error."""
    values = read_overrides(environ)
    globals().update(values)
    return values
