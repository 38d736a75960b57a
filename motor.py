#!/usr/bin/env python3
import re
import sys
import time
import signal

import config
from angle_log import AngleRecorder
from calibration import CalibrationTable, CalibrationError, parse_points
from pwm_driver import PwmFrame, PwmSetupError, create_driver
from servo_control import ServoController

BANNER = "SG90 Servo Motor Angle Control with Hardware PWM (Non-linear Calibration)"
PROMPT = f"Enter the servo angle ({config.ANGLE_MIN}-{config.ANGLE_MAX}): "

ANGLE_PATTERN = re.compile(r"[+-]?[0-9]+")

# ===== Helper Functions =====


def parse_angle(text):
    """Return the integer in `text`, or None if it is not plain ASCII digits."""
    text = text.strip()
    if not ANGLE_PATTERN.fullmatch(text):
        return None
    return int(text)


def load_table():
    if config.CALIBRATION.strip():
        return CalibrationTable(parse_points(config.CALIBRATION))
    return CalibrationTable()


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt


# ===== Control Loop =====


def run(controller, stream=None, delay=None, sleep=None):
    """Prompt, read one angle, apply it, wait. Stops at end of input."""
    stream = stream or sys.stdin
    delay = config.COMMAND_DELAY_S if delay is None else delay
    sleep = sleep or time.sleep
    while True:
        print(PROMPT, end="", flush=True)
        line = stream.readline()
        if not line:
            print()
            break

        angle = parse_angle(line)
        if angle is None:
            print(f"Invalid input. Please enter a whole number between {config.ANGLE_MIN} and {config.ANGLE_MAX}.")
            continue

        controller.apply(angle)
        sleep(delay)  # let the servo finish moving


def main():
    print(BANNER)

    try:
        config.load_overrides()
    except config.ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        table = load_table()
    except CalibrationError as e:
        print(f"Calibration error: {e}", file=sys.stderr)
        return 1

    try:
        driver = create_driver(config.PWM_BACKEND, config.SERVO_PIN, PwmFrame())
        driver.init()
    except PwmSetupError as e:
        print(f"PWM setup failed! {e}", file=sys.stderr)
        return 1

    recorder = AngleRecorder(config.DB_PATH) if config.RECORD_ANGLES else None
    controller = ServoController(driver, recorder, table)

    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        run(controller)
    except KeyboardInterrupt:
        print("\nProgram stopped by user.")
    finally:
        signal.signal(signal.SIGTERM, previous)
        driver.close()
        print("Resources released.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
