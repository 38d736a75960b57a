import sys

import config

# ===== PWM Frame =====


class PwmSetupError(RuntimeError):
    """Raised when the PWM output cannot be initialised."""


class PwmFrame:
    """Frame timing: `range_` ticks per frame at base_clock_hz / divisor."""

    def __init__(self, range_=config.PWM_RANGE, divisor=config.PWM_CLOCK_DIVISOR,
                 base_clock_hz=config.PWM_BASE_CLOCK_HZ):
        if range_ <= 0 or divisor <= 0 or base_clock_hz <= 0:
            raise PwmSetupError("PWM range, divisor and base clock must be positive.")
        self.range = range_
        self.divisor = divisor
        self.base_clock_hz = base_clock_hz

    @property
    def tick_hz(self):
        return self.base_clock_hz / self.divisor

    @property
    def frame_hz(self):
        return self.tick_hz / self.range

    @property
    def frame_ms(self):
        return 1000.0 * self.range / self.tick_hz

    def duty_to_us(self, duty):
        return duty * 1_000_000 / self.tick_hz

    def duty_to_percent(self, duty):
        return duty * 100.0 / self.range

    def duty_to_millionths(self, duty):
        return duty * 1_000_000 // self.range


# ===== Drivers =====
# Every driver follows init() -> write(duty)... -> close().
# init() claims the pin, then selects mark-space mode, then applies the
# frame range and clock.


class PigpioDriver:
    """Hardware PWM through the pigpio daemon."""

    # pin -> pigpio alt function that routes it to the PWM peripheral
    HARDWARE_PWM_ALT = {12: "ALT0", 13: "ALT0", 18: "ALT5", 19: "ALT5"}

    def __init__(self, pin=config.SERVO_PIN, frame=None):
        self.pin = pin
        self.frame = frame or PwmFrame()
        self._pigpio = None
        self._pi = None

    def init(self):
        if self.pin not in self.HARDWARE_PWM_ALT:
            raise PwmSetupError(f"GPIO{self.pin} has no hardware PWM channel.")
        try:
            import pigpio
        except ImportError as e:
            raise PwmSetupError(f"pigpio is not available: {e}")

        pi = pigpio.pi()
        if not pi.connected:
            pi.stop()
            raise PwmSetupError("pigpio not running. Start it with: sudo systemctl start pigpiod")
        self._pigpio = pigpio
        self._pi = pi

        try:
            pi.set_mode(self.pin, getattr(pigpio, self.HARDWARE_PWM_ALT[self.pin]))
            # hardware_PWM programs mark-space mode before range and clock
            pi.hardware_PWM(self.pin, round(self.frame.frame_hz), 0)
        except pigpio.error as e:
            self.close()
            raise PwmSetupError(f"Hardware PWM setup failed on GPIO{self.pin}: {e}")

    def write(self, duty):
        self._pi.hardware_PWM(self.pin, round(self.frame.frame_hz),
                              self.frame.duty_to_millionths(duty))

    def close(self):
        if self._pi is None:
            return
        try:
            self._pi.hardware_PWM(self.pin, 0, 0)
            self._pi.set_mode(self.pin, self._pigpio.INPUT)
        except self._pigpio.error as e:
            print(f"PWM release error: {e}", file=sys.stderr)
        finally:
            self._pi.stop()
            self._pi = None


class RPiGPIODriver:
    """RPi.GPIO PWM, frame rate and duty taken from the same tick frame."""

    def __init__(self, pin=config.SERVO_PIN, frame=None):
        self.pin = pin
        self.frame = frame or PwmFrame()
        self._gpio = None
        self._pwm = None

    def init(self):
        try:
            import RPi.GPIO as GPIO
        except (ImportError, RuntimeError) as e:
            raise PwmSetupError(f"RPi.GPIO is not available: {e}")

        self._gpio = GPIO
        try:
            GPIO.setmode(GPIO.BCM)
            GPIO.setup(self.pin, GPIO.OUT)
            # RPi.GPIO frames are mark-space: high for the duty, low for the rest
            self._pwm = GPIO.PWM(self.pin, self.frame.frame_hz)
            self._pwm.start(0)
        except (RuntimeError, ValueError) as e:
            self.close()
            raise PwmSetupError(f"GPIO setup failed on GPIO{self.pin}: {e}")

    def write(self, duty):
        self._pwm.ChangeDutyCycle(self.frame.duty_to_percent(duty))

    def close(self):
        if self._gpio is None:
            return
        if self._pwm is not None:
            self._pwm.stop()
            self._pwm = None
        self._gpio.cleanup()
        self._gpio = None


class ConsoleDriver:
    """Dry-run driver that prints duty writes instead of touching hardware."""

    def __init__(self, pin=config.SERVO_PIN, frame=None, out=None):
        self.pin = pin
        self.frame = frame or PwmFrame()
        self.out = out
        self.duty = None

    def init(self):
        print(f"Console PWM on GPIO{self.pin}: {self.frame.frame_hz:.0f} Hz frame, "
              f"{self.frame.range} ticks", file=self.out or sys.stdout)

    def write(self, duty):
        self.duty = duty
        print(f"PWM <- {duty} ({self.frame.duty_to_us(duty):.0f} us)", file=self.out or sys.stdout)

    def close(self):
        self.duty = None


DRIVERS = {
    "pigpio": PigpioDriver,
    "rpigpio": RPiGPIODriver,
    "console": ConsoleDriver,
}


def create_driver(backend=config.PWM_BACKEND, pin=config.SERVO_PIN, frame=None):
    try:
        driver_class = DRIVERS[backend]
    except KeyError:
        raise PwmSetupError(
            f"Unknown PWM backend {backend!r}, choose one of: {', '.join(sorted(DRIVERS))}"
        )
    return driver_class(pin=pin, frame=frame)
