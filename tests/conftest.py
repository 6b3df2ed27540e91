import pytest


SAMPLE_OUTPUT = """BANK0 (GPIO 0 to 27):
GPIO 0: level=1 fsel=0 func=INPUT pull=UP
GPIO 1: level=1 fsel=0 func=INPUT pull=UP
GPIO 2: level=1 fsel=0 func=INPUT pull=UP"""

FULL_OUTPUT = """BANK0 (GPIO 0 to 27):
GPIO 0: level=1 fsel=0 func=INPUT pull=UP
GPIO 1: level=1 fsel=0 func=INPUT pull=UP
GPIO 2: level=1 fsel=0 func=INPUT pull=UP
GPIO 3: level=1 fsel=0 func=INPUT pull=UP
GPIO 4: level=1 fsel=0 func=INPUT pull=NONE
GPIO 9: level=0 fsel=0 func=INPUT pull=DOWN
GPIO 17: level=0 fsel=1 func=OUTPUT pull=DOWN
GPIO 27: level=0 fsel=0 func=INPUT pull=DOWN
BANK1 (GPIO 28 to 45):
GPIO 28: level=1 fsel=2 alt=5 func=RGMII_MDIO pull=UP
GPIO 29: level=0 fsel=2 alt=5 func=RGMII_MDC pull=DOWN
GPIO 30: level=0 fsel=7 alt=3 func=CTS0 pull=UP
GPIO 40: level=0 fsel=4 alt=0 func=PWM1_0 pull=NONE
GPIO 42: level=0 fsel=1 func=OUTPUT pull=UP
BANK2 (GPIO 46 to 53):
GPIO 46: level=0 fsel=0 func=INPUT pull=UP
GPIO 53: level=0 fsel=0 func=INPUT pull=DOWN"""

FILTERED_OUTPUT = """GPIO 0: level=1 fsel=0 func=INPUT pull=UP
GPIO 29: level=0 fsel=2 alt=5 func=RGMII_MDC pull=DOWN
GPIO 38: level=1 fsel=7 alt=3 func=SD1_DAT2 pull=UP"""


class FakeHostCommand:
    """Records calls and replays a canned output or error."""

    def __init__(self, output="", error=None):
        self.output = output
        self.error = error
        self.calls = []

    def __call__(self, binary, args):
        self.calls.append((binary, list(args)))
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def fake_host_command():
    return FakeHostCommand
