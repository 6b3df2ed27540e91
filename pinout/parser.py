"""
Parser for `raspi-gpio get` output.

Example output:
BANK0 (GPIO 0 to 27):
GPIO 0: level=1 fsel=0 func=INPUT pull=UP
GPIO 17: level=0 fsel=1 func=OUTPUT pull=DOWN
BANK1 (GPIO 28 to 45):
GPIO 28: level=1 fsel=2 alt=5 func=RGMII_MDIO pull=UP
"""
import re
from typing import Dict, List, NamedTuple

from .exceptions import PinoutParseError

# Bank key for pins listed before any BANK header
NO_BANK = -1

BANK_PATTERN = re.compile(r'^BANK(\d+)')
GPIO_PATTERN = re.compile(
    r'^GPIO (\d+): level=(\d+) fsel=(\d+).*func=([0-9A-Za-z_]+) pull=([0-9A-Za-z]+)'
)


class PinStatus(NamedTuple):
    """State of a single pin at collection time."""
    gpio: int
    level: int
    fsel: int
    func: str
    pull: str


def _to_int(value: str, line: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise PinoutParseError(line, str(e)) from e


def parse_output(output: str) -> Dict[int, List[PinStatus]]:
    """
    Group the pin status lines of raspi-gpio output by bank.

    Pins are appended to the bank of the closest preceding BANK header, or to
    NO_BANK when no header was seen yet. Lines matching neither pattern are
    ignored.

    Args:
        output: Raw raspi-gpio output

    Returns:
        Mapping of bank number to pins in output order

    Raises:
        PinoutParseError: If a matching line carries malformed numbers
    """
    banks: Dict[int, List[PinStatus]] = {}
    bank = NO_BANK

    for line in output.split("\n"):
        line = line.rstrip("\r")

        bank_match = BANK_PATTERN.match(line)
        if bank_match:
            bank = _to_int(bank_match.group(1), line)
            continue

        gpio_match = GPIO_PATTERN.match(line)
        if gpio_match:
            pin = PinStatus(
                gpio=_to_int(gpio_match.group(1), line),
                level=_to_int(gpio_match.group(2), line),
                fsel=_to_int(gpio_match.group(3), line),
                func=gpio_match.group(4),
                pull=gpio_match.group(5),
            )
            banks.setdefault(bank, []).append(pin)

    return banks
