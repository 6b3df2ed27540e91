"""
Raspberry Pi pinout collector.
Uses raspi-gpio to read level, function and pull state of every pin.
"""
from typing import Callable, List, Optional

from .base import BaseCollector, Emit
from .parser import NO_BANK, parse_output
from .runner import run_command

HostCommand = Callable[[str, List[str]], str]


class RaspberryPiPinoutCollector(BaseCollector):
    """
    Pinout status collector for Raspberry Pi devices.

    Runs `raspi-gpio get [pins]` and emits one `rpi_pinout` point per pin,
    tagged with the pin number and, when the output has bank headers, the bank.
    """

    BINARY = "raspi-gpio"
    MEASUREMENT = "rpi_pinout"

    description = "Get pinout status on raspberry pi"
    sample_config = (
        "# Pins to query, all pins when empty\n"
        "gpins: [0, 1, 2, 3]\n"
    )

    def __init__(self, config: dict, host_command: Optional[HostCommand] = None):
        super().__init__(config)
        self.host_command = host_command or run_command
        self.gpins = list(config.get("gpins") or [])

        if self.gpins:
            self.logger.info(f"Pinout collector initialized for pins {self.gpins}")
        else:
            self.logger.info("Pinout collector initialized for all pins")

    @classmethod
    def metric_names(cls) -> List[str]:
        return [cls.MEASUREMENT]

    def get_args(self) -> List[str]:
        """
        Build the raspi-gpio arguments.

        Returns:
            ["get"] for all pins, or ["get", "0,2,5,30"] in configured order
        """
        args = ["get"]
        if self.gpins:
            args.append(",".join(str(pin) for pin in self.gpins))
        return args

    def gather(self, emit: Emit) -> None:
        try:
            output = self.host_command(self.BINARY, self.get_args())
        except Exception as e:
            self.logger.error(f"{self.BINARY} failed: {e}")
            raise

        banks = parse_output(output)

        for bank, pins in banks.items():
            for pin in pins:
                tags = {"gpio": str(pin.gpio)}
                if bank != NO_BANK:
                    tags["bank"] = str(bank)

                fields = {
                    "level": pin.level,
                    "fsel": pin.fsel,
                    "func": pin.func,
                    "pull": pin.pull,
                }
                emit(self.MEASUREMENT, fields, tags)

        self.logger.debug(f"Collected {sum(len(p) for p in banks.values())} pins")
