"""Detects whether the host can report platform power directly."""

import glob

# ACPI power meter (ACPI000D) and hwmon power_meter drivers
ACPI_POWER_METER_GLOB = "/sys/devices/LNXSYSTM:00/LNXSYBUS:00/ACPI000D:*/power*_average"
HWMON_NAME_GLOB = "/sys/class/hwmon/hwmon*/name"


def is_system_collection_supported(acpi_glob: str = ACPI_POWER_METER_GLOB,
                                   hwmon_glob: str = HWMON_NAME_GLOB) -> bool:
    """True when an ACPI or hwmon power meter is exposed; the sensor is never read here."""
    if glob.glob(acpi_glob):
        return True
    for name_path in glob.glob(hwmon_glob):
        try:
            with open(name_path, "r", encoding="utf-8") as f:
                if f.read().strip() == "power_meter":
                    return True
        except OSError:
            continue
    return False
