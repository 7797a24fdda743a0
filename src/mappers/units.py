"""Conversions from OOXML native units to display units."""

EMU_PER_INCH = 914400
EMU_PER_POINT = 12700
ANGLE_UNITS_PER_DEGREE = 60000


def emu_to_inches(emu: float) -> float:
    """EMU -> inches, rounded to 4 decimal places."""
    return round(emu / EMU_PER_INCH, 4)


def emu_angle_to_degrees(angle: float) -> float:
    return angle / ANGLE_UNITS_PER_DEGREE


def hundredths_to_points(val: float) -> float:
    return val / 100


def emu_to_points(emu: float) -> float:
    """EMU -> points (line widths, shadow distances), rounded to 2 places."""
    return round(emu / EMU_PER_POINT, 2)
