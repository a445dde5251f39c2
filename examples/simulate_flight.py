#!/usr/bin/env python3
"""Generate a synthetic state vector dump for trying out the decoder.

Writes a short simulated flight (pad, boost, coast, drogue, main, landed)
to /tmp/TELEM.DAT.

Usage:
    python examples/simulate_flight.py
    telemdecode /tmp/TELEM.DAT
"""

import math
import random

from telemdecode.states import FlightState
from telemdecode.storage import DumpWriter

DUMP_PATH = "/tmp/TELEM.DAT"
PAD_ALT = 1200.0
RATE_HZ = 20.0


def flight_state(t: float, alt: float, vel: float) -> FlightState:
    if t < 2.0:
        return FlightState.PRELTOFF
    if t < 5.0:
        return FlightState.PWFLIGHT
    if vel > 0.0:
        return FlightState.CRSCANRD if vel < 60.0 else FlightState.CRUISING
    if alt - PAD_ALT > 300.0:
        return FlightState.FALLDROG
    if alt - PAD_ALT > 1.0:
        return FlightState.FALLMAIN
    return FlightState.CONCLUDE


def make_values(t: float, alt: float, vel: float, acc: float) -> dict:
    """One record's worth of fields at time t (seconds)."""
    state = flight_state(t, alt, vel)
    pressure = 101325.0 * (1.0 - 2.25577e-5 * alt) ** 5.25588
    angle = 0.02 * t
    return dict(
        time=t,
        state=int(state),
        altitude=alt,
        velocity=vel,
        acceleration=acc,
        pressure=pressure + random.gauss(0, 5.0),
        temperature=15.0 - 0.0065 * (alt - PAD_ALT) + random.gauss(0, 0.1),
        baro_altitude=alt + random.gauss(0, 1.5),
        imu_temp=30 + int(t // 20),
        accel_x=random.gauss(0, 0.05),
        accel_y=random.gauss(0, 0.05),
        accel_z=acc + 9.81 + random.gauss(0, 0.05),
        accel_vertical=acc + random.gauss(0, 0.02),
        gyro_x=0.1 * math.sin(t) + random.gauss(0, 0.01),
        gyro_y=0.1 * math.cos(t) + random.gauss(0, 0.01),
        gyro_z=0.02 + random.gauss(0, 0.01),
        quat_w=math.cos(angle / 2),
        quat_x=0.0,
        quat_y=0.0,
        quat_z=math.sin(angle / 2),
        launchpad_altitude=PAD_ALT,
    )


def simulate(path: str = DUMP_PATH, duration: float = 120.0) -> int:
    dt = 1.0 / RATE_HZ
    alt, vel = PAD_ALT, 0.0
    t = 0.0
    with DumpWriter(path) as w:
        while t < duration:
            if t < 2.0:
                acc = 0.0
            elif t < 5.0:
                acc = 80.0
            elif vel > 0.0 or alt - PAD_ALT > 300.0:
                acc = -9.81 if vel > -30.0 else 0.0
            elif alt > PAD_ALT:
                acc, vel = 0.0, -6.0
            else:
                acc, vel, alt = 0.0, 0.0, PAD_ALT

            w.write_record(**make_values(t, alt, vel, acc))
            vel += acc * dt
            alt = max(PAD_ALT, alt + vel * dt)
            t += dt
        return w.count


if __name__ == "__main__":
    n = simulate()
    print(f"Wrote {n} records to {DUMP_PATH}")
