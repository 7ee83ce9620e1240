# src/netwatch_api/domain/services/aggregation.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Aggregation functions over normalized monitoring records.

Purpose:
    Deterministic arithmetic turning typed records (ports, devices, bills,
    health samples) into dashboard figures: utilization percentages, health
    scores and their status buckets, plaza/site scoring, and growth rates.

Layer:
    domain

Notes:
    - Pure functions: no logging, no I/O, no clocks, no randomness.
    - Percentages are rounded with :func:`round1` (half away from zero on
      ``value * 10``) so results are stable across runs and platforms.
    - Capacity conversions are decimal: bits/s / 1_000_000 = Mbit/s.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from netwatch_api.domain.entities.records import Bill, Port
from netwatch_api.domain.enums.monitoring import HealthStatus, SiteStatus, UtilizationStatus

BITS_PER_BYTE = 8
BPS_PER_MBPS = 1_000_000
BYTES_PER_MEBIBYTE = 1024 * 1024

HEALTHY_SCORE = 80.0
WARNING_SCORE = 60.0
BASELINE_TEMP_C = 20.0

DEFAULT_PLAZA = "Unknown"
# Ordered: first matching needle wins.
_PLAZA_ALIASES: tuple[tuple[str, str], ...] = (
    ("saltillo", "Saltillo"),
    ("monterrey", "Monterrey"),
    ("podi", "Monterrey"),
    ("guadalajara", "Guadalajara"),
    ("laredo", "Laredo"),
)

BILL_LOCATION_OTHER = "Other"
# Bills carry no location field; these needles are matched against name/notes/ref.
_BILL_LOCATIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Saltillo", ("saltillo", "jolla")),
    ("Monterrey", ("monterrey", "mty", "purisima", "guadalupe")),
    ("Queretaro", ("queretaro", "qro")),
    ("Guadalajara", ("guadalajara", "gdl", "cardenal")),
    ("Torreon", ("torreon", "torreón")),
    ("Piedras Negras", ("piedras negras", "piedra negra", "acuña")),
    ("Sabinas", ("sabinas",)),
    ("Monclova", ("monclova",)),
    ("Parras", ("parras",)),
    ("Muzquiz", ("muzquiz",)),
    ("Villa Union", ("villa union",)),
    ("Nueva Rosita", ("nueva rosita", "rosita")),
    ("Cogent", ("cogent",)),
    ("Ti Sparkle", ("ti sparkle", "sparkle")),
    ("Marcatel", ("marcatel",)),
    ("Alestra", ("alestra",)),
)


# --------------------------------------------------------------------------- #
# Rounding / clamping                                                         #
# --------------------------------------------------------------------------- #
def round_to(value: float, digits: int = 1) -> float:
    """Round half away from zero at ``digits`` decimal places.

    The value is scaled first (``value * 10**digits``) and the scaled float is
    rounded through its shortest repr, so ``round_to(48.5666, 1) == 48.6`` and
    ``round_to(-0.25, 1) == -0.3``.

    Args:
        value: Finite number.
        digits: Decimal places to keep (>= 0).

    Returns:
        The rounded float. Non-finite input is returned as ``0.0``.
    """
    if not math.isfinite(value):
        return 0.0
    scale = 10**digits
    scaled = Decimal(repr(value * scale)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return float(scaled) / scale


def round1(value: float) -> float:
    """Round to one decimal place, half away from zero."""
    return round_to(value, 1)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


def clamp_pct(value: float) -> float:
    """Clamp a percentage into ``[0, 100]``."""
    return clamp(value, 0.0, 100.0)


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, ``0.0`` for an empty input."""
    items = list(values)
    return sum(items) / len(items) if items else 0.0


# --------------------------------------------------------------------------- #
# Utilization                                                                 #
# --------------------------------------------------------------------------- #
def utilization_pct(used_mbps: float, total_mbps: float) -> float:
    """Return ``used / total * 100`` clamped to [0, 100] and rounded to 1 decimal.

    ``0.0`` when ``total_mbps`` is zero (or negative).
    """
    if total_mbps <= 0:
        return 0.0
    return round1(clamp_pct(used_mbps / total_mbps * 100))


def port_capacity_mbps(port: Port) -> float:
    """Port capacity in Mbit/s, preferring ``ifHighSpeed`` over ``ifSpeed``."""
    if port.if_high_speed_mbps is not None and port.if_high_speed_mbps > 0:
        return port.if_high_speed_mbps
    if port.if_speed_bps > 0:
        return port.if_speed_bps / BPS_PER_MBPS
    return 0.0


def port_usage_mbps(port: Port) -> float:
    """Busiest direction of a port in Mbit/s (octet rates are bytes/s)."""
    return max(port.in_octets_rate, port.out_octets_rate) * BITS_PER_BYTE / BPS_PER_MBPS


def port_utilization_pct(port: Port) -> float:
    """Utilization of a single port, clamped to [0, 100].

    Upstream-computed ``in_perc``/``out_perc`` win when present; otherwise the
    octet rates are compared against :func:`port_capacity_mbps`.
    """
    percs = [p for p in (port.in_perc, port.out_perc) if p is not None]
    if percs:
        return round1(clamp_pct(max(percs)))
    return utilization_pct(port_usage_mbps(port), port_capacity_mbps(port))


def port_rate_utilization_pct(port: Port) -> float:
    """Utilization from the octet rates alone, ignoring upstream percentages."""
    return utilization_pct(port_usage_mbps(port), port_capacity_mbps(port))


def utilization_status(pct: float) -> UtilizationStatus:
    """Bucket a plaza/port utilization: >= 80 critical, >= 60 warning."""
    if pct >= 80:
        return UtilizationStatus.CRITICAL
    if pct >= 60:
        return UtilizationStatus.WARNING
    return UtilizationStatus.NORMAL


def capacity_summary_status(pct: float) -> UtilizationStatus:
    """Bucket the network-wide utilization: >= 90 critical, >= 75 warning."""
    if pct >= 90:
        return UtilizationStatus.CRITICAL
    if pct >= 75:
        return UtilizationStatus.WARNING
    return UtilizationStatus.NORMAL


def bill_rate_mbps(bill: Bill) -> float:
    """95th percentile rate of a bill in MiB/s-based Mbps (``max(in, out) / 1024**2``)."""
    return max(bill.rate_95th_in, bill.rate_95th_out) / BYTES_PER_MEBIBYTE


# --------------------------------------------------------------------------- #
# Health                                                                      #
# --------------------------------------------------------------------------- #
def cpu_score(avg_cpu_pct: float) -> float:
    return max(0.0, 100.0 - avg_cpu_pct)


def memory_score(avg_mem_pct: float) -> float:
    return max(0.0, 100.0 - avg_mem_pct)


def temperature_score(avg_temp_c: float) -> float:
    """``100`` when no temperature is known, else 2 points per degree above 20 C."""
    if avg_temp_c > 0:
        return max(0.0, 100.0 - (avg_temp_c - BASELINE_TEMP_C) * 2)
    return 100.0


def health_score(avg_cpu_pct: float, avg_mem_pct: float, avg_temp_c: float) -> float:
    """Average of the CPU, memory and temperature sub-scores, rounded to 1 decimal.

    Example:
        ``health_score(65.2, 72.1, 28.5) == 48.6`` (34.8, 27.9 and 83.0).
    """
    total = cpu_score(avg_cpu_pct) + memory_score(avg_mem_pct) + temperature_score(avg_temp_c)
    return round1(total / 3)


def health_status(score: float) -> HealthStatus:
    """Bucket a health score: >= 80 healthy, >= 60 warning, else critical."""
    if score >= HEALTHY_SCORE:
        return HealthStatus.HEALTHY
    if score >= WARNING_SCORE:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


def device_system_health(cpu_pct: float, mem_pct: float, temp_c: float) -> HealthStatus:
    """Classify one device from its raw resource readings."""
    if cpu_pct >= 90 or mem_pct >= 95 or temp_c >= 80:
        return HealthStatus.CRITICAL
    if cpu_pct >= 75 or mem_pct >= 85 or temp_c >= 70:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def _availability(up: int, total: int) -> float:
    return up / total * 100 if total > 0 else 100.0


def plaza_health_score(
    devices_up: int,
    devices_total: int,
    ports_up: int,
    ports_total: int,
    alert_count: int,
) -> int:
    """Weighted plaza score: 40% device availability, 30% port availability, 30% alerts.

    Each alert costs 10 points of the alert component (floored at 0). A zero
    total counts as full availability.
    """
    alert_component = 100 - min(alert_count * 10, 100)
    score = (
        _availability(devices_up, devices_total) * 0.4
        + _availability(ports_up, ports_total) * 0.3
        + alert_component * 0.3
    )
    return int(round_to(score, 0))


def health_grade(score: float) -> str:
    """Letter grade for a plaza score."""
    for threshold, grade in ((90, "A"), (80, "B"), (70, "C"), (60, "D")):
        if score >= threshold:
            return grade
    return "F"


def site_health_score(utilization: float, alert_count: int, device_count: int) -> float:
    """Score a site from its utilization, alerts and redundancy (floored at 0)."""
    score = 100.0
    for threshold, penalty in ((90, 40), (80, 25), (70, 15), (60, 10)):
        if utilization >= threshold:
            score -= penalty
            break
    score -= min(alert_count * 10, 30)
    if device_count == 1:
        score -= 5
    return max(0.0, score)


def site_status(utilization: float, alert_count: int, score: float) -> SiteStatus:
    """Severity of a site flagged by the critical-sites view."""
    if utilization >= 90 or alert_count >= 3 or score <= 60:
        return SiteStatus.CRITICAL
    if utilization >= 80 or alert_count >= 2 or score <= 70:
        return SiteStatus.WARNING
    return SiteStatus.ATTENTION


# --------------------------------------------------------------------------- #
# Locations                                                                   #
# --------------------------------------------------------------------------- #
def extract_plaza(location: str | None) -> str:
    """Map a free-form device location onto a plaza name.

    Known cities are matched case-insensitively as substrings; anything else
    is returned trimmed, or ``"Unknown"`` when blank.
    """
    if not location or not location.strip():
        return DEFAULT_PLAZA
    lowered = location.lower()
    for needle, plaza in _PLAZA_ALIASES:
        if needle in lowered:
            return plaza
    return location.strip()


def location_matches(location: str | None, plaza: str) -> bool:
    """Case-insensitive substring match used by plaza filters."""
    return bool(location) and plaza.strip().lower() in (location or "").lower()


def site_name(hostname: str, location: str = "") -> str:
    """Derive a site identifier from a hostname (``AAA-BBB-CCC-...`` -> ``AAA-BBB-CCC``)."""
    parts = hostname.split("-")
    if len(parts) >= 3:
        return "-".join(parts[:3])
    short = hostname.split(".")[0]
    return short or location or DEFAULT_PLAZA


def bill_location(bill: Bill) -> str:
    """Locate a bill by searching its name, notes and reference for known place names."""
    haystack = f"{bill.name} {bill.notes} {bill.ref}".lower()
    for location, needles in _BILL_LOCATIONS:
        if any(needle in haystack for needle in needles):
            return location
    return BILL_LOCATION_OTHER


# --------------------------------------------------------------------------- #
# Growth                                                                      #
# --------------------------------------------------------------------------- #
def growth_rate(current: float, previous: float) -> float:
    """Percent change from ``previous`` to ``current``; ``0.0`` when previous is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def forecast_next(current: float, avg_growth_pct: float) -> float:
    """Next-period forecast: ``current * (1 + avg_growth_pct / 100)``."""
    return current * (1 + avg_growth_pct / 100)


def forecast_quarter(current: float, monthly_rate: float) -> float:
    """Three periods of compound growth; ``monthly_rate`` is a fraction (0.02 = 2%)."""
    return current * (1 + monthly_rate) ** 3
