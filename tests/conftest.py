from __future__ import annotations

"""Pytest configuration.

This file is imported during *collection*, so it's the right place to set
process-wide environment variables needed for stable imports.
"""

import os
import tempfile

# Force a non-interactive backend in test environments.
os.environ.setdefault("MPLBACKEND", "Agg")

# Isolate matplotlib cache to avoid flaky font-cache locking.
os.environ.setdefault("MPLCONFIGDIR", tempfile.mkdtemp(prefix="mplconfig-"))

from pathlib import Path  # noqa: E402

import pandas as pd  # noqa: E402
import pytest  # noqa: E402

TEST_POINTS = [
    {"Test Point ID": 101, "Latitude": 40.0, "Longitude": -75.0, "Altitude (Ellipsoid) Meters": 10.0, "Building ID": "HQ", "Floor": 1},
    {"Test Point ID": 102, "Latitude": 40.0005, "Longitude": -75.0005, "Altitude (Ellipsoid) Meters": 14.0, "Building ID": "HQ", "Floor": 2},
    {"Test Point ID": "A-7", "Latitude": 40.001, "Longitude": -75.001, "Altitude (Ellipsoid) Meters": None, "Building ID": "HQ", "Floor": 2},
]

CORRELATION_ROWS = [
    {
        "Stage": "S1",
        "Building ID": "HQ",
        "Path ID": "path-1",
        "Point ID": 101,
        "Participant": "alice",
        "Device": "Pixel 8",
        "Timestamp": "2024-05-01 10:00:00",
        "Location Latitude": 40.0,
        "Location Longitude": -75.0,
        "Location Altitude": 10.0,
        "Location Source": "fused",
        "Technology": "WiFi",
        "Horizontal Uncertainty": 5.0,
        "Floor": 1,
        "Completed Call": "Yes",
    },
    {
        "Stage": "S1",
        "Building ID": "HQ",
        "Path ID": "path-1",
        "Point ID": 102,
        "Participant": "bob",
        "Device": "Galaxy S24",
        "Timestamp": "2024-05-01 10:05:00",
        "Location Latitude": 40.0011,
        "Location Longitude": -75.0005,
        "Location Altitude": 25.0,
        "Location Source": "gnss",
        "Technology": "GNSS",
        "Horizontal Uncertainty": "bad",
        "Floor": 2,
        "Completed Call": "No",
    },
    {
        "Stage": "S2",
        "Building ID": "HQ",
        "Path ID": "path-2",
        "Point ID": "ZZ-9",
        "Participant": "bob",
        "Device": "Galaxy S24",
        "Timestamp": "2024-05-01 10:10:00",
        "Location Latitude": 40.0,
        "Location Longitude": -75.0,
        "Location Altitude": None,
        "Location Source": "gnss",
        "Technology": "GNSS",
        "Horizontal Uncertainty": None,
        "Floor": 3,
        "Completed Call": None,
    },
]


@pytest.fixture
def test_points_xlsx(tmp_path: Path) -> Path:
    path = tmp_path / "TestPoints.xlsx"
    pd.DataFrame(TEST_POINTS).to_excel(path, index=False)
    return path


@pytest.fixture
def correlation_xlsx(tmp_path: Path) -> Path:
    path = tmp_path / "audit.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(CORRELATION_ROWS).to_excel(writer, sheet_name="Correlation", index=False, startrow=2)
        pd.DataFrame({"note": ["unrelated"]}).to_excel(writer, sheet_name="Baro Trend", index=False)
    return path


@pytest.fixture
def correlation_csv(tmp_path: Path) -> Path:
    path = tmp_path / "audit.csv"
    frame = pd.DataFrame(CORRELATION_ROWS)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write("Correlation export\nGenerated for tests\n")
        frame.to_csv(handle, index=False)
    return path


@pytest.fixture
def correlation_plain_csv(tmp_path: Path) -> Path:
    path = tmp_path / "plain.csv"
    pd.DataFrame(CORRELATION_ROWS).to_csv(path, index=False)
    return path
