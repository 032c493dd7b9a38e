"""
Shared fixtures: environment for Settings and throwaway geo datasets.
"""
import os
import sqlite3

import pytest

# Settings() is instantiated at import time; give it what it requires.
os.environ.setdefault("PRIMARY_AUTH_URL", "https://auth.test")
os.environ.setdefault("PRIMARY_AUTH_API_KEY", "test-anon-key")
os.environ.setdefault("WEATHER_API_KEY", "test-weather-key")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client.apps.googleusercontent.com")


COUNTRIES = [
    # code, name, capital, continent
    ("US", "United States", "Washington", "NA"),
    ("FR", "France", "Paris", "EU"),
    ("BR", "Brazil", "Brasília", "SA"),
    ("AQ", "Antarctica", None, "AN"),
]

CITIES = [
    # name, lat, lng, population, country
    ("New York", 40.7128, -74.0060, 8_336_817, "US"),
    ("Albany", 42.6526, -73.7562, 99_224, "US"),
    ("San Francisco", 37.7749, -122.4194, 815_201, "US"),
    ("San Diego", 32.7157, -117.1611, 1_386_932, "US"),
    ("San Jose", 37.3382, -121.8863, 1_013_240, "US"),
    ("Paris", 48.8566, 2.3522, 2_102_650, "FR"),
    ("Lyon", 45.7640, 4.8357, 522_969, "FR"),
    ("São Paulo", -23.5505, -46.6333, 12_325_232, "BR"),
    ("Santos", -23.9608, -46.3336, 433_656, "BR"),
]


def build_geo_db(path, countries=COUNTRIES, cities=CITIES):
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            """
            CREATE TABLE countries (
                country_code TEXT PRIMARY KEY,
                country_name TEXT NOT NULL,
                capital TEXT,
                continent TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE cities (
                name TEXT NOT NULL,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                population INTEGER NOT NULL DEFAULT 0,
                country_code TEXT NOT NULL REFERENCES countries(country_code)
            )
            """
        )
        conn.executemany(
            "INSERT INTO countries VALUES (?, ?, ?, ?)",
            [tuple(c) + (None,) * (4 - len(c)) for c in countries],
        )
        conn.executemany("INSERT INTO cities VALUES (?, ?, ?, ?, ?)", cities)
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def geo_db_path(tmp_path):
    return str(build_geo_db(tmp_path / "world_geo.db"))


@pytest.fixture
def make_geo_db(tmp_path):
    """Factory for datasets with custom rows."""
    def _make(countries, cities, name="custom_geo.db"):
        return str(build_geo_db(tmp_path / name, countries, cities))
    return _make


@pytest.fixture
def make_unchecked_geo_db(tmp_path):
    """Same tables without NOT NULL constraints, so corrupt rows can be stored."""
    def _make(countries, cities, name="unchecked_geo.db"):
        path = tmp_path / name
        conn = sqlite3.connect(path)
        try:
            conn.execute("CREATE TABLE countries (country_code TEXT, country_name TEXT)")
            conn.execute(
                "CREATE TABLE cities (name TEXT, latitude REAL, longitude REAL, "
                "population INTEGER, country_code TEXT)"
            )
            conn.executemany("INSERT INTO countries VALUES (?, ?)", countries)
            conn.executemany("INSERT INTO cities VALUES (?, ?, ?, ?, ?)", cities)
            conn.commit()
        finally:
            conn.close()
        return str(path)
    return _make
