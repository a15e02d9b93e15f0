import json
import os
import sys
import tempfile
from pathlib import Path

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
os.environ.setdefault("FLEET_DB_PATH", os.path.join(tempfile.mkdtemp(prefix="fleetlog-"), "db.sqlite3"))

import app as store  # noqa: E402
from fleetlog.client import FleetClient  # noqa: E402

BASE_URL = "http://fleet.test"


def truck_log(**overrides):
    log = {
        "truckModel": "Volvo FH 540",
        "licensePlate": "ABC1D23",
        "month": "2024-06",
        "initialKm": 1000.0,
        "finalKm": 1500.0,
        "fuelPricePerLiter": 6.0,
        "litersFueled": 200.0,
        "idealKmLRoute": 2.5,
        "route": "Curitiba - Joinville",
        "gasStation": "Posto Graal",
    }
    log.update(overrides)
    return log


def expense(**overrides):
    exp = {"month": "2024-06", "supplier": "Borracharia Zé", "description": "Troca de pneus", "cost": 1200.0}
    exp.update(overrides)
    return exp


class FlaskResponse:
    def __init__(self, resp):
        self.status_code = resp.status_code
        self.content = resp.data
        self.reason = resp.status.split(" ", 1)[1] if " " in resp.status else ""

    def json(self):
        return json.loads(self.content)


class FlaskSession:
    """requests.Session stand-in that routes calls into the Flask test client."""

    def __init__(self, test_client, fail_on=None):
        self.test_client = test_client
        self.fail_on = fail_on
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        path = url[len(BASE_URL):]
        self.calls.append((method, path, json))
        if self.fail_on and self.fail_on(method, path):
            raise requests.ConnectionError(f"connection refused: {url}")
        return FlaskResponse(self.test_client.open(path, method=method, json=json))


@pytest.fixture()
def flask_app(tmp_path_factory):
    db_dir = tmp_path_factory.mktemp("db")
    store.app.config.update(DATABASE=str(db_dir / "fleet.sqlite3"), CORS_ORIGIN="", TESTING=True,
                            PROPAGATE_EXCEPTIONS=None)
    with store.app.app_context():
        store.init_db()
    yield store.app


@pytest.fixture()
def http(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def session(http):
    return FlaskSession(http)


@pytest.fixture()
def client(session):
    return FleetClient(BASE_URL, session=session)
