import os
import tempfile

import pytest

# point settings at a throwaway database / log dir before the app is imported
_TMP_DIR = tempfile.mkdtemp(prefix="yield-estimator-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ.pop("YIELD_MODEL_CONFIG_PATH", None)

from fastapi.testclient import TestClient  # noqa: E402

from app.main import app  # noqa: E402
from app.schemas.farmer.yield_estimation import EstimationInput  # noqa: E402
from app.services.farmer.yield_estimation_service import YieldEstimator  # noqa: E402


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def estimator():
    return YieldEstimator()


@pytest.fixture
def make_input():
    def _make(**overrides):
        data = {
            "crop": "Wheat",
            "area": 1.0,
            "area_unit": "acres",
            "soil_fertility": "medium",
            "rainfall_mm": 750.0,
            "fertilizer_rate_kg_per_acre": 100.0,
            "previous_yield_qtl_per_acre": 18.0,
            "management_score": 6,
        }
        data.update(overrides)
        return EstimationInput(**data)

    return _make
