import json

import pytest

from app.main import app
from app.schemas.farmer.yield_estimation import MAX_AREA, MAX_YIELD_QTL_PER_ACRE, YieldModelConfig
from app.services.farmer.yield_estimation_service import YieldEstimator, get_estimator

WHEAT_PAYLOAD = {
    "crop": "Wheat",
    "area": 1,
    "areaUnit": "acres",
    "soilFertility": "medium",
    "rainfallMm": 750,
    "fertilizerRateKgPerAcre": 100,
    "previousYieldQtlPerAcre": 18,
    "managementScore": 6,
}


def post_raw_json(client, url, payload):
    return client.post(url, content=json.dumps(payload), headers={"content-type": "application/json"})


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
    assert res.headers.get("x-request-id")


def test_incoming_request_id_is_reused(client):
    res = client.get("/health", headers={"X-Request-ID": "web-form-0001"})
    assert res.headers["x-request-id"] == "web-form-0001"

    res = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
    assert res.headers["x-request-id"] != "bad id with spaces"


# -----------------------------------------------------------
# POST /farmer/yield/estimate
# -----------------------------------------------------------
def test_estimate_returns_camel_case_result(client):
    res = client.post("/farmer/yield/estimate", json=WHEAT_PAYLOAD)
    assert res.status_code == 200

    body = res.json()
    assert body["yieldPerAcre"] == 23
    assert body["totalYield"] == 23
    assert body["unit"] == "quintals"
    assert body["confidence"] == "High"
    assert body["areaInAcres"] == 1
    assert body["factors"]["baselineSource"] == "previous_yield"
    assert body["factors"]["fertilizerFactor"] == pytest.approx(1.2)
    assert body["revenueEstimate"] is None
    assert body["rationale"]


def test_estimate_accepts_snake_case_fields(client):
    payload = {
        "crop": "Quinoa",
        "area": 1,
        "area_unit": "acres",
        "soil_fertility": "low",
        "rainfall_mm": 0,
        "fertilizer_rate_kg_per_acre": 0,
        "previous_yield_qtl_per_acre": 0,
        "management_score": 1,
    }
    res = client.post("/farmer/yield/estimate", json=payload)
    assert res.status_code == 200
    assert res.json()["yieldPerAcre"] == 7
    assert res.json()["confidence"] == "Low"


def test_estimate_in_hectares_with_price(client):
    payload = dict(WHEAT_PAYLOAD, area=10, areaUnit="hectares", pricePerQuintal=2000)
    body = client.post("/farmer/yield/estimate", json=payload).json()

    assert body["areaInAcres"] == pytest.approx(24.7105)
    assert body["totalYield"] == 568
    assert body["revenueEstimate"] == pytest.approx(568 * 2000)


@pytest.mark.parametrize(
    "field, value",
    [
        ("area", 0),
        ("area", -2),
        ("areaUnit", "bigha"),
        ("soilFertility", "rich"),
        ("rainfallMm", -1),
        ("fertilizerRateKgPerAcre", -5),
        ("previousYieldQtlPerAcre", -0.5),
        ("managementScore", 0),
        ("managementScore", 11),
        ("managementScore", 6.5),
        ("crop", ""),
        ("area", float("inf")),
        ("area", float("nan")),
        ("area", 1e308),
        ("rainfallMm", float("nan")),
        ("rainfallMm", float("inf")),
        ("fertilizerRateKgPerAcre", float("inf")),
        ("previousYieldQtlPerAcre", float("inf")),
        ("previousYieldQtlPerAcre", float("nan")),
        ("previousYieldQtlPerAcre", 1e308),
        ("pricePerQuintal", float("inf")),
        ("pricePerQuintal", -1),
    ],
)
def test_estimate_rejects_out_of_domain_input(client, field, value):
    payload = dict(WHEAT_PAYLOAD, **{field: value})
    # json.dumps writes Infinity / NaN literals, which the server's parser accepts
    res = post_raw_json(client, "/farmer/yield/estimate", payload)
    assert res.status_code == 422


def test_estimate_rejects_product_that_would_overflow(client):
    payload = dict(WHEAT_PAYLOAD, area=10, previousYieldQtlPerAcre=1e308)
    assert post_raw_json(client, "/farmer/yield/estimate", payload).status_code == 422


def test_estimate_at_upper_bounds_stays_finite(client):
    payload = dict(
        WHEAT_PAYLOAD,
        area=MAX_AREA,
        areaUnit="hectares",
        previousYieldQtlPerAcre=MAX_YIELD_QTL_PER_ACRE,
        managementScore=10,
        soilFertility="high",
    )
    res = client.post("/farmer/yield/estimate", json=payload)
    assert res.status_code == 200

    body = res.json()
    assert body["yieldPerAcre"] == 1656
    assert body["totalYield"] == pytest.approx(1656 * MAX_AREA * 2.47105)


def test_estimate_requires_all_fields(client):
    payload = {k: v for k, v in WHEAT_PAYLOAD.items() if k != "managementScore"}
    assert client.post("/farmer/yield/estimate", json=payload).status_code == 422


def test_estimate_with_owner_saves_input(client):
    payload = dict(WHEAT_PAYLOAD, crop="Rice", previousYieldQtlPerAcre=0)
    res = client.post("/farmer/yield/estimate", params={"owner_id": "farmer-prefill"}, json=payload)
    assert res.status_code == 200

    saved = client.get("/farmer/yield/saved-input/farmer-prefill")
    assert saved.status_code == 200
    body = saved.json()
    assert body["storageKey"] == "yield_estimator_v1:farmer-prefill"
    assert body["input"]["crop"] == "Rice"
    assert body["input"]["previousYieldQtlPerAcre"] == 0


def test_estimate_with_injected_model(client):
    regional = YieldEstimator(YieldModelConfig(baseline_yields={"quinoa": 20}))
    app.dependency_overrides[get_estimator] = lambda: regional
    try:
        payload = dict(WHEAT_PAYLOAD, crop="Quinoa", previousYieldQtlPerAcre=0)
        body = client.post("/farmer/yield/estimate", json=payload).json()
    finally:
        app.dependency_overrides.clear()

    assert body["factors"]["baseline"] == 20
    assert body["factors"]["baselineSource"] == "crop_table"
    assert body["confidence"] == "Medium"


# -----------------------------------------------------------
# GET /farmer/yield/model
# -----------------------------------------------------------
def test_model_lists_known_crops(client):
    body = client.get("/farmer/yield/model").json()
    assert body["baselineYields"]["wheat"] == 18
    assert body["defaultBaseline"] == 15
    assert body["fertilityFactors"] == {"low": 0.9, "medium": 1.0, "high": 1.15}
    assert body["rainfallOptimumMm"] == 750
    # the unit constant is fixed in code, not a model setting
    assert "hectareToAcre" not in body


# -----------------------------------------------------------
# Saved inputs
# -----------------------------------------------------------
def test_saved_input_round_trip(client):
    owner = "farmer-roundtrip"
    put = client.put(f"/farmer/yield/saved-input/{owner}", json=WHEAT_PAYLOAD)
    assert put.status_code == 200
    assert put.json()["input"]["managementScore"] == 6

    updated = dict(WHEAT_PAYLOAD, managementScore=9)
    client.put(f"/farmer/yield/saved-input/{owner}", json=updated)
    got = client.get(f"/farmer/yield/saved-input/{owner}").json()
    assert got["input"]["managementScore"] == 9

    deleted = client.delete(f"/farmer/yield/saved-input/{owner}")
    assert deleted.status_code == 200
    assert deleted.json()["status"] == "deleted"

    assert client.get(f"/farmer/yield/saved-input/{owner}").status_code == 404
    assert client.delete(f"/farmer/yield/saved-input/{owner}").status_code == 404


def test_saved_input_missing_owner_is_404(client):
    res = client.get("/farmer/yield/saved-input/nobody-here")
    assert res.status_code == 404
    assert res.json()["detail"] == "saved_input_not_found"


def test_saved_input_rejects_invalid_payload(client):
    payload = dict(WHEAT_PAYLOAD, managementScore=42)
    assert client.put("/farmer/yield/saved-input/farmer-bad", json=payload).status_code == 422
    assert client.get("/farmer/yield/saved-input/farmer-bad").status_code == 404
