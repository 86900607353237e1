import json
from io import BytesIO

from fastapi.testclient import TestClient
from PIL import Image

from src.liff_delivery.api.dependencies import get_delivery_store, get_location_resolver, get_slip_uploader
from src.liff_delivery.data.locations_repository import LocationRepository
from src.liff_delivery.main import create_app
from src.liff_delivery.services.locations import AddressHierarchyResolver
from src.liff_delivery.services.tracking import is_tracking_id

from .conftest import LINE_USER, add_record

HOME_DATA = {
    "customerName": "A",
    "phone": "0811111111",
    "locationType": "home",
    "addressDetails": "1 Main Rd",
    "subDistrict": "X",
    "district": "Y",
    "province": "Z",
    "postalCode": "10110",
}


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (4, 4)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_health(api_client: TestClient):
    response = api_client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root_diagnostics(api_client: TestClient):
    body = api_client.get("/").json()
    assert body["status"] == "running"
    assert body["health"] == "/api/health"


def test_create_home_delivery_without_slip(api_client: TestClient, store):
    response = api_client.post("/api/delivery", data={"data": json.dumps(HOME_DATA)})

    assert response.status_code == 201
    body = response.json()
    assert is_tracking_id(body["trackingId"])
    assert body["slipImageUrl"] is None
    assert body["id"] in store.records
    assert body["createdAt"]


def test_create_store_delivery_without_address(api_client: TestClient, store):
    data = {"customerName": "A", "phone": "0811111111", "locationType": "store"}

    response = api_client.post("/api/delivery", data={"data": json.dumps(data)})

    assert response.status_code == 201
    record = store.records[response.json()["id"]]
    assert record.address_details is None


def test_create_with_slip_upload(api_client: TestClient, uploader):
    data = {**HOME_DATA, "line_user_id": LINE_USER}

    response = api_client.post(
        "/api/delivery",
        data={"data": json.dumps(data)},
        files={"file": ("slip.png", _png_bytes(), "image/png")},
    )

    assert response.status_code == 201
    assert response.json()["slipImageUrl"] == uploader.url
    assert uploader.calls[0]["identifier"] == LINE_USER


def test_create_reports_missing_field(api_client: TestClient, store):
    data = {key: value for key, value in HOME_DATA.items() if key != "postalCode"}

    response = api_client.post("/api/delivery", data={"data": json.dumps(data)})

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "postalCode"
    assert store.records == {}


def test_create_without_data_field(api_client: TestClient):
    response = api_client.post("/api/delivery", data={})

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "data"


def test_create_with_malformed_json(api_client: TestClient):
    response = api_client.post("/api/delivery", data={"data": "{not json"})

    assert response.status_code == 400


def test_create_with_unknown_location_type(api_client: TestClient):
    data = {**HOME_DATA, "locationType": "office"}

    response = api_client.post("/api/delivery", data={"data": json.dumps(data)})

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "locationType"


def test_create_with_unreadable_slip(api_client: TestClient, uploader):
    response = api_client.post(
        "/api/delivery",
        data={"data": json.dumps(HOME_DATA)},
        files={"file": ("slip.png", b"not an image", "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "file"
    assert uploader.calls == []


def test_get_and_update_delivery(api_client: TestClient, store):
    record = add_record(store)

    response = api_client.get(f"/api/delivery/{record.id}")
    assert response.status_code == 200
    assert response.json()["message"] == "พบข้อมูล"
    assert response.json()["data"]["trackingId"] == record.tracking_id

    response = api_client.put(f"/api/delivery/{record.id}", json={"customerName": "B", "unknown": "ignored"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "อัปเดตข้อมูลสำเร็จ"
    assert body["data"]["customerName"] == "B"
    assert body["data"]["phone"] == record.phone


def test_get_delivery_errors(api_client: TestClient):
    assert api_client.get("/api/delivery/not-a-uuid").status_code == 400
    assert api_client.get("/api/delivery/00000000-0000-0000-0000-000000000000").status_code == 404


def test_update_with_no_fields(api_client: TestClient, store):
    record = add_record(store)

    response = api_client.put(f"/api/delivery/{record.id}", json={})

    assert response.status_code == 400


def test_get_by_tracking_id(api_client: TestClient, store):
    record = add_record(store, tracking_id="RET-ABCDEF12")

    response = api_client.get("/api/delivery/tracking/ret-abcdef12")

    assert response.status_code == 200
    assert response.json()["data"]["id"] == record.id
    assert api_client.get("/api/delivery/tracking/RET-00000000").status_code == 404


def test_find_by_query_and_body(api_client: TestClient, store):
    older = add_record(store, minutes=0, tracking_id="RET-00000001")
    newer = add_record(store, minutes=1, tracking_id="RET-00000002")

    response = api_client.get("/api/find", params={"line_user_id": LINE_USER})
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [item["id"] for item in body["data"]] == [newer.id, older.id]

    response = api_client.post("/api/find", json={"phone": "0811111111"})
    assert response.status_code == 200
    assert response.json()["count"] == 2


def test_find_not_found_and_missing_key(api_client: TestClient):
    response = api_client.get("/api/find", params={"phone": "0800000000"})
    assert response.status_code == 404
    assert response.json() == {"message": "ไม่พบข้อมูล", "data": []}

    assert api_client.get("/api/find").status_code == 400
    assert api_client.get("/api/find", params={"line_user_id": "bad"}).status_code == 400


def test_find_latest(api_client: TestClient, store):
    add_record(store, minutes=0, tracking_id="RET-00000001")
    newer = add_record(store, minutes=1, tracking_id="RET-00000002")

    response = api_client.get("/api/find/latest", params={"line_user_id": LINE_USER})

    assert response.status_code == 200
    assert response.json()["data"]["id"] == newer.id
    assert api_client.get("/api/find/latest", params={"phone": "0800000000"}).status_code == 404


def test_summary_message(api_client: TestClient, store):
    record = add_record(store)

    response = api_client.get(f"/api/delivery/{record.id}/message")

    assert response.status_code == 200
    body = response.json()
    assert body["trackingId"] == record.tracking_id
    assert body["messages"][0]["type"] == "flex"


def test_notify_pushes_summary(api_client: TestClient, store, line_client):
    record = add_record(store)

    response = api_client.post(f"/api/delivery/{record.id}/notify")

    assert response.status_code == 200
    assert response.json() == {"sent": True, "to": LINE_USER}
    assert line_client.pushed[0][0] == LINE_USER


def test_notify_without_line_user(api_client: TestClient, store, line_client):
    record = add_record(store, line_user_id=None)

    response = api_client.post(f"/api/delivery/{record.id}/notify")

    assert response.status_code == 400
    assert line_client.pushed == []


def test_location_endpoints(api_client: TestClient):
    provinces = api_client.get("/api/locations/provinces").json()
    assert [p["id"] for p in provinces] == [1, 50]
    assert provinces[0]["name"] == "กรุงเทพมหานคร"

    districts = api_client.get("/api/locations/districts", params={"province_id": 1}).json()
    assert [d["id"] for d in districts] == [101, 102]

    subdistricts = api_client.get(
        "/api/locations/subdistricts", params={"province_id": 1, "district_id": 101}
    ).json()
    assert [s["id"] for s in subdistricts] == [10101, 10102]

    matches = api_client.get("/api/locations/postal-codes", params={"prefix": "503"}).json()
    assert len(matches) == 1
    assert matches[0]["subdistrict"]["name_en"] == "Chang Moi"


def test_resolve_postal_code_endpoint(api_client: TestClient):
    response = api_client.get(
        "/api/locations/postal-code", params={"province_id": 1, "district_id": 102, "subdistrict_id": 10201}
    )
    assert response.json() == {"found": True, "postalCode": "10330"}

    response = api_client.get(
        "/api/locations/postal-code", params={"province_id": 1, "district_id": 2, "subdistrict_id": 99}
    )
    assert response.status_code == 200
    assert response.json() == {"found": False, "postalCode": None}


def test_location_limit_validation(api_client: TestClient):
    assert api_client.get("/api/locations/provinces", params={"limit": 0}).status_code == 422


def test_delivery_routes_without_store_are_unavailable(test_settings):
    client = TestClient(create_app(test_settings))

    assert client.get("/api/find", params={"phone": "0811111111"}).status_code == 503


def test_database_health_reports_store(api_client: TestClient, store):
    add_record(store)
    api_client.app.state.delivery_store = store

    body = api_client.get("/api/health/database").json()

    assert body["connected"] is True
    assert body["deliveries_count"] == 1


def test_update_province_alone_is_rejected(api_client: TestClient, store):
    record = add_record(store)

    response = api_client.put(f"/api/delivery/{record.id}", json={"province": "เชียงใหม่"})

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "district"
    assert store.records[record.id].district == "บางรัก"


def test_unreadable_location_file_is_unavailable(api_client: TestClient, tmp_path):
    path = tmp_path / "zip.txt"
    path.write_text("zip_code\n10500\n", encoding="utf-8")
    repository = LocationRepository(None, source=path)
    api_client.app.dependency_overrides[get_location_resolver] = lambda: AddressHierarchyResolver(repository.rows)

    response = api_client.get("/api/locations/provinces")

    assert response.status_code == 503


def test_oversized_slip_is_rejected(store, uploader, resolver, test_settings):
    app = create_app(test_settings.model_copy(update={"slip_max_bytes": 10}))
    app.dependency_overrides[get_delivery_store] = lambda: store
    app.dependency_overrides[get_slip_uploader] = lambda: uploader
    app.dependency_overrides[get_location_resolver] = lambda: resolver
    client = TestClient(app)

    response = client.post(
        "/api/delivery",
        data={"data": json.dumps(HOME_DATA)},
        files={"file": ("slip.png", _png_bytes(), "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "file"
    assert uploader.calls == []
    assert store.records == {}
