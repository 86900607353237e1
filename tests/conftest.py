import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from src.liff_delivery.api.dependencies import (
    get_delivery_store,
    get_line_client,
    get_location_resolver,
    get_slip_uploader,
)
from src.liff_delivery.config import Settings
from src.liff_delivery.main import create_app
from src.liff_delivery.models.domain import DeliveryRecord, DeliveryStatus, LocationRow, LocationType
from src.liff_delivery.services.locations import AddressHierarchyResolver

LINE_USER = "U" + "a" * 32
OTHER_LINE_USER = "U" + "b" * 32


def _row(pid, p_th, p_en, did, d_th, d_en, sid, s_th, s_en, postal):
    return LocationRow(
        province_id=pid,
        province_name_th=p_th,
        province_name_en=p_en,
        district_id=did,
        district_name_th=d_th,
        district_name_en=d_en,
        subdistrict_id=sid,
        subdistrict_name_th=s_th,
        subdistrict_name_en=s_en,
        postal_code=postal,
    )


LOCATION_ROWS = (
    _row(1, "กรุงเทพมหานคร", "Bangkok", 101, "บางรัก", "Bang Rak", 10101, "สีลม", "Si Lom", "10500"),
    _row(1, "กรุงเทพมหานคร", "Bangkok", 101, "บางรัก", "Bang Rak", 10102, "สุริยวงศ์", "Suriyawong", "10500"),
    _row(1, "กรุงเทพมหานคร", "Bangkok", 102, "ปทุมวัน", "Pathum Wan", 10201, "ลุมพินี", "Lumphini", "10330"),
    _row(50, "เชียงใหม่", "Chiang Mai", 5001, "เมืองเชียงใหม่", "Mueang Chiang Mai", 500101, "ศรีภูมิ", "Si Phum", "50200"),
    _row(50, "เชียงใหม่", "Chiang Mai", 5001, "เมืองเชียงใหม่", "Mueang Chiang Mai", 500102, "ช้างม่อย", "Chang Moi", "50300"),
)


class FakeDeliveryStore:
    def __init__(self):
        self.records = {}

    def insert(self, record):
        record_id = str(uuid.uuid4())
        self.records[record_id] = replace(record, id=record_id)
        return record_id

    def find_by_id(self, delivery_id):
        return self.records.get(delivery_id)

    def find_by_identifier_or_phone(self, line_user_id=None, phone=None):
        return [
            record
            for record in self.records.values()
            if (line_user_id and record.line_user_id == line_user_id) or (phone and record.phone == phone)
        ]

    def find_by_tracking_id(self, tracking_id):
        return [record for record in self.records.values() if record.tracking_id == tracking_id]

    def update_by_id(self, delivery_id, fields):
        record = self.records.get(delivery_id)
        if record is None:
            return None
        updated = replace(record, **fields)
        self.records[delivery_id] = updated
        return updated

    def ping(self):
        return len(self.records)


class FakeUploader:
    def __init__(self, url="https://files.example.com/slip.png"):
        self.url = url
        self.calls = []

    def upload(self, content, filename, content_type, identifier):
        self.calls.append({"filename": filename, "content_type": content_type, "identifier": identifier})
        return self.url


class FakeLineClient:
    def __init__(self):
        self.pushed = []

    def push(self, to, messages):
        self.pushed.append((to, messages))


def make_record(**overrides) -> DeliveryRecord:
    now = datetime(2025, 12, 1, 3, 0, tzinfo=timezone.utc)
    values = dict(
        customer_name="A",
        phone="0811111111",
        location_type=LocationType.HOME,
        tracking_id="RET-0A1B2C3D",
        status=DeliveryStatus.PENDING,
        created_at=now,
        updated_at=now,
        line_user_id=LINE_USER,
        address_details="1 Main Rd",
        sub_district="สีลม",
        district="บางรัก",
        province="กรุงเทพมหานคร",
        postal_code="10500",
    )
    values.update(overrides)
    return DeliveryRecord(**values)


def add_record(store: FakeDeliveryStore, minutes: int = 0, **overrides) -> DeliveryRecord:
    record = make_record(**overrides)
    record.created_at = record.created_at + timedelta(minutes=minutes)
    record.updated_at = record.created_at
    record.id = store.insert(record)
    return store.records[record.id]


@pytest.fixture
def resolver() -> AddressHierarchyResolver:
    return AddressHierarchyResolver.from_rows(LOCATION_ROWS)


@pytest.fixture
def store() -> FakeDeliveryStore:
    return FakeDeliveryStore()


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture
def line_client() -> FakeLineClient:
    return FakeLineClient()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, supabase_url=None, supabase_key=None, locations_file=None)


@pytest.fixture
def api_client(store, uploader, resolver, line_client, test_settings) -> TestClient:
    app = create_app(test_settings)
    app.dependency_overrides[get_delivery_store] = lambda: store
    app.dependency_overrides[get_slip_uploader] = lambda: uploader
    app.dependency_overrides[get_location_resolver] = lambda: resolver
    app.dependency_overrides[get_line_client] = lambda: line_client
    return TestClient(app)
