import io
import json
from datetime import date, datetime, timezone

import pandas as pd
import pytest

from repositories.local_repo import LocalSubscriptionRepository
from services.export_service import TABLE_COLUMNS, ExportService, export_filename
from services.import_service import ImportService


@pytest.fixture
def export_service():
    return ExportService()


@pytest.fixture
def sample(make_sub):
    return [
        make_sub(id="n1", name="Netflix", amount=45, labels=["streaming", "family"],
                 url="https://netflix.com", comment="4K plan", start_date=date(2022, 5, 1)),
        make_sub(id="a1", name="Adobe", amount=20, currency="USD", frequency="yearly",
                 next_payment=date(2025, 1, 15), auto_renewal=False,
                 colors={"primary": "#ff0000"}),
    ]


def _valid_record(record_id, name):
    return {
        "id": record_id,
        "name": name,
        "amount": 10,
        "currency": "SAR",
        "frequency": "monthly",
        "nextPayment": "2024-07-01",
        "labels": [],
        "autoRenewal": True,
        "createdAt": "2024-01-01T00:00:00+00:00",
        "updatedAt": "2024-01-01T00:00:00+00:00",
    }


# ── EXPORT ────────────────────────────────────────────────

def test_export_json_is_full_fidelity_array(export_service, sample):
    data = json.loads(export_service.export_json(sample).decode("utf-8"))

    assert isinstance(data, list)
    assert data[0]["nextPayment"] == "2024-07-01"
    assert data[0]["startDate"] == "2022-05-01"
    assert data[0]["labels"] == ["streaming", "family"]
    assert data[0]["comment"] == "4K plan"
    assert data[1]["autoRenewal"] is False
    assert data[1]["colors"] == {"primary": "#ff0000"}


def test_export_table_reads_back(export_service, sample):
    buffer = export_service.export_table(sample)
    df = pd.read_excel(buffer, sheet_name="Subscriptions", dtype=str, keep_default_na=False)

    assert list(df.columns) == list(TABLE_COLUMNS)
    assert len(df) == 2
    first, second = df.iloc[0], df.iloc[1]
    assert first["Service Name"] == "Netflix"
    assert first["Labels"] == "streaming, family"
    assert first["Auto Renewal"] == "Yes"
    assert first["Website"] == "https://netflix.com"
    assert second["Auto Renewal"] == "No"
    assert float(second["Amount (SAR)"]) == pytest.approx(75.0)
    assert second["Start Date"] == ""
    assert second["Created"] == "2024-01-01"


def test_export_csv_has_bom_and_header(export_service, sample):
    raw = export_service.export_csv(sample).getvalue()

    assert raw.startswith(b"\xef\xbb\xbf")
    header = raw.decode("utf-8-sig").splitlines()[0]
    assert header.split(",")[:4] == ["Service Name", "Amount", "Currency", "Amount (SAR)"]


def test_export_empty_collection(export_service):
    df = pd.read_excel(export_service.export_table([]))
    assert df.empty
    assert export_service.export_json([]) == b"[]"


def test_export_filename():
    assert export_filename("json", date(2024, 6, 15)) == "subscriptions-2024-06-15.json"
    assert export_filename(".xlsx", date(2024, 6, 15)) == "subscriptions-2024-06-15.xlsx"


# ── IMPORT ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_import_mixed_batch(recording_repo, make_sub):
    existing = [make_sub(id="dup", name="Existing")]
    repo = recording_repo(existing)
    payload = json.dumps([
        _valid_record("fresh", "New One"),
        _valid_record("dup", "Existing"),
        {"id": "bad", "name": "Broken"},
    ])

    result = await ImportService(repo).import_json(payload, existing)

    assert result.imported == 1
    assert result.skipped == 1
    assert result.errors == ["Invalid subscription data at index 2"]
    assert result.duplicates == ["Existing"]
    assert result.success
    assert [record_id for record_id, _ in repo.created] == ["fresh"]


@pytest.mark.asyncio
async def test_import_catches_duplicates_within_batch(recording_repo):
    repo = recording_repo()
    payload = json.dumps([_valid_record("x", "First"), _valid_record("x", "Second")])

    result = await ImportService(repo).import_json(payload, [])

    assert result.imported == 1
    assert result.duplicates == ["Second"]


@pytest.mark.asyncio
async def test_import_rejects_blank_ids(tmp_path):
    repo = LocalSubscriptionRepository(tmp_path / "ws.json")
    payload = json.dumps([_valid_record("", "A"), _valid_record("  ", "B")])

    first = await ImportService(repo).import_json(payload)
    second = await ImportService(repo).import_json(payload)

    assert first.imported == second.imported == 0
    assert first.duplicates == []
    assert first.errors == [
        "Invalid subscription data at index 0",
        "Invalid subscription data at index 1",
    ]
    assert await repo.list_all() == []


@pytest.mark.asyncio
async def test_import_single_object_and_envelope(recording_repo):
    repo = recording_repo()
    service = ImportService(repo)

    single = await service.import_json(json.dumps(_valid_record("s1", "Solo")), [])
    envelope = await service.import_json(
        json.dumps({"version": 1, "subscriptions": [_valid_record("e1", "Wrapped")]}), []
    )

    assert single.imported == 1
    assert envelope.imported == 1
    assert set(repo.subs) == {"s1", "e1"}


@pytest.mark.asyncio
async def test_import_reads_existing_from_repository(recording_repo, make_sub):
    repo = recording_repo([make_sub(id="dup", name="Existing")])

    result = await ImportService(repo).import_json(json.dumps([_valid_record("dup", "Existing")]))

    assert result.skipped == 1
    assert result.success
    assert repo.created == []


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, message", [
    ("{not json", "Invalid JSON format"),
    ("[]", "No subscription data found"),
])
async def test_import_fatal_problems(recording_repo, payload, message):
    result = await ImportService(recording_repo()).import_json(payload, [])
    assert result.errors == [message]
    assert not result.success


@pytest.mark.asyncio
async def test_import_store_failure_is_isolated(recording_repo):
    repo = recording_repo(fail_creates={"Broken Disk"})
    payload = json.dumps([_valid_record("a", "Broken Disk"), _valid_record("b", "Fine")])

    result = await ImportService(repo).import_json(payload, [])

    assert result.imported == 1
    assert result.errors == ['Failed to import "Broken Disk": disk full']


@pytest.mark.asyncio
async def test_round_trip_through_local_store(export_service, sample, tmp_path):
    exported = export_service.export_json(sample)
    repo = LocalSubscriptionRepository(tmp_path / "ws.json")

    result = await ImportService(repo).import_json(exported, [])
    stored = await repo.list_all()

    assert result.imported == 2
    assert sorted((s.name, s.amount, s.currency) for s in stored) == [
        ("Adobe", 20.0, "USD"),
        ("Netflix", 45.0, "SAR"),
    ]
    assert {s.id for s in stored} == {"n1", "a1"}

    again = await ImportService(repo).import_json(exported)
    assert again.imported == 0
    assert again.skipped == 2
    assert again.success
