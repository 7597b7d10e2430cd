# tests/test_api_portfolio.py
CSV = (
    "Property ID,Address,City,Zip,County,Property Type,BPO,Strike Price,Estimated ROI,Foreclosure\n"
    "P-1,1 Main St,Kingston,12401,Ulster,Single Family,200000,120000,18.5,Yes\n"
    "P-2,2 Oak Ave,Beacon,12508,Dutchess,2-Family,300000,210000,9,no\n"
    "P-3,,Beacon,12508,Dutchess,2-Family,300000,210000,9,no\n"
)


def _import(client):
    r = client.post("/properties/import", files={"file": ("props.csv", CSV.encode(), "text/csv")})
    assert r.status_code == 200, r.text
    return r.json()


def test_import_reports_counts_and_mappings(client):
    data = _import(client)
    assert data["success"] == 2
    assert data["failed"] == 1
    assert data["errors"] == ["Row 3: Missing required fields (address, city, or zip_code)"]
    assert data["mappings"]["Strike Price"] == "strike_price"


def test_import_rejects_header_only_file(client):
    r = client.post("/properties/import", files={"file": ("empty.csv", b"Address,City\n", "text/csv")})
    assert r.status_code == 400


def test_list_filter_and_get_properties(client):
    _import(client)

    r = client.get("/properties")
    assert r.status_code == 200
    assert r.json()["count"] == 2
    assert r.json()["active_filters"] == 0

    r = client.get("/properties", params={"city": "Beacon"})
    data = r.json()
    assert data["total"] == 2
    assert [p["property_id"] for p in data["items"]] == ["P-2"]
    assert data["active_filters"] == 1

    r = client.get("/properties", params={"q": "ulster", "min_roi": 10})
    assert [p["property_id"] for p in r.json()["items"]] == ["P-1"]

    assert client.get("/properties/P-1").json()["county"] == "Ulster"
    assert client.get("/properties/NOPE").status_code == 404


def test_inverted_range_is_400(client):
    r = client.get("/properties", params={"min_price": 500, "max_price": 100})
    assert r.status_code == 400


def test_filter_options_and_summary(client):
    _import(client)

    opts = client.get("/properties/filters").json()
    assert opts["cities"] == ["Beacon", "Kingston"]
    assert opts["max_price"] == 210_000.0

    data = client.get("/portfolio/summary").json()
    assert data["summary"]["total_properties"] == 2
    assert data["summary"]["foreclosures"] == 1
    assert data["summary"]["total_bpo"] == 500_000.0
    # one property each; ties sort by county name
    assert [c["county"] for c in data["counties"]] == ["Dutchess", "Ulster"]
    assert data["pipeline"][0]["status"] == "Active"
    assert data["pipeline"][0]["deal_count"] == 2


def test_export_csv_and_empty_export(client):
    assert client.get("/properties/export/csv").status_code == 404

    _import(client)
    r = client.get("/properties/export/csv")
    assert r.status_code == 200
    header = r.text.splitlines()[0]
    assert header.startswith("Property ID,Address,City,State,ZIP Code")
    assert "$120,000" in r.text

    assert client.get("/properties/export/pdf").status_code == 422


def test_export_temp_dir_is_removed_after_response(client, monkeypatch):
    import tempfile
    from pathlib import Path

    made = []
    real_mkdtemp = tempfile.mkdtemp

    def recording_mkdtemp(*args, **kwargs):
        made.append(real_mkdtemp(*args, **kwargs))
        return made[-1]

    monkeypatch.setattr(tempfile, "mkdtemp", recording_mkdtemp)

    assert client.get("/properties/export/csv").status_code == 404
    _import(client)
    assert client.get("/properties/export/csv").status_code == 200

    exports = [d for d in made if Path(d).name.startswith("dealscope-export-")]
    assert len(exports) == 2
    assert not any(Path(d).exists() for d in exports)
