from core.config import settings
from crud import analytics_crud
from crud.analytics_crud import get_interaction_count, get_page_view_count
from models.analytics import AnalyticsEvent, ErrorLog, SearchQuery, UploadStats


def _track(client, body, ip="10.0.0.1"):
    return client.post("/api/analytics/track", json=body, headers={"X-Forwarded-For": ip})


def test_every_valid_event_writes_one_raw_row(client, db):
    for name in ("page_view", "custom_thing", "search", "error"):
        before = db.query(AnalyticsEvent).count()
        r = _track(client, {"name": name, "url": "https://arhub.test/p"})
        assert r.status_code == 200
        assert r.json()["success"] is True
        db.expire_all()
        assert db.query(AnalyticsEvent).count() == before + 1


def test_raw_row_records_request_metadata(client, db):
    _track(client, {"name": "custom", "sessionId": "s-1", "properties": {"k": 1}}, ip="1.2.3.4, 5.6.7.8")
    row = db.query(AnalyticsEvent).one()
    assert row.session_id == "s-1"
    assert row.ip_address == "1.2.3.4"
    assert row.properties == {"k": 1}


def test_missing_session_defaults_to_unknown(client, db):
    _track(client, {"name": "custom"})
    assert db.query(AnalyticsEvent).one().session_id == "unknown"


def test_page_view_counter_starts_at_one_and_increments(client, db):
    _track(client, {"name": "page_view", "url": "https://x/y"})
    assert get_page_view_count(db, "/y") == 1
    _track(client, {"name": "page_view", "url": "https://x/y"})
    db.expire_all()
    assert get_page_view_count(db, "/y") == 2


def test_project_interaction_counts_pairs(client, db):
    body = {"name": "project_interaction", "properties": {"projectId": "p1", "action": "view"}}
    _track(client, body)
    _track(client, body)
    _track(client, {"name": "project_interaction", "properties": {"projectId": "p1", "action": "like"}})
    assert get_interaction_count(db, "p1", "view") == 2
    assert get_interaction_count(db, "p1", "like") == 1


def test_project_interaction_without_action_is_skipped(client, db):
    r = _track(client, {"name": "project_interaction", "properties": {"projectId": "p1"}})
    assert r.status_code == 200
    assert get_interaction_count(db, "p1", "view") == 0


def test_search_query_is_truncated(client, db):
    _track(client, {"name": "search", "properties": {"query": "q" * 400, "resultsCount": 7}})
    row = db.query(SearchQuery).one()
    assert len(row.query) == 255
    assert row.results_count == 7


def test_file_upload_defaults(client, db):
    _track(client, {"name": "file_upload", "properties": {"fileName": "scene.glb"}})
    row = db.query(UploadStats).one()
    assert row.file_name == "scene.glb"
    assert row.file_type == "unknown"
    assert row.success is False


def test_error_event_is_truncated_to_500(client, db):
    _track(client, {"name": "error", "url": "https://arhub.test/upload",
                    "properties": {"error": "e" * 900, "context": "upload"}})
    row = db.query(ErrorLog).one()
    assert len(row.error) == 500
    assert row.context == "upload"
    assert row.url == "https://arhub.test/upload"


def test_bad_properties_do_not_fail_the_request(client, db):
    r = _track(client, {"name": "search", "properties": {"query": "cube", "resultsCount": "many"}})
    assert r.status_code == 200
    assert db.query(AnalyticsEvent).count() == 1
    assert db.query(SearchQuery).count() == 0


def test_aggregate_failure_is_swallowed(client, db, monkeypatch):
    def boom(db, event, props):
        raise RuntimeError("side table down")

    monkeypatch.setitem(analytics_crud.AGGREGATORS, "page_view", boom)
    r = _track(client, {"name": "page_view", "url": "https://x/y"})
    assert r.status_code == 200
    assert db.query(AnalyticsEvent).count() == 1


def test_empty_name_is_rejected(client, db):
    r = _track(client, {"name": ""})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Invalid analytics data"
    assert body["details"][0]["field"] == "name"
    assert db.query(AnalyticsEvent).count() == 0


def test_malformed_url_is_rejected(client, db):
    r = _track(client, {"name": "page_view", "url": "not a url"})
    assert r.status_code == 400
    assert db.query(AnalyticsEvent).count() == 0


def test_rate_limit_rejects_without_touching_storage(client, db, monkeypatch):
    monkeypatch.setattr(settings, "ANALYTICS_RATE_LIMIT", 2)
    assert _track(client, {"name": "a"}).status_code == 200
    assert _track(client, {"name": "a"}).status_code == 200
    r = _track(client, {"name": "a"})
    assert r.status_code == 429
    assert r.json() == {"success": False, "error": "Rate limit exceeded", "timestamp": r.json()["timestamp"]}
    assert db.query(AnalyticsEvent).count() == 2
    # Other callers have their own window
    assert _track(client, {"name": "a"}, ip="10.0.0.2").status_code == 200
