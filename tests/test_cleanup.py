from sqlalchemy.exc import OperationalError

from countercache.models import User
from countercache.services.cleanup import drop_orphaned_temporary_tables
from countercache.services.statements import TEMP_TABLE_PATTERN


def test_nothing_to_clean(store):
    report = drop_orphaned_temporary_tables(store)
    assert report.dropped == []
    assert report.ok


def test_drops_leftover_temp_and_regular_tables(store):
    store.execute_statement("CREATE TEMP TABLE counter_tmp_posts_comments AS SELECT 1 AS count")
    store.execute_statement("CREATE TABLE counter_tmp_users_reviews (count INTEGER)")
    store.execute_statement("CREATE TABLE unrelated_count (count INTEGER)")

    report = drop_orphaned_temporary_tables(store)

    assert report.dropped == ["counter_tmp_posts_comments", "counter_tmp_users_reviews"]
    assert store.list_tables(TEMP_TABLE_PATTERN) == []
    assert store.list_tables("^unrelated_count$") == ["unrelated_count"]
    assert store.list_tables(f"^{User.__tablename__}$") == ["users"]

    store.execute_statement("DROP TABLE unrelated_count")


def test_cleanup_is_idempotent(store):
    store.execute_statement("CREATE TEMP TABLE counter_tmp_anime_favorites AS SELECT 1 AS count")

    assert drop_orphaned_temporary_tables(store).dropped == ["counter_tmp_anime_favorites"]
    assert drop_orphaned_temporary_tables(store).dropped == []


def test_failed_drop_does_not_stop_cleanup(store, monkeypatch):
    store.execute_statement("CREATE TEMP TABLE counter_tmp_a_b AS SELECT 1 AS count")
    store.execute_statement("CREATE TEMP TABLE counter_tmp_c_d AS SELECT 1 AS count")

    execute_statement = store.execute_statement

    def flaky(sql):
        if "counter_tmp_a_b" in sql:
            raise OperationalError(sql, None, Exception("permission denied"))
        return execute_statement(sql)

    monkeypatch.setattr(store, "execute_statement", flaky)

    report = drop_orphaned_temporary_tables(store)

    assert report.dropped == ["counter_tmp_c_d"]
    assert not report.ok
    assert [e.table for e in report.errors] == ["counter_tmp_a_b"]
    assert "permission denied" in report.errors[0].reason

    monkeypatch.undo()
    store.execute_statement("DROP TABLE counter_tmp_a_b")


def test_mixed_case_leftover_is_dropped_by_exact_name(store, monkeypatch):
    store.execute_statement('CREATE TABLE "counter_tmp_Anime_favorites" (count INTEGER)')

    execute_statement = store.execute_statement
    issued = []

    def recording(sql):
        issued.append(sql)
        return execute_statement(sql)

    monkeypatch.setattr(store, "execute_statement", recording)

    report = drop_orphaned_temporary_tables(store)

    assert report.dropped == ["counter_tmp_Anime_favorites"]
    assert issued == ['DROP TABLE IF EXISTS "counter_tmp_Anime_favorites"']
    assert store.list_tables(TEMP_TABLE_PATTERN) == []
