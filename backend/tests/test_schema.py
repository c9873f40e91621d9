from sqlalchemy import create_engine, inspect

from db.schema import ensure_application_schema


def test_schema_creates_application_tables_on_given_engine():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    ensure_application_schema(engine)
    ensure_application_schema(engine)
    assert {"inspection_lists", "product_records", "app_settings"} <= set(inspect(engine).get_table_names())
