"""
Podcasts-ETL Daily DAG

This DAG orchestrates the daily ETL pipeline for the Top Podcasts chart:
1. Loads the CSV export into the bronze table (full snapshot)
2. Cleans bronze rows into the silver table (identity resolution + cleaning)
3. Runs data quality checks on the silver table

Schedule: Daily at 06:00 Europe/London
"""
from datetime import datetime, timedelta

from airflow import DAG
from airflow.operators.empty import EmptyOperator
from airflow.operators.python import PythonOperator
import pendulum


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

TZ = pendulum.timezone("Europe/London")

# Default arguments applied to all tasks
default_args = {
    "owner": "podcast-etl",
    "depends_on_past": False,
    "email_on_failure": False,
    "email_on_retry": False,
    # The stages never retry internally; Airflow re-invokes a failed run
    "retries": 2,
    "retry_delay": timedelta(minutes=5),
}


# -----------------------------------------------------------------------------
# Task Callable Functions
# -----------------------------------------------------------------------------

def _database_url() -> str:
    """Resolve the database URL from the Airflow connection, then the environment."""
    import os
    from airflow.hooks.base import BaseHook

    try:
        conn = BaseHook.get_connection('postgres_default')
        return conn.get_uri().replace('postgres://', 'postgresql://')
    except Exception as e:
        print(f"Warning: Could not get Airflow connection, trying DATABASE_URL: {e}")

    database_url = os.getenv('DATABASE_URL')
    if not database_url:
        raise ValueError(
            "DATABASE_URL must be configured via Airflow connection 'postgres_default' "
            "or the DATABASE_URL environment variable"
        )
    return database_url


def load_bronze(**context):
    """Replace the bronze table with today's CSV export."""
    import os

    from podcast_etl.bronze.db_operations import BronzeDB
    from podcast_etl.bronze.main import run_bronze_load

    csv_path = os.getenv('TOP_PODCASTS_CSV', '/opt/airflow/data/top_podcasts.csv')
    print(f"Loading bronze from {csv_path}")

    stats = run_bronze_load(db=BronzeDB(_database_url()), csv_path=csv_path)

    print(f"BRONZE TASK - rows read: {stats['read']}, written: {stats['written']}")
    return stats


def load_silver(**context):
    """Rebuild the silver table from bronze."""
    from podcast_etl.silver.db_operations import SilverDB
    from podcast_etl.silver.lookups import load_silver_lookups
    from podcast_etl.silver.main import run_silver_load

    events = []

    def record_event(event, payload):
        events.append(event)
        print(f"SILVER EVENT {event}: {payload}")

    stats = run_silver_load(
        db=SilverDB(_database_url()),
        lookups=load_silver_lookups(),
        on_event=record_event,
    )

    print(f"SILVER TASK - fetched: {stats['fetched']}, written: {stats['written']}")
    return {**stats, 'events': events}


def check_silver(**context):
    """Fail the task when any silver data quality check fails."""
    from podcast_etl.quality.main import run_quality_checks
    from podcast_etl.silver.db_operations import SilverDB
    from podcast_etl.silver.lookups import load_silver_lookups

    results = run_quality_checks(SilverDB(_database_url()), load_silver_lookups())

    for result in results:
        status = 'PASS' if result.passed else 'FAIL'
        print(f"[{status}] {result.name} ({result.failures} failures) {result.samples}")

    failed = [result.name for result in results if not result.passed]
    if failed:
        raise ValueError(f"Silver quality checks failed: {', '.join(failed)}")

    return {'checks': len(results)}


# -----------------------------------------------------------------------------
# DAG Definition
# -----------------------------------------------------------------------------

with DAG(
    dag_id="podcasts_etl_daily",
    default_args=default_args,
    description="Daily bronze/silver load of the Top Podcasts chart",
    schedule="0 6 * * *",
    start_date=datetime(2025, 10, 1, tzinfo=TZ),
    catchup=False,
    max_active_runs=1,
    tags=["etl", "podcasts", "daily"],
) as dag:

    start = EmptyOperator(task_id="start")

    bronze = PythonOperator(
        task_id="load_bronze",
        python_callable=load_bronze,
        doc_md="""
        **Load bronze**

        - Truncates bronze.spotify_top_podcasts
        - Inserts every row of the CSV export as untyped text
        """
    )

    silver = PythonOperator(
        task_id="load_silver",
        python_callable=load_silver,
        doc_md="""
        **Load silver**

        - Resolves one canonical show id per (show name, publisher)
        - Cleans and types every field
        - Replaces silver.spotify_top_podcasts in one transaction
        """
    )

    quality = PythonOperator(
        task_id="check_silver",
        python_callable=check_silver,
        retries=0,
        doc_md="""
        **Silver data quality**

        - Rank completeness and uniqueness per region and day
        - Closed region vocabulary
        - No placeholder text in narrative fields
        """
    )

    end = EmptyOperator(task_id="end")

    start >> bronze >> silver >> quality >> end
