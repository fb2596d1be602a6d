# dags/temperature_grid_dag.py
from __future__ import annotations
import os
from datetime import datetime, timedelta
from airflow.decorators import dag, task
from airflow.exceptions import AirflowFailException
from tempgrid.client import TableFetchError, TemperatureTableClient
from tempgrid.config import load_year_range
from tempgrid.models import ConfigError
from tempgrid.service import process_rows


@dag(
    dag_id="temperature_grid",
    start_date=datetime(2025, 1, 1),
    schedule="0 6 * * *",
    catchup=False,
    default_args={"owner": "tempgrid", "retries": 1, "retry_delay": timedelta(minutes=2)},
    tags=["weather", "temperature-grid"],
)
def temperature_grid():
    @task(execution_timeout=timedelta(minutes=5))
    def build_dataset() -> dict:
        try:
            years = load_year_range()
        except ConfigError as e:
            raise AirflowFailException(f"build_dataset config error: {e}")

        source = os.getenv("TEMPGRID_DATA_URL")
        try:
            rows = TemperatureTableClient().fetch_rows(source)
        except TableFetchError as e:
            # includes HTTP status/body snippets from our client
            raise AirflowFailException(f"build_dataset fetch error: {e}")

        dataset = process_rows(rows, years)
        return {
            "start_year": years.start_year,
            "end_year": years.end_year,
            "cells": len(dataset.data),
            "filled_days": sum(c.filled_days for c in dataset.data),
            "empty_months": sum(1 for c in dataset.data if c.avg_max is None),
        }

    @task
    def publish(summary: dict) -> None:
        print(
            f"Temperature grid {summary['start_year']}-{summary['end_year']}: "
            f"{summary['cells']} cells, {summary['filled_days']} filled days, "
            f"{summary['empty_months']} empty months"
        )

    publish(build_dataset())

dag = temperature_grid()
