"""
Module for turning dBUS responses into tables.

This module flattens the typed responses returned by DbusClient into pandas
DataFrames and saves them in a standardized format.
"""

from pathlib import Path
from typing import Union

import pandas as pd
from loguru import logger

from dbus_api.exceptions import ExportError
from dbus_api.models import (
    ItinerariosLineaResponse,
    LineasParadaResponse,
    ListadoLineasResponse,
    ParadasItinerarioResponse,
    ParadasSentidoResponse,
    TiemposParadaResponse,
)

ARRIVAL_TIME_COLUMNS = [
    "stop_code",
    "line_id",
    "line_code",
    "line_name",
    "itinerary_id",
    "destination",
    "minutes",
    "time",
    "header",
    "type",
    "created",
]

STOP_COLUMNS = ["id", "code", "description", "order", "regular"]
LINE_COLUMNS = ["id", "code", "name", "color"]

StopsResponse = Union[ParadasItinerarioResponse, ParadasSentidoResponse]
LinesResponse = Union[ListadoLineasResponse, LineasParadaResponse]


def arrival_times_frame(response: TiemposParadaResponse) -> pd.DataFrame:
    """
    Flatten the arrival times of a stop into one row per predicted arrival.

    Args:
        response: Result of tiempos_parada or tiempos_parada_bus

    Returns:
        DataFrame with the columns in ARRIVAL_TIME_COLUMNS
    """
    stop_code = response.stop.code if response.stop else None
    rows = []
    for arrival in response.arrival_times:
        itinerary = arrival.itinerary
        line = itinerary.line if itinerary else None
        rows.append(
            {
                "stop_code": stop_code,
                "line_id": line.id if line else None,
                "line_code": line.code if line else None,
                "line_name": line.name if line else None,
                "itinerary_id": itinerary.id if itinerary else None,
                "destination": itinerary.destination if itinerary else None,
                "minutes": arrival.minutes,
                "time": arrival.time,
                "header": arrival.header,
                "type": arrival.type,
                "created": arrival.created,
            }
        )
    return pd.DataFrame(rows, columns=ARRIVAL_TIME_COLUMNS)


def stops_frame(response: StopsResponse) -> pd.DataFrame:
    """
    Stops of an itinerary or direction, in route order.

    The itinerary id is added as a column when the response carries one.
    """
    df = pd.DataFrame(
        [stop.model_dump(include=set(STOP_COLUMNS)) for stop in response.stops],
        columns=STOP_COLUMNS,
    )
    if response.itinerary is not None and response.itinerary.id is not None:
        df["itinerary_id"] = response.itinerary.id
    return df


def lines_frame(
    response: Union[LinesResponse, ItinerariosLineaResponse],
) -> pd.DataFrame:
    """
    Lines listed by a response.

    For itinerariosLinea responses, the line each itinerary belongs to is
    used, falling back to the response-level line.
    """
    if isinstance(response, ItinerariosLineaResponse):
        lines = [it.line or response.line for it in response.itineraries]
        lines = [line for line in lines if line is not None]
    else:
        lines = response.lines

    return pd.DataFrame(
        [line.model_dump(include=set(LINE_COLUMNS)) for line in lines],
        columns=LINE_COLUMNS,
    )


def save_frame(
    df: pd.DataFrame,
    output_path: Path,
    format: str = "parquet",
) -> Path:
    """
    Save a DataFrame to a file.

    Args:
        df: DataFrame to save
        output_path: Path where the file should be saved
        format: Output format (parquet, csv, json)

    Returns:
        Path to the saved file

    Raises:
        ExportError: If the format is unsupported or the file cannot be saved
    """
    if format not in ("parquet", "csv", "json"):
        raise ExportError(f"Unsupported format: {format}")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        if format == "parquet":
            df.to_parquet(
                output_path, engine="pyarrow", compression="snappy", index=False
            )
        elif format == "csv":
            df.to_csv(output_path, index=False)
        else:
            df.to_json(output_path, orient="records", indent=2)
    except (OSError, ValueError, ImportError) as e:
        logger.error(
            "Failed to save {file_name}: {error}",
            file_name=output_path.name,
            error=e,
        )
        raise ExportError(f"Failed to save {format} file: {e}") from e

    logger.info(
        "Saved {rows:,} rows to {path}",
        rows=len(df),
        path=str(output_path),
    )
    return output_path
