"""
Response models for the dBUS web service.

Each endpoint answers with a JSON envelope carrying a status string
("estado"), notices ("avisos") and an endpoint-specific payload. The wire
keys are Spanish and differ per endpoint (a stop list comes back as "lista"
from one endpoint, line lists as "lineas" from another), so every field
binds its exact wire key through an alias while the Python attribute uses a
descriptive name. Models can also be built with the attribute names.

The service is loosely documented, so every field is optional and list
fields default to empty.
"""

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class DbusModel(BaseModel):
    """Common settings: immutable, unknown keys ignored, numeric ids as str."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def null_lists_to_empty(cls, data: Any) -> Any:
        # The service sends null for empty collections
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, field in cls.model_fields.items():
            if field.default_factory is None:
                continue
            for key in (field.alias, name):
                if key in data and data[key] is None:
                    data[key] = []
        return data


class Notice(DbusModel):
    """A service notice. Its shape is not fixed, so unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    title: Optional[str] = Field(None, validation_alias=AliasChoices("titulo", "title"))
    text: Optional[str] = Field(
        None, validation_alias=AliasChoices("texto", "text", "desc")
    )


NoticeField = Union[Notice, List[Notice], None]


class Line(DbusModel):
    """A bus line."""

    id: Optional[str] = None
    code: Optional[str] = Field(None, alias="cod")
    name: Optional[str] = Field(None, alias="nombre")
    color: Optional[str] = None


class Direction(DbusModel):
    """One travel direction ("sentido") of a line."""

    id: Optional[str] = None
    name: Optional[str] = Field(None, alias="nombre")


class RoutePoint(DbusModel):
    model_config = ConfigDict(extra="allow")

    latitude: Optional[float] = Field(
        None, validation_alias=AliasChoices("lat", "latitud", "latitude")
    )
    longitude: Optional[float] = Field(
        None, validation_alias=AliasChoices("lon", "lng", "longitud", "longitude")
    )


class Itinerary(DbusModel):
    """
    A scheduled path variant of a line.

    The route points are only filled in by the recorridoLinea endpoint.
    """

    id: Optional[str] = None
    code: Optional[str] = Field(None, alias="cod")
    destination: Optional[str] = Field(None, alias="destino")
    name: Optional[str] = Field(None, alias="nombre")
    line: Optional[Line] = Field(None, alias="linea")
    current: Optional[bool] = Field(None, alias="actual")
    points: List[RoutePoint] = Field(default_factory=list, alias="puntos")
    route_type: Optional[int] = Field(None, alias="tipoRecorrido")
    color_rgb: Optional[int] = Field(None, alias="colorRGB")
    regular: Optional[int] = Field(None, alias="habitual")


class Stop(DbusModel):
    """A physical bus stop ("parada")."""

    id: Optional[str] = None
    code: Optional[str] = Field(None, alias="cod")
    description: Optional[str] = Field(None, alias="desc")
    order: Optional[int] = Field(None, alias="ordenParada")
    regular: Optional[bool] = Field(None, alias="habitual")


class ArrivalTime(DbusModel):
    """A predicted arrival ("tiempo") at a stop."""

    itinerary: Optional[Itinerary] = Field(None, alias="itinerario")
    created: Optional[str] = Field(None, alias="creacion")
    minutes: Optional[int] = Field(None, alias="minutos")
    header: Optional[bool] = Field(None, alias="cabecera")
    type: Optional[int] = Field(None, alias="tipo")
    time: Optional[str] = Field(None, alias="hora")


class DbusResponse(DbusModel):
    """Envelope shared by every endpoint."""

    status: Optional[str] = Field(None, alias="estado")
    notices: NoticeField = Field(None, alias="avisos")


class TiemposParadaResponse(DbusResponse):
    stop: Optional[Stop] = Field(None, alias="parada")
    arrival_times: List[ArrivalTime] = Field(default_factory=list, alias="tiempos")


class DatosVehiculoResponse(DbusResponse):
    """Vehicle data. The payload is undocumented, so extra keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    itinerary: Optional[Itinerary] = Field(None, alias="itinerario")


class AvisosResponse(DbusResponse):
    @property
    def notice_list(self) -> List[Notice]:
        if self.notices is None:
            return []
        if isinstance(self.notices, Notice):
            return [self.notices]
        return list(self.notices)


class _TripsResponse(DbusResponse):
    itinerary: Optional[Itinerary] = Field(None, alias="itinerario")
    times: List[str] = Field(default_factory=list, alias="horas")


class ExpedicionesParadaItinerarioResponse(_TripsResponse):
    pass


class ExpedicionesParadaSentidoResponse(_TripsResponse):
    pass


class ExpedicionesItinerarioResponse(_TripsResponse):
    """The itinerary here has no documented shape; non-objects are kept raw."""

    itinerary: Union[Itinerary, Any] = Field(
        None, alias="itinerario", union_mode="left_to_right"
    )


class ItinerariosLineaResponse(DbusResponse):
    line: Optional[Line] = Field(None, alias="linea")
    itineraries: List[Itinerary] = Field(default_factory=list, alias="lista")


class SentidosLineaResponse(DbusResponse):
    line: Optional[Line] = Field(None, alias="linea")
    directions: List[Direction] = Field(default_factory=list, alias="lista")


class LineasParadaResponse(DbusResponse):
    lines: List[Line] = Field(default_factory=list, alias="lista")


class ParadasItinerarioResponse(DbusResponse):
    itinerary: Optional[Itinerary] = Field(None, alias="itinerario")
    stops: List[Stop] = Field(default_factory=list, alias="lista")


class ParadasSentidoResponse(DbusResponse):
    itinerary: Optional[Itinerary] = Field(None, alias="itinerario")
    stops: List[Stop] = Field(default_factory=list, alias="lista")


class RecorridoLineaResponse(DbusResponse):
    itineraries: List[Itinerary] = Field(default_factory=list, alias="itinerarios")


class ListadoLineasResponse(DbusResponse):
    lines: List[Line] = Field(default_factory=list, alias="lineas")


class PuntosParadaResponse(DbusResponse):
    points: List[RoutePoint] = Field(default_factory=list, alias="puntos")
