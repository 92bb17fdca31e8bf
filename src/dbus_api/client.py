"""
Client for the dBUS (San Sebastián municipal buses) web service.

Every endpoint is a plain GET against a fixed base URL with a handful of
query parameters, answered with a JSON envelope. This module builds those
requests, decodes the responses into the models in dbus_api.models and maps
HTTP failures onto the exceptions in dbus_api.exceptions.

Each endpoint has a blocking method and an ``*_async`` twin returning a
concurrent.futures.Future; the blocking form simply waits on the future.
"""

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import date, time
from typing import Any, Dict, Optional, Type, TypeVar, Union
from urllib.parse import quote_plus

import requests
from loguru import logger
from pydantic import ValidationError

from dbus_api.config import (
    BASE_URL,
    COMPANY_CODE,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_WORKERS,
    DEFAULT_READ_TIMEOUT,
    ClientConfig,
    validate_language,
)
from dbus_api.exceptions import (
    ApiConnectionError,
    ConfigurationError,
    ResponseParseError,
    error_for_status,
)
from dbus_api.models import (
    AvisosResponse,
    DatosVehiculoResponse,
    DbusResponse,
    ExpedicionesItinerarioResponse,
    ExpedicionesParadaItinerarioResponse,
    ExpedicionesParadaSentidoResponse,
    ItinerariosLineaResponse,
    LineasParadaResponse,
    ListadoLineasResponse,
    ParadasItinerarioResponse,
    ParadasSentidoResponse,
    PuntosParadaResponse,
    RecorridoLineaResponse,
    SentidosLineaResponse,
    TiemposParadaResponse,
)

ResponseT = TypeVar("ResponseT", bound=DbusResponse)
Identifier = Union[str, int]
DateArg = Union[date, str]
TimeArg = Union[time, str]

ACCEPT_HEADERS = {"Accept": "application/json"}


def build_url(
    path: str,
    params: Optional[Dict[str, str]] = None,
    base_url: str = BASE_URL,
) -> str:
    """
    Build the full request URL for an endpoint.

    Keys and values are form-encoded and kept in insertion order. An empty
    parameter set yields the bare endpoint URL.

    Args:
        path: Endpoint path, e.g. 'tiemposParada'
        params: Query parameters
        base_url: Service root, ending in '/'

    Returns:
        The URL to request
    """
    url = base_url + path
    if not params:
        return url
    query = "&".join(
        f"{quote_plus(key)}={quote_plus(value)}" for key, value in params.items()
    )
    return f"{url}?{query}"


def _is_digits(value: Any, length: int) -> bool:
    return (
        isinstance(value, str)
        and len(value) == length
        and value.isascii()
        and value.isdigit()
    )


def format_date(value: DateArg) -> str:
    """Render a date the way the service expects it (ddMMyy)."""
    if isinstance(value, date):
        return value.strftime("%d%m%y")
    if _is_digits(value, 6):
        return value
    raise ConfigurationError(
        f"Invalid date {value!r}: expected a date or a ddMMyy string"
    )


def format_time(value: TimeArg) -> str:
    """Render a time of day the way the service expects it (HHmm)."""
    if isinstance(value, time):
        return value.strftime("%H%M")
    if _is_digits(value, 4):
        return value
    raise ConfigurationError(
        f"Invalid time {value!r}: expected a time or an HHmm string"
    )


def get_json_response(
    session: requests.Session,
    url: str,
    response_cls: Type[ResponseT],
    timeout: tuple = (DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT),
) -> ResponseT:
    """
    Issue a GET and decode the body into a response model.

    Args:
        session: HTTP session used to send the request
        url: Full request URL
        response_cls: Model the JSON body is validated against
        timeout: (connect, read) timeouts in seconds

    Returns:
        The decoded response model

    Raises:
        ApiConnectionError: If no HTTP response was obtained
        ApiError: Or one of its subclasses, for non-2xx statuses
        ResponseParseError: If the body is empty or not the expected JSON
    """
    logger.debug("GET {url}", url=url)
    try:
        response = session.get(url, headers=ACCEPT_HEADERS, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error("Request to {url} failed: {error}", url=url, error=e)
        raise ApiConnectionError(f"Error connecting to API: {e}") from e

    body = response.text or ""
    if not 200 <= response.status_code < 300:
        logger.warning(
            "{url} answered with status {status}",
            url=url,
            status=response.status_code,
        )
        raise error_for_status(response.status_code, body)

    if not body.strip():
        logger.error("Empty response body from {url}", url=url)
        raise ResponseParseError("Empty API response body", body)

    try:
        payload = response.json()
    except ValueError as e:
        logger.error("Invalid JSON from {url}: {error}", url=url, error=e)
        raise ResponseParseError(f"Error parsing API response: {e}", body) from e

    if not isinstance(payload, dict):
        raise ResponseParseError(
            f"Expected a JSON object, got {type(payload).__name__}", body
        )

    try:
        return response_cls.model_validate(payload)
    except ValidationError as e:
        logger.error(
            "Response from {url} does not match {model}: {error}",
            url=url,
            model=response_cls.__name__,
            error=e,
        )
        raise ResponseParseError(f"Unexpected response shape: {e}", body) from e


class DbusClient:
    """
    Client for the dBUS web service.

    Configuration is fixed at construction. The client holds no per-call
    state, so one instance can be shared between threads.

    Example:
        >>> with DbusClient(default_language="en") as client:
        ...     times = client.tiempos_parada("200")
        ...     [t.minutes for t in times.arrival_times]
    """

    def __init__(
        self,
        default_language: str = DEFAULT_LANGUAGE,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        session: Optional[requests.Session] = None,
        executor: Optional[Executor] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        """
        Initialize the client.

        Args:
            default_language: Language used when a call does not pass one
            connect_timeout: Connect timeout in seconds
            read_timeout: Read timeout in seconds
            session: Pre-configured requests session; one is created if omitted
            executor: Executor running the async calls; a thread pool of
                max_workers threads is created if omitted
            max_workers: Size of the thread pool created when no executor is given

        Raises:
            ConfigurationError: If any option is invalid
        """
        self._config = ClientConfig(
            default_language=default_language,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            max_workers=max_workers,
        )
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._owns_executor = executor is None
        self._executor = (
            executor
            if executor is not None
            else ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="dbus")
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def default_language(self) -> str:
        return self._config.default_language

    @property
    def connect_timeout(self) -> float:
        return self._config.connect_timeout

    @property
    def read_timeout(self) -> float:
        return self._config.read_timeout

    def close(self) -> None:
        """Release the session and thread pool if this client created them."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "DbusClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_language_or_default(self, language: Optional[str] = None) -> str:
        """
        Resolve the language for a call.

        Raises:
            ConfigurationError: If the resolved code is not es, eu, en or fr
        """
        if language is None:
            language = self.default_language
        return validate_language(language)

    def _submit(
        self,
        path: str,
        params: Optional[Dict[str, str]],
        response_cls: Type[ResponseT],
    ) -> "Future[ResponseT]":
        url = build_url(path, params)
        try:
            return self._executor.submit(
                get_json_response,
                self._session,
                url,
                response_cls,
                self._config.timeout,
            )
        except RuntimeError as e:
            # Raised by an executor that has been shut down
            raise ConfigurationError(f"Client is closed: {e}") from e

    # Asynchronous endpoints

    def tiempos_parada_async(
        self,
        cod_parada: Identifier,
        idioma: Optional[str] = None,
    ) -> "Future[TiemposParadaResponse]":
        """Estimated arrival times at a stop."""
        params = {
            "codParada": str(cod_parada),
            "idioma": self.get_language_or_default(idioma),
        }
        return self._submit("tiemposParada", params, TiemposParadaResponse)

    def tiempos_parada_bus_async(
        self,
        cod_parada: Identifier,
        cod_vehiculo: Identifier,
        idioma: Optional[str] = None,
    ) -> "Future[TiemposParadaResponse]":
        """Estimated arrival times of one vehicle at a stop."""
        params = {
            "codParada": str(cod_parada),
            "codVehiculo": str(cod_vehiculo),
            "idioma": self.get_language_or_default(idioma),
        }
        return self._submit("tiemposParadaBus", params, TiemposParadaResponse)

    def datos_vehiculo_async(
        self,
        cod_vehiculo: Identifier,
        pet_itinerario: bool = False,
    ) -> "Future[DatosVehiculoResponse]":
        """Data for one vehicle, optionally with its current itinerary."""
        params = {
            "codVehiculo": str(cod_vehiculo),
            "codEmpresa": COMPANY_CODE,
            "petItinerario": "true" if pet_itinerario else "false",
        }
        return self._submit("datosVehiculo", params, DatosVehiculoResponse)

    def avisos_async(self, idioma: Optional[str] = None) -> "Future[AvisosResponse]":
        """Service notices."""
        params = {"idioma": self.get_language_or_default(idioma)}
        return self._submit("avisos", params, AvisosResponse)

    def expediciones_parada_itinerario_async(
        self,
        id_itinerario: Identifier,
        id_parada: Identifier,
        fecha: DateArg,
        hora: TimeArg,
        idioma: Optional[str] = None,
    ) -> "Future[ExpedicionesParadaItinerarioResponse]":
        """Scheduled trips of an itinerary through a stop, from a date and time."""
        language = self.get_language_or_default(idioma)
        params = {
            "idItinerario": str(id_itinerario),
            "idParada": str(id_parada),
            "fecha": format_date(fecha),
            "hora": format_time(hora),
            "idioma": language,
        }
        return self._submit(
            "expedicionesParadaItinerario",
            params,
            ExpedicionesParadaItinerarioResponse,
        )

    def expediciones_parada_sentido_async(
        self,
        id_sentido: Identifier,
        id_parada: Identifier,
        fecha: DateArg,
        hora: TimeArg,
        idioma: Optional[str] = None,
    ) -> "Future[ExpedicionesParadaSentidoResponse]":
        """Scheduled trips in one direction through a stop, from a date and time."""
        language = self.get_language_or_default(idioma)
        params = {
            "idSentido": str(id_sentido),
            "idParada": str(id_parada),
            "fecha": format_date(fecha),
            "hora": format_time(hora),
            "idioma": language,
        }
        return self._submit(
            "expedicionesParadaSentido",
            params,
            ExpedicionesParadaSentidoResponse,
        )

    def itinerarios_linea_async(
        self,
        id_linea: Identifier,
        idioma: Optional[str] = None,
        id_parada: Optional[Identifier] = None,
    ) -> "Future[ItinerariosLineaResponse]":
        """Itineraries of a line, optionally only those serving a stop."""
        params = {
            "idLinea": str(id_linea),
            "idioma": self.get_language_or_default(idioma),
        }
        if id_parada is not None:
            params["idParada"] = str(id_parada)
        return self._submit("itinerariosLinea", params, ItinerariosLineaResponse)

    def sentidos_linea_async(
        self,
        id_linea: Identifier,
        idioma: Optional[str] = None,
        id_parada: Optional[Identifier] = None,
    ) -> "Future[SentidosLineaResponse]":
        """Directions of a line, optionally only those serving a stop."""
        params = {
            "idLinea": str(id_linea),
            "idioma": self.get_language_or_default(idioma),
        }
        if id_parada is not None:
            params["idParada"] = str(id_parada)
        return self._submit("sentidosLinea", params, SentidosLineaResponse)

    def expediciones_itinerario_async(
        self,
        id_parada: Identifier,
        tipo_dia: str,
        h_inicio: TimeArg,
        h_fin: TimeArg,
        id_itinerario: Identifier,
    ) -> "Future[ExpedicionesItinerarioResponse]":
        """Trips of an itinerary at a stop within a time window for a day type."""
        params = {
            "idParada": str(id_parada),
            "tipoDia": str(tipo_dia),
            "hInicio": format_time(h_inicio),
            "hFin": format_time(h_fin),
            "idItinerario": str(id_itinerario),
        }
        return self._submit(
            "expedicionesItinerario",
            params,
            ExpedicionesItinerarioResponse,
        )

    def lineas_parada_async(
        self,
        id_parada: Identifier,
        tipo_dia: str,
        h_inicio: TimeArg,
        h_fin: TimeArg,
    ) -> "Future[LineasParadaResponse]":
        """Lines serving a stop within a time window for a day type."""
        params = {
            "idParada": str(id_parada),
            "tipoDia": str(tipo_dia),
            "hInicio": format_time(h_inicio),
            "hFin": format_time(h_fin),
        }
        return self._submit("lineasParada", params, LineasParadaResponse)

    def paradas_itinerario_async(
        self,
        id_itinerario: Identifier,
    ) -> "Future[ParadasItinerarioResponse]":
        params = {"idItinerario": str(id_itinerario)}
        return self._submit("paradasItinerario", params, ParadasItinerarioResponse)

    def paradas_sentido_async(
        self,
        id_sentido: Identifier,
    ) -> "Future[ParadasSentidoResponse]":
        params = {"idSentido": str(id_sentido)}
        return self._submit("paradasSentido", params, ParadasSentidoResponse)

    def recorrido_linea_async(
        self,
        id_linea: Identifier,
    ) -> "Future[RecorridoLineaResponse]":
        """Route geometry of every itinerary of a line."""
        params = {"idLinea": str(id_linea)}
        return self._submit("recorridoLinea", params, RecorridoLineaResponse)

    def listado_lineas_async(self) -> "Future[ListadoLineasResponse]":
        return self._submit("listadoLineas", None, ListadoLineasResponse)

    def puntos_parada_async(self) -> "Future[PuntosParadaResponse]":
        return self._submit("puntosParada", None, PuntosParadaResponse)

    # Synchronous endpoints: wait on the async form, which re-raises the
    # original exception from the worker.

    def tiempos_parada(
        self,
        cod_parada: Identifier,
        idioma: Optional[str] = None,
    ) -> TiemposParadaResponse:
        return self.tiempos_parada_async(cod_parada, idioma).result()

    def tiempos_parada_bus(
        self,
        cod_parada: Identifier,
        cod_vehiculo: Identifier,
        idioma: Optional[str] = None,
    ) -> TiemposParadaResponse:
        return self.tiempos_parada_bus_async(cod_parada, cod_vehiculo, idioma).result()

    def datos_vehiculo(
        self,
        cod_vehiculo: Identifier,
        pet_itinerario: bool = False,
    ) -> DatosVehiculoResponse:
        return self.datos_vehiculo_async(cod_vehiculo, pet_itinerario).result()

    def avisos(self, idioma: Optional[str] = None) -> AvisosResponse:
        return self.avisos_async(idioma).result()

    def expediciones_parada_itinerario(
        self,
        id_itinerario: Identifier,
        id_parada: Identifier,
        fecha: DateArg,
        hora: TimeArg,
        idioma: Optional[str] = None,
    ) -> ExpedicionesParadaItinerarioResponse:
        future = self.expediciones_parada_itinerario_async(
            id_itinerario, id_parada, fecha, hora, idioma
        )
        return future.result()

    def expediciones_parada_sentido(
        self,
        id_sentido: Identifier,
        id_parada: Identifier,
        fecha: DateArg,
        hora: TimeArg,
        idioma: Optional[str] = None,
    ) -> ExpedicionesParadaSentidoResponse:
        future = self.expediciones_parada_sentido_async(
            id_sentido, id_parada, fecha, hora, idioma
        )
        return future.result()

    def itinerarios_linea(
        self,
        id_linea: Identifier,
        idioma: Optional[str] = None,
        id_parada: Optional[Identifier] = None,
    ) -> ItinerariosLineaResponse:
        return self.itinerarios_linea_async(id_linea, idioma, id_parada).result()

    def sentidos_linea(
        self,
        id_linea: Identifier,
        idioma: Optional[str] = None,
        id_parada: Optional[Identifier] = None,
    ) -> SentidosLineaResponse:
        return self.sentidos_linea_async(id_linea, idioma, id_parada).result()

    def expediciones_itinerario(
        self,
        id_parada: Identifier,
        tipo_dia: str,
        h_inicio: TimeArg,
        h_fin: TimeArg,
        id_itinerario: Identifier,
    ) -> ExpedicionesItinerarioResponse:
        future = self.expediciones_itinerario_async(
            id_parada, tipo_dia, h_inicio, h_fin, id_itinerario
        )
        return future.result()

    def lineas_parada(
        self,
        id_parada: Identifier,
        tipo_dia: str,
        h_inicio: TimeArg,
        h_fin: TimeArg,
    ) -> LineasParadaResponse:
        future = self.lineas_parada_async(id_parada, tipo_dia, h_inicio, h_fin)
        return future.result()

    def paradas_itinerario(
        self,
        id_itinerario: Identifier,
    ) -> ParadasItinerarioResponse:
        return self.paradas_itinerario_async(id_itinerario).result()

    def paradas_sentido(self, id_sentido: Identifier) -> ParadasSentidoResponse:
        return self.paradas_sentido_async(id_sentido).result()

    def recorrido_linea(self, id_linea: Identifier) -> RecorridoLineaResponse:
        return self.recorrido_linea_async(id_linea).result()

    def listado_lineas(self) -> ListadoLineasResponse:
        return self.listado_lineas_async().result()

    def puntos_parada(self) -> PuntosParadaResponse:
        return self.puntos_parada_async().result()
