"""Async client for the shipment tracking provider."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from parcelwatch._constants import NO_DATA
from parcelwatch._transport import JsonTransport, Transport
from parcelwatch.config import MonitorConfig, TrackingConfig
from parcelwatch.exceptions import ParcelwatchError, TrackingApiError
from parcelwatch.models.parcel import ParcelResponse, Shipment
from parcelwatch.models.snapshot import Event, FetchResult, Pending, Place, Ready, ShipmentSnapshot

_logger = logging.getLogger(__name__)


def build_tracking_request(config: MonitorConfig, tracking: TrackingConfig) -> dict[str, Any]:
    """Build the JSON body of a tracking request."""
    return {
        "apiKey": config.api_key,
        "shipments": [
            {
                "trackingId": tracking.track_number,
                "language": config.language,
                "country": tracking.country,
            }
        ],
    }


def parse_tracking_response(payload: dict[str, Any]) -> ParcelResponse:
    """Validate a decoded response, raising for provider-reported errors."""
    error = payload.get("error")
    if error:
        raise TrackingApiError(f"Error while getting parcel info. {error}", error=str(error))
    try:
        response = ParcelResponse.model_validate(payload)
    except ValidationError as exc:
        raise TrackingApiError(f"Unexpected tracking response shape: {exc}") from exc
    if not response.shipments and not response.is_acknowledgment:
        raise TrackingApiError("Tracking response contains neither shipments nor an acknowledgment")
    return response


def _select_shipment(response: ParcelResponse, tracking_id: str) -> Shipment:
    wanted = tracking_id.strip().upper()
    for shipment in response.shipments:
        if shipment.tracking_id.strip().upper() == wanted:
            return shipment
    return response.shipments[0]


def normalize_shipment(shipment: Shipment, tracking_id: str) -> ShipmentSnapshot:
    """Convert a wire shipment into a :class:`ShipmentSnapshot`."""
    states = list(shipment.states)
    if not states and shipment.last_state is not None:
        states = [shipment.last_state]

    # A blank status keeps its slot so an older event never moves up to events[0].
    events = tuple(
        Event(timestamp=state.date, location=state.location, status=state.status or NO_DATA) for state in states
    )

    carrier_name = NO_DATA
    if shipment.detected_carrier is not None and shipment.detected_carrier.name:
        carrier_name = shipment.detected_carrier.name
    elif shipment.carriers:
        carrier_name = shipment.carriers[0]

    return ShipmentSnapshot(
        tracking_id=shipment.tracking_id or tracking_id,
        status=shipment.status or NO_DATA,
        events=events,
        origin=Place(name=shipment.origin or NO_DATA, code=shipment.origin_code or NO_DATA),
        destination=Place(name=shipment.destination or NO_DATA, code=shipment.destination_code or NO_DATA),
        carrier_name=carrier_name,
        attributes={attr.l: attr.val for attr in shipment.attributes if attr.l},
    )


class TrackingClient:
    """Async client for the tracking provider.

    Usage::

        async with TrackingClient(config) as client:
            result = await client.fetch(tracking)
    """

    def __init__(
        self,
        config: MonitorConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    async def __aenter__(self) -> TrackingClient:
        if not self._external_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = JsonTransport(self._http_session, timeout=self._config.request_timeout)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise ParcelwatchError("Client not initialized. Use 'async with TrackingClient(...) as client:'")
        return self._transport

    async def fetch(self, tracking: TrackingConfig) -> FetchResult:
        """Request the current state of *tracking*.

        Returns :class:`Ready` with a normalized snapshot, or :class:`Pending`
        when the provider only acknowledged the request (after re-issuing it
        ``pending_retries`` times).
        """
        transport = self._require_transport()
        payload = build_tracking_request(self._config, tracking)
        attempts = 1 + self._config.pending_retries

        uuid = ""
        for attempt in range(1, attempts + 1):
            raw = await transport.post_json(self._config.tracking_url, payload)
            response = parse_tracking_response(raw)
            if response.is_acknowledgment:
                uuid = response.uuid or ""
                _logger.warning(
                    "Received parcel UUID %s instead of shipment data (attempt %d/%d)",
                    uuid,
                    attempt,
                    attempts,
                )
                continue
            shipment = _select_shipment(response, tracking.track_number)
            snapshot = normalize_shipment(shipment, tracking.track_number)
            _logger.debug(
                "Fetched %s: status=%s events=%d from_cache=%s",
                snapshot.tracking_id,
                snapshot.status,
                len(snapshot.events),
                response.from_cache,
            )
            return Ready(snapshot)

        return Pending(uuid=uuid)
