"""Fetch branch, staff and booking data from the booking API.

Failures are logged and degrade to an empty result for the request that
failed, so one bad day never blanks a week or month view. There is no
retry; the next navigation or refresh fetches again.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Any, Iterable, Sequence

import httpx

from salonbook.settings import Settings
from .clock import date_key
from .ingest import extract_booking_rows, extract_collection, normalize_bookings
from .models import Booking
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class BookingFeed:
    def __init__(
        self,
        settings: Settings,
        repository: ScheduleRepository,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.repository = repository
        headers = {"Accept": "application/json"}
        if settings.API_TOKEN:
            headers["Authorization"] = f"Bearer {settings.API_TOKEN}"
        self.client = httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            headers=headers,
            timeout=settings.REQUEST_TIMEOUT,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "BookingFeed":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _get(self, path: str, params: dict | None = None) -> Any:
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            return None

    async def _post(self, path: str) -> bool:
        try:
            response = await self.client.post(path)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            return False
        return True

    def _branch_params(self, **params: Any) -> dict:
        if self.repository.branch_id is not None:
            params["branch_id"] = self.repository.branch_id
        return params

    # ------------------------------------------------------------------
    # Branch and staff
    # ------------------------------------------------------------------
    async def load_branch(self, branch_id: str) -> None:
        """Select ``branch_id`` and cache its opening hours and staff roster."""

        self.repository.select_branch(branch_id)
        opening, staff = await asyncio.gather(
            self._get(f"/branches/{branch_id}/opening-hours"),
            self._get(f"/branches/{branch_id}/staff"),
        )
        self.repository.set_opening_hours(extract_collection(opening, "opening_hours", "openingHours"))
        members = extract_collection(staff, "staff", "team", "members")
        self.repository.set_staff(members if isinstance(members, list) else [])

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------
    async def fetch_day(self, day: dt.date) -> list[Booking]:
        payload = await self._get("/bookings", self._branch_params(date=date_key(day)))
        if payload is None:
            return []
        return normalize_bookings(extract_booking_rows(payload))

    async def load_range(self, days: Iterable[dt.date]) -> dict[str, list[Booking]] | None:
        """Fetch several days in fixed-size concurrent batches.

        Each batch is awaited fully before the next one is issued. When a
        newer ``load_range`` starts meanwhile, this one stops and returns
        ``None`` without touching the repository.
        """

        generation = self.repository.begin_load()
        ordered: Sequence[dt.date] = list(days)
        size = max(1, self.settings.FETCH_BATCH_SIZE)
        results: dict[str, list[Booking]] = {}
        for offset in range(0, len(ordered), size):
            batch = ordered[offset:offset + size]
            fetched = await asyncio.gather(*(self.fetch_day(day) for day in batch))
            if not self.repository.is_current(generation):
                logger.debug("Discarding superseded load of %d days", len(ordered))
                return None
            for day, bookings in zip(batch, fetched):
                results[date_key(day)] = bookings
        for day in ordered:
            self.repository.replace_bookings(day, results[date_key(day)])
        return results

    async def fetch_pending(self) -> list[Booking]:
        payload = await self._get("/bookings/pending-today", self._branch_params())
        if payload is None:
            return []
        return normalize_bookings(extract_booking_rows(payload))

    async def approve(self, booking_id: str) -> bool:
        return await self._post(f"/bookings/{booking_id}/approve")

    async def decline(self, booking_id: str) -> bool:
        return await self._post(f"/bookings/{booking_id}/decline")
